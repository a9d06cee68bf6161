"""
Bridge configuration management.

Action inputs arrive as ``INPUT_<NAME>`` environment variables (the runner
keeps hyphens in input names, so both ``INPUT_SERVER-URL`` and
``INPUT_SERVER_URL`` are accepted). Runner context comes from the
``GITHUB_*`` variables.
"""

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from works_bridge.models.action import ActionRequest


DEFAULT_SERVER_URL = "https://works.dev"


def _input_aliases(name: str, *fallbacks: str) -> AliasChoices:
    upper = name.upper()
    return AliasChoices(
        f"INPUT_{upper}",
        f"INPUT_{upper.replace('-', '_')}",
        *fallbacks,
    )


class Settings(BaseSettings):
    """Bridge settings loaded from environment variables."""

    # Action inputs
    server_url: str = Field(
        DEFAULT_SERVER_URL,
        validation_alias=_input_aliases("server-url", "WORKS_SERVER_URL"),
    )
    api_key: str = Field("", validation_alias=_input_aliases("api-key", "WORKS_API_KEY"))
    action: str = Field("", validation_alias=_input_aliases("action"))
    work_id: Optional[str] = Field(None, validation_alias=_input_aliases("work-id"))
    progress: Optional[str] = Field(None, validation_alias=_input_aliases("progress"))
    summary: Optional[str] = Field(None, validation_alias=_input_aliases("summary"))
    files: Optional[str] = Field(None, validation_alias=_input_aliases("files"))

    # Runner context
    github_event_name: str = ""
    github_event_path: Optional[str] = None
    github_output: Optional[str] = None

    # Webhook receiver
    webhook_secret: Optional[str] = None

    # Application
    log_level: str = "INFO"
    works_timeout: Optional[float] = None  # httpx default when unset

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"

    @field_validator("server_url")
    @classmethod
    def _default_blank_server_url(cls, value: str) -> str:
        # The runner passes unset inputs as empty strings
        return value.strip() or DEFAULT_SERVER_URL

    @field_validator("api_key", "action", "work_id", "progress", "summary", "files")
    @classmethod
    def _strip_input(cls, value: Optional[str]) -> Optional[str]:
        # Inputs are trimmed, so a whitespace-only value reads as unset
        if value is None:
            return None
        return value.strip()

    def to_request(self) -> ActionRequest:
        """Build the immutable action request for one run."""
        return ActionRequest(
            action=self.action,
            work_id=self.work_id or None,
            progress=self.progress or None,
            summary=self.summary or None,
            files=self.files or None,
        )
