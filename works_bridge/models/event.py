"""Repository event data models."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Event kinds with payload shapes the bridge understands."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    ISSUES = "issues"


class Commit(BaseModel):
    """A single commit from a push payload."""

    message: str = ""
    id: Optional[str] = None
    url: Optional[str] = None


class PullRequestInfo(BaseModel):
    """Pull request fields from a pull_request payload."""

    number: int
    title: str = ""
    body: Optional[str] = None
    html_url: Optional[str] = None
    merged: Optional[bool] = None


class IssueInfo(BaseModel):
    """Issue fields from an issues payload."""

    number: int
    title: Optional[str] = None


class EventContext(BaseModel):
    """
    Read-only snapshot of the triggering event.

    ``payload`` is kept as delivered; the typed accessors parse only the
    parts the bridge reads.
    """

    model_config = ConfigDict(frozen=True)

    event_name: str = ""
    payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> Optional[EventKind]:
        try:
            return EventKind(self.event_name)
        except ValueError:
            return None

    @property
    def commits(self) -> List[Commit]:
        return [Commit.model_validate(commit) for commit in self.payload.get("commits") or []]

    @property
    def pull_request(self) -> Optional[PullRequestInfo]:
        pr = self.payload.get("pull_request")
        if not pr:
            return None
        return PullRequestInfo.model_validate(pr)

    @property
    def issue(self) -> Optional[IssueInfo]:
        issue = self.payload.get("issue")
        if not issue:
            return None
        return IssueInfo.model_validate(issue)
