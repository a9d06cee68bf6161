"""API response data models."""

from typing import Optional

from pydantic import BaseModel

from .outputs import WorkStatus


class WebhookResponse(BaseModel):
    """Response from webhook handler."""

    status: str
    message: str
    work_id: str = ""
    work_status: Optional[WorkStatus] = None
