"""Action request data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ActionName(str, Enum):
    """Actions the bridge can perform against a work item."""

    SYNC = "sync"
    COMPLETE = "complete"
    PROGRESS = "progress"
    INIT = "init"


class ActionRequest(BaseModel):
    """Operation requested by the invoker for a single run."""

    model_config = ConfigDict(frozen=True)

    action: str
    work_id: Optional[str] = None
    progress: Optional[str] = None  # raw integer string, parsed at dispatch
    summary: Optional[str] = None
    files: Optional[str] = None  # comma-separated paths
