"""Run output data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


OUTPUT_WORK_ID = "work-id"
OUTPUT_STATUS = "status"
OUTPUT_AGENTS_MD = "agents-md"


class WorkStatus(str, Enum):
    """Work item status reported after a successful update."""

    COMPLETED = "COMPLETED"
    IN_PROGRESS = "IN_PROGRESS"


class ActionOutputs(BaseModel):
    """Outputs emitted by a run."""

    work_id: str = ""
    status: Optional[WorkStatus] = None
    agents_md: Optional[str] = None
