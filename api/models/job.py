"""Job model definitions."""
from enum import Enum
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel


class JobStatusEnum(str, Enum):
    """Job status enumeration."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class UrlStatusEnum(str, Enum):
    """Per-URL status enumeration."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


class UrlStatusModel(BaseModel):
    """Progress of a single URL within a job."""
    url: str
    status: UrlStatusEnum
    error: Optional[str] = None


class JobModel(BaseModel):
    """Job model for the job store representation."""
    job_id: str
    urls: List[str]
    output_path: str
    status: JobStatusEnum
    completed: bool
    url_statuses: List[UrlStatusModel]
    success_count: int
    fail_count: int
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    revision: int = 0
