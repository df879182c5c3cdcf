"""Response schemas for API endpoints."""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from api.models.job import UrlStatusModel


class JobSubmitResponse(BaseModel):
    """Response schema for job submission."""
    job_id: str = Field(..., description="Unique job identifier")
    status: str = Field(..., description="Current job status")
    total_urls: int = Field(..., description="Number of URLs in the job")
    message: str = Field(default="Job submitted successfully")


class JobStatusResponse(BaseModel):
    """Response schema for job status."""
    job_id: str = Field(..., description="Unique job identifier")
    status: str = Field(..., description="Current job status")
    completed: bool = Field(..., description="True once the job reached a terminal state")
    url_statuses: List[UrlStatusModel] = Field(..., description="Per-URL progress, in submission order")
    success_count: int = Field(..., description="Number of PDFs generated")
    fail_count: int = Field(..., description="Number of URLs that failed")
    output_path: str = Field(..., description="Directory the PDFs are written to")
    error: Optional[str] = Field(None, description="Job-level error message")
    created_at: datetime = Field(..., description="Job creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @classmethod
    def from_job(cls, job: dict) -> "JobStatusResponse":
        return cls(
            job_id=job["job_id"],
            status=job["status"],
            completed=job["completed"],
            url_statuses=job["url_statuses"],
            success_count=job["success_count"],
            fail_count=job["fail_count"],
            output_path=job["output_path"],
            error=job.get("error"),
            created_at=job["created_at"],
            updated_at=job["updated_at"]
        )


class JobCancelResponse(BaseModel):
    """Response schema for job cancellation."""
    job_id: str = Field(..., description="Unique job identifier")
    cancelled: bool = Field(..., description="Whether the job was cancelled by this request")
    status: str = Field(..., description="Job status after the request")
    message: str = Field(..., description="Cancellation message")


class PdfFile(BaseModel):
    """A generated PDF of a job."""
    name: str
    path: str
    view_url: str
    download_url: str


class PdfListResponse(BaseModel):
    """Response schema for the PDFs of a job."""
    job_id: str
    files: List[PdfFile] = Field(default_factory=list)


class FileEntry(BaseModel):
    """A file or directory in the file browser."""
    name: str
    path: str
    is_directory: bool
    size: int
    modified_time: Optional[datetime] = None
    download_url: Optional[str] = None
    view_url: Optional[str] = None


class DirectoryListing(BaseModel):
    """Response schema for a directory listing."""
    directory: str
    parent_directory: Optional[str] = None
    files: List[FileEntry] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str


class ErrorResponse(BaseModel):
    """Schema for error responses."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
