"""Request schemas for API endpoints."""
from typing import List
from pydantic import BaseModel, Field, field_validator

from shared.utils import validate_url


class GeneratePdfRequest(BaseModel):
    """Request schema for PDF job submission."""
    urls: List[str] = Field(
        ...,
        min_length=1,
        max_length=100,
        description="URLs of the pages to convert, processed in order"
    )
    output_path: str = Field(..., min_length=1, description="Directory the PDFs are written to")

    @field_validator('urls')
    @classmethod
    def validate_urls(cls, v: List[str]) -> List[str]:
        """Validate URL format."""
        urls = [url.strip() for url in v]
        invalid = [url for url in urls if not validate_url(url)]
        if invalid:
            raise ValueError(f"Invalid URL(s): {', '.join(invalid)}")
        return urls

    @field_validator('output_path')
    @classmethod
    def validate_output_path(cls, v: str) -> str:
        """Reject whitespace-only paths."""
        if not v.strip():
            raise ValueError('Output path is required')
        return v.strip()


class CancelJobRequest(BaseModel):
    """Request schema for job cancellation."""
    job_id: str = Field(..., min_length=1, description="Job to cancel")
