# Schemas module
from .requests import CancelJobRequest, GeneratePdfRequest
from .responses import (
    DirectoryListing,
    ErrorResponse,
    FileEntry,
    JobCancelResponse,
    JobStatusResponse,
    JobSubmitResponse,
    MessageResponse,
    PdfFile,
    PdfListResponse
)

__all__ = [
    "CancelJobRequest",
    "GeneratePdfRequest",
    "DirectoryListing",
    "ErrorResponse",
    "FileEntry",
    "JobCancelResponse",
    "JobStatusResponse",
    "JobSubmitResponse",
    "MessageResponse",
    "PdfFile",
    "PdfListResponse"
]
