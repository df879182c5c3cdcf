"""PDF job routes for the REST API."""
import asyncio
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query, status
from fastapi.responses import FileResponse

from api.dependencies import get_controller, get_file_browser, get_job_store
from api.schemas.requests import CancelJobRequest, GeneratePdfRequest
from api.schemas.responses import (
    JobCancelResponse,
    JobStatusResponse,
    JobSubmitResponse,
    MessageResponse,
    PdfListResponse
)
from api.services.file_browser import FileBrowserService
from renderer.controller import JobController
from storage.job_store import JobStatus, JobStore


router = APIRouter(prefix="/api/pdf", tags=["pdf"])


async def _get_job_or_404(controller: JobController, job_id: str) -> dict:
    job = await controller.get_status(job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found"
        )
    return job


@router.post("/generate", response_model=JobSubmitResponse, status_code=status.HTTP_201_CREATED)
async def generate_pdfs(
    request: GeneratePdfRequest,
    controller: JobController = Depends(get_controller)
):
    """
    Submit a new PDF conversion job.

    - Validates input
    - Creates job record with every URL pending
    - Starts rendering in the background
    - Returns job ID immediately
    """
    job_id = await controller.submit(request.urls, request.output_path)

    return JobSubmitResponse(
        job_id=job_id,
        status=JobStatus.PENDING,
        total_urls=len(request.urls),
        message="Job submitted successfully"
    )


@router.get("/status/{job_id}", response_model=JobStatusResponse)
async def get_job_status(
    job_id: str,
    controller: JobController = Depends(get_controller)
):
    """Get the current status of a job."""
    job = await _get_job_or_404(controller, job_id)
    return JobStatusResponse.from_job(job)


@router.post("/cancel", response_model=JobCancelResponse)
async def cancel_job(
    request: CancelJobRequest,
    controller: JobController = Depends(get_controller)
):
    """Cancel a pending or processing job."""
    await _get_job_or_404(controller, request.job_id)

    cancelled = await controller.cancel(request.job_id)
    job = await controller.get_status(request.job_id)

    if cancelled:
        message = "Job cancelled successfully"
    else:
        message = f"Job already finished with status {job['status']}"

    return JobCancelResponse(
        job_id=request.job_id,
        cancelled=cancelled,
        status=job["status"],
        message=message
    )


@router.get("/jobs", response_model=List[JobStatusResponse])
async def list_jobs(
    status_filter: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    skip: int = Query(0, ge=0),
    store: JobStore = Depends(get_job_store)
):
    """List all jobs with optional status filter."""
    jobs = await store.list_jobs(status=status_filter, limit=limit, skip=skip)
    return [JobStatusResponse.from_job(job) for job in jobs]


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: str,
    controller: JobController = Depends(get_controller),
    store: JobStore = Depends(get_job_store)
):
    """Delete a finished job's record. Generated files are left on disk."""
    job = await _get_job_or_404(controller, job_id)

    if not job["completed"]:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot delete job with status {job['status']}"
        )

    await store.delete(job_id)
    return MessageResponse(message=f"Job {job_id} deleted")


@router.get("/list/{job_id}", response_model=PdfListResponse)
async def list_job_pdfs(
    job_id: str,
    controller: JobController = Depends(get_controller),
    file_browser: FileBrowserService = Depends(get_file_browser)
):
    """List the PDFs generated into a job's output directory."""
    job = await _get_job_or_404(controller, job_id)

    try:
        files = await asyncio.to_thread(file_browser.list_job_pdfs, job_id, job["output_path"])
    except OSError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not read output directory: {e}"
        )

    return PdfListResponse(job_id=job_id, files=files)


async def _job_pdf_response(
    job_id: str,
    filename: str,
    disposition: str,
    controller: JobController,
    file_browser: FileBrowserService
) -> FileResponse:
    job = await _get_job_or_404(controller, job_id)

    path = file_browser.job_file_path(job["output_path"], filename)
    if path is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="PDF file not found"
        )

    return FileResponse(
        path,
        media_type="application/pdf",
        filename=filename,
        content_disposition_type=disposition
    )


@router.get("/view/{filename}")
async def view_pdf(
    filename: str,
    job_id: str = Query(..., min_length=1),
    controller: JobController = Depends(get_controller),
    file_browser: FileBrowserService = Depends(get_file_browser)
):
    """Stream a job's PDF for viewing in the browser."""
    return await _job_pdf_response(job_id, filename, "inline", controller, file_browser)


@router.get("/download/{filename}")
async def download_pdf(
    filename: str,
    job_id: str = Query(..., min_length=1),
    controller: JobController = Depends(get_controller),
    file_browser: FileBrowserService = Depends(get_file_browser)
):
    """Stream a job's PDF as a download."""
    return await _job_pdf_response(job_id, filename, "attachment", controller, file_browser)
