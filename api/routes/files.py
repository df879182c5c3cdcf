"""File browser routes for the REST API."""
import asyncio
import logging
import os
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query, status
from fastapi.responses import FileResponse

from api.dependencies import get_file_browser
from api.schemas.responses import DirectoryListing, MessageResponse
from api.services.file_browser import FileBrowserService, content_type_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


def _require_file(path: str) -> str:
    if not os.path.exists(path):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found"
        )
    if os.path.isdir(path):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path is a directory"
        )
    return path


@router.get("/list", response_model=DirectoryListing)
async def list_files(
    directory: Optional[str] = None,
    file_browser: FileBrowserService = Depends(get_file_browser)
):
    """List the files in a directory (defaults to the generated PDFs directory)."""
    try:
        return await asyncio.to_thread(file_browser.list_directory, directory)
    except OSError as e:
        logger.error(f"Error reading directory {directory}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not read directory: {e}"
        )


@router.get("/view")
async def view_file(path: str = Query(..., min_length=1)):
    """Stream any file inline with a content type inferred from its extension."""
    _require_file(path)
    return FileResponse(
        path,
        media_type=content_type_for(path),
        filename=os.path.basename(path),
        content_disposition_type="inline"
    )


@router.get("/download")
async def download_file(path: str = Query(..., min_length=1)):
    """Stream any file as a download."""
    _require_file(path)
    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=os.path.basename(path)
    )


@router.delete("/delete", response_model=MessageResponse)
async def delete_file(
    path: str = Query(..., min_length=1),
    file_browser: FileBrowserService = Depends(get_file_browser)
):
    """Delete a single file."""
    try:
        file_browser.delete_file(path)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found"
        )
    except IsADirectoryError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete a directory"
        )

    logger.info(f"Deleted file {path}")
    return MessageResponse(message="File deleted successfully")
