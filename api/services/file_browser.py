"""File browser service for generated PDFs and their directories."""
import os
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote

from api.schemas.responses import DirectoryListing, FileEntry, PdfFile

PDF_EXTENSION = ".pdf"

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: str) -> str:
    """Infer a content type from the file extension."""
    ext = os.path.splitext(path)[1].lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def is_safe_filename(filename: str) -> bool:
    """True if filename is a bare name that cannot escape its directory."""
    return (
        bool(filename)
        and filename not in (".", "..")
        and os.path.basename(filename) == filename
        and "\\" not in filename
    )


class FileBrowserService:
    """Service for listing, locating and deleting files on disk."""

    def __init__(self, default_directory: str):
        self.default_directory = default_directory

    def list_directory(self, directory: Optional[str] = None) -> DirectoryListing:
        """
        List a directory's entries with view/download links.

        The directory is created if it does not exist yet. Raises OSError if
        it cannot be read.
        """
        directory = directory or self.default_directory
        os.makedirs(directory, exist_ok=True)

        entries: List[FileEntry] = []
        with os.scandir(directory) as it:
            for entry in sorted(it, key=lambda e: (not e.is_dir(), e.name.lower())):
                full_path = os.path.join(directory, entry.name)
                is_directory = entry.is_dir()

                size = 0
                modified_time = None
                try:
                    stats = entry.stat()
                    size = stats.st_size
                    modified_time = datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc)
                except OSError:
                    pass

                encoded = quote(full_path, safe="")
                entries.append(FileEntry(
                    name=entry.name,
                    path=full_path,
                    is_directory=is_directory,
                    size=size,
                    modified_time=modified_time,
                    download_url=None if is_directory else f"/api/files/download?path={encoded}",
                    view_url=(
                        f"/api/files/view?path={encoded}"
                        if not is_directory and entry.name.lower().endswith(PDF_EXTENSION)
                        else None
                    )
                ))

        normalized = os.path.normpath(directory)
        parent = os.path.dirname(normalized)
        return DirectoryListing(
            directory=directory,
            parent_directory=parent if parent and parent != normalized else None,
            files=entries
        )

    def list_job_pdfs(self, job_id: str, output_dir: str) -> List[PdfFile]:
        """List the PDFs in a job's output directory."""
        names = sorted(
            name for name in os.listdir(output_dir)
            if name.lower().endswith(PDF_EXTENSION)
            and os.path.isfile(os.path.join(output_dir, name))
        )
        job_query = quote(job_id, safe="")
        return [
            PdfFile(
                name=name,
                path=os.path.join(output_dir, name),
                view_url=f"/api/pdf/view/{quote(name)}?job_id={job_query}",
                download_url=f"/api/pdf/download/{quote(name)}?job_id={job_query}"
            )
            for name in names
        ]

    def job_file_path(self, output_dir: str, filename: str) -> Optional[str]:
        """Path of a PDF inside a job's output directory, or None if not servable."""
        if not is_safe_filename(filename):
            return None
        path = os.path.join(output_dir, filename)
        if not os.path.isfile(path):
            return None
        return path

    def delete_file(self, path: str):
        """
        Delete a single file.

        Raises FileNotFoundError if it does not exist and IsADirectoryError for
        directories.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(path)
        if os.path.isdir(path):
            raise IsADirectoryError(path)
        os.remove(path)
