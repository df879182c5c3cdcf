"""FastAPI dependencies for the job controller, store and file browser."""
from fastapi.requests import HTTPConnection

from api.services.file_browser import FileBrowserService
from renderer.controller import JobController
from shared.config import settings
from storage.job_store import JobStore


def get_controller(connection: HTTPConnection) -> JobController:
    """Dependency for getting the application's job controller (HTTP and WebSocket routes)."""
    return connection.app.state.controller


def get_job_store(connection: HTTPConnection) -> JobStore:
    """Dependency for getting the application's job store."""
    return connection.app.state.job_store


def get_file_browser() -> FileBrowserService:
    """Dependency for getting the file browser service."""
    return FileBrowserService(settings.files_root)
