# Routes module
from .files import router as files_router
from .pdf import router as pdf_router

__all__ = ["files_router", "pdf_router"]
