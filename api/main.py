"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, WebSocket, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import get_controller
from api.routes import files_router, pdf_router
from api.websocket import manager, websocket_endpoint
from renderer.controller import JobController
from shared.config import settings
from storage.job_store import JobStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    app.state.job_store = JobStore()
    app.state.controller = JobController(
        app.state.job_store,
        settings=settings,
        on_update=manager.publish_job_update
    )

    yield

    # Shutdown
    await app.state.controller.shutdown()
    logger.info("All PDF jobs stopped")


# Create FastAPI app
app = FastAPI(
    title="URL to PDF Converter",
    description="Converts lists of web pages to PDF documents with a headless browser",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


# Include routers
app.include_router(pdf_router)
app.include_router(files_router)


# WebSocket endpoint
@app.websocket("/ws/jobs/{job_id}")
async def websocket_job(
    websocket: WebSocket,
    job_id: str,
    controller: JobController = Depends(get_controller)
):
    """WebSocket endpoint for specific job updates."""
    await websocket_endpoint(websocket, job_id, controller.get_status)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "URL to PDF Converter",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug
    )
