"""Shared configuration for all services."""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # Output Configuration
    default_output_dir: str = "./generated-pdfs"
    unusable_output_paths: List[str] = ["/Downloads/pdfs"]

    # Browser Configuration
    browser_headless: bool = True
    browser_executable_path: Optional[str] = None
    browser_args: List[str] = ["--no-sandbox", "--disable-setuid-sandbox"]
    viewport_width: int = 1280
    viewport_height: int = 1024

    # Render Timing
    navigation_timeout_ms: int = 60000
    settle_delay: float = 2.0  # seconds
    post_scroll_delay: float = 1.0  # seconds
    scroll_step_px: int = 100
    scroll_interval: float = 0.1  # seconds
    max_scroll_steps: int = 500

    # PDF Output
    pdf_format: str = "A4"
    pdf_margin: str = "0.4in"
    pdf_print_background: bool = True

    # Status Polling
    status_poll_interval: float = 1.0

    # WebSocket Configuration
    ws_heartbeat_interval: int = 30

    # File Browser
    files_root: str = "./generated-pdfs"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
