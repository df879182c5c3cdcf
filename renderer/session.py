"""Headless browser session for rendering web pages to PDF."""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from shared.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Raised when the browser cannot render or save a page."""


@dataclass
class RenderOutcome:
    """Result of rendering a single URL."""
    url: str
    success: bool
    file_path: Optional[str] = None
    error: Optional[str] = None


class RenderSession:
    """
    One launched Chromium instance shared by every URL of a job.

    Each URL gets its own browser context so cookies, storage and lazy-load
    state never leak from one page into the next. Closing the session is
    also how a running job is cancelled: any browser call in flight fails
    once the browser is gone.
    """

    def __init__(
        self,
        playwright: Optional[Playwright],
        browser: Browser,
        settings: Settings = None
    ):
        self.playwright = playwright
        self.browser = browser
        self.settings = settings or default_settings
        self._closed = False
        self._close_lock = asyncio.Lock()

    @classmethod
    async def launch(cls, settings: Settings = None) -> "RenderSession":
        """Start Playwright and launch Chromium."""
        settings = settings or default_settings
        playwright = await async_playwright().start()

        launch_options = {
            "headless": settings.browser_headless,
            "args": list(settings.browser_args),
        }
        if settings.browser_executable_path:
            launch_options["executable_path"] = settings.browser_executable_path

        try:
            browser = await playwright.chromium.launch(**launch_options)
        except Exception as e:
            await playwright.stop()
            raise RenderError(f"Failed to launch browser: {e}") from e

        logger.info("Chromium launched")
        return cls(playwright, browser, settings)

    @property
    def closed(self) -> bool:
        return self._closed

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Open a page in a fresh, isolated browser context."""
        if self._closed:
            raise RenderError("Browser session is closed")

        context = await self.browser.new_context(
            viewport={
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height
            }
        )
        try:
            page = await context.new_page()
            yield page
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")

    async def navigate(self, page: Page, url: str):
        """Load a URL and wait until the network goes idle."""
        await page.goto(
            url,
            wait_until="networkidle",
            timeout=self.settings.navigation_timeout_ms
        )

    async def auto_scroll(self, page: Page) -> int:
        """
        Scroll down step by step so lazy-loaded content renders.

        The scroll height is re-read on every step because it can grow while
        scrolling. Returns the total distance scrolled.
        """
        step = self.settings.scroll_step_px
        scrolled = 0

        for _ in range(self.settings.max_scroll_steps):
            height = await page.evaluate("() => document.body.scrollHeight")
            await page.evaluate("(distance) => window.scrollBy(0, distance)", step)
            scrolled += step

            if scrolled >= height:
                return scrolled

            await asyncio.sleep(self.settings.scroll_interval)

        logger.warning(
            f"Stopped scrolling after {self.settings.max_scroll_steps} steps "
            f"({scrolled}px); page keeps growing"
        )
        return scrolled

    async def capture(self, page: Page, path: str):
        """Print the page to a PDF file."""
        margin = self.settings.pdf_margin
        await page.pdf(
            path=path,
            format=self.settings.pdf_format,
            print_background=self.settings.pdf_print_background,
            margin={
                "top": margin,
                "right": margin,
                "bottom": margin,
                "left": margin
            }
        )

    async def close(self):
        """Close the browser and stop Playwright. Safe to call more than once."""
        async with self._close_lock:
            if self._closed:
                return
            self._closed = True

            try:
                await self.browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

            if self.playwright is not None:
                try:
                    await self.playwright.stop()
                except Exception as e:
                    logger.warning(f"Error stopping Playwright: {e}")
