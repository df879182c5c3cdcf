"""Pytest configuration and fixtures."""
import asyncio
from contextlib import asynccontextmanager

import pytest

from renderer.controller import JobController
from renderer.session import RenderError
from shared.config import Settings
from storage.job_store import JobStore


class FakePage:
    """Stand-in for a Playwright page."""

    def __init__(self, url=None):
        self.url = url
        self.closed = False


class FakeRenderSession:
    """
    Render session that never starts a browser.

    fail_urls raise on navigation, hang_urls block until the session is
    closed or released, and missing_urls "capture" without writing a file.
    """

    def __init__(self, fail_urls=(), hang_urls=(), missing_urls=()):
        self.fail_urls = set(fail_urls)
        self.hang_urls = set(hang_urls)
        self.missing_urls = set(missing_urls)
        self.closed = False
        self.close_calls = 0
        self.pages = []
        self.navigated = []
        self.captured = []
        self._unblocked = asyncio.Event()

    @asynccontextmanager
    async def open_page(self):
        if self.closed:
            raise RenderError("Browser session is closed")
        page = FakePage()
        self.pages.append(page)
        try:
            yield page
        finally:
            page.closed = True

    async def navigate(self, page, url):
        page.url = url
        self.navigated.append(url)
        if url in self.hang_urls:
            await self._unblocked.wait()
        if self.closed:
            raise RenderError("Target page, context or browser has been closed")
        if url in self.fail_urls:
            raise RenderError(f"net::ERR_NAME_NOT_RESOLVED at {url}")

    async def auto_scroll(self, page):
        return 0

    async def capture(self, page, path):
        if self.closed:
            raise RenderError("Target page, context or browser has been closed")
        self.captured.append(path)
        if page.url in self.missing_urls:
            return
        with open(path, "wb") as f:
            f.write(b"%PDF-1.4\n%fake\n")

    def release(self):
        """Let hanging navigations continue without closing the session."""
        self._unblocked.set()

    async def close(self):
        self.close_calls += 1
        self.closed = True
        self._unblocked.set()


@pytest.fixture
def fast_settings(tmp_path):
    """Settings with all render delays removed."""
    return Settings(
        default_output_dir=str(tmp_path / "default-pdfs"),
        settle_delay=0,
        post_scroll_delay=0,
        scroll_interval=0,
        status_poll_interval=0.01,
        files_root=str(tmp_path / "files")
    )


@pytest.fixture
def job_store():
    """Create an empty job store."""
    return JobStore()


@pytest.fixture
def fake_session():
    """Create a fake render session."""
    return FakeRenderSession()


@pytest.fixture
def make_controller(job_store, fast_settings):
    """Build a controller whose session factory returns the given fake session."""
    def _make(session=None, on_update=None, factory=None):
        session = session or FakeRenderSession()

        async def session_factory():
            return session

        return JobController(
            job_store,
            session_factory=factory or session_factory,
            settings=fast_settings,
            on_update=on_update
        )

    return _make


@pytest.fixture
def output_dir(tmp_path):
    """Directory the tests write PDFs into."""
    return str(tmp_path / "pdfs")


@pytest.fixture
def sample_urls():
    """Two reachable test targets."""
    return ["https://a.example", "https://b.example"]


@pytest.fixture
def make_session():
    """Factory for fake render sessions with scripted failures."""
    return FakeRenderSession
