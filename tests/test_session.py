"""Render session unit tests."""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from renderer.session import RenderError, RenderOutcome, RenderSession
from shared.config import Settings


@pytest.fixture
def session_settings():
    """Settings with a fast scroll loop."""
    return Settings(scroll_interval=0, max_scroll_steps=50)


@pytest.fixture
def mock_page():
    """Create mock Playwright page."""
    page = MagicMock()
    page.goto = AsyncMock()
    page.pdf = AsyncMock()
    page.evaluate = AsyncMock()
    return page


@pytest.fixture
def mock_browser(mock_page):
    """Create mock Playwright browser whose contexts hand out mock_page."""
    context = MagicMock()
    context.new_page = AsyncMock(return_value=mock_page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def session(mock_browser, session_settings):
    """Create a render session around the mock browser."""
    playwright = MagicMock()
    playwright.stop = AsyncMock()
    return RenderSession(playwright, mock_browser, session_settings)


def scroll_heights(*heights):
    """evaluate() side effect: odd calls read the height, even calls scroll."""
    calls = []
    for height in heights:
        calls.extend([height, None])
    return calls


class TestAutoScroll:
    """Tests for RenderSession.auto_scroll."""

    @pytest.mark.asyncio
    async def test_scrolls_until_height_reached(self, session, mock_page):
        """Test scrolling stops once the distance covers the page height."""
        mock_page.evaluate.side_effect = scroll_heights(250, 250, 250)

        scrolled = await session.auto_scroll(mock_page)

        assert scrolled == 300
        assert mock_page.evaluate.await_count == 6

    @pytest.mark.asyncio
    async def test_rereads_growing_height(self, session, mock_page):
        """Test a page that grows while scrolling is scrolled further."""
        mock_page.evaluate.side_effect = scroll_heights(150, 400, 400, 400)

        scrolled = await session.auto_scroll(mock_page)

        assert scrolled == 400

    @pytest.mark.asyncio
    async def test_infinite_page_is_capped(self, session, mock_page):
        """Test an endlessly growing page stops at max_scroll_steps."""
        mock_page.evaluate.side_effect = lambda *args: 10 ** 9 if len(args) == 1 else None

        scrolled = await session.auto_scroll(mock_page)

        assert scrolled == 50 * 100


class TestOpenPage:
    """Tests for per-URL browser contexts."""

    @pytest.mark.asyncio
    async def test_context_uses_viewport_and_is_closed(self, session, mock_browser, mock_page):
        """Test each page gets its own context which is closed afterwards."""
        async with session.open_page() as page:
            assert page is mock_page

        mock_browser.new_context.assert_awaited_once_with(viewport={"width": 1280, "height": 1024})
        context = mock_browser.new_context.return_value
        context.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_context_closed_on_error(self, session, mock_browser):
        """Test the context is closed even when rendering fails."""
        with pytest.raises(ValueError):
            async with session.open_page():
                raise ValueError("boom")

        mock_browser.new_context.return_value.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_context_close_error_is_tolerated(self, session, mock_browser):
        """Test a failing context close does not mask the outcome."""
        mock_browser.new_context.return_value.close.side_effect = Exception("browser gone")

        async with session.open_page():
            pass

    @pytest.mark.asyncio
    async def test_closed_session_refuses_pages(self, session):
        """Test opening a page on a closed session raises RenderError."""
        await session.close()

        with pytest.raises(RenderError):
            async with session.open_page():
                pass


class TestNavigateAndCapture:
    """Tests for navigation and PDF capture options."""

    @pytest.mark.asyncio
    async def test_navigate_waits_for_network_idle(self, session, mock_page):
        await session.navigate(mock_page, "https://example.com")

        mock_page.goto.assert_awaited_once_with(
            "https://example.com",
            wait_until="networkidle",
            timeout=60000
        )

    @pytest.mark.asyncio
    async def test_capture_options(self, session, mock_page):
        await session.capture(mock_page, "/tmp/out.pdf")

        mock_page.pdf.assert_awaited_once_with(
            path="/tmp/out.pdf",
            format="A4",
            print_background=True,
            margin={"top": "0.4in", "right": "0.4in", "bottom": "0.4in", "left": "0.4in"}
        )


class TestClose:
    """Tests for RenderSession.close."""

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, session, mock_browser):
        """Test closing twice closes the browser once."""
        await session.close()
        await session.close()

        assert session.closed
        mock_browser.close.assert_awaited_once()
        session.playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_tolerates_dead_browser(self, session, mock_browser):
        """Test closing an already-crashed browser does not raise."""
        mock_browser.close.side_effect = Exception("Browser has been closed")

        await session.close()

        assert session.closed


class TestLaunch:
    """Tests for RenderSession.launch."""

    @pytest.mark.asyncio
    async def test_launch_failure_stops_playwright(self, session_settings):
        """Test a failed Chromium launch raises RenderError and stops the driver."""
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(side_effect=Exception("Executable doesn't exist"))
        playwright.stop = AsyncMock()

        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)

        with patch("renderer.session.async_playwright", return_value=starter):
            with pytest.raises(RenderError, match="Executable doesn't exist"):
                await RenderSession.launch(session_settings)

        playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_passes_browser_options(self):
        """Test launch options come from settings."""
        settings = Settings(browser_executable_path="/usr/bin/chromium", browser_headless=True)
        browser = MagicMock()
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)

        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)

        with patch("renderer.session.async_playwright", return_value=starter):
            session = await RenderSession.launch(settings)

        playwright.chromium.launch.assert_awaited_once_with(
            headless=True,
            args=["--no-sandbox", "--disable-setuid-sandbox"],
            executable_path="/usr/bin/chromium"
        )
        assert session.browser is browser
        assert not session.closed


class TestRenderOutcome:
    """Tests for RenderOutcome dataclass."""

    def test_success(self):
        outcome = RenderOutcome(url="https://example.com", success=True, file_path="/tmp/a.pdf")
        assert outcome.success
        assert outcome.error is None

    def test_failure(self):
        outcome = RenderOutcome(url="https://example.com", success=False, error="Timeout 60000ms exceeded")
        assert not outcome.success
        assert "Timeout" in outcome.error
