"""
Headless Chromium renderer backed by Playwright.
Turns an HTML document into PNG bytes once its auto-fit script has run.
"""
import asyncio
import logging
from typing import Optional

from playwright.async_api import async_playwright, Browser, Playwright

from shared_lib.config import RendererConfig

logger = logging.getLogger(__name__)

# Set by the caption document once the font size is final
FITTED_SELECTOR = "body[data-fitted]"


class PlaywrightRenderer:
    """Shares one browser between renders; every render gets its own page."""

    def __init__(self, config: Optional[RendererConfig] = None):
        self.config = config or RendererConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def start(self) -> Browser:
        """Launch Chromium unless it is already running."""
        async with self._lock:
            if self.is_running:
                return self._browser

            if self._playwright is None:
                self._playwright = await async_playwright().start()

            logger.info("Launching Chromium (headless=%s)", self.config.headless)
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=self.config.browser_args
            )
            return self._browser

    async def close(self):
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        logger.info("Chromium renderer closed")

    async def render(self, html: str) -> bytes:
        """Render a caption document to PNG bytes."""
        browser = await self.start()
        width = self.config.canvas_width
        height = self.config.canvas_height
        timeout = self.config.timeout_ms

        page = await browser.new_page(viewport={"width": width, "height": height})
        try:
            page.set_default_timeout(timeout)
            page.on("pageerror", lambda error: logger.warning(f"Caption page error: {error}"))

            await page.set_content(html, wait_until="load", timeout=timeout)
            await page.wait_for_selector(FITTED_SELECTOR, state="attached", timeout=timeout)

            font_size = await page.evaluate("document.body.dataset.fitted")
            logger.debug(f"Caption fitted at {font_size}px")

            return await page.screenshot(
                type="png",
                clip={"x": 0, "y": 0, "width": width, "height": height},
                timeout=timeout
            )
        finally:
            await page.close()

    async def __aenter__(self) -> "PlaywrightRenderer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
