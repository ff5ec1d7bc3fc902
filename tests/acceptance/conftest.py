"""
Configuration for acceptance tests with browser automation.
"""
import pytest
from playwright.async_api import async_playwright, Browser, Error, Page
from typing import AsyncGenerator

from shared_lib.config import RendererConfig
from xibao.services.browser_renderer import PlaywrightRenderer


def pytest_collection_modifyitems(items):
    for item in items:
        if "acceptance" in item.path.parts:
            item.add_marker(pytest.mark.acceptance)


@pytest.fixture
async def browser() -> AsyncGenerator[Browser, None]:
    """Launch Chromium, skipping when it is not installed."""
    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(
                headless=True,
                args=[
                    "--no-sandbox",
                    "--disable-dev-shm-usage",
                    "--disable-gpu"
                ]
            )
        except Error as e:
            pytest.skip(f"Chromium not available: {e}")
        yield browser
        await browser.close()


@pytest.fixture
async def page(browser: Browser) -> AsyncGenerator[Page, None]:
    """Create a canvas-sized page for each test."""
    page = await browser.new_page(viewport={"width": 960, "height": 768})

    # Set up console logging for debugging
    page.on("console", lambda msg: print(f"Console: {msg.text}"))
    page.on("pageerror", lambda error: print(f"Page Error: {error}"))

    yield page
    await page.close()


@pytest.fixture
async def renderer() -> AsyncGenerator[PlaywrightRenderer, None]:
    """PlaywrightRenderer started against its own Chromium."""
    renderer = PlaywrightRenderer(RendererConfig(timeout_ms=15000))
    try:
        await renderer.start()
    except Error as e:
        await renderer.close()
        pytest.skip(f"Chromium not available: {e}")
    yield renderer
    await renderer.close()


class BrowserHelpers:
    """Helper methods for caption documents."""

    @staticmethod
    async def load_fitted(page: Page, html: str) -> int:
        """Load a caption document and return the font size it settled on."""
        await page.set_content(html, wait_until="load")
        await page.wait_for_selector("body[data-fitted]", state="attached")
        return int(await page.evaluate("document.body.dataset.fitted"))

    @staticmethod
    async def caption_width(page: Page, font_size: int = None) -> float:
        """Width of the caption, optionally after forcing a font size."""
        if font_size is not None:
            await page.evaluate(f"document.body.style.fontSize = '{font_size}px'")
        return await page.evaluate("document.querySelector('div').offsetWidth")


@pytest.fixture
def browser_helpers():
    """Browser helper methods."""
    return BrowserHelpers()
