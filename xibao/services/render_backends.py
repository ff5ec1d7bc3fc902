"""
Render backends turning a RenderRequest into PNG bytes.

HtmlRenderBackend hands the caption document to a browser; PillowRenderBackend
draws the caption natively and measures text with the font file itself.
"""
import asyncio
import io
import logging
from functools import lru_cache
from typing import Awaitable, Callable, List, Optional, Protocol

from PIL import Image, ImageDraw, ImageFont

from shared_lib.config import RendererConfig
from xibao.services.browser_renderer import PlaywrightRenderer
from xibao.services.caption_renderer import CaptionRenderer, RenderRequest, fit_font_size

logger = logging.getLogger(__name__)

# Matches the browser's default "normal" line height for most CJK fonts
LINE_HEIGHT_RATIO = 1.2
STROKE_WIDTH = 2


class RenderBackend(Protocol):
    async def render(self, request: RenderRequest) -> bytes:
        ...


class HtmlRenderBackend:
    """Builds the caption document and delegates rasterisation to `render`."""

    def __init__(self, document_builder: CaptionRenderer, render: Callable[[str], Awaitable[bytes]]):
        self.document_builder = document_builder
        self._render = render

    async def render(self, request: RenderRequest) -> bytes:
        document = self.document_builder.build_document(request)
        return await self._render(document)


class PillowRenderBackend:
    """Draws captions with Pillow when no browser is available."""

    def __init__(self, font_path: str, canvas_width: int = 960, canvas_height: int = 768):
        self.font_path = font_path
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self._font = lru_cache(maxsize=128)(self._load_font)

    async def render(self, request: RenderRequest) -> bytes:
        return await asyncio.to_thread(self.draw, request)

    def _load_font(self, size: int) -> ImageFont.FreeTypeFont:
        return ImageFont.truetype(self.font_path, size)

    def measure(self, lines: List[str], size: int) -> float:
        """Width of the widest line at the given font size."""
        font = self._font(size)
        return max(font.getlength(line) for line in lines)

    def draw(self, request: RenderRequest) -> bytes:
        lines = request.text.split('\n')
        font_size = fit_font_size(lambda size: self.measure(lines, size), request.style)
        font = self._font(font_size)
        logger.debug(f"Caption fitted at {font_size}px")

        canvas = Image.new("RGB", (self.canvas_width, self.canvas_height), "white")
        with Image.open(io.BytesIO(request.background)) as background:
            canvas.paste(background.convert("RGB"), (0, 0))
        draw = ImageDraw.Draw(canvas)

        line_height = font_size * LINE_HEIGHT_RATIO
        y = (self.canvas_height - line_height * len(lines)) / 2
        for line in lines:
            text_width = font.getlength(line)
            x = (self.canvas_width - text_width) / 2
            draw.text(
                (x, y), line, font=font,
                fill=request.font_color,
                stroke_width=STROKE_WIDTH,
                stroke_fill=request.stroke_color
            )
            y += line_height

        output = io.BytesIO()
        canvas.save(output, format="PNG")
        return output.getvalue()


def create_render_backend(config: RendererConfig, browser: Optional[PlaywrightRenderer] = None) -> RenderBackend:
    """Build the configured backend; the playwright one renders through `browser`."""
    if config.backend == "pillow":
        if not config.font_path:
            raise ValueError("The pillow backend needs renderer.font_path")
        return PillowRenderBackend(config.font_path, config.canvas_width, config.canvas_height)

    browser = browser or PlaywrightRenderer(config)
    document_builder = CaptionRenderer(config.canvas_width, config.canvas_height)
    return HtmlRenderBackend(document_builder, browser.render)
