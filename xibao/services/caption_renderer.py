"""
Caption Renderer

Builds the HTML document for a captioned news image:
- Caption text escaped and split into stacked lines
- Background image inlined as a base64 data URI
- External stylesheet import for web fonts
- Post-layout script shrinking the font until every line fits
"""
import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup, escape
from PIL import Image, UnidentifiedImageError

from shared_lib.config import StyleConfig


TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
DOCUMENT_TEMPLATE = "caption.html.j2"

LINE_BREAK = '<br/>'


@dataclass(frozen=True)
class RenderRequest:
    """Everything needed to draw one caption."""
    text: str
    font_color: str
    stroke_color: str
    style: StyleConfig
    background: bytes
    stylesheet_url: str


def escape_html(text: str) -> str:
    """Replace the five HTML-significant characters with entities."""
    return str(escape(text)).replace('&#34;', '&quot;')


def format_caption(text: str) -> Markup:
    """Escape caption text and turn newlines into line breaks."""
    return Markup(escape_html(text).replace('\n', LINE_BREAK))


def sniff_image_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format, 'image/png')
    except UnidentifiedImageError:
        return 'image/png'


environment = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)
environment.filters["caption"] = format_caption


def fit_font_size(measure: Callable[[int], float], style: StyleConfig) -> int:
    """
    Shrink the font one pixel at a time until the caption fits.

    `measure` returns the rendered width of the widest line at a font size.
    Starts at max_font_size and stops as soon as the width drops below
    offset_width or min_font_size is reached; text wider than offset_width at
    min_font_size is left overflowing.
    """
    font_size = style.max_font_size
    width = measure(font_size)
    while width >= style.offset_width and font_size > style.min_font_size:
        font_size -= 1
        width = measure(font_size)
    return font_size


class CaptionRenderer:
    """Produces self-contained HTML documents for the browser renderer."""

    def __init__(self, canvas_width: int = 960, canvas_height: int = 768):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height

    def build_document(self, request: RenderRequest) -> str:
        style = request.style
        template = environment.get_template(DOCUMENT_TEMPLATE)
        return template.render(
            stylesheet_url=request.stylesheet_url,
            canvas_width=self.canvas_width,
            canvas_height=self.canvas_height,
            font_family=style.font_family,
            font_color=request.font_color,
            stroke_color=request.stroke_color,
            mime_type=sniff_image_type(request.background),
            background=base64.b64encode(request.background).decode('ascii'),
            text=request.text,
            max_font_size=style.max_font_size,
            min_font_size=style.min_font_size,
            offset_width=style.offset_width,
        )
