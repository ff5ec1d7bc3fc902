"""
Caption Service

Turns a command invocation into an image:
- Variant lookup (喜报 / 悲报) with colours and background
- Caption validation with a user-facing usage hint
- Background loading on every call
- Request assembly and delegation to the render backend
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from PIL import Image, ImageDraw

from shared_lib.config import BotConfig
from shared_lib.utils import format_bytes, truncate_text
from xibao.services.caption_renderer import RenderRequest
from xibao.services.render_backends import RenderBackend

logger = logging.getLogger(__name__)

USAGE_HINT = "请在指令空格后输入内容，具体使用方式请查看帮助信息"


@dataclass(frozen=True)
class CaptionVariant:
    """A news image flavour and the command that produces it."""
    name: str
    command: str
    aliases: Tuple[str, ...]
    background: str
    font_color: str
    stroke_color: str
    description: str
    usage: str
    example: str
    placeholder_fill: str
    placeholder_frame: str


VARIANTS: Dict[str, CaptionVariant] = {
    "xibao": CaptionVariant(
        name="xibao",
        command="喜报",
        aliases=("xibao",),
        background="xibao.jpg",
        font_color="#ff0a0a",
        stroke_color="#ffde00",
        description="生成一张喜报",
        usage="喜报 要在喜报上写的内容，支持换行",
        example="喜报 这可以喜",
        placeholder_fill="#c4161c",
        placeholder_frame="#ffde00",
    ),
    "beibao": CaptionVariant(
        name="beibao",
        command="悲报",
        aliases=("beibao",),
        background="beibao.jpg",
        font_color="#000500",
        stroke_color="#c6c6c6",
        description="生成一张悲报",
        usage="悲报 要在悲报上写的内容，支持换行",
        example="悲报 这不可以喜",
        placeholder_fill="#c6c6c6",
        placeholder_frame="#3c3c3c",
    ),
}


def write_placeholder_backgrounds(directory: Union[str, Path], size: Tuple[int, int] = (960, 768),
                                  overwrite: bool = False) -> List[Path]:
    """
    Draw plain framed backgrounds for every variant.

    Existing files are kept unless `overwrite` is set. Returns the paths written.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    written = []

    for variant in VARIANTS.values():
        path = directory / variant.background
        if path.exists() and not overwrite:
            continue

        image = Image.new("RGB", size, variant.placeholder_fill)
        inset = min(size) // 24
        ImageDraw.Draw(image).rectangle(
            (inset, inset, size[0] - inset - 1, size[1] - inset - 1),
            outline=variant.placeholder_frame,
            width=max(1, inset // 3)
        )
        image.save(path, format="JPEG", quality=90)
        logger.info(f"Wrote placeholder background {path}")
        written.append(path)

    return written

class EmptyCaptionError(Exception):
    """Raised when a command is invoked without caption text."""

    def __init__(self, message: str = USAGE_HINT):
        super().__init__(message)
        self.message = message


class UnknownVariantError(Exception):
    """Raised for a variant name that has no background or style."""
    pass


class CaptionService:
    """Renders news captions with injected backend and asset reader."""

    def __init__(self, config: BotConfig, backend: RenderBackend, read_file: Callable[[str], bytes]):
        self.config = config
        self.backend = backend
        self.read_file = read_file

    def get_variant(self, name: str) -> CaptionVariant:
        try:
            return VARIANTS[name]
        except KeyError:
            raise UnknownVariantError(f"Unknown caption variant: {name}")

    def validate_text(self, text: Optional[str]) -> str:
        """Return the caption unchanged, or raise EmptyCaptionError if it is blank."""
        if not text or not text.strip():
            raise EmptyCaptionError()
        return text

    def build_request(self, variant: CaptionVariant, text: str) -> RenderRequest:
        return RenderRequest(
            text=text,
            font_color=variant.font_color,
            stroke_color=variant.stroke_color,
            style=self.config.get_style(variant.name),
            background=self.read_file(variant.background),
            stylesheet_url=self.config.advanced.stylesheet_url,
        )

    async def render_caption(self, variant_name: str, text: Optional[str]) -> bytes:
        """
        Render a caption for the given variant.

        Raises:
            EmptyCaptionError: If the caption is empty or whitespace only
            UnknownVariantError: If the variant does not exist
        """
        variant = self.get_variant(variant_name)
        text = self.validate_text(text)
        request = self.build_request(variant, text)

        logger.info(f"Rendering {variant.name} caption {truncate_text(text, 40)!r}")
        image = await self.backend.render(request)
        logger.info(f"Rendered {variant.name} image ({format_bytes(len(image))})")
        return image
