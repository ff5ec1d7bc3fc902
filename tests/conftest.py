from pathlib import Path

import pytest

from shared_lib.config import BotConfig, StyleConfig
from xibao.services.caption_renderer import RenderRequest
from tests.fixtures import find_system_font, make_image


@pytest.fixture
def bot_config() -> BotConfig:
    """Default configuration with a bot token set."""
    return BotConfig.from_dict({"discord": {"bot_token": "test-token"}})


@pytest.fixture
def png_background() -> bytes:
    return make_image("PNG")


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    """Directory holding both background images."""
    (tmp_path / "xibao.jpg").write_bytes(make_image("JPEG", color=(220, 20, 20)))
    (tmp_path / "beibao.jpg").write_bytes(make_image("JPEG", color=(90, 90, 90)))
    return tmp_path


@pytest.fixture
def default_style() -> StyleConfig:
    return StyleConfig()


@pytest.fixture
def render_request(default_style, png_background) -> RenderRequest:
    return RenderRequest(
        text="这可以喜",
        font_color="#ff0a0a",
        stroke_color="#ffde00",
        style=default_style,
        background=png_background,
        stylesheet_url="https://gitee.com/ifrank/harmonyos-fonts/raw/main/css/harmonyos_sans_sc.css",
    )


@pytest.fixture
def font_path() -> str:
    """Path to a TrueType font, skipping the test when none is installed."""
    path = find_system_font()
    if path is None:
        pytest.skip("No TrueType font found.")
    return path
