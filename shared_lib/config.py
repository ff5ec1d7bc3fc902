"""
Configuration management for the xibao caption bot.
Provides validated settings for the Discord surface, caption styles and the renderer.
"""

import os
from enum import Enum
from typing import Optional, List, Dict, Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_FONT_FAMILY = '"HarmonyOS Sans SC", "Source Han Sans CN", sans-serif'

# Stylesheets that ship the HarmonyOS Sans SC web font.
STYLESHEET_PRESETS: Dict[str, str] = {
    "gitee": "https://gitee.com/ifrank/harmonyos-fonts/raw/main/css/harmonyos_sans_sc.css",
    "github": "https://raw.githubusercontent.com/ifrvn/harmonyos-fonts/main/css/harmonyos_sans_sc.css",
}
DEFAULT_CUSTOM_STYLESHEET = (
    "https://ghproxy.com/https://raw.githubusercontent.com/ifrvn/harmonyos-fonts/main/css/harmonyos_sans_sc.css"
)


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StyleConfig(BaseModel):
    """Typography of one caption variant."""
    model_config = ConfigDict(frozen=True)

    font_family: str = Field(DEFAULT_FONT_FAMILY, description="CSS font-family list")
    max_font_size: int = Field(80, ge=1, description="Largest font size in px")
    min_font_size: int = Field(38, ge=1, description="Smallest font size in px")
    offset_width: int = Field(
        900, ge=1,
        description="Line width in px at which the font starts shrinking, down to min_font_size"
    )

    @property
    def has_inverted_bounds(self) -> bool:
        return self.min_font_size > self.max_font_size


class DiscordConfig(BaseModel):
    """Discord bot configuration."""
    bot_token: str = Field("", description="Discord bot token")
    command_prefix: str = Field("!", description="Bot command prefix")


class AdvancedConfig(BaseModel):
    """External stylesheet selection."""
    import_css: str = Field(
        "gitee",
        description="Stylesheet preset to @import: 'gitee', 'github' or 'custom'"
    )
    custom: str = Field(DEFAULT_CUSTOM_STYLESHEET, description="Stylesheet URL used when import_css is 'custom'")

    @field_validator('import_css')
    @classmethod
    def validate_import_css(cls, v):
        """Accept preset names, their URLs, or 'custom'."""
        if v == "custom" or v in STYLESHEET_PRESETS:
            return v
        for name, url in STYLESHEET_PRESETS.items():
            if v == url:
                return name
        raise ValueError(
            f"import_css must be one of {sorted(STYLESHEET_PRESETS)} or 'custom', got {v!r}"
        )

    @property
    def stylesheet_url(self) -> str:
        """Resolve the stylesheet URL to embed in rendered documents."""
        if self.import_css == "custom":
            return self.custom
        return STYLESHEET_PRESETS[self.import_css]


class RendererConfig(BaseModel):
    """Image rendering configuration."""
    backend: Literal["playwright", "pillow"] = Field("playwright", description="Rendering backend")
    canvas_width: int = Field(960, ge=1, description="Output image width in px")
    canvas_height: int = Field(768, ge=1, description="Output image height in px")
    timeout_ms: int = Field(30000, ge=1000, description="Timeout for each browser step")
    headless: bool = Field(True, description="Run Chromium headless")
    browser_args: List[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
        description="Extra Chromium command line flags"
    )
    font_path: Optional[str] = Field(None, description="TrueType font file for the pillow backend")


class BotConfig(BaseSettings):
    """
    Main bot configuration with environment variable validation.

    Values are read from the environment and an optional .env file,
    nested sections use "__" (e.g. XIBAO__MAX_FONT_SIZE=72).
    """

    # Environment and logging
    environment: str = Field("development", description="Environment name")
    log_level: LogLevel = Field(LogLevel.INFO, description="Logging level")
    debug: bool = Field(False, description="Enable debug mode")

    # Component configurations
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    xibao: StyleConfig = Field(default_factory=StyleConfig)
    beibao: StyleConfig = Field(default_factory=lambda: StyleConfig(max_font_size=90))
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
    renderer: RendererConfig = Field(default_factory=RendererConfig)
    assets_dir: Optional[str] = Field(None, description="Directory holding the background images")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore"
    )

    @field_validator('beibao', mode='before')
    @classmethod
    def default_beibao_max_font_size(cls, v):
        """The bad news caption starts larger than the good news one."""
        if isinstance(v, dict) and "max_font_size" not in v:
            return {**v, "max_font_size": 90}
        return v

    @classmethod
    def from_env(cls) -> 'BotConfig':
        """Load configuration from environment variables."""
        try:
            return cls()
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'BotConfig':
        """Load configuration from dictionary."""
        try:
            return cls(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")

    @classmethod
    def from_yaml(cls, path: str) -> 'BotConfig':
        """Load configuration from a YAML file; the environment fills the gaps."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return self.model_dump(mode="json")

    def get_style(self, variant: str) -> StyleConfig:
        """Style block of a caption variant ('xibao' or 'beibao')."""
        if variant not in ("xibao", "beibao"):
            raise KeyError(variant)
        return getattr(self, variant)

    def missing_required_values(self) -> List[str]:
        """
        List settings that must be present before the bot can connect.

        Returns:
            Names of the missing settings, as environment variables
        """
        missing = []
        if not self.discord.bot_token:
            missing.append("DISCORD__BOT_TOKEN")
        if self.renderer.backend == "pillow" and not self.renderer.font_path:
            missing.append("RENDERER__FONT_PATH")
        return missing


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""
    pass


def load_config(path: Optional[str] = None) -> BotConfig:
    """
    Load and validate bot configuration.

    Args:
        path: Optional YAML file; defaults to $XIBAO_CONFIG when set

    Returns:
        Validated BotConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    load_dotenv()
    path = path or os.getenv("XIBAO_CONFIG")
    if path:
        return BotConfig.from_yaml(path)
    return BotConfig.from_env()


def create_sample_env_file(filepath: str = ".env.example") -> None:
    """
    Create a sample .env file with all configuration options.

    Args:
        filepath: Path to create the sample file
    """
    sample_content = f'''# xibao caption bot configuration

# Environment
ENVIRONMENT=development
LOG_LEVEL=INFO
DEBUG=false

# Discord Configuration
DISCORD__BOT_TOKEN=your_bot_token_here
DISCORD__COMMAND_PREFIX=!

# Good news (喜报) style
XIBAO__FONT_FAMILY='{DEFAULT_FONT_FAMILY}'
XIBAO__MAX_FONT_SIZE=80
XIBAO__MIN_FONT_SIZE=38
XIBAO__OFFSET_WIDTH=900

# Bad news (悲报) style
BEIBAO__FONT_FAMILY='{DEFAULT_FONT_FAMILY}'
BEIBAO__MAX_FONT_SIZE=90
BEIBAO__MIN_FONT_SIZE=38
BEIBAO__OFFSET_WIDTH=900

# External stylesheet: gitee, github or custom
ADVANCED__IMPORT_CSS=gitee
ADVANCED__CUSTOM={DEFAULT_CUSTOM_STYLESHEET}

# Renderer Configuration
RENDERER__BACKEND=playwright
RENDERER__CANVAS_WIDTH=960
RENDERER__CANVAS_HEIGHT=768
RENDERER__TIMEOUT_MS=30000
RENDERER__HEADLESS=true
RENDERER__FONT_PATH=

# Background images (defaults to the bundled assets)
ASSETS_DIR=
'''

    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(sample_content)

