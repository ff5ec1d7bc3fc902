"""
Tests for configuration loading and validation.
"""
import pytest

from shared_lib.config import (
    BotConfig,
    ConfigurationError,
    StyleConfig,
    STYLESHEET_PRESETS,
    DEFAULT_CUSTOM_STYLESHEET,
    create_sample_env_file,
    load_config,
)


class TestStyleConfig:
    """Test cases for StyleConfig."""

    def test_defaults(self):
        style = StyleConfig()
        assert style.font_family == '"HarmonyOS Sans SC", "Source Han Sans CN", sans-serif'
        assert (style.max_font_size, style.min_font_size, style.offset_width) == (80, 38, 900)

    @pytest.mark.parametrize("field", ["max_font_size", "min_font_size", "offset_width"])
    def test_sizes_must_be_positive(self, field):
        with pytest.raises(ValueError):
            StyleConfig(**{field: 0})

    def test_frozen(self):
        style = StyleConfig()
        with pytest.raises(ValueError):
            style.max_font_size = 10

    def test_inverted_bounds_allowed(self):
        style = StyleConfig(max_font_size=20, min_font_size=40)
        assert style.has_inverted_bounds


class TestBotConfig:
    """Test cases for BotConfig."""

    def test_variant_defaults(self):
        config = BotConfig.from_dict({})
        assert config.xibao.max_font_size == 80
        assert config.beibao.max_font_size == 90
        assert config.beibao.min_font_size == 38

    def test_partial_beibao_keeps_larger_default(self):
        config = BotConfig.from_dict({"beibao": {"min_font_size": 30}})
        assert config.beibao.max_font_size == 90
        assert config.beibao.min_font_size == 30

    def test_get_style(self):
        config = BotConfig.from_dict({"xibao": {"offset_width": 700}})
        assert config.get_style("xibao").offset_width == 700
        with pytest.raises(KeyError):
            config.get_style("renderer")

    def test_invalid_values_raise_configuration_error(self):
        with pytest.raises(ConfigurationError, match="validation failed"):
            BotConfig.from_dict({"xibao": {"min_font_size": 0}})

    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("XIBAO__MAX_FONT_SIZE", "72")
        monkeypatch.setenv("RENDERER__BACKEND", "pillow")
        monkeypatch.setenv("DISCORD__COMMAND_PREFIX", "/")

        config = BotConfig.from_env()

        assert config.xibao.max_font_size == 72
        assert config.renderer.backend == "pillow"
        assert config.discord.command_prefix == "/"

    def test_missing_required_values(self):
        config = BotConfig.from_dict({"renderer": {"backend": "pillow"}})
        assert config.missing_required_values() == ["DISCORD__BOT_TOKEN", "RENDERER__FONT_PATH"]

    def test_nothing_missing(self, bot_config):
        assert bot_config.missing_required_values() == []

    def test_to_dict_is_serialisable(self, bot_config):
        data = bot_config.to_dict()
        assert data["log_level"] == "INFO"
        assert data["beibao"]["max_font_size"] == 90


class TestAdvancedConfig:
    """Test cases for stylesheet selection."""

    def test_default_is_gitee(self):
        assert BotConfig.from_dict({}).advanced.stylesheet_url == STYLESHEET_PRESETS["gitee"]

    def test_github_preset(self):
        config = BotConfig.from_dict({"advanced": {"import_css": "github"}})
        assert config.advanced.stylesheet_url == STYLESHEET_PRESETS["github"]

    def test_preset_url_accepted(self):
        config = BotConfig.from_dict({"advanced": {"import_css": STYLESHEET_PRESETS["github"]}})
        assert config.advanced.import_css == "github"

    def test_custom_default(self):
        config = BotConfig.from_dict({"advanced": {"import_css": "custom"}})
        assert config.advanced.stylesheet_url == DEFAULT_CUSTOM_STYLESHEET

    def test_unknown_preset_rejected(self):
        with pytest.raises(ConfigurationError):
            BotConfig.from_dict({"advanced": {"import_css": "https://example.com/other.css"}})


class TestConfigFiles:
    """Test cases for YAML and .env loading."""

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(
            "discord:\n"
            "  bot_token: yaml-token\n"
            "xibao:\n"
            "  max_font_size: 64\n"
            "advanced:\n"
            "  import_css: custom\n"
            "  custom: https://fonts.example.com/a.css\n",
            encoding="utf-8"
        )

        config = BotConfig.from_yaml(str(path))

        assert config.discord.bot_token == "yaml-token"
        assert config.xibao.max_font_size == 64
        assert config.advanced.stylesheet_url == "https://fonts.example.com/a.css"

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            BotConfig.from_yaml(str(tmp_path / "missing.yml"))

    def test_from_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            BotConfig.from_yaml(str(path))

    def test_load_config_uses_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yml"
        path.write_text("beibao:\n  offset_width: 800\n", encoding="utf-8")
        monkeypatch.setenv("XIBAO_CONFIG", str(path))

        assert load_config().beibao.offset_width == 800

    def test_sample_env_file_loads(self, tmp_path):
        path = tmp_path / ".env.example"
        create_sample_env_file(str(path))

        config = BotConfig(_env_file=str(path))

        assert config.discord.bot_token == "your_bot_token_here"
        assert config.xibao.font_family == '"HarmonyOS Sans SC", "Source Han Sans CN", sans-serif'
        assert config.beibao.max_font_size == 90
        assert config.renderer.font_path is None
