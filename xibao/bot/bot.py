"""
Discord bot serving the 喜报 / 悲报 caption commands.
Wires configuration, assets, renderer and commands together at start-up.
"""
import logging
from typing import Optional

import discord
from discord.ext import commands

from shared_lib.assets import AssetStore
from shared_lib.config import BotConfig, ConfigurationError, load_config
from shared_lib.utils import setup_logging
from xibao.bot.cogs.captions import CaptionCog
from xibao.services.browser_renderer import PlaywrightRenderer
from xibao.services.caption_service import CaptionService, VARIANTS
from xibao.services.render_backends import create_render_backend

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "生成图片失败，请稍后再试"


class CaptionBot(commands.Bot):
    """Bot hosting the caption commands."""

    def __init__(self, config: BotConfig):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.guild_messages = True

        super().__init__(
            command_prefix=config.discord.command_prefix,
            intents=intents
        )

        self.config = config
        self.assets = AssetStore(config.assets_dir)
        self.browser: Optional[PlaywrightRenderer] = None
        self.caption_service: Optional[CaptionService] = None

    async def setup_hook(self):
        """Initialize bot components."""
        logger.info("Setting up caption bot...")
        self._check_configuration()

        if self.config.renderer.backend == "playwright":
            self.browser = PlaywrightRenderer(self.config.renderer)
        backend = create_render_backend(self.config.renderer, self.browser)

        self.caption_service = CaptionService(self.config, backend, self.assets.read_file)
        await self.add_cog(CaptionCog(self.caption_service))

        logger.info(f"Caption bot setup complete (backend: {self.config.renderer.backend})")

    def _check_configuration(self):
        for name in VARIANTS:
            style = self.config.get_style(name)
            if style.has_inverted_bounds:
                logger.warning(
                    f"{name}: min_font_size ({style.min_font_size}) is larger than "
                    f"max_font_size ({style.max_font_size}); captions will not shrink"
                )

        missing = self.assets.missing(*(variant.background for variant in VARIANTS.values()))
        if missing:
            logger.warning(
                f"Background images missing from {self.assets.directory}: {', '.join(missing)}; "
                "run scripts/setup.py --backgrounds for placeholders"
            )

    async def on_ready(self):
        """Bot ready event handler."""
        logger.info(f"Bot logged in as {self.user}")

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        """Log failed commands and tell the user."""
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.CommandInvokeError):
            original = error.original
            logger.error(
                f"Command {ctx.command} failed: {original}",
                exc_info=(type(original), original, original.__traceback__)
            )
            await ctx.reply(FAILURE_MESSAGE)
            return

        logger.warning(f"Command {ctx.command} rejected: {error}")
        await ctx.reply(str(error))

    async def close(self):
        """Shut the browser down with the bot."""
        if self.browser is not None:
            await self.browser.close()
        await super().close()


def run_bot(config: Optional[BotConfig] = None):
    """Run the caption bot until interrupted."""
    try:
        config = config or load_config()
    except ConfigurationError as e:
        setup_logging()
        logger.error(str(e))
        raise SystemExit(1)

    setup_logging(config.log_level.value)

    missing = config.missing_required_values()
    if missing:
        logger.error(f"Missing required configuration: {', '.join(missing)}")
        raise SystemExit(1)

    bot = CaptionBot(config)
    bot.run(config.discord.bot_token, log_handler=None)


if __name__ == "__main__":
    run_bot()
