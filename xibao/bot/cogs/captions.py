"""
Caption commands: 喜报 / 悲报 <text>
"""
import io
import logging

import discord
from discord.ext import commands

from xibao.services.caption_service import CaptionService, EmptyCaptionError, VARIANTS

logger = logging.getLogger(__name__)


def _help(variant_name: str) -> str:
    variant = VARIANTS[variant_name]
    return f"{variant.description}\n\n用法: {variant.usage}\n例: {variant.example}"


class CaptionCog(commands.Cog, name="Captions"):
    """Good news / bad news image commands."""

    def __init__(self, service: CaptionService):
        self.service = service

    @commands.command(
        name=VARIANTS["xibao"].command,
        aliases=list(VARIANTS["xibao"].aliases),
        brief=VARIANTS["xibao"].description,
        help=_help("xibao"),
    )
    async def xibao(self, ctx: commands.Context, *, text: str = ""):
        await self.send_caption(ctx, "xibao", text)

    @commands.command(
        name=VARIANTS["beibao"].command,
        aliases=list(VARIANTS["beibao"].aliases),
        brief=VARIANTS["beibao"].description,
        help=_help("beibao"),
    )
    async def beibao(self, ctx: commands.Context, *, text: str = ""):
        await self.send_caption(ctx, "beibao", text)

    async def send_caption(self, ctx: commands.Context, variant_name: str, text: str):
        """Reply with the rendered image, or with the usage hint for an empty caption."""
        try:
            self.service.validate_text(text)
        except EmptyCaptionError as e:
            await ctx.reply(e.message)
            return

        async with ctx.typing():
            image = await self.service.render_caption(variant_name, text)

        await ctx.reply(file=discord.File(io.BytesIO(image), filename=f"{variant_name}.png"))
        logger.info(f"Sent {variant_name} image to {ctx.author} in #{ctx.channel}")
