"""
Anti-raid cog: owner-only configuration commands.

This cog exposes two slash commands:
- /antiraid: Interactive panel with buttons to toggle the protections
- /antiraid-dump: Export the stored protection settings as JSON

Only the guild owner may use them; administrators are rejected too.
Responses are ephemeral to avoid leaking configuration in public channels.
"""

import io
import json
from typing import Optional

import discord
from discord.ext import commands

from raidguard.configuration.app_configuration import app_config
from raidguard.configuration.guild_settings import GuildSettingsManager
from raidguard.ui.antiraid_panel import AntiRaidPanelView, build_panel_embed
from raidguard.util.discord_utils import is_guild_owner
from raidguard.util.logger import get_logger

logger = get_logger("antiraid_cog")

OWNER_ONLY_MESSAGE = "Only the server owner can use this command."


class AntiRaidCog(commands.Cog):
    """Owner-facing anti-raid configuration."""

    def __init__(
        self,
        discord_bot_instance,
        settings_manager: GuildSettingsManager,
        *,
        panel_timeout: Optional[float] = None,
    ):
        self.discord_bot_instance = discord_bot_instance
        self.settings_manager = settings_manager
        self.panel_timeout = app_config.panel_timeout if panel_timeout is None else panel_timeout
        logger.info("Anti-raid cog loaded")

    async def _ensure_owner_context(self, ctx: discord.ApplicationContext) -> bool:
        """Reject DMs and non-owners; initializes the guild's settings otherwise."""
        if not ctx.guild_id or ctx.guild is None:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return False

        self.settings_manager.ensure_guild(ctx.guild_id)

        if not is_guild_owner(ctx.guild, ctx.user):
            await ctx.respond(OWNER_ONLY_MESSAGE, ephemeral=True)
            return False
        return True

    @commands.slash_command(name="antiraid", description="Configure anti-raid protections (Owner only)")
    async def antiraid(self, ctx: discord.ApplicationContext) -> None:
        """Open the anti-raid panel for this server."""
        if not await self._ensure_owner_context(ctx):
            return

        view = AntiRaidPanelView(
            self.settings_manager,
            ctx.guild_id,
            ctx.user.id,
            timeout_seconds=self.panel_timeout,
        )
        await ctx.respond(embed=build_panel_embed(), view=view, ephemeral=True)
        view.origin_interaction = ctx.interaction
        logger.debug("[ANTIRAID] Panel opened for guild %s by %s", ctx.guild_id, ctx.user.id)

    @commands.slash_command(name="antiraid-dump", description="Show the stored anti-raid settings as raw JSON.")
    async def antiraid_dump(self, ctx: discord.ApplicationContext) -> None:
        """Send the guild's stored protection settings as an ephemeral JSON file."""
        if not await self._ensure_owner_context(ctx):
            return

        guild_id = ctx.guild_id
        settings = self.settings_manager.get_guild_settings(guild_id)
        payload = {"guild_id": guild_id, "antiRaid": settings.to_dict()}
        file_obj = io.BytesIO(json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8"))

        discord_file = discord.File(fp=file_obj, filename=f"guild_{guild_id}_antiraid.json")
        await ctx.respond(file=discord_file, ephemeral=True)


def setup(discord_bot_instance, settings_manager: GuildSettingsManager):
    """Add the anti-raid cog to the supplied Discord bot instance."""
    discord_bot_instance.add_cog(AntiRaidCog(discord_bot_instance, settings_manager))
