"""
Role cog: bulk role assignment.

``/roleall`` gives a role to every member of the guild that does not already
have it. The run pauses after each addition to stay under rate limits, so
the interaction is deferred first and the count is reported as a followup.
"""

from typing import Optional

import discord
from discord import Option
from discord.ext import commands

from raidguard.configuration.app_configuration import app_config
from raidguard.configuration.guild_settings import GuildSettingsManager
from raidguard.moderation.role_assignment import assign_role_to_all
from raidguard.util.discord_utils import has_permissions
from raidguard.util.logger import get_logger

logger = get_logger("role_cog")


class RoleCommandsCog(commands.Cog):
    """Slash commands that manage roles in bulk."""

    def __init__(
        self,
        discord_bot_instance,
        settings_manager: GuildSettingsManager,
        *,
        delay_seconds: Optional[float] = None,
    ):
        self.discord_bot_instance = discord_bot_instance
        self.settings_manager = settings_manager
        self.delay_seconds = app_config.role_assignment_delay if delay_seconds is None else delay_seconds
        logger.info("Role cog loaded")

    @commands.slash_command(name="roleall", description="Assign a role to all members")
    @discord.default_permissions(manage_roles=True)
    async def roleall(
        self,
        ctx: discord.ApplicationContext,
        role: Option(discord.Role, "The role to assign", required=True),  # type: ignore
    ) -> None:
        """Add ``role`` to every member lacking it and report how many were updated."""
        if not ctx.guild_id or ctx.guild is None:
            await ctx.respond("This command can only be used in a server.", ephemeral=True)
            return

        self.settings_manager.ensure_guild(ctx.guild_id)

        if not has_permissions(ctx, manage_roles=True):
            await ctx.respond("You need Manage Roles permission.", ephemeral=True)
            return

        if role is None:
            await ctx.respond("Role not found.", ephemeral=True)
            return

        await ctx.defer()
        logger.info("[ROLEALL] %s started assigning role %s in guild %s", ctx.author, role.id, ctx.guild_id)
        result = await assign_role_to_all(
            ctx.guild,
            role,
            delay_seconds=self.delay_seconds,
            reason=f"/roleall by {ctx.author}",
        )
        await ctx.send_followup(f"Assigned {role.name} to {result.assigned} members.")


def setup(discord_bot_instance, settings_manager: GuildSettingsManager):
    """Add the role cog to the supplied Discord bot instance."""
    discord_bot_instance.add_cog(RoleCommandsCog(discord_bot_instance, settings_manager))
