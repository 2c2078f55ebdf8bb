"""Event listener Cog for RaidGuard.

This cog handles bot lifecycle events (on_ready) and command error handling.
Anti-raid events are handled by the ProtectionListenerCog.
"""

import discord
from discord.ext import commands

from raidguard.util.discord_utils import GENERIC_COMMAND_ERROR
from raidguard.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle and command error handlers."""

    def __init__(self, discord_bot_instance):
        self.bot = discord_bot_instance
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        """Log the connected identity and set the bot's presence."""
        if self.bot.user:
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
            await self.bot.change_presence(
                status=discord.Status.online,
                activity=discord.Activity(type=discord.ActivityType.watching, name="for raids"),
            )
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        logger.info("--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--")

    @commands.Cog.listener(name='on_application_command_error')
    async def on_application_command_error(self, application_context: discord.ApplicationContext, error: Exception):
        """Log command failures and tell the user, unless they already got a response.

        Parameters
        ----------
        application_context:
            The command invocation context.
        error:
            The exception raised during command execution.
        """
        if isinstance(error, commands.CommandNotFound):
            return

        command_name = getattr(application_context.command, 'name', '<unknown>')
        logger.error(
            "Error in command '%s' (guild: %s): %s",
            command_name, application_context.guild_id, error,
            exc_info=error,
        )

        if application_context.interaction.response.is_done():
            return

        try:
            await application_context.respond(GENERIC_COMMAND_ERROR, ephemeral=True)
        except discord.HTTPException as exc:
            logger.error("Failed to reply to command error: %s", exc)


def setup(discord_bot_instance):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance))
