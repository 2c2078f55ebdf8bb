"""
discord_utils.py
================

Stateless Discord helpers shared by the cogs and the settings panel:
permission checks for invokers and for the bot itself, and safe ephemeral
error replies.
"""

from typing import Iterable, List

import discord

from raidguard.util.logger import get_logger

logger = get_logger("discord_utils")

GENERIC_COMMAND_ERROR = "An error occurred while processing the command."


def has_permissions(application_context: discord.ApplicationContext, **required_permissions) -> bool:
    """
    Check if the command issuer has all specified permissions in the guild.

    Args:
        application_context (discord.ApplicationContext): The command context.
        **required_permissions: Permission flags to check.

    Returns:
        bool: True if all permissions are present, False otherwise.
    """
    if not isinstance(application_context.author, discord.Member):
        return False
    return all(getattr(application_context.author.guild_permissions, permission_name, False) for permission_name in required_permissions)


def is_guild_owner(guild: discord.Guild | None, user: discord.abc.Snowflake | None) -> bool:
    """Return True when ``user`` owns ``guild``."""
    if guild is None or user is None:
        return False
    return guild.owner_id == user.id


def missing_bot_permissions(guild: discord.Guild, permission_names: Iterable[str]) -> List[str]:
    """
    List the permissions the bot lacks in ``guild``.

    When the bot's own member is not cached every permission is reported
    missing, since nothing can be verified.
    """
    me = getattr(guild, "me", None)
    names = list(permission_names)
    if me is None:
        return names
    permissions = me.guild_permissions
    return [name for name in names if not getattr(permissions, name, False)]


async def send_ephemeral_error(interaction: discord.Interaction, message: str) -> bool:
    """Reply ephemerally unless the interaction already has a response.

    Returns True when the message was sent.
    """
    if interaction.response.is_done():
        return False
    try:
        await interaction.response.send_message(message, ephemeral=True)
    except discord.HTTPException as exc:
        logger.error("Failed to send error response: %s", exc)
        return False
    return True
