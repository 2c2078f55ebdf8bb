"""Protection listener Cog for RaidGuard.

Reacts to gateway events with the guild's enabled anti-raid protections:

- member join: Anti-Bot and Anti-Fake kicks
- channel delete / channel create / role delete: ban the audit-log executor
  (channel create also deletes the new channel)

Handlers only read guild settings. Missing bot permissions and Discord API
failures are logged and never surfaced to users.
"""

import datetime
from typing import Optional

import discord
from discord.ext import commands

from raidguard.configuration.app_configuration import app_config
from raidguard.configuration.guild_settings import GuildSettingsManager
from raidguard.moderation.audit_log import AuditLogPolicy, find_audit_executor
from raidguard.moderation.protection_rules import (
    ANTI_BOT_REASON,
    CHANNEL_CREATE_DELETE_REASON,
    CHANNEL_CREATE_RULE,
    CHANNEL_DELETE_RULE,
    ROLE_DELETE_RULE,
    AuditRule,
    check_account_age,
    should_kick_bot,
)
from raidguard.util.discord_utils import missing_bot_permissions
from raidguard.util.logger import get_logger

logger = get_logger("protection_listener_cog")


class ProtectionListenerCog(commands.Cog):
    """Cog enforcing the per-guild anti-raid protections."""

    def __init__(
        self,
        discord_bot_instance,
        settings_manager: GuildSettingsManager,
        *,
        audit_policy: Optional[AuditLogPolicy] = None,
    ):
        self.bot = discord_bot_instance
        self.settings_manager = settings_manager
        self.audit_policy = audit_policy or app_config.audit_log_policy
        logger.info("Protection listener cog loaded")

    # ----- member join -----

    @commands.Cog.listener(name="on_member_join")
    async def on_member_join(self, member: discord.Member) -> None:
        guild = member.guild
        if guild is None:
            return

        config = self.settings_manager.ensure_guild(guild.id)

        if should_kick_bot(config, member.bot):
            await self._kick(member, ANTI_BOT_REASON, "Anti-Bot")
            return

        reason = check_account_age(config, member.created_at, datetime.datetime.now(datetime.timezone.utc))
        if reason is not None:
            await self._kick(member, reason, "Anti-Fake")

    async def _kick(self, member: discord.Member, reason: str, protection: str) -> bool:
        missing = missing_bot_permissions(member.guild, ("kick_members",))
        if missing:
            logger.warning(
                "[PROTECTION] Missing %s permission for %s in guild %s",
                ", ".join(missing), protection, member.guild.id,
            )
            return False

        try:
            await member.kick(reason=reason)
        except discord.HTTPException as exc:
            logger.error("[PROTECTION] %s failed to kick %s: %s", protection, member, exc)
            return False

        logger.info("[PROTECTION] %s kicked %s from guild %s: %s", protection, member, member.guild.id, reason)
        return True

    # ----- audit-log protections -----

    @commands.Cog.listener(name="on_guild_channel_delete")
    async def on_guild_channel_delete(self, channel: discord.abc.GuildChannel) -> None:
        await self.enforce_audit_rule(channel.guild, CHANNEL_DELETE_RULE, channel)

    @commands.Cog.listener(name="on_guild_channel_create")
    async def on_guild_channel_create(self, channel: discord.abc.GuildChannel) -> None:
        await self.enforce_audit_rule(channel.guild, CHANNEL_CREATE_RULE, channel)

    @commands.Cog.listener(name="on_guild_role_delete")
    async def on_guild_role_delete(self, role: discord.Role) -> None:
        await self.enforce_audit_rule(role.guild, ROLE_DELETE_RULE, role)

    async def enforce_audit_rule(self, guild: Optional[discord.Guild], rule: AuditRule, target) -> bool:
        """Ban whoever performed ``rule.audit_action`` on ``target`` if the protection is on.

        Returns True when the executor was banned.
        """
        if guild is None:
            return False

        config = self.settings_manager.ensure_guild(guild.id)
        if not config.is_enabled(rule.toggle):
            return False

        missing = missing_bot_permissions(guild, rule.required_permissions)
        if missing:
            logger.warning(
                "[PROTECTION] Missing %s permission for %s protection in guild %s",
                ", ".join(missing), rule.toggle.value, guild.id,
            )
            return False

        target_name = getattr(target, "name", target.id)
        try:
            executor = await find_audit_executor(guild, rule.audit_action, target.id, self.audit_policy)
        except discord.HTTPException as exc:
            logger.error("[PROTECTION] Audit log lookup failed for %s in guild %s: %s", target_name, guild.id, exc)
            return False

        if executor is None:
            logger.info("[PROTECTION] No audit log entry found for %s (%s)", rule.toggle.value, target_name)
            return False

        if self.bot.user is not None and executor.id == self.bot.user.id:
            logger.debug("[PROTECTION] Ignoring %s by the bot itself", rule.toggle.value)
            return False

        try:
            await guild.ban(executor, reason=rule.ban_reason)
            logger.info("[PROTECTION] Banned %s for %s (%s)", executor, rule.toggle.value, target_name)
            if rule.delete_target:
                await target.delete(reason=CHANNEL_CREATE_DELETE_REASON)
                logger.info("[PROTECTION] Deleted %s created by %s", target_name, executor)
        except discord.HTTPException as exc:
            logger.error("[PROTECTION] Failed to enforce %s against %s: %s", rule.toggle.value, executor, exc)
            return False

        return True


def setup(discord_bot_instance, settings_manager: GuildSettingsManager):
    """Register the ProtectionListenerCog with the bot."""
    discord_bot_instance.add_cog(ProtectionListenerCog(discord_bot_instance, settings_manager))
