"""
Rule evaluation for the reactive anti-raid protections.

The functions here are pure: they decide whether a protection fires and with
which reason. Fetching audit logs and calling Discord is left to
:mod:`raidguard.bot.cogs.protection_listener`.
"""

import datetime
from dataclasses import dataclass
from typing import Optional, Tuple

import discord

from raidguard.datatypes.protection_datatypes import GuildProtectionConfig, ProtectionToggle

ANTI_BOT_REASON = "Anti-Bot protection enabled."
CHANNEL_CREATE_DELETE_REASON = "Anti-raid protection enabled."

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class AuditRule:
    """An audit-log backed protection: who did ``audit_action`` gets banned."""

    toggle: ProtectionToggle
    audit_action: discord.AuditLogAction
    ban_reason: str
    required_permissions: Tuple[str, ...]
    delete_target: bool = False


CHANNEL_DELETE_RULE = AuditRule(
    toggle=ProtectionToggle.CHANNEL_DELETE,
    audit_action=discord.AuditLogAction.channel_delete,
    ban_reason="Deleted a channel with anti-raid protection enabled.",
    required_permissions=("view_audit_log", "ban_members"),
)

CHANNEL_CREATE_RULE = AuditRule(
    toggle=ProtectionToggle.CHANNEL_CREATE,
    audit_action=discord.AuditLogAction.channel_create,
    ban_reason="Created a channel with anti-raid protection enabled.",
    required_permissions=("view_audit_log", "ban_members", "manage_channels"),
    delete_target=True,
)

ROLE_DELETE_RULE = AuditRule(
    toggle=ProtectionToggle.ROLE_DELETE,
    audit_action=discord.AuditLogAction.role_delete,
    ban_reason="Deleted a role with anti-raid protection enabled.",
    required_permissions=("view_audit_log", "ban_members"),
)


def account_age_days(created_at: datetime.datetime, now: Optional[datetime.datetime] = None) -> float:
    """Fractional days between account creation and ``now`` (UTC)."""
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=datetime.timezone.utc)
    return (now - created_at).total_seconds() / SECONDS_PER_DAY


def should_kick_bot(config: GuildProtectionConfig, is_bot: bool) -> bool:
    return config.anti_bot and is_bot


def check_account_age(
    config: GuildProtectionConfig,
    created_at: datetime.datetime,
    now: Optional[datetime.datetime] = None,
) -> Optional[str]:
    """Return the kick reason if Anti-Fake rejects the account, else ``None``."""
    if not config.anti_fake.enabled:
        return None

    age = account_age_days(created_at, now)
    if age >= config.anti_fake.min_days:
        return None
    return f"Account too new ({age:.1f} days). Minimum: {config.anti_fake.min_days} days."
