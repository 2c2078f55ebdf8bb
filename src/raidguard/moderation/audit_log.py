"""
Audit-log lookups for the reactive protections.

Discord writes audit-log entries asynchronously, so the entry for an action
may not exist yet when the gateway event arrives. Lookups wait, scan the
newest entries of the relevant type for one targeting the affected object,
and retry with exponential backoff up to a fixed number of attempts.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

import discord

from raidguard.util.logger import get_logger

logger = get_logger("audit_log")


@dataclass(frozen=True, slots=True)
class AuditLogPolicy:
    """Wait/retry schedule for audit-log lookups."""

    initial_delay: float = 1.0
    max_attempts: int = 3
    backoff_factor: float = 2.0
    max_delay: float = 5.0
    scan_limit: int = 5

    @property
    def attempts(self) -> int:
        """Number of lookups actually made; at least one."""
        return max(1, self.max_attempts)

    def delays(self):
        """Yield the wait before each attempt."""
        delay = self.initial_delay
        for _ in range(self.attempts):
            yield delay
            delay = min(delay * self.backoff_factor, self.max_delay)


async def find_audit_executor(
    guild: discord.Guild,
    action: discord.AuditLogAction,
    target_id: Optional[int],
    policy: AuditLogPolicy,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Optional[Union[discord.User, discord.Member]]:
    """Return the user responsible for ``action`` on ``target_id``, or ``None``.

    When ``target_id`` is ``None`` the newest entry of the action type is
    accepted. A failed fetch is retried like an empty one; ``discord.Forbidden``
    propagates at once, and the last ``discord.HTTPException`` propagates when
    every attempt failed.
    """
    last_error: Optional[discord.HTTPException] = None

    for attempt, delay in enumerate(policy.delays(), start=1):
        await sleep(delay)
        try:
            async for entry in guild.audit_logs(limit=policy.scan_limit, action=action):
                if target_id is None or (entry.target and entry.target.id == target_id):
                    return entry.user
        except discord.Forbidden:
            raise
        except discord.HTTPException as exc:
            last_error = exc
            logger.warning(
                "[AUDIT LOG] Fetch failed in guild %s (attempt %d/%d): %s",
                guild.id, attempt, policy.attempts, exc,
            )
            continue

        last_error = None
        logger.debug(
            "[AUDIT LOG] No %s entry for target %s in guild %s (attempt %d/%d)",
            action, target_id, guild.id, attempt, policy.attempts,
        )

    if last_error is not None:
        raise last_error
    return None
