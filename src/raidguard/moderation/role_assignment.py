"""
Bulk role assignment used by ``/roleall``.

Members are walked one at a time with a fixed pause after every successful
addition so the run stays under Discord's role-update rate limits. A failure
on one member is logged and the run continues.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

import discord

from raidguard.util.logger import get_logger

logger = get_logger("role_assignment")


@dataclass(slots=True)
class RoleAssignmentResult:
    assigned: int = 0
    already_had: int = 0
    failed: int = 0


def member_has_role(member: discord.Member, role: discord.Role) -> bool:
    return any(existing.id == role.id for existing in member.roles)


async def assign_role_to_all(
    guild: discord.Guild,
    role: discord.Role,
    *,
    delay_seconds: float = 0.1,
    reason: str | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> RoleAssignmentResult:
    """Give ``role`` to every member of ``guild`` that lacks it."""
    result = RoleAssignmentResult()

    async for member in guild.fetch_members(limit=None):
        if member_has_role(member, role):
            result.already_had += 1
            continue

        try:
            await member.add_roles(role, reason=reason)
        except discord.HTTPException as exc:
            result.failed += 1
            logger.error("[ROLE ASSIGNMENT] Failed to add role %s to %s: %s", role.id, member, exc)
            continue

        result.assigned += 1
        await sleep(delay_seconds)

    logger.info(
        "[ROLE ASSIGNMENT] Guild %s role %s: %d assigned, %d already had it, %d failed",
        guild.id, role.id, result.assigned, result.already_had, result.failed,
    )
    return result
