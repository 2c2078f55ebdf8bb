from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from raidguard.bot.cogs import events_listener


def make_ctx(done: bool):
    return SimpleNamespace(
        command=SimpleNamespace(name="roleall"),
        guild_id=1,
        interaction=SimpleNamespace(response=SimpleNamespace(is_done=lambda: done)),
        respond=AsyncMock(),
    )


def test_setup_adds_cog():
    captured = {}
    events_listener.setup(SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog)))
    assert isinstance(captured["cog"], events_listener.EventsListenerCog)


@pytest.mark.asyncio
async def test_command_error_replies_when_no_response_sent():
    cog = events_listener.EventsListenerCog(SimpleNamespace())
    ctx = make_ctx(done=False)

    await cog.on_application_command_error(ctx, RuntimeError("boom"))

    ctx.respond.assert_awaited_once_with("An error occurred while processing the command.", ephemeral=True)


@pytest.mark.asyncio
async def test_command_error_only_logged_after_response():
    cog = events_listener.EventsListenerCog(SimpleNamespace())
    ctx = make_ctx(done=True)

    await cog.on_application_command_error(ctx, RuntimeError("boom"))

    ctx.respond.assert_not_awaited()


@pytest.mark.asyncio
async def test_on_ready_sets_presence():
    bot = SimpleNamespace(user=SimpleNamespace(id=1), change_presence=AsyncMock())
    cog = events_listener.EventsListenerCog(bot)

    await cog.on_ready()

    bot.change_presence.assert_awaited_once()
