import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from raidguard.bot.cogs import antiraid_cmds
from raidguard.datatypes.protection_datatypes import ProtectionToggle
from raidguard.ui.antiraid_panel import AntiRaidPanelView

GUILD_ID = 555
OWNER_ID = 10


def make_ctx(user_id, *, guild_id=GUILD_ID):
    guild = SimpleNamespace(id=guild_id, owner_id=OWNER_ID) if guild_id else None
    return SimpleNamespace(
        guild_id=guild_id,
        guild=guild,
        user=SimpleNamespace(id=user_id),
        interaction=SimpleNamespace(edit_original_response=AsyncMock()),
        respond=AsyncMock(),
    )


def test_setup_adds_cog(settings_manager):
    captured = {}

    fake_bot = SimpleNamespace(add_cog=lambda cog: captured.setdefault("cog", cog))
    antiraid_cmds.setup(fake_bot, settings_manager)

    assert isinstance(captured["cog"], antiraid_cmds.AntiRaidCog)
    assert captured["cog"].settings_manager is settings_manager


@pytest.mark.asyncio
async def test_non_owner_is_rejected(settings_manager):
    cog = antiraid_cmds.AntiRaidCog(SimpleNamespace(), settings_manager, panel_timeout=300)
    ctx = make_ctx(user_id=99)

    await antiraid_cmds.AntiRaidCog.antiraid.callback(cog, ctx)

    ctx.respond.assert_awaited_once_with("Only the server owner can use this command.", ephemeral=True)
    # the guild is still initialized, nothing else changes
    assert settings_manager.list_guild_ids() == [GUILD_ID]
    assert settings_manager.get_guild_settings(GUILD_ID).anti_bot is False


@pytest.mark.asyncio
async def test_owner_receives_panel_with_current_state(settings_manager):
    settings_manager.ensure_guild(GUILD_ID)
    await settings_manager.toggle_protection(GUILD_ID, ProtectionToggle.CHANNEL_CREATE)
    cog = antiraid_cmds.AntiRaidCog(SimpleNamespace(), settings_manager, panel_timeout=120)
    ctx = make_ctx(user_id=OWNER_ID)

    await antiraid_cmds.AntiRaidCog.antiraid.callback(cog, ctx)

    ctx.respond.assert_awaited_once()
    kwargs = ctx.respond.await_args.kwargs
    assert kwargs["ephemeral"] is True
    assert kwargs["embed"].title == "Anti-Raid Protection"
    view = kwargs["view"]
    assert isinstance(view, AntiRaidPanelView)
    assert view.invoker_id == OWNER_ID
    assert view.guild_id == GUILD_ID
    assert view.timeout == 120
    assert view.origin_interaction is ctx.interaction
    assert "Channel Create: ON" in [child.label for child in view.children]


@pytest.mark.asyncio
async def test_command_requires_guild(settings_manager):
    cog = antiraid_cmds.AntiRaidCog(SimpleNamespace(), settings_manager, panel_timeout=300)
    ctx = make_ctx(user_id=OWNER_ID, guild_id=None)

    await antiraid_cmds.AntiRaidCog.antiraid.callback(cog, ctx)

    ctx.respond.assert_awaited_once_with("This command can only be used in a server.", ephemeral=True)
    assert settings_manager.list_guild_ids() == []


@pytest.mark.asyncio
async def test_dump_sends_json_file(settings_manager):
    await settings_manager.set_anti_fake(GUILD_ID, 30)
    cog = antiraid_cmds.AntiRaidCog(SimpleNamespace(), settings_manager, panel_timeout=300)
    ctx = make_ctx(user_id=OWNER_ID)

    await antiraid_cmds.AntiRaidCog.antiraid_dump.callback(cog, ctx)

    kwargs = ctx.respond.await_args.kwargs
    assert kwargs["ephemeral"] is True
    discord_file = kwargs["file"]
    assert isinstance(discord_file, discord.File)
    assert discord_file.filename == f"guild_{GUILD_ID}_antiraid.json"
    discord_file.fp.seek(0)
    payload = json.loads(discord_file.fp.read().decode("utf-8"))
    assert payload["guild_id"] == GUILD_ID
    assert payload["antiRaid"]["antiFake"] == {"enabled": True, "minDays": 30}


@pytest.mark.asyncio
async def test_dump_is_owner_only(settings_manager):
    cog = antiraid_cmds.AntiRaidCog(SimpleNamespace(), settings_manager, panel_timeout=300)
    ctx = make_ctx(user_id=3)

    await antiraid_cmds.AntiRaidCog.antiraid_dump.callback(cog, ctx)

    ctx.respond.assert_awaited_once_with("Only the server owner can use this command.", ephemeral=True)
