import asyncio
import json

import pytest

from raidguard.configuration.guild_settings import GuildSettingsManager
from raidguard.datatypes.protection_datatypes import GuildProtectionConfig, ProtectionToggle


def test_ensure_guild_creates_defaults_and_persists_once(recording_store):
    mgr = GuildSettingsManager(recording_store)

    config = mgr.ensure_guild(42)
    again = mgr.ensure_guild(42)

    assert config is again
    assert config == GuildProtectionConfig()
    assert config.anti_fake.enabled is False
    assert config.anti_fake.min_days == 7
    assert len(recording_store.saved) == 1
    assert 42 in recording_store.saved[0]


def test_get_guild_settings_initializes_unknown_guild(recording_store):
    mgr = GuildSettingsManager(recording_store)

    assert mgr.get_guild_settings(7).anti_bot is False
    assert mgr.list_guild_ids() == [7]


def test_load_from_disk_uses_store(settings_manager, settings_path):
    settings_path.write_text(json.dumps({"antiRaid": {"5": {"roleDelete": True}}}), encoding="utf-8")

    settings_manager.load_from_disk()

    assert settings_manager.list_guild_ids() == [5]
    assert settings_manager.get_guild_settings(5).role_delete is True


@pytest.mark.asyncio
async def test_toggle_twice_restores_value(recording_store):
    mgr = GuildSettingsManager(recording_store)
    mgr.ensure_guild(1)

    assert await mgr.toggle_protection(1, ProtectionToggle.CHANNEL_DELETE) is True
    assert mgr.get_guild_settings(1).channel_delete is True
    assert await mgr.toggle_protection(1, ProtectionToggle.CHANNEL_DELETE) is False
    assert mgr.get_guild_settings(1).channel_delete is False

    # one save for initialization plus one per toggle
    assert len(recording_store.saved) == 3


@pytest.mark.asyncio
async def test_toggle_rejects_anti_fake(recording_store):
    mgr = GuildSettingsManager(recording_store)

    with pytest.raises(ValueError):
        await mgr.toggle_protection(1, ProtectionToggle.ANTI_FAKE)


@pytest.mark.asyncio
async def test_concurrent_toggles_on_same_guild_are_serialized(recording_store):
    mgr = GuildSettingsManager(recording_store)

    results = await asyncio.gather(
        *(mgr.toggle_protection(3, ProtectionToggle.ANTI_BOT) for _ in range(4))
    )

    assert sorted(results) == [False, False, True, True]
    assert mgr.get_guild_settings(3).anti_bot is False


@pytest.mark.asyncio
async def test_set_anti_fake_enables_and_persists(settings_manager, settings_path):
    settings = await settings_manager.set_anti_fake(9, 14)

    assert settings.enabled is True
    assert settings.min_days == 14
    stored = json.loads(settings_path.read_text(encoding="utf-8"))
    assert stored["antiRaid"]["9"]["antiFake"] == {"enabled": True, "minDays": 14}


@pytest.mark.asyncio
async def test_set_anti_fake_rejects_negative(recording_store):
    mgr = GuildSettingsManager(recording_store)

    with pytest.raises(ValueError):
        await mgr.set_anti_fake(9, -1)
    assert 9 not in mgr.guilds


class FailingStore:
    def load(self):
        return {}

    def save(self, guilds):
        raise OSError("disk full")


@pytest.mark.asyncio
async def test_failed_save_rolls_back_toggle():
    mgr = GuildSettingsManager(FailingStore())
    mgr.guilds[1] = GuildProtectionConfig()

    with pytest.raises(OSError):
        await mgr.toggle_protection(1, ProtectionToggle.ANTI_BOT)

    assert mgr.get_guild_settings(1).anti_bot is False


@pytest.mark.asyncio
async def test_failed_save_rolls_back_anti_fake():
    mgr = GuildSettingsManager(FailingStore())
    mgr.guilds[1] = GuildProtectionConfig()

    with pytest.raises(OSError):
        await mgr.set_anti_fake(1, 30)

    anti_fake = mgr.get_guild_settings(1).anti_fake
    assert anti_fake.enabled is False
    assert anti_fake.min_days == 7
