"""
In-memory registry of per-guild protection settings.

Responsibilities:
- Lazily create the default configuration for a guild on first reference
- Apply panel mutations (toggles, Anti-Fake threshold) and persist each one
- Serialize mutations of the same guild so read-modify-write cannot interleave

The manager is created once at startup and handed to every cog and view.
"""

import asyncio
import collections
from typing import DefaultDict, Dict, List

from raidguard.configuration.settings_store import SettingsStore
from raidguard.datatypes.protection_datatypes import (
    AntiFakeSettings,
    GuildProtectionConfig,
    ProtectionToggle,
)
from raidguard.util.logger import get_logger

logger = get_logger("guild_settings_manager")


class GuildSettingsManager:
    """Owns the guild id -> :class:`GuildProtectionConfig` mapping."""

    def __init__(self, store: SettingsStore):
        self.store = store
        self.guilds: Dict[int, GuildProtectionConfig] = {}
        self._guild_locks: DefaultDict[int, asyncio.Lock] = collections.defaultdict(asyncio.Lock)

    def load_from_disk(self) -> None:
        """Replace the in-memory mapping with the persisted one.

        :class:`~raidguard.configuration.settings_store.SettingsFileError`
        propagates to the caller.
        """
        self.guilds = self.store.load()
        logger.info("[GUILD SETTINGS] %d guild configuration(s) loaded", len(self.guilds))

    def persist(self) -> None:
        """Write the full mapping through the store."""
        self.store.save(self.guilds)

    def ensure_guild(self, guild_id: int) -> GuildProtectionConfig:
        """Return the guild's config, creating and persisting the defaults if absent."""
        config = self.guilds.get(guild_id)
        if config is None:
            config = GuildProtectionConfig()
            self.guilds[guild_id] = config
            logger.info("[GUILD SETTINGS] Initialized default protections for guild %s", guild_id)
            self.persist()
        return config

    def get_guild_settings(self, guild_id: int) -> GuildProtectionConfig:
        return self.ensure_guild(guild_id)

    def list_guild_ids(self) -> List[int]:
        return list(self.guilds.keys())

    async def toggle_protection(self, guild_id: int, toggle: ProtectionToggle) -> bool:
        """Flip a boolean protection, persist, and return its new value."""
        if not toggle.is_boolean:
            raise ValueError(f"{toggle.value} is not a boolean protection")

        async with self._guild_locks[guild_id]:
            config = self.ensure_guild(guild_id)
            new_state = not getattr(config, toggle.field_name)
            setattr(config, toggle.field_name, new_state)
            try:
                self.persist()
            except Exception:
                setattr(config, toggle.field_name, not new_state)
                raise

        logger.info(
            "[GUILD SETTINGS] %s %s for guild %s",
            toggle.value, "enabled" if new_state else "disabled", guild_id,
        )
        return new_state

    async def set_anti_fake(self, guild_id: int, min_days: int) -> AntiFakeSettings:
        """Enable Anti-Fake with the given minimum account age and persist."""
        if min_days < 0:
            raise ValueError("min_days must be a non-negative integer")

        async with self._guild_locks[guild_id]:
            config = self.ensure_guild(guild_id)
            previous = config.anti_fake
            config.anti_fake = AntiFakeSettings(enabled=True, min_days=min_days)
            try:
                self.persist()
            except Exception:
                config.anti_fake = previous
                raise

        logger.info("[GUILD SETTINGS] Anti-Fake enabled for guild %s (min %d days)", guild_id, min_days)
        return config.anti_fake
