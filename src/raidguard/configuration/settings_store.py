"""
Flat-file persistence for per-guild protection settings.

The whole file is rewritten on every save::

    {"antiRaid": {"<guildId>": {...GuildProtectionConfig...}}}
"""

import json
import os
from pathlib import Path
from typing import Dict, Mapping

from raidguard.datatypes.protection_datatypes import GuildProtectionConfig
from raidguard.util.logger import get_logger

logger = get_logger("settings_store")

ROOT_KEY = "antiRaid"


class SettingsFileError(RuntimeError):
    """Raised when the persisted settings file cannot be parsed."""


class SettingsStore:
    """Reads and writes the settings file at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Dict[int, GuildProtectionConfig]:
        """Return the persisted mapping, or an empty one if the file does not exist.

        Raises
        ------
        SettingsFileError
            If the file exists but is not a valid settings document.
        """
        if not self.path.exists():
            logger.info("[SETTINGS STORE] %s not found; starting with empty settings", self.path)
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsFileError(f"Cannot read settings file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise SettingsFileError(f"Settings file {self.path} must contain a JSON object")

        section = data.get(ROOT_KEY, {})
        if not isinstance(section, dict):
            raise SettingsFileError(f"'{ROOT_KEY}' in {self.path} must be a JSON object")

        guilds: Dict[int, GuildProtectionConfig] = {}
        for raw_guild_id, raw_config in section.items():
            try:
                guild_id = int(raw_guild_id)
            except ValueError as exc:
                raise SettingsFileError(f"Invalid guild id {raw_guild_id!r} in {self.path}") from exc
            if not isinstance(raw_config, dict):
                raise SettingsFileError(f"Settings for guild {raw_guild_id} must be a JSON object")
            guilds[guild_id] = GuildProtectionConfig.from_dict(raw_config)

        logger.info("[SETTINGS STORE] Loaded settings for %d guild(s) from %s", len(guilds), self.path)
        return guilds

    def save(self, guilds: Mapping[int, GuildProtectionConfig]) -> None:
        """Serialize the full mapping, replacing the file atomically."""
        payload = {
            ROOT_KEY: {str(guild_id): config.to_dict() for guild_id, config in guilds.items()}
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, self.path)
        logger.debug("[SETTINGS STORE] Saved settings for %d guild(s)", len(guilds))
