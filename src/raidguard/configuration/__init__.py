"""
Configuration management for RaidGuard.

This package handles application and guild-level configuration:

- **app_configuration.py**: File-locked YAML loader for global settings: the
  settings file location, the /roleall pacing delay, the panel timeout and the
  audit-log retry policy. Falls back to defaults on missing or malformed files.

- **settings_store.py**: JSON persistence of the per-guild protection settings.

- **guild_settings.py**: In-memory registry of guild protection settings with
  lazy defaults, per-guild locking and persist-on-every-change.
"""
