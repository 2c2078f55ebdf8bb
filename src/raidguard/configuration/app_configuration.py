from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Callable, Dict
import yaml

from raidguard.moderation.audit_log import AuditLogPolicy
from raidguard.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_SETTINGS_PATH = "./data/settings.json"
DEFAULT_ROLE_ASSIGNMENT_DELAY = 0.1
DEFAULT_PANEL_TIMEOUT = 300.0


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed shortcuts with defaults for every key, so a missing or broken file
    still yields a usable configuration.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
        return {}

    def _section(self, key: str) -> Dict[str, Any]:
        section = self._data.get(key, {})
        return section if isinstance(section, dict) else {}

    def _number(self, section: str, key: str, default: Any, cast: Callable[[Any], Any]) -> Any:
        value = self._section(section).get(key, default)
        try:
            return cast(value)
        except (TypeError, ValueError):
            logger.error(
                "[APP CONFIGURATION] Invalid value %r for %s.%s; using default %r",
                value, section, key, default,
            )
            return default

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file, replace the cache, and return the mapping (``{}`` on error)."""
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def settings_path(self) -> Path:
        """Location of the per-guild settings file."""
        value = self._section("storage").get("settings_file") or DEFAULT_SETTINGS_PATH
        return Path(str(value)).resolve()

    @property
    def role_assignment_delay(self) -> float:
        """Pause in seconds after each role added by ``/roleall``."""
        value = self._number("role_assignment", "delay_seconds", DEFAULT_ROLE_ASSIGNMENT_DELAY, float)
        return max(0.0, value)

    @property
    def panel_timeout(self) -> float:
        """Seconds an anti-raid panel accepts button presses."""
        return self._number("panel", "timeout_seconds", DEFAULT_PANEL_TIMEOUT, float)

    @property
    def audit_log_policy(self) -> AuditLogPolicy:
        """Retry schedule used when looking up audit-log executors."""
        defaults = AuditLogPolicy()
        return AuditLogPolicy(
            initial_delay=self._number("audit_log", "initial_delay_seconds", defaults.initial_delay, float),
            max_attempts=self._number("audit_log", "max_attempts", defaults.max_attempts, int),
            backoff_factor=self._number("audit_log", "backoff_factor", defaults.backoff_factor, float),
            max_delay=self._number("audit_log", "max_delay_seconds", defaults.max_delay, float),
            scan_limit=self._number("audit_log", "scan_limit", defaults.scan_limit, int),
        )


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
