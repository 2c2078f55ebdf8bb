"""
Per-guild anti-raid configuration datatypes.

The persisted layout uses camelCase keys so that an existing ``settings.json``
keeps working::

    {
        "antiBot": false,
        "antiFake": {"enabled": false, "minDays": 7},
        "channelDelete": false,
        "channelCreate": false,
        "roleDelete": false,
        "ban": false,
        "unban": false,
        "kick": false
    }

``ban``, ``unban`` and ``kick`` are stored and round-tripped but no handler
enforces them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_MIN_DAYS = 7


def _flag(data: Mapping[str, Any], key: str) -> bool:
    """Read a stored switch; anything but a JSON boolean counts as off."""
    value = data.get(key, False)
    return value if isinstance(value, bool) else False


class ProtectionToggle(Enum):
    """Panel actions, valued by the action name used in component custom ids."""

    ANTI_BOT = "antiBot"
    ANTI_FAKE = "antiFake"
    CHANNEL_DELETE = "channelDelete"
    CHANNEL_CREATE = "channelCreate"
    ROLE_DELETE = "roleDelete"

    @property
    def is_boolean(self) -> bool:
        return self is not ProtectionToggle.ANTI_FAKE

    @property
    def field_name(self) -> str:
        """Attribute of :class:`GuildProtectionConfig` backing this toggle."""
        return TOGGLE_FIELDS[self]


TOGGLE_FIELDS: Dict[ProtectionToggle, str] = {
    ProtectionToggle.ANTI_BOT: "anti_bot",
    ProtectionToggle.ANTI_FAKE: "anti_fake",
    ProtectionToggle.CHANNEL_DELETE: "channel_delete",
    ProtectionToggle.CHANNEL_CREATE: "channel_create",
    ProtectionToggle.ROLE_DELETE: "role_delete",
}

ANTI_FAKE_MODAL_ACTION = "antiFakeModal"


@dataclass(slots=True)
class AntiFakeSettings:
    """Minimum account age rule."""

    enabled: bool = False
    min_days: int = DEFAULT_MIN_DAYS

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "minDays": self.min_days}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AntiFakeSettings":
        if not isinstance(data, Mapping):
            return cls()
        min_days = data.get("minDays", DEFAULT_MIN_DAYS)
        if not isinstance(min_days, int) or isinstance(min_days, bool) or min_days < 0:
            min_days = DEFAULT_MIN_DAYS
        return cls(enabled=_flag(data, "enabled"), min_days=min_days)


@dataclass(slots=True)
class GuildProtectionConfig:
    """Persistent per-guild protection switches."""

    anti_bot: bool = False
    anti_fake: AntiFakeSettings = field(default_factory=AntiFakeSettings)
    channel_delete: bool = False
    channel_create: bool = False
    role_delete: bool = False
    ban: bool = False
    unban: bool = False
    kick: bool = False

    def is_enabled(self, toggle: ProtectionToggle) -> bool:
        if toggle is ProtectionToggle.ANTI_FAKE:
            return self.anti_fake.enabled
        return bool(getattr(self, toggle.field_name))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "antiBot": self.anti_bot,
            "antiFake": self.anti_fake.to_dict(),
            "channelDelete": self.channel_delete,
            "channelCreate": self.channel_create,
            "roleDelete": self.role_delete,
            "ban": self.ban,
            "unban": self.unban,
            "kick": self.kick,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GuildProtectionConfig":
        return cls(
            anti_bot=_flag(data, "antiBot"),
            anti_fake=AntiFakeSettings.from_dict(data.get("antiFake")),
            channel_delete=_flag(data, "channelDelete"),
            channel_create=_flag(data, "channelCreate"),
            role_delete=_flag(data, "roleDelete"),
            ban=_flag(data, "ban"),
            unban=_flag(data, "unban"),
            kick=_flag(data, "kick"),
        )


def encode_custom_id(action: str, guild_id: int) -> str:
    """Build a component custom id of the form ``<action>_<guildId>``."""
    return f"{action}_{guild_id}"


def decode_custom_id(custom_id: str) -> Tuple[str, Optional[int]]:
    """Split ``<action>_<guildId>``; the guild part is ``None`` when missing or malformed."""
    action, _, raw_guild = (custom_id or "").partition("_")
    try:
        return action, int(raw_guild)
    except ValueError:
        return action, None


def parse_min_days(raw_value: Optional[str]) -> Optional[int]:
    """Parse the Anti-Fake dialog input.

    Returns the day count, or ``None`` when the input is empty, not an
    integer, or negative.
    """
    text = (raw_value or "").strip()
    if not text:
        return None
    try:
        days = int(text)
    except ValueError:
        return None
    return days if days >= 0 else None
