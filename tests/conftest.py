"""
Pytest configuration and fixtures for RaidGuard tests.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from raidguard.configuration.guild_settings import GuildSettingsManager  # noqa: E402
from raidguard.configuration.settings_store import SettingsStore  # noqa: E402


class RecordingStore:
    """In-memory stand-in for SettingsStore that counts saves."""

    def __init__(self, initial=None):
        self.initial = dict(initial or {})
        self.saved = []

    def load(self):
        return dict(self.initial)

    def save(self, guilds):
        self.saved.append({guild_id: config.to_dict() for guild_id, config in guilds.items()})


@pytest.fixture()
def settings_path(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


@pytest.fixture()
def settings_manager(settings_path: Path) -> GuildSettingsManager:
    return GuildSettingsManager(SettingsStore(settings_path))


@pytest.fixture()
def recording_store() -> RecordingStore:
    return RecordingStore()


def _make_interaction(user_id: int, *, done: bool = False) -> SimpleNamespace:
    """Fake discord.Interaction exposing the response methods the bot uses."""
    response = SimpleNamespace(
        edit_message=AsyncMock(),
        send_message=AsyncMock(),
        send_modal=AsyncMock(),
        is_done=lambda: done,
    )
    return SimpleNamespace(
        user=SimpleNamespace(id=user_id),
        response=response,
        edit_original_response=AsyncMock(),
    )


@pytest.fixture()
def make_interaction():
    return _make_interaction
