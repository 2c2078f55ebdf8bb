from pathlib import Path

import pytest

from raidguard.configuration.app_configuration import AppConfig
from raidguard.moderation.audit_log import AuditLogPolicy


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_reload_parses_yaml(config_path: Path, tmp_path: Path) -> None:
    settings_file = tmp_path / "guilds.json"
    config_path.write_text(
        "\n".join([
            "storage:",
            f"  settings_file: {settings_file}",
            "role_assignment:",
            "  delay_seconds: 0.25",
            "panel:",
            "  timeout_seconds: 60",
            "audit_log:",
            "  initial_delay_seconds: 0.5",
            "  max_attempts: 4",
            "  backoff_factor: 1.5",
            "  max_delay_seconds: 3",
            "  scan_limit: 10",
        ]),
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.settings_path == settings_file.resolve()
    assert config.role_assignment_delay == pytest.approx(0.25)
    assert config.panel_timeout == pytest.approx(60)
    assert config.audit_log_policy == AuditLogPolicy(
        initial_delay=0.5, max_attempts=4, backoff_factor=1.5, max_delay=3.0, scan_limit=10,
    )


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.data == {}
    assert config.settings_path == Path("./data/settings.json").resolve()
    assert config.role_assignment_delay == pytest.approx(0.1)
    assert config.panel_timeout == pytest.approx(300)
    assert config.audit_log_policy == AuditLogPolicy()


def test_app_config_ignores_malformed_sections(config_path: Path) -> None:
    config_path.write_text("panel: [1, 2]\naudit_log: nope\n", encoding="utf-8")

    config = AppConfig(config_path)

    assert config.panel_timeout == pytest.approx(300)
    assert config.audit_log_policy == AuditLogPolicy()


def test_app_config_falls_back_on_wrongly_typed_values(config_path: Path) -> None:
    config_path.write_text(
        "\n".join([
            "role_assignment:",
            "  delay_seconds: slow",
            "panel:",
            "  timeout_seconds: [1]",
            "audit_log:",
            "  max_attempts: three",
            "  scan_limit: 10",
        ]),
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.role_assignment_delay == pytest.approx(0.1)
    assert config.panel_timeout == pytest.approx(300)
    assert config.audit_log_policy == AuditLogPolicy(scan_limit=10)


def test_app_config_non_mapping_document(config_path: Path) -> None:
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    assert AppConfig(config_path).data == {}


def test_negative_role_delay_is_clamped(config_path: Path) -> None:
    config_path.write_text("role_assignment:\n  delay_seconds: -1\n", encoding="utf-8")

    assert AppConfig(config_path).role_assignment_delay == 0.0


def test_reload_picks_up_changes(config_path: Path) -> None:
    config_path.write_text("panel:\n  timeout_seconds: 10\n", encoding="utf-8")
    config = AppConfig(config_path)
    config_path.write_text("panel:\n  timeout_seconds: 20\n", encoding="utf-8")

    config.reload()

    assert config.get("panel") == {"timeout_seconds": 20}
    assert config.panel_timeout == pytest.approx(20)
