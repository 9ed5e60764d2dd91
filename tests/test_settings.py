"""Tests for environment and YAML configuration."""

import pytest

from gtsignups.config import settings
from gtsignups.config.settings import (
    ConfigurationError,
    ReportConfig,
    get_pipeline_config,
)

ENV_VARS = [
    "EMAIL_USER", "EMAIL_PASS", "RECIPIENT_EMAIL", "SMTP_HOST", "SMTP_PORT",
    "GTSIGNUPS_CREDENTIALS_PATH", "GTSIGNUPS_TOKEN_PATH", "GTSIGNUPS_LOG_FILE",
    "GTSIGNUPS_TIMEZONE", "GTSIGNUPS_LOOKBACK_DAYS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings, "load_dotenv", lambda: None)


def test_defaults():
    config = get_pipeline_config()

    assert config.timezone == "Africa/Johannesburg"
    assert config.gmail.subject_patterns == ["Growth Track Signup", "Growth Track Sign Up Form"]
    assert config.gmail.lookback_days == 7
    assert config.store.folder_name == "Growth Track Registrations"
    assert config.store.spreadsheet_title == "Growth Track Signups"
    assert config.store.header == ("Registration Date", "Full Name", "Phone", "Email")
    assert config.report.smtp_host == "smtp.gmail.com"
    assert config.report.subject == "Growth Track Signups"


def test_environment(monkeypatch):
    monkeypatch.setenv("EMAIL_USER", "bot@example.com")
    monkeypatch.setenv("EMAIL_PASS", "secret")
    monkeypatch.setenv("RECIPIENT_EMAIL", "pastor@example.com")
    monkeypatch.setenv("GTSIGNUPS_LOOKBACK_DAYS", "14")
    monkeypatch.setenv("SMTP_PORT", "465")

    config = get_pipeline_config()

    assert config.report.sender == "bot@example.com"
    assert config.report.recipient == "pastor@example.com"
    assert config.report.smtp_port == 465
    assert config.gmail.lookback_days == 14
    config.report.validate()


def test_invalid_number(monkeypatch):
    monkeypatch.setenv("GTSIGNUPS_LOOKBACK_DAYS", "seven")
    with pytest.raises(ConfigurationError):
        get_pipeline_config()


def test_yaml_overrides(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        "timezone: UTC\n"
        "gmail:\n"
        "  subject_patterns: [\"New Signup\"]\n"
        "store:\n"
        "  folder_name: Registrations\n"
        "report:\n"
        "  recipient: team@example.com\n"
    )

    config = get_pipeline_config(str(path))

    assert config.timezone == "UTC"
    assert config.gmail.subject_patterns == ["New Signup"]
    assert config.store.folder_name == "Registrations"
    assert config.report.recipient == "team@example.com"


def test_default_yaml_in_working_directory(tmp_path):
    (tmp_path / "gtsignups.yaml").write_text("log_file: logs/run.log\n")
    assert get_pipeline_config().log_file == "logs/run.log"


def test_unknown_yaml_key(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("store:\n  colour: blue\n")
    with pytest.raises(ConfigurationError):
        get_pipeline_config(str(path))


def test_missing_explicit_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        get_pipeline_config(str(tmp_path / "absent.yaml"))


def test_empty_subject_patterns_rejected(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("gmail:\n  subject_patterns: []\n")
    with pytest.raises(ConfigurationError):
        get_pipeline_config(str(path))


def test_report_validation_names_missing_settings():
    with pytest.raises(ConfigurationError, match="EMAIL_PASS, RECIPIENT_EMAIL"):
        ReportConfig(sender="bot@example.com").validate()
    ReportConfig(enabled=False).validate()
