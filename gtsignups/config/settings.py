"""
Configuration settings for the Growth Track Signups Pipeline.

Uses dataclasses for configuration. Values come from environment variables
(optionally loaded from a .env file) and an optional YAML override file.
"""

import os
import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SENTINEL_NOT_PROVIDED = "Not provided"

DEFAULT_SUBJECT_PATTERNS = [
    "Growth Track Signup",
    "Growth Track Sign Up Form",
]

DEFAULT_HEADER = ("Registration Date", "Full Name", "Phone", "Email")

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass
class GmailConfig:
    """Gmail API configuration for the installed-app OAuth flow."""
    credentials_path: str = "credentials.json"
    token_path: str = "token.json"
    scopes: List[str] = field(default_factory=lambda: [
        'https://www.googleapis.com/auth/gmail.modify',
        'https://www.googleapis.com/auth/spreadsheets',
        'https://www.googleapis.com/auth/drive.file',
        'https://www.googleapis.com/auth/drive'
    ])
    subject_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_SUBJECT_PATTERNS))
    lookback_days: int = 7
    max_results_per_query: int = 500


@dataclass
class StoreConfig:
    """Google Drive / Sheets destination for signup rows."""
    folder_name: str = "Growth Track Registrations"
    spreadsheet_title: str = "Growth Track Signups"
    sheet_title: str = "Sheet1"
    header: Tuple[str, ...] = DEFAULT_HEADER
    initial_row_count: int = 1000
    column_pixel_width: int = 200


@dataclass
class ReportConfig:
    """SMTP delivery of the spreadsheet export."""
    enabled: bool = True
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    sender: Optional[str] = None
    password: Optional[str] = None
    recipient: Optional[str] = None
    subject: str = "Growth Track Signups"
    attachment_filename: str = "GrowthTrackSignups.xlsx"

    def validate(self):
        """Raise ConfigurationError if an enabled report cannot be sent."""
        if not self.enabled:
            return
        missing = [
            name for name, value in (
                ("EMAIL_USER", self.sender),
                ("EMAIL_PASS", self.password),
                ("RECIPIENT_EMAIL", self.recipient),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Report delivery is enabled but {', '.join(missing)} is not set"
            )


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    timezone: str = "Africa/Johannesburg"
    log_file: str = "gtsignups.log"
    gmail: GmailConfig = field(default_factory=GmailConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


def load_overrides(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration overrides from a YAML file.

    Args:
        config_path: Path to the YAML file. If None, uses gtsignups.yaml in
            the working directory when present.

    Returns:
        Dictionary of overrides (empty if no file exists).
    """
    if config_path is None:
        path = Path.cwd() / "gtsignups.yaml"
        if not path.exists():
            return {}
    else:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

    with open(path, 'r') as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    logger.info(f"Loaded configuration overrides from {path}")
    return overrides


def _apply_section(target: Any, values: Optional[Dict[str, Any]], section: str):
    """Copy known keys from a YAML section onto a config dataclass."""
    for key, value in (values or {}).items():
        if not hasattr(target, key):
            raise ConfigurationError(f"Unknown setting '{section}.{key}'")
        if key == "header":
            value = tuple(value)
        setattr(target, key, value)


def get_pipeline_config(config_path: Optional[str] = None) -> PipelineConfig:
    """
    Create pipeline configuration from environment variables and YAML overrides.

    Environment variables (a .env file in the working directory is loaded first):
        EMAIL_USER: SMTP login and sender address for the report
        EMAIL_PASS: SMTP password (Gmail app password)
        RECIPIENT_EMAIL: Report recipient
        SMTP_HOST / SMTP_PORT: SMTP server (default smtp.gmail.com:587)
        GTSIGNUPS_CREDENTIALS_PATH: OAuth client secrets file (default credentials.json)
        GTSIGNUPS_TOKEN_PATH: Cached OAuth token file (default token.json)
        GTSIGNUPS_LOG_FILE: Append-only run log (default gtsignups.log)
        GTSIGNUPS_TIMEZONE: Timezone for registration dates (default Africa/Johannesburg)
        GTSIGNUPS_LOOKBACK_DAYS: Mailbox scan window in days (default 7)

    YAML sections (gmail, store, report) and top-level keys (timezone,
    log_file) override the environment.
    """
    load_dotenv()

    try:
        gmail_config = GmailConfig(
            credentials_path=os.getenv('GTSIGNUPS_CREDENTIALS_PATH', 'credentials.json'),
            token_path=os.getenv('GTSIGNUPS_TOKEN_PATH', 'token.json'),
            lookback_days=int(os.getenv('GTSIGNUPS_LOOKBACK_DAYS', '7'))
        )

        report_config = ReportConfig(
            smtp_host=os.getenv('SMTP_HOST', 'smtp.gmail.com'),
            smtp_port=int(os.getenv('SMTP_PORT', '587')),
            sender=os.getenv('EMAIL_USER'),
            password=os.getenv('EMAIL_PASS'),
            recipient=os.getenv('RECIPIENT_EMAIL')
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    config = PipelineConfig(
        timezone=os.getenv('GTSIGNUPS_TIMEZONE', 'Africa/Johannesburg'),
        log_file=os.getenv('GTSIGNUPS_LOG_FILE', 'gtsignups.log'),
        gmail=gmail_config,
        store=StoreConfig(),
        report=report_config
    )

    overrides = load_overrides(config_path)
    for key in ("timezone", "log_file"):
        if key in overrides:
            setattr(config, key, overrides[key])
    _apply_section(config.gmail, overrides.get("gmail"), "gmail")
    _apply_section(config.store, overrides.get("store"), "store")
    _apply_section(config.report, overrides.get("report"), "report")

    if not config.gmail.subject_patterns:
        raise ConfigurationError("gmail.subject_patterns must not be empty")
    if len(config.store.header) != 4:
        raise ConfigurationError("store.header must have exactly 4 columns")

    return config
