"""Configuration module for the Growth Track Signups Pipeline."""

from .settings import (
    get_pipeline_config,
    load_overrides,
    ConfigurationError,
    GmailConfig,
    StoreConfig,
    ReportConfig,
    PipelineConfig,
    SENTINEL_NOT_PROVIDED,
    DEFAULT_SUBJECT_PATTERNS,
    DEFAULT_HEADER,
    XLSX_MIME_TYPE,
)

__all__ = [
    "get_pipeline_config",
    "load_overrides",
    "ConfigurationError",
    "GmailConfig",
    "StoreConfig",
    "ReportConfig",
    "PipelineConfig",
    "SENTINEL_NOT_PROVIDED",
    "DEFAULT_SUBJECT_PATTERNS",
    "DEFAULT_HEADER",
    "XLSX_MIME_TYPE",
]
