"""
Run logging.

`configure_logging` sets up console output plus the append-only run log
file. `RunLog` is the collaborator the orchestrator records run events
through.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s: %(message)s"


def configure_logging(log_file: Optional[str] = None, verbose: bool = False) -> logging.Logger:
    """Attach stream and (append-mode) file handlers to the package logger."""
    package_logger = logging.getLogger("gtsignups")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Replace handlers from an earlier call so lines are not written twice
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    package_logger.addHandler(stream_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger


class RunLog:
    """Records run-level events on a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("gtsignups.run")

    def record(self, event: str, level: int = logging.INFO, exc_info: bool = False):
        self.logger.log(level, event, exc_info=exc_info)
