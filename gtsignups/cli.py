"""
Command-line entry point.

Run from cron (or any scheduler); each invocation processes the
mailbox once and exits.
"""

import argparse
import logging
from typing import List, Optional

from .config.settings import ConfigurationError, get_pipeline_config
from .core.auth import AuthorizationError
from .core.run_log import configure_logging
from .core.sync_orchestrator import create_orchestrator_from_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gtsignups",
        description="Record Growth Track signup emails in Google Sheets and mail a report."
    )
    parser.add_argument("--config", help="YAML file with configuration overrides")
    parser.add_argument("--log-file", help="Append-only run log (overrides configuration)")
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Record signups but do not mail the export"
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Fail instead of opening a browser when the saved token is unusable"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_pipeline_config(args.config)
    except ConfigurationError as e:
        configure_logging(args.log_file, args.verbose)
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(args.log_file or config.log_file, args.verbose)

    send_report = not args.no_report
    try:
        if send_report:
            config.report.validate()
        orchestrator = create_orchestrator_from_config(
            config,
            interactive=not args.non_interactive,
            send_report=send_report
        )
    except (ConfigurationError, AuthorizationError) as e:
        logger.error(f"Startup failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"An error occurred during startup: {e}", exc_info=True)
        return 1

    result = orchestrator.run()
    logger.info(f"Run result: {result.to_dict()}")
    return 1 if result.status == "failed" else 0
