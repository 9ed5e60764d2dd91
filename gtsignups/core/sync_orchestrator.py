"""
Signup Sync Orchestrator.

Coordinates one pipeline run:
1. Scan Gmail for unread signup notifications
2. Extract signup fields from each message
3. Skip signups already in the spreadsheet
4. Append new signups to the spreadsheet
5. Mark each processed message as read
6. Mail an Excel export if anything new was recorded
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict

from ..config.settings import PipelineConfig
from .auth import load_credentials
from .deduplicator import Deduplicator
from .extractor import FieldExtractor
from .gmail_client import GmailClient
from .mailer import SmtpMailer
from .report_dispatcher import ReportDispatcher
from .run_log import RunLog
from .scanner import MailboxScanner
from .sheets_store import HeaderStyle, SheetsStore
from .store_writer import StoreWriter

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of a pipeline run."""
    status: str  # "success", "partial", "failed"
    emails_found: int = 0
    records_added: int = 0
    duplicates_skipped: int = 0
    emails_failed: int = 0
    mark_read_failures: int = 0
    report_sent: bool = False
    spreadsheet_id: Optional[str] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SignupSyncOrchestrator:
    """
    Runs the signup pipeline once.

    Handles:
    - Per-message failures (logged, counted, loop continues)
    - Mark-read failures (logged, row kept, loop continues)
    - Run-level failures (logged, returned as a failed result)
    """

    def __init__(
        self,
        scanner: MailboxScanner,
        extractor: FieldExtractor,
        deduplicator: Deduplicator,
        store_writer: StoreWriter,
        mailbox,
        dispatcher: Optional[ReportDispatcher] = None,
        run_log: Optional[RunLog] = None
    ):
        """
        Initialize orchestrator with component services.

        Args:
            scanner: Finds unread signup messages
            extractor: Builds a SignupRecord per message
            deduplicator: Checks the spreadsheet for an existing record
            store_writer: Resolves the spreadsheet and appends rows
            mailbox: Provides mark_read(message_id)
            dispatcher: Mails the export; None disables reporting
            run_log: Run event recorder
        """
        self.scanner = scanner
        self.extractor = extractor
        self.deduplicator = deduplicator
        self.store_writer = store_writer
        self.mailbox = mailbox
        self.dispatcher = dispatcher
        self.run_log = run_log or RunLog()

    def run(self) -> SyncResult:
        start_time = datetime.now()
        self.run_log.record("Starting the Growth Track Signup process...")
        result = SyncResult(status="success")

        try:
            message_ids = self.scanner.scan()
            result.emails_found = len(message_ids)

            if message_ids:
                # Store outages fail the run instead of every message
                self.store_writer.resolve()

            for message_id in message_ids:
                self._process_message(message_id, result)

            resolved = self.store_writer.resolved
            if resolved is not None:
                result.spreadsheet_id = resolved.spreadsheet_id

            if self.dispatcher is None:
                self.run_log.record("Report delivery disabled")
            elif result.records_added:
                receipt = self.dispatcher.dispatch(resolved, result.records_added)
                result.report_sent = receipt is not None
                if receipt is not None:
                    result.details["report_message_id"] = receipt.message_id
            else:
                self.run_log.record("No new signups to process")

            if result.emails_failed or result.mark_read_failures:
                result.status = "partial"

            self.run_log.record(
                f"Process completed ({result.status}): {result.emails_found} found, "
                f"{result.records_added} added, {result.duplicates_skipped} duplicates, "
                f"{result.emails_failed} failed"
            )

        except Exception as e:
            self.run_log.record(f"An error occurred: {e}", logging.ERROR, exc_info=True)
            result.status = "failed"
            result.error = str(e)

        result.duration_seconds = (datetime.now() - start_time).total_seconds()
        return result

    def _process_message(self, message_id: str, result: SyncResult):
        """Extract, dedupe, write and mark one message read."""
        self.run_log.record(f"Processing message {message_id}...")

        try:
            record = self.extractor.extract(message_id)
            resolved = self.store_writer.resolve()

            if self.deduplicator.exists(record, resolved):
                result.duplicates_skipped += 1
            else:
                self.store_writer.append(record)
                result.records_added += 1

        except Exception as e:
            self.run_log.record(f"Failed to process message {message_id}: {e}", logging.ERROR)
            result.emails_failed += 1
            return

        try:
            self.mailbox.mark_read(message_id)
        except Exception as e:
            self.run_log.record(f"Failed to mark message {message_id} as read: {e}", logging.WARNING)
            result.mark_read_failures += 1


def create_orchestrator_from_config(
    config: PipelineConfig,
    interactive: bool = True,
    send_report: bool = True
) -> SignupSyncOrchestrator:
    """
    Create orchestrator from pipeline configuration.

    Args:
        config: PipelineConfig object
        interactive: Allow the browser OAuth flow if no valid token exists
        send_report: Mail the export when new signups were added

    Returns:
        Configured SignupSyncOrchestrator
    """
    credentials = load_credentials(
        credentials_path=config.gmail.credentials_path,
        token_path=config.gmail.token_path,
        scopes=config.gmail.scopes,
        interactive=interactive
    )

    gmail_client = GmailClient(
        credentials=credentials,
        max_results=config.gmail.max_results_per_query
    )
    sheets_store = SheetsStore(credentials=credentials)

    store_writer = StoreWriter(
        store=sheets_store,
        folder_name=config.store.folder_name,
        spreadsheet_title=config.store.spreadsheet_title,
        header=config.store.header,
        sheet_title=config.store.sheet_title,
        style=HeaderStyle(
            column_pixel_width=config.store.column_pixel_width,
            row_count=config.store.initial_row_count
        )
    )

    dispatcher = None
    if send_report and config.report.enabled:
        dispatcher = ReportDispatcher(
            store=sheets_store,
            mailer=SmtpMailer(
                host=config.report.smtp_host,
                port=config.report.smtp_port,
                username=config.report.sender,
                password=config.report.password
            ),
            sender=config.report.sender,
            recipient=config.report.recipient,
            subject=config.report.subject,
            attachment_filename=config.report.attachment_filename,
            lookback_days=config.gmail.lookback_days,
            tz_name=config.timezone
        )

    return SignupSyncOrchestrator(
        scanner=MailboxScanner(
            mailbox=gmail_client,
            subject_patterns=config.gmail.subject_patterns,
            lookback_days=config.gmail.lookback_days
        ),
        extractor=FieldExtractor(mailbox=gmail_client, tz_name=config.timezone),
        deduplicator=Deduplicator(sheets_store),
        store_writer=store_writer,
        mailbox=gmail_client,
        dispatcher=dispatcher
    )
