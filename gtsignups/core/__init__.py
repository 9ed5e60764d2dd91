"""Core module for the Growth Track Signups Pipeline."""

from .gmail_client import GmailClient, MailMessage
from .scanner import MailboxScanner
from .extractor import FieldExtractor, SignupRecord, ExtractedFields
from .deduplicator import Deduplicator
from .sheets_store import SheetsStore
from .store_writer import StoreWriter, ResolvedStore
from .mailer import SmtpMailer, OutgoingMessage, MessageReceipt
from .report_dispatcher import ReportDispatcher
from .run_log import RunLog
from .sync_orchestrator import SignupSyncOrchestrator, SyncResult

__all__ = [
    "GmailClient",
    "MailMessage",
    "MailboxScanner",
    "FieldExtractor",
    "SignupRecord",
    "ExtractedFields",
    "Deduplicator",
    "SheetsStore",
    "StoreWriter",
    "ResolvedStore",
    "SmtpMailer",
    "OutgoingMessage",
    "MessageReceipt",
    "ReportDispatcher",
    "RunLog",
    "SignupSyncOrchestrator",
    "SyncResult",
]
