"""
Mails an Excel export of the signup spreadsheet after a run.

The export is written to a temporary file that is removed whether or
not sending succeeds.
"""

import os
import logging
import tempfile
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Optional

from ..config.settings import XLSX_MIME_TYPE
from .extractor import format_registration_date
from .mailer import MessageReceipt, OutgoingMessage

logger = logging.getLogger(__name__)

BODY_TEMPLATE = (
    "Please find attached the latest Growth Track signups.\n\n"
    "This report includes {count} new signup(s) received between {start} and {end}."
)


@contextmanager
def temporary_export(data: bytes, filename: str) -> Iterator[str]:
    """Write `data` to a temporary file named `filename`; delete it on exit."""
    directory = tempfile.mkdtemp(prefix="gtsignups-")
    path = os.path.join(directory, filename)
    try:
        with open(path, "wb") as f:
            f.write(data)
        logger.info(f"Saved export temporarily to {path}")
        yield path
    finally:
        if os.path.exists(path):
            os.remove(path)
        os.rmdir(directory)
        logger.info("Deleted temporary export file")


class ReportDispatcher:
    def __init__(
        self,
        store,
        mailer,
        sender: str,
        recipient: str,
        subject: str = "Growth Track Signups",
        attachment_filename: str = "GrowthTrackSignups.xlsx",
        lookback_days: int = 7,
        tz_name: str = "Africa/Johannesburg",
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            store: Object providing export_as(spreadsheet_id, mime_type)
            mailer: Object providing send(OutgoingMessage) -> MessageReceipt
            sender: From address
            recipient: Fixed report recipient
            subject: Report subject line
            attachment_filename: Name of the attached workbook
            lookback_days: Window named in the message body
            tz_name: Timezone used to render the window dates
            clock: Returns the current aware datetime (defaults to UTC now)
        """
        self.store = store
        self.mailer = mailer
        self.sender = sender
        self.recipient = recipient
        self.subject = subject
        self.attachment_filename = attachment_filename
        self.lookback_days = lookback_days
        self.tz_name = tz_name
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build_body(self, records_added: int) -> str:
        end = self.clock()
        start = end - timedelta(days=self.lookback_days)
        return BODY_TEMPLATE.format(
            count=records_added,
            start=format_registration_date(int(start.timestamp() * 1000), self.tz_name),
            end=format_registration_date(int(end.timestamp() * 1000), self.tz_name)
        )

    def dispatch(self, resolved, records_added: int) -> Optional[MessageReceipt]:
        """
        Export and mail the spreadsheet if this run added records.

        Returns:
            The send receipt, or None when there was nothing to report.
        """
        if records_added <= 0 or resolved is None:
            logger.info("No new signups to report")
            return None

        logger.info("Exporting spreadsheet as Excel...")
        data = self.store.export_as(resolved.spreadsheet_id, XLSX_MIME_TYPE)

        with temporary_export(data, self.attachment_filename) as path:
            logger.info(f"Sending report to {self.recipient}...")
            return self.mailer.send(OutgoingMessage(
                sender=self.sender,
                recipient=self.recipient,
                subject=self.subject,
                body=self.build_body(records_added),
                attachment_path=path,
                attachment_filename=self.attachment_filename
            ))
