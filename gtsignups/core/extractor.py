"""
Signup field extraction.

Signup notifications carry the form fields as two-cell HTML table rows:

    <td valign="top">Full Name:</td>
    <td>Jane Doe</td>

The registration date is never read from the body; it comes from the
message's receipt timestamp.
"""

import re
import logging
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..config.settings import SENTINEL_NOT_PROVIDED

logger = logging.getLogger(__name__)


def _cell_pattern(label: str) -> "re.Pattern[str]":
    return re.compile(
        r'<td[^>]*>\s*' + re.escape(label) + r'\s*</td>\s*<td[^>]*>([^<]*)</td>',
        re.IGNORECASE
    )


FIELD_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    "name": _cell_pattern("Full Name:"),
    "phone": _cell_pattern("Phone:"),
    "email": _cell_pattern("Email:"),
}


@dataclass(frozen=True)
class SignupRecord:
    """One registration, ready to be written as a spreadsheet row."""
    date: str
    name: str
    phone: str
    email: str

    def __post_init__(self):
        for field_name in ("date", "name", "phone", "email"):
            if not getattr(self, field_name):
                raise ValueError(f"SignupRecord.{field_name} must not be empty")

    @property
    def identity(self) -> Tuple[str, str, str]:
        """Key used for duplicate detection."""
        return (self.name, self.phone, self.email)

    def as_row(self) -> List[str]:
        return [self.date, self.name, self.phone, self.email]


@dataclass(frozen=True)
class ExtractedFields:
    """Raw extraction result; None marks a field that was not found."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @property
    def missing_fields(self) -> List[str]:
        return [f for f in ("name", "phone", "email") if getattr(self, f) is None]

    def to_record(self, date: str) -> SignupRecord:
        return SignupRecord(
            date=date,
            name=self.name if self.name is not None else SENTINEL_NOT_PROVIDED,
            phone=self.phone if self.phone is not None else SENTINEL_NOT_PROVIDED,
            email=self.email if self.email is not None else SENTINEL_NOT_PROVIDED,
        )


def extract_fields(html: str) -> ExtractedFields:
    """Apply each field pattern to the body; blank values count as missing."""
    values: Dict[str, Optional[str]] = {}
    for field_name, pattern in FIELD_PATTERNS.items():
        match = pattern.search(html)
        value = match.group(1).strip() if match else ''
        values[field_name] = value or None
    return ExtractedFields(**values)


def format_registration_date(received_at_ms: int, tz_name: str = "Africa/Johannesburg") -> str:
    """Render an epoch-milliseconds timestamp as 'Month D, YYYY' in `tz_name`."""
    moment = datetime.fromtimestamp(received_at_ms / 1000, tz=timezone.utc)
    local = moment.astimezone(ZoneInfo(tz_name))
    return f"{local.strftime('%B')} {local.day}, {local.year}"


class FieldExtractor:
    """Builds a SignupRecord for a mailbox message."""

    def __init__(self, mailbox, tz_name: str = "Africa/Johannesburg"):
        """
        Args:
            mailbox: Object providing fetch(message_id) -> MailMessage
            tz_name: IANA timezone used to render registration dates
        """
        self.mailbox = mailbox
        self.tz_name = tz_name
        # Fail on an unknown timezone before any message is fetched
        ZoneInfo(tz_name)

    def extract(self, message_id: str) -> SignupRecord:
        logger.info(f"Extracting signup information from email {message_id}...")
        message = self.mailbox.fetch(message_id)
        logger.debug(f"Fetched message: {message.to_dict()}")

        fields = extract_fields(message.body)
        for field_name in ("name", "phone", "email"):
            value = getattr(fields, field_name)
            if value is None:
                logger.warning(f"Could not extract {field_name} from email {message_id}")
            else:
                logger.info(f"Extracted {field_name}: {value}")

        date = format_registration_date(message.received_at_ms, self.tz_name)
        logger.info(f"Using email date as registration date: {date}")

        return fields.to_record(date)
