"""
The "Watcher": finds unread Growth Track signup notifications.

The signup form's subject line changed over time, so subject patterns
are tried in priority order and the first pattern with results wins.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


class MailboxScanner:
    def __init__(
        self,
        mailbox,
        subject_patterns: Sequence[str],
        lookback_days: int = 7,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            mailbox: Object providing list_unread(subject_pattern, since)
            subject_patterns: Subjects to try, highest priority first
            lookback_days: Size of the trailing window to search
            clock: Returns the current aware datetime (defaults to UTC now)
        """
        if not subject_patterns:
            raise ValueError("At least one subject pattern is required")
        self.mailbox = mailbox
        self.subject_patterns = list(subject_patterns)
        self.lookback_days = lookback_days
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def window_start(self) -> datetime:
        return self.clock() - timedelta(days=self.lookback_days)

    def scan(self) -> List[str]:
        """Return message IDs for the first subject pattern that has unread matches."""
        since = self.window_start()

        for pattern in self.subject_patterns:
            message_ids = self.mailbox.list_unread(pattern, since)
            if message_ids:
                logger.info(
                    f"Found {len(message_ids)} unread signup emails from the last "
                    f"{self.lookback_days} days (subject '{pattern}')"
                )
                return list(message_ids)
            logger.info(f"No unread emails for subject '{pattern}'")

        logger.info(f"No unread signup emails in the last {self.lookback_days} days")
        return []
