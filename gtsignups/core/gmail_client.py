"""
Gmail API Client for signup notifications.

Lists unread notifications by subject, fetches full messages and
clears the UNREAD label once a message has been handled.
"""

import base64
import logging
from datetime import datetime
from typing import List, Dict, Any
from dataclasses import dataclass, field

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)


@dataclass
class MailMessage:
    """A fetched Gmail message."""
    message_id: str
    thread_id: str
    body: str
    received_at_ms: int
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def subject(self) -> str:
        return self.headers.get('Subject', '(No Subject)')

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "message_id": self.message_id,
            "thread_id": self.thread_id,
            "subject": self.subject,
            "received_at_ms": self.received_at_ms,
            "body_length": len(self.body)
        }


def decode_body(payload: Dict[str, Any]) -> str:
    """
    Decode the body text of a Gmail message payload.

    Multipart messages use the first part (descending through nested
    multiparts); other messages use the top-level body. Gmail encodes
    body data as base64url.
    """
    part = payload
    while part.get('parts') and not part.get('body', {}).get('data'):
        part = part['parts'][0]

    body_data = part.get('body', {}).get('data', '')
    if not body_data:
        return ''

    # Gmail may strip base64 padding
    padded = body_data + '=' * (-len(body_data) % 4)
    return base64.urlsafe_b64decode(padded).decode('utf-8', errors='replace')


def build_subject_query(subject_pattern: str, since: datetime) -> str:
    """Build the Gmail search query for unread messages with a subject."""
    escaped = subject_pattern.replace('"', '\\"')
    return f'subject:"{escaped}" is:unread after:{int(since.timestamp())}'


class GmailClient:
    """
    Gmail API client acting as the signed-in user ('me').

    Requires the gmail.modify scope so messages can be marked as read.
    """

    def __init__(
        self,
        credentials=None,
        service=None,
        max_results: int = 500
    ):
        """
        Initialize the Gmail client.

        Args:
            credentials: Authorized google-auth credentials
            service: Prebuilt Gmail API resource (used instead of credentials)
            max_results: Maximum message IDs returned per query
        """
        if service is None:
            service = build('gmail', 'v1', credentials=credentials)
            logger.info("Gmail client initialized")
        self.service = service
        self.max_results = max_results

    def list_unread(self, subject_pattern: str, since: datetime) -> List[str]:
        """
        List unread message IDs whose subject matches, received after `since`.

        Args:
            subject_pattern: Subject text to search for
            since: Only messages received after this moment

        Returns:
            List of Gmail message IDs (newest first, as Gmail returns them)
        """
        query = build_subject_query(subject_pattern, since)
        logger.info(f"Gmail query: {query}")

        message_ids: List[str] = []
        page_token = None

        try:
            while len(message_ids) < self.max_results:
                response = self.service.users().messages().list(
                    userId='me',
                    q=query,
                    maxResults=min(100, self.max_results - len(message_ids)),
                    pageToken=page_token
                ).execute()

                message_ids.extend(m['id'] for m in response.get('messages', []))

                page_token = response.get('nextPageToken')
                if not page_token:
                    break

        except HttpError as e:
            logger.error(f"Gmail API error listing messages: {e}")
            raise

        logger.info(f"Found {len(message_ids)} messages for subject '{subject_pattern}'")
        return message_ids

    def fetch(self, message_id: str) -> MailMessage:
        """
        Fetch and decode a full message.

        Args:
            message_id: Gmail message ID

        Returns:
            MailMessage with decoded body and receipt timestamp
        """
        try:
            msg = self.service.users().messages().get(
                userId='me',
                id=message_id,
                format='full'
            ).execute()
        except HttpError as e:
            logger.error(f"Error fetching message {message_id}: {e}")
            raise

        payload = msg.get('payload', {})
        headers = {h['name']: h['value'] for h in payload.get('headers', [])}

        return MailMessage(
            message_id=message_id,
            thread_id=msg.get('threadId', ''),
            body=decode_body(payload),
            received_at_ms=int(msg.get('internalDate', 0)),
            headers=headers
        )

    def mark_read(self, message_id: str):
        """Remove the UNREAD label from a message."""
        try:
            self.service.users().messages().modify(
                userId='me',
                id=message_id,
                body={'removeLabelIds': ['UNREAD']}
            ).execute()
        except HttpError as e:
            logger.error(f"Error marking message {message_id} as read: {e}")
            raise

        logger.info(f"Marked message {message_id} as read")

