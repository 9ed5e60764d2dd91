"""
SMTP delivery for the signup report.
"""

import os
import smtplib
import logging
from dataclasses import dataclass
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class OutgoingMessage:
    sender: str
    recipient: str
    subject: str
    body: str
    attachment_path: Optional[str] = None
    attachment_filename: Optional[str] = None


@dataclass
class MessageReceipt:
    message_id: str
    recipient: str


def build_mime_message(message: OutgoingMessage) -> MIMEMultipart:
    """Build a multipart message with an optional binary attachment."""
    msg = MIMEMultipart("mixed")
    msg["From"] = message.sender
    msg["To"] = message.recipient
    msg["Subject"] = message.subject
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid()

    msg.attach(MIMEText(message.body, "plain", "utf-8"))

    if message.attachment_path:
        filename = message.attachment_filename or os.path.basename(message.attachment_path)
        with open(message.attachment_path, "rb") as f:
            part = MIMEBase("application", "octet-stream")
            part.set_payload(f.read())
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", f'attachment; filename="{filename}"')
        msg.attach(part)

    return msg


class SmtpMailer:
    """Sends mail through an authenticated STARTTLS SMTP server."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        timeout: int = 30
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    def send(self, message: OutgoingMessage) -> MessageReceipt:
        msg = build_mime_message(message)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.ehlo()
                server.starttls()
                server.ehlo()
                server.login(self.username, self.password)
                server.sendmail(message.sender, [message.recipient], msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed for {self.username}: {e}")
            raise
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP error sending to {message.recipient}: {e}")
            raise

        logger.info(f"Email sent: {msg['Message-ID']}")
        return MessageReceipt(message_id=msg["Message-ID"], recipient=message.recipient)
