"""
OAuth credentials for Gmail, Drive and Sheets access.

The authorized-user token is cached on disk so the browser consent flow
only runs on the first invocation (or after the refresh token is revoked).
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

logger = logging.getLogger(__name__)


class AuthorizationError(Exception):
    """Raised when no usable credentials can be obtained."""


def load_saved_credentials(token_path: Path, scopes: List[str]) -> Optional[Credentials]:
    """Load cached authorized-user credentials, or None if there are none."""
    if not token_path.exists():
        logger.info("No saved credentials found")
        return None

    try:
        credentials = Credentials.from_authorized_user_file(str(token_path), scopes)
    except (ValueError, json.JSONDecodeError) as e:
        logger.warning(f"Could not load saved credentials from {token_path}: {e}")
        return None

    logger.info("Loaded saved credentials")
    return credentials


def save_credentials(credentials: Credentials, token_path: Path):
    """Persist credentials as an authorized-user JSON file."""
    token_path.parent.mkdir(parents=True, exist_ok=True)
    with open(token_path, 'w') as f:
        f.write(credentials.to_json())
    logger.info(f"Credentials saved to {token_path}")


def load_credentials(
    credentials_path: str,
    token_path: str,
    scopes: List[str],
    interactive: bool = True
) -> Credentials:
    """
    Return valid credentials, refreshing or re-authorizing as needed.

    Args:
        credentials_path: OAuth client secrets file (installed app)
        token_path: Cached authorized-user token file
        scopes: OAuth scopes to request
        interactive: If False, never open a browser; raise instead

    Returns:
        Valid google.oauth2 Credentials

    Raises:
        AuthorizationError: If credentials cannot be loaded or obtained
    """
    token_file = Path(token_path)
    credentials = load_saved_credentials(token_file, scopes)

    if credentials and credentials.valid:
        return credentials

    if credentials and credentials.expired and credentials.refresh_token:
        try:
            credentials.refresh(Request())
            save_credentials(credentials, token_file)
            logger.info("Refreshed expired OAuth token")
            return credentials
        except RefreshError as e:
            logger.warning(f"Token refresh failed: {e}")

    if not interactive:
        raise AuthorizationError(
            f"No valid token at {token_file} and interactive authorization is disabled"
        )

    secrets_file = Path(credentials_path)
    if not secrets_file.exists():
        raise AuthorizationError(f"OAuth client secrets file not found: {secrets_file}")

    logger.info("Starting OAuth consent flow (will open browser)...")
    flow = InstalledAppFlow.from_client_secrets_file(str(secrets_file), scopes)
    credentials = flow.run_local_server(port=0)
    save_credentials(credentials, token_file)
    logger.info("New authorization completed")
    return credentials
