"""Duplicate detection against rows already in the spreadsheet."""

import logging
from typing import Iterable, Sequence

from .extractor import SignupRecord

logger = logging.getLogger(__name__)


def row_identity(row: Sequence[str]) -> tuple:
    """(name, phone, email) from a stored row; Sheets drops trailing blank cells."""
    cells = list(row[1:4])
    cells.extend([''] * (3 - len(cells)))
    return tuple(cells)


def is_duplicate(record: SignupRecord, rows: Iterable[Sequence[str]]) -> bool:
    """
    Exact match of name, phone and email against any row.

    No normalization: comparison is case- and whitespace-sensitive. The
    date column is ignored, so a resubmission on a later day is still a
    duplicate. The header row cannot match a real record.
    """
    identity = record.identity
    return any(row_identity(row) == identity for row in rows)


class Deduplicator:
    def __init__(self, store):
        self.store = store

    def exists(self, record: SignupRecord, resolved) -> bool:
        """Check whether `record` is already stored in the resolved spreadsheet."""
        rows = self.store.read_all_rows(resolved.spreadsheet_id, resolved.sheet_title)
        duplicate = is_duplicate(record, rows)
        if duplicate:
            logger.info(f"Duplicate signup for {record.name} ({record.email}), skipping")
        return duplicate
