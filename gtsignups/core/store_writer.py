"""
Resolves the destination spreadsheet and appends signup rows.

Resolution (folder, then spreadsheet) happens at most once per run;
every later call reuses the cached identifiers.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..config.settings import DEFAULT_HEADER
from .extractor import SignupRecord
from .sheets_store import HeaderStyle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedStore:
    folder_id: str
    spreadsheet_id: str
    sheet_title: str
    created: bool = False


class StoreWriter:
    def __init__(
        self,
        store,
        folder_name: str = "Growth Track Registrations",
        spreadsheet_title: str = "Growth Track Signups",
        header: Sequence[str] = DEFAULT_HEADER,
        sheet_title: str = "Sheet1",
        style: Optional[HeaderStyle] = None
    ):
        """
        Args:
            store: SheetsStore (or compatible) transport
            folder_name: Drive folder holding the spreadsheet
            spreadsheet_title: Spreadsheet name inside the folder
            header: Header row written when the spreadsheet is created
            sheet_title: Worksheet title used for new spreadsheets
            style: Header/column formatting for new spreadsheets
        """
        self.store = store
        self.folder_name = folder_name
        self.spreadsheet_title = spreadsheet_title
        self.header = tuple(header)
        self.sheet_title = sheet_title
        self.style = style or HeaderStyle()
        self._resolved: Optional[ResolvedStore] = None

    @property
    def resolved(self) -> Optional[ResolvedStore]:
        return self._resolved

    def resolve(self) -> ResolvedStore:
        """Find or create the folder and spreadsheet; cached for the run."""
        if self._resolved is not None:
            return self._resolved

        folder_id = self.store.find_folder(self.folder_name)
        if folder_id:
            logger.info(f"Found existing '{self.folder_name}' folder: {folder_id}")
        else:
            folder_id = self.store.create_folder(self.folder_name)

        spreadsheet_id = self.store.find_table(folder_id, self.spreadsheet_title)
        if spreadsheet_id:
            logger.info(f"Found existing spreadsheet: {spreadsheet_id}")
            sheet_title = self.store.first_sheet_title(spreadsheet_id)
            created = False
        else:
            spreadsheet_id = self.store.create_table(
                folder_id,
                self.spreadsheet_title,
                self.header,
                self.style,
                self.sheet_title
            )
            sheet_title = self.sheet_title
            created = True

        self._resolved = ResolvedStore(
            folder_id=folder_id,
            spreadsheet_id=spreadsheet_id,
            sheet_title=sheet_title,
            created=created
        )
        return self._resolved

    def append(self, record: SignupRecord) -> ResolvedStore:
        resolved = self.resolve()
        self.store.append_row(resolved.spreadsheet_id, resolved.sheet_title, record.as_row())
        logger.info(f"Saved signup for {record.name} to spreadsheet {resolved.spreadsheet_id}")
        return resolved
