"""
Google Drive / Sheets store for signup rows.

Thin wrapper over the Drive v3 and Sheets v4 APIs exposing the folder,
spreadsheet and row operations the pipeline needs.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'
SPREADSHEET_MIME_TYPE = 'application/vnd.google-apps.spreadsheet'


@dataclass
class HeaderStyle:
    """Formatting applied to a newly created spreadsheet."""
    bold: bool = True
    horizontal_alignment: str = 'CENTER'
    background_grey: float = 0.9
    column_pixel_width: int = 200
    row_count: int = 1000


def _quote(value: str) -> str:
    """Escape a value for use inside a Drive query string literal."""
    return value.replace('\\', '\\\\').replace("'", "\\'")


def _column_letter(index: int) -> str:
    """Convert a 1-based column index to A1 letters (1 -> A, 27 -> AA)."""
    letters = ''
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord('A') + remainder) + letters
    return letters


class SheetsStore:
    """Drive folder lookup plus Sheets read/append/export."""

    def __init__(self, credentials=None, drive_service=None, sheets_service=None):
        """
        Args:
            credentials: Authorized google-auth credentials
            drive_service: Prebuilt Drive v3 resource (optional)
            sheets_service: Prebuilt Sheets v4 resource (optional)
        """
        self.drive = drive_service or build('drive', 'v3', credentials=credentials)
        self.sheets = sheets_service or build('sheets', 'v4', credentials=credentials)

    def _find_file(self, query: str) -> Optional[str]:
        response = self.drive.files().list(
            q=query,
            spaces='drive',
            fields='files(id, name)'
        ).execute()
        files = response.get('files', [])
        return files[0]['id'] if files else None

    def find_folder(self, name: str) -> Optional[str]:
        """Return the ID of a non-trashed folder named exactly `name`."""
        query = (
            f"name = '{_quote(name)}' and mimeType = '{FOLDER_MIME_TYPE}' "
            f"and trashed = false"
        )
        try:
            return self._find_file(query)
        except HttpError as e:
            logger.error(f"Error looking up folder {name}: {e}")
            raise

    def create_folder(self, name: str) -> str:
        folder_metadata = {
            'name': name,
            'mimeType': FOLDER_MIME_TYPE
        }
        try:
            folder = self.drive.files().create(
                body=folder_metadata,
                fields='id'
            ).execute()
        except HttpError as e:
            logger.error(f"Error creating folder {name}: {e}")
            raise

        folder_id = folder.get('id')
        logger.info(f"Created folder '{name}': {folder_id}")
        return folder_id

    def find_table(self, folder_id: str, title: str) -> Optional[str]:
        """Return the ID of a spreadsheet titled `title` inside `folder_id`."""
        query = (
            f"'{_quote(folder_id)}' in parents and mimeType = '{SPREADSHEET_MIME_TYPE}' "
            f"and name = '{_quote(title)}' and trashed = false"
        )
        try:
            return self._find_file(query)
        except HttpError as e:
            logger.error(f"Error looking up spreadsheet {title}: {e}")
            raise

    def create_table(
        self,
        folder_id: str,
        title: str,
        header: Sequence[str],
        style: Optional[HeaderStyle] = None,
        sheet_title: str = 'Sheet1'
    ) -> str:
        """
        Create a spreadsheet with a formatted header row and move it into a folder.

        Args:
            folder_id: Destination Drive folder
            title: Spreadsheet title
            header: Header cell values
            style: Header/column formatting
            sheet_title: Title of the single worksheet

        Returns:
            The new spreadsheet ID
        """
        style = style or HeaderStyle()
        column_count = len(header)

        spreadsheet_body = {
            'properties': {'title': title},
            'sheets': [{
                'properties': {
                    'title': sheet_title,
                    'gridProperties': {
                        'rowCount': style.row_count,
                        'columnCount': column_count
                    }
                },
                'data': [{
                    'rowData': [{
                        'values': [
                            {'userEnteredValue': {'stringValue': value}}
                            for value in header
                        ]
                    }]
                }]
            }]
        }

        try:
            spreadsheet = self.sheets.spreadsheets().create(
                body=spreadsheet_body
            ).execute()
            spreadsheet_id = spreadsheet['spreadsheetId']
            sheet_id = spreadsheet['sheets'][0]['properties']['sheetId']
            logger.info(f"Created spreadsheet '{title}': {spreadsheet_id}")

            self.sheets.spreadsheets().batchUpdate(
                spreadsheetId=spreadsheet_id,
                body={'requests': self._format_requests(sheet_id, column_count, style)}
            ).execute()

            self.drive.files().update(
                fileId=spreadsheet_id,
                addParents=folder_id,
                fields='id, parents'
            ).execute()
            logger.info(f"Moved spreadsheet {spreadsheet_id} to folder {folder_id}")

        except HttpError as e:
            logger.error(f"Error creating spreadsheet {title}: {e}")
            raise

        return spreadsheet_id

    def _format_requests(
        self,
        sheet_id: int,
        column_count: int,
        style: HeaderStyle
    ) -> List[Dict[str, Any]]:
        grey = style.background_grey
        return [
            {
                'repeatCell': {
                    'range': {
                        'sheetId': sheet_id,
                        'startRowIndex': 0,
                        'endRowIndex': 1,
                        'startColumnIndex': 0,
                        'endColumnIndex': column_count
                    },
                    'cell': {
                        'userEnteredFormat': {
                            'backgroundColor': {'red': grey, 'green': grey, 'blue': grey},
                            'textFormat': {'bold': style.bold},
                            'horizontalAlignment': style.horizontal_alignment
                        }
                    },
                    'fields': 'userEnteredFormat(backgroundColor,textFormat,horizontalAlignment)'
                }
            },
            {
                'updateDimensionProperties': {
                    'range': {
                        'sheetId': sheet_id,
                        'dimension': 'COLUMNS',
                        'startIndex': 0,
                        'endIndex': column_count
                    },
                    'properties': {'pixelSize': style.column_pixel_width},
                    'fields': 'pixelSize'
                }
            }
        ]

    def first_sheet_title(self, spreadsheet_id: str) -> str:
        """Return the title of the first worksheet."""
        try:
            info = self.sheets.spreadsheets().get(
                spreadsheetId=spreadsheet_id,
                fields='sheets.properties'
            ).execute()
        except HttpError as e:
            logger.error(f"Error reading spreadsheet {spreadsheet_id}: {e}")
            raise
        return info['sheets'][0]['properties']['title']

    def _range(self, sheet_title: str, column_count: int = 4) -> str:
        escaped = sheet_title.replace("'", "''")
        return f"'{escaped}'!A:{_column_letter(column_count)}"

    def read_all_rows(self, spreadsheet_id: str, sheet_title: str) -> List[List[str]]:
        """Return every row of the worksheet, header included."""
        try:
            response = self.sheets.spreadsheets().values().get(
                spreadsheetId=spreadsheet_id,
                range=self._range(sheet_title)
            ).execute()
        except HttpError as e:
            logger.error(f"Error reading rows from {spreadsheet_id}: {e}")
            raise
        return response.get('values', [])

    def append_row(self, spreadsheet_id: str, sheet_title: str, values: Sequence[str]):
        """Append one row after the last non-empty row; values are stored as literal strings."""
        try:
            self.sheets.spreadsheets().values().append(
                spreadsheetId=spreadsheet_id,
                range=self._range(sheet_title, len(values)),
                valueInputOption='RAW',
                body={'values': [list(values)]}
            ).execute()
        except HttpError as e:
            logger.error(f"Error appending row to {spreadsheet_id}: {e}")
            raise

    def export_as(self, spreadsheet_id: str, mime_type: str) -> bytes:
        """Export a spreadsheet through Drive and return the file bytes."""
        request = self.drive.files().export_media(fileId=spreadsheet_id, mimeType=mime_type)
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, request)

        try:
            done = False
            while not done:
                _, done = downloader.next_chunk()
        except HttpError as e:
            logger.error(f"Error exporting spreadsheet {spreadsheet_id}: {e}")
            raise

        data = buffer.getvalue()
        logger.info(f"Exported spreadsheet {spreadsheet_id} ({len(data)} bytes)")
        return data
