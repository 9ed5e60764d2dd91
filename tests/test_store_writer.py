"""Tests for spreadsheet resolution and row appends."""

from gtsignups.core.extractor import SignupRecord
from gtsignups.core.store_writer import StoreWriter
from tests.fakes import FakeSheetsStore

HEADER = ["Registration Date", "Full Name", "Phone", "Email"]
RECORD = SignupRecord(date="March 4, 2025", name="Jane Doe", phone="1", email="jane@example.com")


def test_creates_folder_and_spreadsheet_when_absent():
    store = FakeSheetsStore()

    resolved = StoreWriter(store).resolve()

    assert store.folders == {resolved.folder_id: "Growth Track Registrations"}
    table = store.tables[resolved.spreadsheet_id]
    assert table["title"] == "Growth Track Signups"
    assert table["folder_id"] == resolved.folder_id
    assert table["rows"] == [HEADER]
    assert table["style"].column_pixel_width == 200
    assert resolved.created is True
    assert resolved.sheet_title == "Sheet1"


def test_resolution_cached_within_run():
    store = FakeSheetsStore()
    writer = StoreWriter(store)

    first = writer.resolve()
    calls_after_first = list(store.calls)
    second = writer.resolve()

    assert first == second
    assert store.calls == calls_after_first


def test_reuses_existing_store_across_runs():
    store = FakeSheetsStore()
    first = StoreWriter(store).resolve()

    second = StoreWriter(store).resolve()

    assert (second.folder_id, second.spreadsheet_id) == (first.folder_id, first.spreadsheet_id)
    assert second.created is False
    assert len(store.folders) == 1
    assert len(store.tables) == 1
    assert store.calls.count("create_table") == 1


def test_existing_folder_without_spreadsheet():
    store = FakeSheetsStore()
    folder_id = store.create_folder("Growth Track Registrations")

    resolved = StoreWriter(store).resolve()

    assert resolved.folder_id == folder_id
    assert resolved.created is True
    assert len(store.folders) == 1


def test_append_writes_one_row_in_column_order():
    store = FakeSheetsStore()
    writer = StoreWriter(store)

    resolved = writer.append(RECORD)
    writer.append(RECORD)

    assert store.rows(resolved.spreadsheet_id) == [
        HEADER,
        ["March 4, 2025", "Jane Doe", "1", "jane@example.com"],
        ["March 4, 2025", "Jane Doe", "1", "jane@example.com"],
    ]
    assert store.calls.count("create_table") == 1
