"""Unit tests for signup field extraction and registration dates."""

import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfoNotFoundError

import pytest

from gtsignups.config.settings import SENTINEL_NOT_PROVIDED
from gtsignups.core.extractor import (
    ExtractedFields,
    FieldExtractor,
    SignupRecord,
    extract_fields,
    format_registration_date,
)
from tests.fakes import FakeMailbox, epoch_ms, signup_html


class TestExtractFields:

    def test_all_fields_trimmed(self):
        html = signup_html(name="  Jane Doe ", phone="\n082 555 0101\t", email=" jane@example.com")
        fields = extract_fields(html)
        assert fields.name == "Jane Doe"
        assert fields.phone == "082 555 0101"
        assert fields.email == "jane@example.com"
        assert fields.missing_fields == []

    def test_missing_phone_leaves_other_fields(self):
        fields = extract_fields(signup_html(name="Sam Smith", email="sam@example.com"))
        assert fields.phone is None
        assert fields.name == "Sam Smith"
        assert fields.email == "sam@example.com"
        assert fields.missing_fields == ["phone"]

    def test_labels_are_case_insensitive(self):
        html = (
            '<TD valign="top">FULL NAME:</TD><TD>Ann Lee</TD>'
            '<td valign="top">phone:</td> <td>0123</td>'
            '<td>EMAIL:</td><td class="v">ann@example.com</td>'
        )
        fields = extract_fields(html)
        assert (fields.name, fields.phone, fields.email) == ("Ann Lee", "0123", "ann@example.com")

    def test_blank_cell_counts_as_missing(self):
        fields = extract_fields(signup_html(name="   ", phone="1", email="a@b.c"))
        assert fields.name is None

    def test_body_without_table(self):
        fields = extract_fields("Thanks for signing up!")
        assert fields.missing_fields == ["name", "phone", "email"]

    def test_literal_sentinel_text_is_not_missing(self):
        fields = extract_fields(signup_html(name="Not provided", phone="1", email="a@b.c"))
        assert fields.name == SENTINEL_NOT_PROVIDED
        assert fields.missing_fields == []


class TestSignupRecord:

    def test_to_record_uses_sentinel_for_missing(self):
        record = ExtractedFields(name="Jo", email="jo@example.com").to_record("May 1, 2025")
        assert record.phone == SENTINEL_NOT_PROVIDED
        assert record.as_row() == ["May 1, 2025", "Jo", SENTINEL_NOT_PROVIDED, "jo@example.com"]
        assert record.identity == ("Jo", SENTINEL_NOT_PROVIDED, "jo@example.com")

    def test_record_is_immutable(self):
        record = SignupRecord(date="May 1, 2025", name="Jo", phone="1", email="e")
        with pytest.raises(AttributeError):
            record.name = "Other"

    def test_empty_field_rejected(self):
        with pytest.raises(ValueError):
            SignupRecord(date="May 1, 2025", name="", phone="1", email="e")


class TestRegistrationDate:

    def test_rendered_in_johannesburg(self):
        # 23:30 UTC on March 3 is already March 4 in Johannesburg (UTC+2)
        ms = epoch_ms(datetime(2025, 3, 3, 23, 30, tzinfo=timezone.utc))
        assert format_registration_date(ms) == "March 4, 2025"

    def test_day_not_zero_padded(self):
        ms = epoch_ms(datetime(2024, 11, 5, 8, 0, tzinfo=timezone.utc))
        assert format_registration_date(ms) == "November 5, 2024"

    @pytest.mark.skipif(not hasattr(time, "tzset"), reason="requires time.tzset")
    def test_stable_under_host_timezone(self, monkeypatch):
        ms = epoch_ms(datetime(2025, 3, 3, 23, 30, tzinfo=timezone.utc))
        try:
            monkeypatch.setenv("TZ", "America/Los_Angeles")
            time.tzset()
            assert format_registration_date(ms) == "March 4, 2025"
        finally:
            monkeypatch.undo()
            time.tzset()


class TestFieldExtractor:

    def test_date_comes_from_timestamp_not_body(self):
        mailbox = FakeMailbox()
        body = signup_html(name="Jane", phone="1", email="j@example.com") + "<p>Date: January 1, 2020</p>"
        mailbox.add("m1", "Growth Track Signup", body, epoch_ms(datetime(2025, 6, 15, 12, tzinfo=timezone.utc)))

        record = FieldExtractor(mailbox).extract("m1")

        assert record == SignupRecord(date="June 15, 2025", name="Jane", phone="1", email="j@example.com")

    def test_missing_field_logged_as_warning(self, caplog):
        mailbox = FakeMailbox()
        mailbox.add("m1", "Growth Track Signup", signup_html(name="Jane", email="j@x.com"), 0)

        with caplog.at_level("WARNING"):
            record = FieldExtractor(mailbox).extract("m1")

        assert record.phone == SENTINEL_NOT_PROVIDED
        assert "Could not extract phone" in caplog.text

    def test_transport_failure_propagates(self):
        mailbox = FakeMailbox()
        mailbox.add("m1", "Growth Track Signup", "", 0)
        mailbox.fetch_failures.add("m1")
        with pytest.raises(ConnectionError):
            FieldExtractor(mailbox).extract("m1")

    def test_unknown_timezone_rejected_up_front(self):
        with pytest.raises(ZoneInfoNotFoundError):
            FieldExtractor(FakeMailbox(), tz_name="Not/AZone")
