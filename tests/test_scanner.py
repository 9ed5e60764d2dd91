"""Tests for the subject-fallback mailbox scanner."""

from datetime import datetime, timedelta, timezone

import pytest

from gtsignups.core.scanner import MailboxScanner
from tests.fakes import FakeMailbox, epoch_ms

NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
PATTERNS = ["Growth Track Signup", "Growth Track Sign Up Form"]


def make_scanner(mailbox):
    return MailboxScanner(mailbox, PATTERNS, lookback_days=7, clock=lambda: NOW)


def test_primary_subject_wins():
    mailbox = FakeMailbox()
    mailbox.add("new", "Growth Track Signup", "", epoch_ms(NOW - timedelta(days=1)))
    mailbox.add("old", "Growth Track Sign Up Form", "", epoch_ms(NOW - timedelta(days=1)))

    assert make_scanner(mailbox).scan() == ["new"]
    assert [call[0] for call in mailbox.list_calls] == ["Growth Track Signup"]


def test_falls_back_to_legacy_subject():
    mailbox = FakeMailbox()
    mailbox.add("legacy", "Growth Track Sign Up Form", "", epoch_ms(NOW - timedelta(days=2)))

    assert make_scanner(mailbox).scan() == ["legacy"]
    assert [call[0] for call in mailbox.list_calls] == PATTERNS


def test_no_matches_returns_empty():
    mailbox = FakeMailbox()
    assert make_scanner(mailbox).scan() == []
    assert len(mailbox.list_calls) == 2


def test_window_is_trailing_seven_days():
    mailbox = FakeMailbox()
    mailbox.add("stale", "Growth Track Signup", "", epoch_ms(NOW - timedelta(days=8)))
    mailbox.add("read", "Growth Track Signup", "", epoch_ms(NOW - timedelta(days=1)), unread=False)

    scanner = make_scanner(mailbox)

    assert scanner.scan() == []
    assert mailbox.list_calls[0][1] == NOW - timedelta(days=7)


def test_listing_failure_propagates():
    mailbox = FakeMailbox()
    mailbox.fail_listing = True
    with pytest.raises(ConnectionError):
        make_scanner(mailbox).scan()


def test_requires_a_pattern():
    with pytest.raises(ValueError):
        MailboxScanner(FakeMailbox(), [])
