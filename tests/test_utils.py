"""Tests for shared utility functions."""

from datetime import timezone

from booking_calendar.utils import is_date_key, is_time_key, normalize_phone, utc_now


class TestNormalizePhone:
    def test_strips_spaces(self):
        assert normalize_phone("0788 123 456") == "0788123456"

    def test_strips_dashes(self):
        assert normalize_phone("0788-123-456") == "0788123456"

    def test_preserves_leading_plus(self):
        assert normalize_phone("+250 788 123 456") == "+250788123456"

    def test_strips_whitespace(self):
        assert normalize_phone("  0788123456  ") == "0788123456"

    def test_mixed_separators(self):
        assert normalize_phone("+250 (788) 123-456") == "+250788123456"


class TestDateAndTimeKeys:
    def test_valid_date_key(self):
        assert is_date_key("2024-06-01")

    def test_date_key_must_be_zero_padded(self):
        assert not is_date_key("2024-6-1")

    def test_impossible_date(self):
        assert not is_date_key("2024-02-30")

    def test_valid_time_key(self):
        assert is_time_key("09:30")

    def test_time_key_must_be_zero_padded(self):
        assert not is_time_key("9:30")

    def test_impossible_time(self):
        assert not is_time_key("24:00")


def test_utc_now_is_timezone_aware():
    assert utc_now().tzinfo == timezone.utc
