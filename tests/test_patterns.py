"""Tests for the built-in PII detectors."""

import pytest

from dictate_privacy import patterns
from dictate_privacy.patterns import (
    EMAIL_PLACEHOLDER,
    NUMBER_SEQUENCE_PLACEHOLDER,
    PHONE_PLACEHOLDER,
    detect_any,
    detect_categories,
    get_pattern,
    replace_all,
)


class TestEmailDetector:
    """Tests for the email detector."""

    @pytest.mark.parametrize(
        "text",
        [
            "a@b.com",
            "reach me at Taro.Yamada+work@example.co.jp please",
            "USER_1%x@MAIL-SERVER.ORG",
            "連絡先はtanaka@example.jpです",
        ],
    )
    def test_detects_email(self, text):
        """Test that common email shapes are detected, including inside Japanese text."""
        assert detect_any("email", text) is True

    @pytest.mark.parametrize("text", ["user@localhost", "@example.com", "a@b.c", "no email here"])
    def test_ignores_non_email(self, text):
        """Test that strings without a 2+ letter TLD or local part are not detected."""
        assert detect_any("email", text) is False

    def test_replace_all_emails(self):
        """Test that every email is replaced with the email placeholder."""
        result = replace_all("email", "a@b.com and C@D.ORG")
        assert result == f"{EMAIL_PLACEHOLDER} and {EMAIL_PLACEHOLDER}"


class TestPhoneDetector:
    """Tests for the permissive phone detector."""

    @pytest.mark.parametrize(
        "text",
        [
            "090-1234-5678",
            "+81 90 1234 5678",
            "(03) 1234 5678",
            "03-1234-5678",
            "１２３４５６７８",  # full-width digits
        ],
    )
    def test_detects_phone_like_sequences(self, text):
        """Test that phone numbers in several layouts are detected."""
        assert detect_any("phone", text) is True

    def test_replaces_whole_phone_number(self):
        """Test that the whole number, separators included, becomes one placeholder."""
        result = replace_all("phone", "call 090-1234-5678")
        assert result == f"call {PHONE_PLACEHOLDER}"

    def test_permissive_on_short_numeric_groups(self):
        """Test that date-like numbers are caught too: recall over precision."""
        assert detect_any("phone", "2024 10") is True

    def test_ignores_text_without_digits(self):
        """Test that plain text is never matched."""
        assert detect_any("phone", "こんにちは、元気ですか") is False

    def test_single_digits_not_matched(self):
        """Test that isolated short numbers are left alone."""
        assert detect_any("phone", "room 7") is False


class TestNumberSequenceDetector:
    """Tests for the long digit run detector."""

    def test_detects_six_or_more_digits(self):
        """Test the 6-digit threshold."""
        assert detect_any("number_sequence", "123456") is True
        assert detect_any("number_sequence", "12345") is False

    def test_replace_all_digit_runs(self):
        """Test that each run is replaced once regardless of its length."""
        result = replace_all("number_sequence", "ID 123456789 and 9876543")
        assert result == f"ID {NUMBER_SEQUENCE_PLACEHOLDER} and {NUMBER_SEQUENCE_PLACEHOLDER}"


class TestPatternLibrary:
    """Tests for shared detector behavior."""

    def test_pattern_compiled_once(self):
        """Test that repeated lookups return the same compiled object."""
        assert get_pattern("email") is get_pattern("email")

    def test_unknown_category_raises(self):
        """Test that an unknown category raises ValueError."""
        with pytest.raises(ValueError, match="Unknown PII category"):
            detect_any("address", "anything")
        with pytest.raises(ValueError, match="Unknown PII category"):
            replace_all("address", "anything")

    def test_custom_placeholder(self):
        """Test that an explicit placeholder is used verbatim, backslashes included."""
        assert replace_all("email", "a@b.com", placeholder=r"[\1]") == r"[\1]"

    def test_detect_categories(self):
        """Test that every matching category is reported."""
        flagged = detect_categories("mail a@b.com, ID 1234567")
        assert flagged == frozenset({"email", "phone", "number_sequence"})

    def test_detect_categories_empty(self):
        """Test that clean text reports no categories."""
        assert detect_categories("今日は良い天気です") == frozenset()

    def test_placeholders_contain_nothing_detectable(self):
        """Test that placeholder tokens never trigger a detector."""
        for placeholder in patterns.PLACEHOLDERS.values():
            assert detect_categories(placeholder) == frozenset()
