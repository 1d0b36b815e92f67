"""Tests for email syntax validation."""

import pytest

from lettering.validation import is_valid_email


class TestIsValidEmail:
    """Tests for is_valid_email."""

    @pytest.mark.parametrize(
        "address",
        [
            "user@domain.com",
            "first.last+tag@sub.example.org",
            "USER_1%x@Example.IO",
            "a@b.co",
        ],
    )
    def test_valid_addresses(self, address):
        assert is_valid_email(address) is True

    @pytest.mark.parametrize(
        "address",
        [
            "user@domain",
            "user domain.com",
            "@domain.com",
            "user@domain.c",
            "user@domain.c0m",
            "",
            " user@domain.com",
            "user@domain.com ",
            "user@domain.com\n",
            "contact: user@domain.com",
        ],
    )
    def test_invalid_addresses(self, address):
        """Prefix or suffix matches do not count as valid."""
        assert is_valid_email(address) is False

    def test_top_level_label_length_limit(self):
        assert is_valid_email("user@domain." + "a" * 64)
        assert not is_valid_email("user@domain." + "a" * 65)

    def test_non_string_returns_false(self):
        assert is_valid_email(None) is False
        assert is_valid_email(42) is False
