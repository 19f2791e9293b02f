"""
Unit tests for bulk menu import cell normalization.

Tests cover:
- normalize_name() - lookup keys for restaurants, categories and items
- parse_price() - lenient price parsing
- parse_flag() / parse_availability() - boolean cells
- parse_preparation_time() - leading integer with default
"""
from decimal import Decimal

import pytest

from menu_admin.menu_imports.normalization import (
    normalize_name,
    parse_availability,
    parse_flag,
    parse_preparation_time,
    parse_price,
)


class TestNormalizeName:
    """Tests for normalize_name() function."""

    @pytest.mark.parametrize(
        "input_name,expected",
        [
            ("Burger King", "burger king"),
            ("  burger king  ", "burger king"),
            ("BURGER KING", "burger king"),
            ("\tPizza Hut\n", "pizza hut"),
            ("", ""),
            (None, ""),
            ("   ", ""),
        ],
    )
    @pytest.mark.unit
    def test_normalize_name(self, input_name, expected):
        assert normalize_name(input_name) == expected

    @pytest.mark.unit
    def test_inner_whitespace_is_kept(self):
        """Only the ends are trimmed; 'Burger  King' is a different restaurant."""
        assert normalize_name("Burger  King") != normalize_name("Burger King")


class TestParsePrice:
    """Tests for parse_price() function."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("250", Decimal("250.00")),
            ("₹250", Decimal("250.00")),
            ("1,250.50", Decimal("1250.50")),
            ("$ 9.99", Decimal("9.99")),
            ("99.999", Decimal("100.00")),
            ("1.2.3", Decimal("1.20")),
            (".5", Decimal("0.50")),
            ("0", Decimal("0.00")),
            ("  42  ", Decimal("42.00")),
        ],
    )
    @pytest.mark.unit
    def test_parse_price(self, raw, expected):
        assert parse_price(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", None, "free", "₹", "."])
    @pytest.mark.unit
    def test_unparseable_price_returns_none(self, raw):
        assert parse_price(raw) is None

    @pytest.mark.unit
    def test_currency_abbreviation_dot_is_read_as_decimal_point(self):
        """The dot of "Rs." survives cleaning, so "Rs. 250" reads as 0.25."""
        assert parse_price("Rs. 250") == Decimal("0.25")

    @pytest.mark.unit
    def test_long_digit_string_keeps_every_digit(self):
        """Values wider than the default decimal precision are still returned, not raised."""
        assert parse_price("9" * 40) == Decimal("9" * 40 + ".00")

    @pytest.mark.unit
    def test_minus_sign_is_dropped(self):
        """Only digits and dots survive, so a price can never be negative."""
        assert parse_price("-50") == Decimal("50.00")


class TestBooleanCells:
    """Tests for parse_flag() and parse_availability()."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Yes", True),
            ("yes", True),
            ("TRUE", True),
            ("1", True),
            (" yes ", True),
            ("No", False),
            ("y", False),
            ("", False),
            (None, False),
        ],
    )
    @pytest.mark.unit
    def test_parse_flag(self, raw, expected):
        assert parse_flag(raw) is expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("No", False),
            ("false", False),
            ("0", False),
            (" NO ", False),
            ("Yes", True),
            ("maybe", True),
            ("", True),
            (None, True),
        ],
    )
    @pytest.mark.unit
    def test_parse_availability(self, raw, expected):
        assert parse_availability(raw) is expected


class TestParsePreparationTime:
    """Tests for parse_preparation_time() function."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("20", 20),
            ("20 min", 20),
            (" 5", 5),
            ("12.5", 12),
            ("", 15),
            (None, 15),
            ("quick", 15),
            ("~10", 15),
        ],
    )
    @pytest.mark.unit
    def test_parse_preparation_time(self, raw, expected):
        assert parse_preparation_time(raw, default=15) == expected
