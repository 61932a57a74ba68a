"""
Tests for cost-code and job-label normalization.

Covers:
- Hyphen insertion and leading-zero repair
- Decimal suffix truncation and stray characters
- Numeric (spreadsheet) inputs
- Idempotence
- Job label normalization
- Hours coercion
"""

from decimal import Decimal

import pytest

from labor_engines.codes import (
    UNSPECIFIED_LABEL,
    coerce_hours,
    normalize_cost_code,
    normalize_job_label,
)


class TestNormalizeCostCode:
    """Canonical CC-NNN keys."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1200", "01-200"),
            ("09-170", "09-170"),
            ("10240", "10-240"),
            ("0917", "09-17"),
            ("100", "100"),
            ("9", "9"),
            ("9-1", "9-1"),
        ],
    )
    def test_canonical_forms(self, raw, expected):
        assert normalize_cost_code(raw) == expected

    def test_leading_zero_restored_for_four_digits(self):
        """A 4-digit code with nonzero lead lost its zero in a spreadsheet."""
        assert normalize_cost_code("2150") == "02-150"

    def test_five_digits_split_without_padding(self):
        assert normalize_cost_code("12345") == "12-345"

    def test_text_after_decimal_point_dropped(self):
        assert normalize_cost_code("09-170.5") == "09-170"
        assert normalize_cost_code("1200.00") == "01-200"

    def test_numeric_cell_values(self):
        assert normalize_cost_code(1200) == "01-200"
        assert normalize_cost_code(1200.0) == "01-200"
        assert normalize_cost_code(10240) == "10-240"

    def test_stray_characters_removed(self):
        assert normalize_cost_code(" CC 09-170 ") == "09-170"
        assert normalize_cost_code("#1200") == "01-200"

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", ".5", "N/A"])
    def test_nothing_usable_is_none(self, raw):
        assert normalize_cost_code(raw) is None

    @pytest.mark.parametrize("raw", ["1200", "09-170", "10240", "0917", "100", 1200.0, "x9-9"])
    def test_idempotent(self, raw):
        once = normalize_cost_code(raw)
        assert normalize_cost_code(once) == once

    def test_hyphenated_codes_are_not_split_again(self):
        assert normalize_cost_code("01-200") == "01-200"


class TestNormalizeJobLabel:
    """Area / job label keys."""

    def test_trim_and_lowercase(self):
        assert normalize_job_label("  Bldg 1 ") == "bldg 1"

    def test_internal_spacing_kept(self):
        assert normalize_job_label("Cuy Fal  Bld 1") == "cuy fal  bld 1"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_unspecified(self, raw):
        assert normalize_job_label(raw) == UNSPECIFIED_LABEL

    def test_numbers_accepted(self):
        assert normalize_job_label(12) == "12"


class TestCoerceHours:
    """Budget hours values from cells and payloads."""

    def test_numbers(self):
        assert coerce_hours(12) == Decimal("12")
        assert coerce_hours(Decimal("2.50")) == Decimal("2.50")
        assert coerce_hours(7.5) == Decimal("7.5")

    def test_numeric_strings(self):
        assert coerce_hours(" 40 ") == Decimal("40")
        assert coerce_hours("1,250.5") == Decimal("1250.5")

    def test_negative_values_kept(self):
        assert coerce_hours("-3") == Decimal("-3")

    @pytest.mark.parametrize("raw", [None, "", "  ", "abc", "12abc", "NaN", "Infinity", True])
    def test_non_numeric_is_none(self, raw):
        assert coerce_hours(raw) is None
