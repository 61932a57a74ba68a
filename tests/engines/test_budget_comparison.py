"""
Tests for the cost-code budget/actual comparison engine.

Covers:
- Union of codes, missing side at zero
- Normalization on both sides before the join
- Variance and variance percent
- Names and summary totals
- Engine trace logging
"""

from decimal import Decimal

import pytest

from labor_engines.budget_comparison import align_cost_code_names, compare_cost_codes
from labor_engines.types import ComparisonRow
from labor_kernel.exceptions import InvalidInputError


class TestCompareCostCodes:
    """Row construction."""

    def test_union_of_codes_sorted(self):
        result = compare_cost_codes(
            actual_by_code={"09-170": Decimal("10"), "02-100": Decimal("4")},
            budget_by_code={"09-170": Decimal("12"), "05-500": Decimal("6")},
        )

        assert [r.key for r in result.rows] == ["02-100", "05-500", "09-170"]

    def test_missing_sides_are_zero(self):
        result = compare_cost_codes(
            actual_by_code={"02-100": Decimal("4")},
            budget_by_code={"05-500": Decimal("6")},
        )
        rows = {r.key: r for r in result.rows}

        assert rows["02-100"].budget_hours == Decimal("0")
        assert rows["02-100"].actual_hours == Decimal("4")
        assert rows["05-500"].actual_hours == Decimal("0")
        assert rows["05-500"].budget_hours == Decimal("6")

    def test_budget_codes_normalized_before_join(self):
        """A spreadsheet code 1200 meets a payroll code 01-200."""
        result = compare_cost_codes(
            actual_by_code={"01-200": Decimal("5")},
            budget_by_code={"1200": Decimal("8")},
        )

        assert len(result.rows) == 1
        row = result.rows[0]
        assert row.key == "01-200"
        assert row.budget_hours == Decimal("8")
        assert row.actual_hours == Decimal("5")

    def test_codes_merging_after_normalization_are_summed(self):
        result = compare_cost_codes(
            actual_by_code={},
            budget_by_code={"1200": Decimal("8"), "01-200": Decimal("2")},
        )

        assert result.rows[0].budget_hours == Decimal("10")

    def test_unusable_codes_dropped(self):
        result = compare_cost_codes(
            actual_by_code={"09-170": Decimal("1")},
            budget_by_code={"n/a": Decimal("8")},
        )

        assert [r.key for r in result.rows] == ["09-170"]

    def test_no_budget(self):
        result = compare_cost_codes(
            actual_by_code={"09-170": Decimal("3")},
            budget_by_code=None,
        )

        assert result.rows[0].budget_hours == Decimal("0")
        assert result.rows[0].variance_percent is None

    def test_empty_inputs(self):
        result = compare_cost_codes(actual_by_code={}, budget_by_code={})
        assert result.rows == ()
        assert result.budgeted_hours == Decimal("0")

    def test_missing_actuals_rejected(self):
        with pytest.raises(InvalidInputError) as exc_info:
            compare_cost_codes(actual_by_code=None, budget_by_code={"09-170": Decimal("8")})
        assert exc_info.value.field == "actual_by_code"


class TestVariance:
    """variance = actual - budget, percent relative to budget."""

    def test_over_budget(self):
        row = ComparisonRow(key="09-170", budget_hours=Decimal("10"), actual_hours=Decimal("12"))
        assert row.variance_hours == Decimal("2")
        assert row.variance_percent == Decimal("20")

    def test_under_budget(self):
        row = ComparisonRow(key="09-170", budget_hours=Decimal("8"), actual_hours=Decimal("6"))
        assert row.variance_hours == Decimal("-2")
        assert row.variance_percent == Decimal("-25")

    def test_zero_budget_has_no_percent(self):
        row = ComparisonRow(key="09-170", budget_hours=Decimal("0"), actual_hours=Decimal("6"))
        assert row.variance_hours == Decimal("6")
        assert row.variance_percent is None

    def test_to_dict(self):
        row = ComparisonRow(key="09-170", budget_hours=Decimal("10"), actual_hours=Decimal("5"), label="Drywall")
        data = row.to_dict()
        assert data["key"] == "09-170"
        assert data["label"] == "Drywall"
        assert data["variance_hours"] == Decimal("-5")
        assert data["variance_percent"] == Decimal("-50")


class TestNamesAndTotals:
    """Display names and summary totals."""

    def test_names_aligned_to_normalized_codes(self):
        result = compare_cost_codes(
            actual_by_code={"01-200": Decimal("5")},
            budget_by_code={"1200": Decimal("8")},
            cost_code_names={"1200": " Framing "},
        )

        assert result.rows[0].label == "Framing"
        assert result.cost_code_names == {"01-200": "Framing"}

    def test_first_non_blank_name_wins(self):
        names = align_cost_code_names({"1200": "", "01-200": "Framing", "01200": "Other"})
        assert names == {"01-200": "Framing"}

    def test_summary_totals(self):
        result = compare_cost_codes(
            actual_by_code={"09-170": Decimal("12"), "02-100": Decimal("3")},
            budget_by_code={"09-170": Decimal("10"), "05-500": Decimal("5")},
        )

        assert result.budgeted_hours == Decimal("15")
        assert result.actual_hours == Decimal("15")
        assert result.variance_hours == Decimal("0")


class TestTracing:
    """LABOR_ENGINE_TRACE emission."""

    def test_trace_emitted_with_fingerprint(self, captured_logs):
        compare_cost_codes(actual_by_code={"09-170": Decimal("1")}, budget_by_code={})

        traces = [r for r in captured_logs() if r["message"] == "LABOR_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "budget_comparison"
        assert len(traces[0]["input_fingerprint"]) == 16

    def test_fingerprint_stable_for_equal_inputs(self, captured_logs):
        compare_cost_codes(actual_by_code={"09-170": Decimal("1.0")}, budget_by_code={})
        compare_cost_codes(actual_by_code={"09-170": Decimal("1")}, budget_by_code={})

        traces = [r for r in captured_logs() if r["message"] == "LABOR_ENGINE_TRACE"]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]
