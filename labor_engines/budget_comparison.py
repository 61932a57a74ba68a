"""
labor_engines.budget_comparison -- Budget vs. actual hours per cost code.

Responsibility:
    Join actual hours by cost code against one budget record's hours by
    cost code and emit one ComparisonRow per code in the union.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by labor_modules.budget.service and
    labor_modules.comparison.service.

Invariants enforced:
    - Both sides are keyed through normalize_cost_code before the join.
      The function is idempotent, so already-normalized input is unchanged.
    - A code present on one side only yields a row with the other side 0.
    - Rows are sorted by cost code.
    - variance_percent is None exactly when budget_hours == 0.

Failure modes:
    InvalidInputError when actual_by_code is missing.
    None for data.  Keys that normalize to None are dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from labor_engines.codes import normalize_cost_code
from labor_engines.tracer import traced_engine
from labor_engines.types import ZERO, BudgetComparison, ComparisonRow
from labor_kernel.exceptions import InvalidInputError
from labor_kernel.logging_config import get_logger

logger = get_logger("engines.budget_comparison")


def _rekey(hours_by_code: Mapping[str, Decimal] | None) -> dict[str, Decimal]:
    merged: dict[str, Decimal] = {}
    for raw_code, hours in (hours_by_code or {}).items():
        code = normalize_cost_code(raw_code)
        if code is None:
            continue
        merged[code] = merged.get(code, ZERO) + hours
    return merged


def align_cost_code_names(names: Mapping[str, str] | None) -> dict[str, str]:
    """Names keyed by normalized code; the first non-blank name per code wins."""
    aligned: dict[str, str] = {}
    for raw_code, name in (names or {}).items():
        code = normalize_cost_code(raw_code)
        clean = str(name).strip() if name is not None else ""
        if code is None or not clean or code in aligned:
            continue
        aligned[code] = clean
    return aligned


@traced_engine(
    "budget_comparison",
    "1.0",
    fingerprint_fields=("actual_by_code", "budget_by_code"),
)
def compare_cost_codes(
    *,
    actual_by_code: Mapping[str, Decimal],
    budget_by_code: Mapping[str, Decimal] | None,
    cost_code_names: Mapping[str, str] | None = None,
) -> BudgetComparison:
    """
    Build the cost-code comparison for one project.

    Args:
        actual_by_code: Actual hours per cost code (see
            labor_engines.aggregation.cost_code_totals).
        budget_by_code: Budget hours per cost code from the latest budget
            record, or None when the project has no budget yet.
        cost_code_names: Optional display names per cost code.

    Returns:
        BudgetComparison with rows sorted by code and summary totals.
    """
    if actual_by_code is None:
        raise InvalidInputError("Actual hours by cost code are required", field="actual_by_code")
    actual = _rekey(actual_by_code)
    budget = _rekey(budget_by_code)
    names = align_cost_code_names(cost_code_names)

    rows = tuple(
        ComparisonRow(
            key=code,
            label=names.get(code),
            budget_hours=budget.get(code, ZERO),
            actual_hours=actual.get(code, ZERO),
        )
        for code in sorted(set(actual) | set(budget))
    )

    logger.info(
        "cost_code_comparison_built",
        extra={
            "row_count": len(rows),
            "actual_only": len(set(actual) - set(budget)),
            "budget_only": len(set(budget) - set(actual)),
        },
    )
    return BudgetComparison(rows=rows, cost_code_names=names)
