"""
labor_engines.area_comparison -- Budget vs. actual hours per area (job label).

Responsibility:
    Reconcile budgeted area hours against actual job-label hours, after
    applying user-declared area aliases and manual adjustments, and break
    every area down by cost code.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by labor_modules.budget.service.

Invariants enforced:
    - Area labels on both sides go through normalize_job_label; budget
      cost codes go through normalize_cost_code.
    - Mappings alias a normalized budget label onto an actual area key.
      Unmapped labels keep their own key.
    - Adjustments add to the side's area total AND appear as an
      ``Adjustment`` code in that area's breakdown.
    - Rows are sorted by display label, then key.
    - Breakdown entries are sorted by cost code.  When an area has a
      positive budget, the breakdown's budget column sums exactly to the
      area's budget: either a synthetic ``Budget`` entry carries the whole
      amount (no codes at all), or the residual is folded in per
      ResidualPolicy.

Failure modes:
    InvalidInputError when job_totals or job_cost_codes is missing.
    None for data.

Residual policies:
    LAST          residual added to the last entry in cost-code order.
    PROPORTIONAL  residual spread over entries by their budget weight,
                  quantized to 0.01 with the rounding remainder on the last
                  weighted entry.  Falls back to LAST when no entry carries
                  budget.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from decimal import Decimal

from labor_engines.codes import normalize_cost_code, normalize_job_label
from labor_engines.tracer import traced_engine
from labor_engines.types import (
    ADJUSTMENT_CODE,
    BUDGET_ONLY_CODE,
    UNSPECIFIED_CODE,
    ZERO,
    AreaBreakdown,
    AreaComparison,
    AreaConfig,
    AreaTotal,
    ComparisonRow,
    JobCostCodeTotals,
    JobTotals,
    ResidualPolicy,
)
from labor_kernel.exceptions import InvalidInputError
from labor_kernel.logging_config import get_logger

logger = get_logger("engines.area_comparison")

RESIDUAL_QUANTUM = Decimal("0.01")


def fold_residual(
    entries: Sequence[ComparisonRow],
    residual: Decimal,
    policy: ResidualPolicy = ResidualPolicy.LAST,
) -> tuple[ComparisonRow, ...]:
    """
    Return ``entries`` with ``residual`` budget hours folded in.

    The sum of budget_hours grows by exactly ``residual`` under every policy.
    """
    folded = list(entries)
    if not folded or residual == ZERO:
        return tuple(folded)

    if policy is ResidualPolicy.PROPORTIONAL:
        weighted = [i for i, e in enumerate(folded) if e.budget_hours > ZERO]
        total_weight = sum((folded[i].budget_hours for i in weighted), ZERO)
        if total_weight > ZERO:
            allocated = ZERO
            for position, i in enumerate(weighted):
                if position == len(weighted) - 1:
                    # Last weighted entry takes the rounding remainder
                    share = residual - allocated
                else:
                    share = (
                        residual * folded[i].budget_hours / total_weight
                    ).quantize(RESIDUAL_QUANTUM)
                    allocated += share
                folded[i] = replace(
                    folded[i], budget_hours=folded[i].budget_hours + share
                )
            return tuple(folded)

    last = folded[-1]
    folded[-1] = replace(last, budget_hours=last.budget_hours + residual)
    return tuple(folded)


def _add(bucket: dict[str, Decimal], key: str, hours: Decimal) -> None:
    bucket[key] = bucket.get(key, ZERO) + hours


def _breakdown(
    actual_codes: Mapping[str, Decimal],
    budget_codes: Mapping[str, Decimal],
    budget_total: Decimal,
    policy: ResidualPolicy,
) -> AreaBreakdown:
    entries: tuple[ComparisonRow, ...] = tuple(
        ComparisonRow(
            key=code,
            budget_hours=budget_codes.get(code, ZERO),
            actual_hours=actual_codes.get(code, ZERO),
        )
        for code in sorted(set(actual_codes) | set(budget_codes))
    )

    if budget_total > ZERO:
        if not entries:
            entries = (
                ComparisonRow(
                    key=BUDGET_ONLY_CODE,
                    budget_hours=budget_total,
                    actual_hours=ZERO,
                ),
            )
        else:
            allocated = sum((e.budget_hours for e in entries), ZERO)
            entries = fold_residual(entries, budget_total - allocated, policy)

    return AreaBreakdown(entries=entries, total_budget=budget_total)


@traced_engine(
    "area_comparison",
    "1.0",
    fingerprint_fields=("budget_area_hours", "budget_area_cost_code_hours"),
)
def compare_areas(
    *,
    job_totals: JobTotals,
    job_cost_codes: Mapping[str, JobCostCodeTotals],
    budget_area_hours: Mapping[str, Decimal] | None,
    budget_area_cost_code_hours: Mapping[str, Mapping[str, Decimal]] | None,
    config: AreaConfig | None = None,
    residual_policy: ResidualPolicy = ResidualPolicy.LAST,
) -> AreaComparison:
    """
    Build the area comparison for one project.

    Args:
        job_totals: Actual hours per normalized job label.
        job_cost_codes: Actual hours per job label split by cost code.
        budget_area_hours: Budget hours per raw area label.
        budget_area_cost_code_hours: Budget hours per raw area label and
            raw cost code.
        config: Area aliases and manual adjustments.
        residual_policy: How unallocated area budget enters the breakdown.
    """
    if job_totals is None:
        raise InvalidInputError("Actual job totals are required", field="job_totals")
    if job_cost_codes is None:
        raise InvalidInputError(
            "Actual job cost-code totals are required", field="job_cost_codes"
        )

    config = config or AreaConfig()
    mappings = {
        normalize_job_label(src): normalize_job_label(dst)
        for src, dst in config.mappings.items()
    }

    def target(key: str) -> str:
        return mappings.get(key, key)

    # Actual side
    actual_totals: dict[str, Decimal] = dict(job_totals.totals)
    actual_codes: dict[str, dict[str, Decimal]] = {}
    for label, data in job_cost_codes.items():
        bucket = actual_codes.setdefault(normalize_job_label(label), {})
        for code, hours in data.cost_codes.items():
            _add(bucket, code or UNSPECIFIED_CODE, hours)

    # Budget side
    budget_areas = tuple(
        AreaTotal(key=normalize_job_label(label), label=str(label), hours=hours)
        for label, hours in (budget_area_hours or {}).items()
    )
    budget_codes: dict[str, dict[str, Decimal]] = {}
    for label, codes in (budget_area_cost_code_hours or {}).items():
        bucket = budget_codes.setdefault(target(normalize_job_label(label)), {})
        for code, hours in codes.items():
            _add(bucket, normalize_cost_code(code) or UNSPECIFIED_CODE, hours)

    labels: dict[str, str] = dict(job_totals.labels)
    budget_totals: dict[str, Decimal] = {}
    for area in budget_areas:
        key = target(area.key)
        _add(budget_totals, key, area.hours)
        labels.setdefault(key, area.label)

    # Manual adjustments
    for label, hours in config.budget_adjustments.items():
        key = normalize_job_label(label)
        _add(budget_totals, key, hours)
        _add(budget_codes.setdefault(key, {}), ADJUSTMENT_CODE, hours)
        labels.setdefault(key, str(label))
    for label, hours in config.actual_adjustments.items():
        key = normalize_job_label(label)
        _add(actual_totals, key, hours)
        _add(actual_codes.setdefault(key, {}), ADJUSTMENT_CODE, hours)
        labels.setdefault(key, str(label))

    rows = sorted(
        (
            ComparisonRow(
                key=key,
                label=labels.get(key, key),
                budget_hours=budget_totals.get(key, ZERO),
                actual_hours=actual_totals.get(key, ZERO),
            )
            for key in set(budget_totals) | set(actual_totals)
        ),
        key=lambda r: (r.label.lower(), r.key),
    )

    breakdowns = {
        row.key: _breakdown(
            actual_codes.get(row.key, {}),
            budget_codes.get(row.key, {}),
            row.budget_hours,
            residual_policy,
        )
        for row in rows
    }

    actual_areas = tuple(
        sorted(
            (
                AreaTotal(key=key, label=job_totals.labels.get(key, key), hours=hours)
                for key, hours in job_totals.totals.items()
            ),
            key=lambda a: (a.label.lower(), a.key),
        )
    )

    logger.info(
        "area_comparison_built",
        extra={
            "row_count": len(rows),
            "mapping_count": len(mappings),
            "residual_policy": residual_policy.value,
        },
    )
    return AreaComparison(
        rows=tuple(rows),
        budget_areas=budget_areas,
        actual_areas=actual_areas,
        breakdowns=breakdowns,
        config=config,
    )
