"""
labor_engines.aggregation -- Actual-hours rollups over stored time entries.

Responsibility:
    Reduce a project's time entries to the three actual-side inputs the
    reconciliation engines need: hours per cost code, hours per job label,
    and hours per job label split by cost code.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Entries are handed in by
    the services; nothing here reads the store.

Invariants enforced:
    - Both identifiers go through labor_engines.codes before grouping.
    - An entry whose cost code normalizes to None is left out of
      cost_code_totals only.  It still counts toward job totals, under the
      ``Unspecified`` code in the job x code split.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from labor_engines.codes import normalize_cost_code, normalize_job_label
from labor_engines.types import (
    UNSPECIFIED_CODE,
    ZERO,
    JobCostCodeTotals,
    JobTotals,
)
from labor_kernel.domain.values import TimeEntry
from labor_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")


def cost_code_totals(entries: Iterable[TimeEntry]) -> dict[str, Decimal]:
    """Actual hours keyed by normalized cost code."""
    totals: dict[str, Decimal] = {}
    skipped = 0
    for entry in entries:
        code = normalize_cost_code(entry.cost_code)
        if code is None:
            skipped += 1
            continue
        totals[code] = totals.get(code, ZERO) + entry.hours

    if skipped:
        logger.debug(
            "cost_code_totals_skipped_uncoded",
            extra={"skipped": skipped, "codes": len(totals)},
        )
    return totals


def job_totals(entries: Iterable[TimeEntry]) -> JobTotals:
    """Actual hours keyed by normalized job label."""
    totals: dict[str, Decimal] = {}
    labels: dict[str, str] = {}
    for entry in entries:
        key = normalize_job_label(entry.job_description)
        totals[key] = totals.get(key, ZERO) + entry.hours
        if key not in labels and entry.job_description:
            labels[key] = entry.job_description
    return JobTotals(totals=totals, labels=labels)


def job_cost_code_totals(entries: Iterable[TimeEntry]) -> dict[str, JobCostCodeTotals]:
    """Actual hours per job label, split by normalized cost code."""
    codes_by_job: dict[str, dict[str, Decimal]] = {}
    labels: dict[str, str] = {}
    for entry in entries:
        key = normalize_job_label(entry.job_description)
        code = normalize_cost_code(entry.cost_code) or UNSPECIFIED_CODE
        codes = codes_by_job.setdefault(key, {})
        codes[code] = codes.get(code, ZERO) + entry.hours
        if key not in labels and entry.job_description:
            labels[key] = entry.job_description

    return {
        key: JobCostCodeTotals(
            label=labels.get(key, key),
            cost_codes=codes,
            total=sum(codes.values(), ZERO),
        )
        for key, codes in codes_by_job.items()
    }
