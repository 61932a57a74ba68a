"""
labor_engines.types -- Frozen value objects produced by the pure engines.

All hours are Decimal.  Mappings held by these objects are never mutated
after construction; engines build fresh dicts and hand them over.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Synthetic breakdown codes
ADJUSTMENT_CODE = "Adjustment"
BUDGET_ONLY_CODE = "Budget"
UNSPECIFIED_CODE = "Unspecified"


class ResidualPolicy(str, Enum):
    """How an area's unallocated budget is folded into its cost-code breakdown."""

    LAST = "last"
    PROPORTIONAL = "proportional"


@dataclass(frozen=True)
class ComparisonRow:
    """
    One budget-vs-actual line, keyed by cost code or area key.

    variance_hours and variance_percent are derived, so
    ``variance_hours == actual_hours - budget_hours`` holds by construction
    and ``variance_percent is None`` exactly when ``budget_hours == 0``.
    """

    key: str
    budget_hours: Decimal
    actual_hours: Decimal
    label: str | None = None

    @property
    def variance_hours(self) -> Decimal:
        return self.actual_hours - self.budget_hours

    @property
    def variance_percent(self) -> Decimal | None:
        if self.budget_hours == ZERO:
            return None
        return self.variance_hours / self.budget_hours * HUNDRED

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "budget_hours": self.budget_hours,
            "actual_hours": self.actual_hours,
            "variance_hours": self.variance_hours,
            "variance_percent": self.variance_percent,
        }


@dataclass(frozen=True)
class BudgetComparison:
    """Cost-code comparison rows, sorted by code, with summary totals."""

    rows: tuple[ComparisonRow, ...]
    cost_code_names: dict[str, str] = field(default_factory=dict)

    @property
    def budgeted_hours(self) -> Decimal:
        return sum((r.budget_hours for r in self.rows), ZERO)

    @property
    def actual_hours(self) -> Decimal:
        return sum((r.actual_hours for r in self.rows), ZERO)

    @property
    def variance_hours(self) -> Decimal:
        return self.actual_hours - self.budgeted_hours


@dataclass(frozen=True)
class AreaTotal:
    """Hours for one area on one side of the comparison."""

    key: str
    label: str
    hours: Decimal


@dataclass(frozen=True)
class AreaBreakdown:
    """Per-cost-code breakdown of one area row."""

    entries: tuple[ComparisonRow, ...]
    total_budget: Decimal

    @property
    def total_actual(self) -> Decimal:
        return sum((e.actual_hours for e in self.entries), ZERO)


@dataclass(frozen=True)
class AreaConfig:
    """
    User-declared area aliases and manual adjustments for one project.

    mappings: normalized budget label -> actual area key.
    budget_adjustments / actual_adjustments: area label -> hours added to
    that side's total.
    """

    mappings: dict[str, str] = field(default_factory=dict)
    budget_adjustments: dict[str, Decimal] = field(default_factory=dict)
    actual_adjustments: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class AreaComparison:
    """Area-level comparison with nested per-area cost-code breakdowns."""

    rows: tuple[ComparisonRow, ...]
    budget_areas: tuple[AreaTotal, ...]
    actual_areas: tuple[AreaTotal, ...]
    breakdowns: dict[str, AreaBreakdown]
    config: AreaConfig


@dataclass(frozen=True)
class JobTotals:
    """Actual hours per normalized job label, with first-seen display labels."""

    totals: dict[str, Decimal]
    labels: dict[str, str]


@dataclass(frozen=True)
class JobCostCodeTotals:
    """Actual hours of one job label split by normalized cost code."""

    label: str
    cost_codes: dict[str, Decimal]
    total: Decimal


@dataclass(frozen=True)
class MonthlyStat:
    month: str
    total_hours: Decimal
    employee_count: int
    average_daily_employees: Decimal


@dataclass(frozen=True)
class MonthlyCategoryRow:
    month: str
    cost_code: str | None
    pay_class: str
    job_description: str
    employee_name: str
    total_hours: Decimal


@dataclass(frozen=True)
class TimelineRow:
    """Hours of one (calendar month, project month, code, class, job, employee) group."""

    project_id: str
    project_name: str
    calendar_month: str
    project_month: int
    cost_code: str | None
    pay_class: str
    job_description: str
    employee_name: str
    total_hours: Decimal


@dataclass(frozen=True)
class EmployeeStat:
    unique_employees: int
    average_daily_employees: Decimal


@dataclass(frozen=True)
class ProjectTimeline:
    """
    Entries of one project laid on a relative month axis.

    project_months and calendar_months hold employee statistics keyed by
    project month number and ``YYYY-MM`` respectively.
    """

    project_id: str
    rows: tuple[TimelineRow, ...]
    project_start_date: date | None
    project_months: dict[int, EmployeeStat]
    calendar_months: dict[str, EmployeeStat]
