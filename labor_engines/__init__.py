"""
Module: labor_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines: code
    normalization, actual-hours aggregation, cost-code and area
    reconciliation, and timelines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import labor_kernel.domain and labor_kernel.logging_config.
    MUST NOT import labor_ingestion or labor_modules.

Invariants enforced:
    - Decimal-only arithmetic for hours.
    - Determinism: identical inputs produce identical outputs.
    - No clock access.
"""

from labor_engines.aggregation import (
    cost_code_totals,
    job_cost_code_totals,
    job_totals,
)
from labor_engines.area_comparison import compare_areas, fold_residual
from labor_engines.budget_comparison import align_cost_code_names, compare_cost_codes
from labor_engines.codes import coerce_hours, normalize_cost_code, normalize_job_label
from labor_engines.timeline import (
    build_project_timeline,
    monthly_breakdown,
    monthly_stats,
    project_month,
)
from labor_engines.types import (
    AreaBreakdown,
    AreaComparison,
    AreaConfig,
    AreaTotal,
    BudgetComparison,
    ComparisonRow,
    EmployeeStat,
    JobCostCodeTotals,
    JobTotals,
    MonthlyCategoryRow,
    MonthlyStat,
    ProjectTimeline,
    ResidualPolicy,
    TimelineRow,
)

__all__ = [
    "normalize_cost_code",
    "normalize_job_label",
    "coerce_hours",
    "cost_code_totals",
    "job_totals",
    "job_cost_code_totals",
    "compare_cost_codes",
    "align_cost_code_names",
    "compare_areas",
    "fold_residual",
    "monthly_stats",
    "monthly_breakdown",
    "build_project_timeline",
    "project_month",
    "AreaBreakdown",
    "AreaComparison",
    "AreaConfig",
    "AreaTotal",
    "BudgetComparison",
    "ComparisonRow",
    "EmployeeStat",
    "JobCostCodeTotals",
    "JobTotals",
    "MonthlyCategoryRow",
    "MonthlyStat",
    "ProjectTimeline",
    "ResidualPolicy",
    "TimelineRow",
]
