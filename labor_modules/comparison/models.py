"""Cross-project comparison DTOs (``labor_modules.comparison.models``)."""

from dataclasses import dataclass
from decimal import Decimal

from labor_engines.types import BudgetComparison, ProjectTimeline
from labor_modules.projects.models import Project


@dataclass(frozen=True)
class BudgetSummary:
    budgeted_hours: Decimal
    actual_hours: Decimal
    variance_hours: Decimal


@dataclass(frozen=True)
class ProjectComparison:
    """One project's slice of a cross-project comparison."""

    project: Project
    timeline: ProjectTimeline
    budget_comparison: BudgetComparison
    budget_summary: BudgetSummary
