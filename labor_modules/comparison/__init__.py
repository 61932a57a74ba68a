"""Cross-project comparison (``labor_modules.comparison``)."""

from labor_modules.comparison.models import BudgetSummary, ProjectComparison

__all__ = ["BudgetSummary", "ProjectComparison"]
