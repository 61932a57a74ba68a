"""Budget Module (``labor_modules.budget``): budget uploads and area configuration."""

from labor_modules.budget.models import BudgetPayload, BudgetRecord

__all__ = ["BudgetPayload", "BudgetRecord"]
