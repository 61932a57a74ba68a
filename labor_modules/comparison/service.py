"""
Comparison Service (``labor_modules.comparison.service``).

Lays several projects side by side on a project-relative month axis, each
with its cost-code comparison and budget summary.  Read-only.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from labor_engines.timeline import build_project_timeline
from labor_kernel.exceptions import InvalidInputError
from labor_kernel.logging_config import get_logger
from labor_modules.budget.service import BudgetService
from labor_modules.comparison.models import BudgetSummary, ProjectComparison
from labor_modules.repository import LaborRepository, SqlLaborRepository

logger = get_logger("modules.comparison.service")


class ComparisonService:
    """Cross-project timeline comparison."""

    def __init__(
        self,
        session: Session,
        budget_service: BudgetService | None = None,
        repository: LaborRepository | None = None,
    ):
        self._repo = repository or SqlLaborRepository(session)
        self._budgets = budget_service or BudgetService(session, repository=self._repo)

    def timeline_comparison(self, project_ids: Sequence[UUID]) -> list[ProjectComparison]:
        """
        Build one ProjectComparison per project id, in the order given.

        Raises:
            InvalidInputError: empty project list.
            ProjectNotFoundError: any unknown project id.
        """
        if not project_ids:
            raise InvalidInputError("At least one project is required", field="project_ids")

        comparisons = []
        for project_id in project_ids:
            project = self._repo.get_project(project_id)
            timeline = build_project_timeline(
                project_id=str(project.id),
                project_name=project.name,
                entries=self._repo.list_entries(project_id),
            )
            budget = self._budgets.cost_code_comparison(project_id)
            comparisons.append(
                ProjectComparison(
                    project=project,
                    timeline=timeline,
                    budget_comparison=budget,
                    budget_summary=BudgetSummary(
                        budgeted_hours=budget.budgeted_hours,
                        actual_hours=budget.actual_hours,
                        variance_hours=budget.variance_hours,
                    ),
                )
            )

        logger.info(
            "timeline_comparison_built",
            extra={"project_count": len(comparisons)},
        )
        return comparisons
