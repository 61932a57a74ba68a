"""
Budget Service (``labor_modules.budget.service``).

Responsibility
--------------
Cleans and stores budget uploads, keeps each project's area configuration,
and produces the two budget/actual views: per cost code and per area.

Architecture position
---------------------
**Modules layer**.  Reads stored entries and budgets through
``LaborRepository`` and hands plain mappings to
``labor_engines.budget_comparison`` / ``labor_engines.area_comparison``.

Invariants enforced
-------------------
* Stored budget cost codes are normalized; hours are Decimal.  Non-numeric
  hours are skipped, never coerced to zero.
* Comparisons always use the newest budget record.
* Each public mutating method owns the transaction boundary.

Failure modes
-------------
* ``InvalidInputError`` when the payload has no cost-code hours, when none
  of its codes survives normalization, or when an adjustment is not a
  number.
* ``ProjectNotFoundError`` for unknown projects.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from labor_engines.aggregation import cost_code_totals, job_cost_code_totals, job_totals
from labor_engines.area_comparison import compare_areas
from labor_engines.budget_comparison import align_cost_code_names, compare_cost_codes
from labor_engines.codes import coerce_hours, normalize_cost_code
from labor_engines.types import AreaComparison, AreaConfig, BudgetComparison, ResidualPolicy
from labor_kernel.domain.clock import Clock, SystemClock
from labor_kernel.exceptions import InvalidInputError
from labor_kernel.logging_config import LogContext, get_logger
from labor_modules.budget.models import BudgetPayload, BudgetRecord
from labor_modules.repository import LaborRepository, SqlLaborRepository

logger = get_logger("modules.budget.service")

DEFAULT_BUDGET_FILENAME = "Budget Upload"


def _clean_code_hours(raw: Mapping[Any, Any]) -> tuple[dict[str, Decimal], int]:
    """Normalized code -> summed hours, plus the number of skipped items."""
    cleaned: dict[str, Decimal] = {}
    skipped = 0
    for raw_code, raw_hours in raw.items():
        code = normalize_cost_code(raw_code)
        hours = coerce_hours(raw_hours)
        if code is None or hours is None:
            skipped += 1
            continue
        cleaned[code] = cleaned.get(code, Decimal("0")) + hours
    return cleaned, skipped


def _clean_area_hours(raw: Mapping[Any, Any]) -> dict[str, Decimal]:
    cleaned: dict[str, Decimal] = {}
    for label, raw_hours in raw.items():
        area = str(label).strip() if label is not None else ""
        hours = coerce_hours(raw_hours)
        if not area or hours is None:
            continue
        cleaned[area] = cleaned.get(area, Decimal("0")) + hours
    return cleaned


def _clean_adjustments(raw: Mapping[str, Any] | None, field: str) -> dict[str, Decimal]:
    cleaned: dict[str, Decimal] = {}
    for label, value in (raw or {}).items():
        area = str(label).strip()
        if not area:
            continue
        hours = coerce_hours(value)
        if hours is None:
            raise InvalidInputError(
                f"Adjustment for {area!r} is not a number: {value!r}", field=field
            )
        cleaned[area] = hours
    return cleaned


class BudgetService:
    """Budget uploads, area configuration and budget/actual comparisons."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        residual_policy: ResidualPolicy = ResidualPolicy.LAST,
        repository: LaborRepository | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._residual_policy = residual_policy
        self._repo = repository or SqlLaborRepository(session)

    # =========================================================================
    # Budget uploads
    # =========================================================================

    def record_budget(self, project_id: UUID, payload: BudgetPayload) -> BudgetRecord:
        """
        Clean a budget payload and store it as the project's newest budget.

        Preconditions:
            - ``payload.cost_code_hours`` is a non-empty mapping.

        Postconditions:
            - Returns the stored BudgetRecord with normalized cost codes.

        Raises:
            InvalidInputError: no cost-code data, or no valid code in it.
            ProjectNotFoundError: unknown project.
        """
        raw_codes = getattr(payload, "cost_code_hours", None)
        if not isinstance(raw_codes, Mapping) or not raw_codes:
            raise InvalidInputError(
                "Budget payload has no cost code hours", field="cost_code_hours"
            )

        cost_code_hours, skipped = _clean_code_hours(raw_codes)
        if not cost_code_hours:
            raise InvalidInputError(
                "Budget payload has no valid cost codes", field="cost_code_hours"
            )

        area_cost_code_hours: dict[str, dict[str, Decimal]] = {}
        for label, codes in (payload.area_cost_code_hours or {}).items():
            area = str(label).strip() if label is not None else ""
            if not area or not isinstance(codes, Mapping):
                continue
            cleaned, _ = _clean_code_hours(codes)
            if cleaned:
                area_cost_code_hours[area] = cleaned

        record = BudgetRecord(
            id=uuid4(),
            project_id=project_id,
            filename=(payload.filename or "").strip() or DEFAULT_BUDGET_FILENAME,
            upload_date=self._clock.now(),
            cost_code_hours=cost_code_hours,
            area_hours=_clean_area_hours(payload.area_hours or {}),
            cost_code_names=align_cost_code_names(payload.cost_code_names),
            area_cost_code_hours=area_cost_code_hours,
        )

        with LogContext.bind(project_id=str(project_id)):
            try:
                stored = self._repo.add_budget(record)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise
            logger.info(
                "budget_recorded",
                extra={
                    "budget_id": str(stored.id),
                    "budget_filename": stored.filename,
                    "cost_codes": len(stored.cost_code_hours),
                    "skipped_codes": skipped,
                    "areas": len(stored.area_hours),
                },
            )
        return stored

    def list_budgets(self, project_id: UUID) -> list[BudgetRecord]:
        self._repo.get_project(project_id)
        return self._repo.list_budgets(project_id)

    # =========================================================================
    # Area configuration
    # =========================================================================

    def get_area_config(self, project_id: UUID) -> AreaConfig:
        self._repo.get_project(project_id)
        return self._repo.get_area_config(project_id)

    def save_area_mappings(self, project_id: UUID, mappings: Mapping[str, str]) -> AreaConfig:
        """Merge budget-area -> actual-area aliases into the stored ones."""
        if not isinstance(mappings, Mapping):
            raise InvalidInputError("Area mappings must be a mapping", field="mappings")
        cleaned = {
            str(src).strip(): str(dst).strip()
            for src, dst in mappings.items()
            if src is not None and dst is not None and str(src).strip() and str(dst).strip()
        }
        try:
            config = self._repo.save_area_mappings(project_id, cleaned)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "area_mappings_saved",
            extra={"project_id": str(project_id), "mapping_count": len(config.mappings)},
        )
        return config

    def save_area_adjustments(
        self,
        project_id: UUID,
        budget_adjustments: Mapping[str, Any] | None = None,
        actual_adjustments: Mapping[str, Any] | None = None,
    ) -> AreaConfig:
        """Merge manual per-area hour adjustments into the stored ones."""
        budget = _clean_adjustments(budget_adjustments, "budget_adjustments")
        actual = _clean_adjustments(actual_adjustments, "actual_adjustments")
        try:
            config = self._repo.save_area_adjustments(project_id, budget, actual)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "area_adjustments_saved",
            extra={
                "project_id": str(project_id),
                "budget_adjustments": len(config.budget_adjustments),
                "actual_adjustments": len(config.actual_adjustments),
            },
        )
        return config

    # =========================================================================
    # Comparisons
    # =========================================================================

    def cost_code_comparison(self, project_id: UUID) -> BudgetComparison:
        """Budget vs. actual hours per normalized cost code, newest budget."""
        self._repo.get_project(project_id)
        entries = self._repo.list_entries(project_id)
        budget = self._repo.latest_budget(project_id)
        return compare_cost_codes(
            actual_by_code=cost_code_totals(entries),
            budget_by_code=budget.cost_code_hours if budget else None,
            cost_code_names=budget.cost_code_names if budget else None,
        )

    def area_comparison(self, project_id: UUID) -> AreaComparison:
        """Budget vs. actual hours per area, with per-area cost-code breakdowns."""
        self._repo.get_project(project_id)
        entries = self._repo.list_entries(project_id)
        budget = self._repo.latest_budget(project_id)
        return compare_areas(
            job_totals=job_totals(entries),
            job_cost_codes=job_cost_code_totals(entries),
            budget_area_hours=budget.area_hours if budget else None,
            budget_area_cost_code_hours=budget.area_cost_code_hours if budget else None,
            config=self._repo.get_area_config(project_id),
            residual_policy=self._residual_policy,
        )
