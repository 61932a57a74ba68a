"""
Record store interface (``labor_modules.repository``).

Responsibility
--------------
The narrow persistence surface the services depend on: projects, uploads,
time entries, budget records and area configuration, all addressed by
project id.  ``LaborRepository`` is the protocol; ``SqlLaborRepository``
implements it over a SQLAlchemy session.

Architecture position
---------------------
**Modules layer**.  Engines never see this module; services read through
it, hand plain DTOs to the engines, and write results back through it.

Invariants enforced
-------------------
* The repository never commits.  Each service method owns its transaction.
* Lists of projects, uploads and budgets come back newest first; entries
  come back ordered by date, then employee name.
* A stored entry can only change the fields in EDITABLE_ENTRY_FIELDS.
* Deleting a project deletes its uploads, entries, budgets and area
  configuration.
* Area mappings and adjustments are merged into what is stored, never
  replaced wholesale.

Failure modes
-------------
* ``ProjectNotFoundError`` / ``EntryNotFoundError`` for unknown ids.
* ``EntryEditNotAllowedError`` for edits outside the whitelist.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from labor_engines.types import AreaConfig
from labor_kernel.domain.values import EDITABLE_ENTRY_FIELDS, TimeEntry
from labor_kernel.exceptions import (
    EntryEditNotAllowedError,
    EntryNotFoundError,
    ProjectNotFoundError,
    RecordNotFoundError,
)
from labor_kernel.logging_config import get_logger
from labor_modules.budget.models import BudgetRecord
from labor_modules.budget.orm import AreaConfigModel, BudgetRecordModel, hours_to_json
from labor_modules.projects.models import Project, ProjectDraft, StoredTimeEntry, Upload
from labor_modules.projects.orm import ProjectModel, TimeEntryModel, UploadModel

logger = get_logger("modules.repository")


@runtime_checkable
class LaborRepository(Protocol):
    """Persistence operations the tracker's services rely on."""

    # Projects
    def create_project(self, draft: ProjectDraft, created_at: datetime) -> Project: ...
    def get_project(self, project_id: UUID) -> Project: ...
    def list_projects(self) -> list[Project]: ...
    def update_project(self, project_id: UUID, draft: ProjectDraft) -> Project: ...
    def delete_project(self, project_id: UUID) -> None: ...

    # Uploads
    def create_upload(
        self,
        project_id: UUID,
        filename: str,
        upload_date: datetime,
        metrics: Mapping[str, Any] | None = None,
    ) -> Upload: ...
    def record_upload_metrics(self, upload_id: UUID, metrics: Mapping[str, Any]) -> Upload: ...
    def list_uploads(self, project_id: UUID) -> list[Upload]: ...

    # Time entries
    def add_entries(
        self, project_id: UUID, upload_id: UUID, entries: Iterable[TimeEntry]
    ) -> int: ...
    def list_entries(self, project_id: UUID) -> list[StoredTimeEntry]: ...
    def edit_entry(self, entry_id: UUID, changes: Mapping[str, Any]) -> StoredTimeEntry: ...

    # Budgets
    def add_budget(self, record: BudgetRecord) -> BudgetRecord: ...
    def list_budgets(self, project_id: UUID) -> list[BudgetRecord]: ...
    def latest_budget(self, project_id: UUID) -> BudgetRecord | None: ...

    # Area configuration
    def get_area_config(self, project_id: UUID) -> AreaConfig: ...
    def save_area_mappings(self, project_id: UUID, mappings: Mapping[str, str]) -> AreaConfig: ...
    def save_area_adjustments(
        self,
        project_id: UUID,
        budget_adjustments: Mapping[str, Decimal] | None = None,
        actual_adjustments: Mapping[str, Decimal] | None = None,
    ) -> AreaConfig: ...


class SqlLaborRepository:
    """``LaborRepository`` over a SQLAlchemy session."""

    def __init__(self, session: Session):
        self._session = session

    # =========================================================================
    # Projects
    # =========================================================================

    def _project_model(self, project_id: UUID) -> ProjectModel:
        model = self._session.get(ProjectModel, project_id)
        if model is None:
            raise ProjectNotFoundError(project_id)
        return model

    def create_project(self, draft: ProjectDraft, created_at: datetime) -> Project:
        model = ProjectModel(id=uuid4(), created_at=created_at)
        model.apply_draft(draft)
        self._session.add(model)
        self._session.flush()
        return model.to_dto()

    def get_project(self, project_id: UUID) -> Project:
        return self._project_model(project_id).to_dto()

    def list_projects(self) -> list[Project]:
        rows = self._session.scalars(
            select(ProjectModel).order_by(ProjectModel.created_at.desc())
        ).all()
        return [row.to_dto() for row in rows]

    def update_project(self, project_id: UUID, draft: ProjectDraft) -> Project:
        model = self._project_model(project_id)
        model.apply_draft(draft)
        self._session.flush()
        return model.to_dto()

    def delete_project(self, project_id: UUID) -> None:
        model = self._project_model(project_id)
        counts = {}
        for table in (TimeEntryModel, UploadModel, BudgetRecordModel, AreaConfigModel):
            result = self._session.execute(
                delete(table).where(table.project_id == project_id)
            )
            counts[table.__tablename__] = result.rowcount
        self._session.delete(model)
        self._session.flush()
        logger.info(
            "project_deleted",
            extra={"project_id": str(project_id), "cascaded": counts},
        )

    # =========================================================================
    # Uploads
    # =========================================================================

    def create_upload(
        self,
        project_id: UUID,
        filename: str,
        upload_date: datetime,
        metrics: Mapping[str, Any] | None = None,
    ) -> Upload:
        self._project_model(project_id)
        model = UploadModel(
            id=uuid4(),
            project_id=project_id,
            filename=filename,
            upload_date=upload_date,
            metrics=dict(metrics or {}),
        )
        self._session.add(model)
        self._session.flush()
        return model.to_dto()

    def record_upload_metrics(self, upload_id: UUID, metrics: Mapping[str, Any]) -> Upload:
        model = self._session.get(UploadModel, upload_id)
        if model is None:
            raise RecordNotFoundError(f"Upload not found: {upload_id}")
        model.metrics = dict(metrics)
        self._session.flush()
        return model.to_dto()

    def list_uploads(self, project_id: UUID) -> list[Upload]:
        rows = self._session.scalars(
            select(UploadModel)
            .where(UploadModel.project_id == project_id)
            .order_by(UploadModel.upload_date.desc())
        ).all()
        return [row.to_dto() for row in rows]

    # =========================================================================
    # Time entries
    # =========================================================================

    def add_entries(
        self, project_id: UUID, upload_id: UUID, entries: Iterable[TimeEntry]
    ) -> int:
        models = [
            TimeEntryModel.from_entry(entry, project_id=project_id, upload_id=upload_id)
            for entry in entries
        ]
        self._session.add_all(models)
        self._session.flush()
        return len(models)

    def list_entries(self, project_id: UUID) -> list[StoredTimeEntry]:
        rows = self._session.scalars(
            select(TimeEntryModel)
            .where(TimeEntryModel.project_id == project_id)
            .order_by(TimeEntryModel.work_date, TimeEntryModel.employee_name)
        ).all()
        return [row.to_dto() for row in rows]

    def edit_entry(self, entry_id: UUID, changes: Mapping[str, Any]) -> StoredTimeEntry:
        rejected = sorted(set(changes) - EDITABLE_ENTRY_FIELDS)
        if rejected:
            raise EntryEditNotAllowedError(
                tuple(rejected), tuple(sorted(EDITABLE_ENTRY_FIELDS))
            )

        model = self._session.get(TimeEntryModel, entry_id)
        if model is None:
            raise EntryNotFoundError(entry_id)

        if "cost_code" in changes:
            code = changes["cost_code"]
            cleaned = "" if code is None else str(code).strip()
            model.cost_code = cleaned or None
        if "job_description" in changes:
            description = changes["job_description"]
            model.job_description = "" if description is None else str(description).strip()
        self._session.flush()
        return model.to_dto()

    # =========================================================================
    # Budgets
    # =========================================================================

    def add_budget(self, record: BudgetRecord) -> BudgetRecord:
        self._project_model(record.project_id)
        model = BudgetRecordModel.from_dto(record)
        self._session.add(model)
        self._session.flush()
        return model.to_dto()

    def list_budgets(self, project_id: UUID) -> list[BudgetRecord]:
        rows = self._session.scalars(
            select(BudgetRecordModel)
            .where(BudgetRecordModel.project_id == project_id)
            .order_by(BudgetRecordModel.upload_date.desc())
        ).all()
        return [row.to_dto() for row in rows]

    def latest_budget(self, project_id: UUID) -> BudgetRecord | None:
        row = self._session.scalars(
            select(BudgetRecordModel)
            .where(BudgetRecordModel.project_id == project_id)
            .order_by(BudgetRecordModel.upload_date.desc())
            .limit(1)
        ).first()
        return row.to_dto() if row is not None else None

    # =========================================================================
    # Area configuration
    # =========================================================================

    def _area_model(self, project_id: UUID) -> AreaConfigModel | None:
        return self._session.scalars(
            select(AreaConfigModel).where(AreaConfigModel.project_id == project_id)
        ).first()

    def _area_model_for_write(self, project_id: UUID) -> AreaConfigModel:
        model = self._area_model(project_id)
        if model is None:
            self._project_model(project_id)
            model = AreaConfigModel(
                id=uuid4(),
                project_id=project_id,
                mappings={},
                budget_adjustments={},
                actual_adjustments={},
            )
            self._session.add(model)
        return model

    def get_area_config(self, project_id: UUID) -> AreaConfig:
        model = self._area_model(project_id)
        return model.to_config() if model is not None else AreaConfig()

    def save_area_mappings(self, project_id: UUID, mappings: Mapping[str, str]) -> AreaConfig:
        model = self._area_model_for_write(project_id)
        model.mappings = {**(model.mappings or {}), **{str(k): str(v) for k, v in mappings.items()}}
        self._session.flush()
        return model.to_config()

    def save_area_adjustments(
        self,
        project_id: UUID,
        budget_adjustments: Mapping[str, Decimal] | None = None,
        actual_adjustments: Mapping[str, Decimal] | None = None,
    ) -> AreaConfig:
        model = self._area_model_for_write(project_id)
        model.budget_adjustments = {
            **(model.budget_adjustments or {}),
            **hours_to_json(dict(budget_adjustments or {})),
        }
        model.actual_adjustments = {
            **(model.actual_adjustments or {}),
            **hours_to_json(dict(actual_adjustments or {})),
        }
        self._session.flush()
        return model.to_config()
