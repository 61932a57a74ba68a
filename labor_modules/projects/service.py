"""
Project Service (``labor_modules.projects.service``).

Responsibility
--------------
Project CRUD, upload and entry listings, whitelisted entry edits and the
monthly statistics views over a project's stored entries.

Architecture position
---------------------
**Modules layer**.  Reads and writes through ``LaborRepository``; monthly
figures come from ``labor_engines.timeline``.

Invariants enforced
-------------------
* Each public mutating method owns the transaction boundary (``commit`` on
  success, ``rollback`` and re-raise on failure).
* ``created_at`` comes from the injected clock.

Failure modes
-------------
* ``InvalidInputError`` for a blank project name.
* ``ProjectNotFoundError`` / ``EntryNotFoundError`` for unknown ids.
* ``EntryEditNotAllowedError`` for edits outside ``cost_code`` and
  ``job_description``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from labor_engines.timeline import monthly_breakdown, monthly_stats
from labor_engines.types import MonthlyCategoryRow, MonthlyStat
from labor_kernel.domain.clock import Clock, SystemClock
from labor_kernel.exceptions import InvalidInputError
from labor_kernel.logging_config import get_logger
from labor_modules.projects.models import Project, ProjectDraft, StoredTimeEntry, Upload
from labor_modules.repository import LaborRepository, SqlLaborRepository

logger = get_logger("modules.projects.service")


def _checked(draft: ProjectDraft) -> ProjectDraft:
    if not draft.name or not draft.name.strip():
        raise InvalidInputError("Project name is required", field="name")
    return draft


class ProjectService:
    """Sole public entry point for project and entry operations."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        repository: LaborRepository | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._repo = repository or SqlLaborRepository(session)

    # =========================================================================
    # Projects
    # =========================================================================

    def create_project(self, draft: ProjectDraft) -> Project:
        try:
            project = self._repo.create_project(_checked(draft), self._clock.now())
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "project_created",
            extra={"project_id": str(project.id), "project_name": project.name},
        )
        return project

    def get_project(self, project_id: UUID) -> Project:
        return self._repo.get_project(project_id)

    def list_projects(self) -> list[Project]:
        """All projects, newest first."""
        return self._repo.list_projects()

    def update_project(self, project_id: UUID, draft: ProjectDraft) -> Project:
        """Replace every editable project field with the draft's values."""
        try:
            project = self._repo.update_project(project_id, _checked(draft))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info("project_updated", extra={"project_id": str(project_id)})
        return project

    def delete_project(self, project_id: UUID) -> None:
        """Delete a project with its uploads, entries, budgets and area config."""
        try:
            self._repo.delete_project(project_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Uploads and entries
    # =========================================================================

    def list_uploads(self, project_id: UUID) -> list[Upload]:
        self._repo.get_project(project_id)
        return self._repo.list_uploads(project_id)

    def list_entries(self, project_id: UUID) -> list[StoredTimeEntry]:
        self._repo.get_project(project_id)
        return self._repo.list_entries(project_id)

    def edit_entry(self, entry_id: UUID, changes: Mapping[str, Any]) -> StoredTimeEntry:
        """
        Change a stored entry's cost code and/or job description.

        Any other field in ``changes`` rejects the whole edit.
        """
        try:
            entry = self._repo.edit_entry(entry_id, changes)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "time_entry_edited",
            extra={"entry_id": str(entry_id), "fields": sorted(changes)},
        )
        return entry

    # =========================================================================
    # Monthly views
    # =========================================================================

    def monthly_stats(self, project_id: UUID) -> list[MonthlyStat]:
        return monthly_stats(self.list_entries(project_id))

    def monthly_breakdown(self, project_id: UUID) -> list[MonthlyCategoryRow]:
        return monthly_breakdown(self.list_entries(project_id))
