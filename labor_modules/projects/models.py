"""
Project Domain Models (``labor_modules.projects.models``).

Frozen DTOs for projects, payroll uploads and stored time entries.  ZERO
I/O; returned by the repository and the services.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from labor_kernel.domain.values import TimeEntry


@dataclass(frozen=True)
class Project:
    """A construction project whose payroll hours are tracked."""

    id: UUID
    name: str
    created_at: datetime
    size: Decimal | None = None
    size_unit: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ProjectDraft:
    """Caller-supplied project fields, used for create and full update."""

    name: str
    size: Decimal | None = None
    size_unit: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Upload:
    """One imported payroll file.  metrics holds the parse summary."""

    id: UUID
    project_id: UUID
    filename: str
    upload_date: datetime
    metrics: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredTimeEntry(TimeEntry):
    """A TimeEntry as persisted: tied to its project and upload."""

    id: UUID
    project_id: UUID
    upload_id: UUID
