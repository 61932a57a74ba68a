"""
SQLAlchemy ORM persistence models for projects, uploads and time entries.

Invariants enforced
-------------------
* Hours and rates are Decimal columns (exact string storage).
* Every upload and time entry carries its project_id; every time entry
  carries its upload_id.
* Rows are not linked by ORM relationships.  Cascading deletes are
  issued explicitly by ``SqlLaborRepository.delete_project``.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from labor_kernel.db.base import Base, TrackedBase


class ProjectModel(TrackedBase):
    """Maps to the ``Project`` DTO in ``labor_modules.projects.models``."""

    __tablename__ = "projects"

    __table_args__ = (Index("idx_project_created_at", "created_at"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[Decimal | None] = mapped_column(nullable=True)
    size_unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self):
        from labor_modules.projects.models import Project

        return Project(
            id=self.id,
            name=self.name,
            created_at=self.created_at,
            size=self.size,
            size_unit=self.size_unit,
            start_date=self.start_date,
            end_date=self.end_date,
            notes=self.notes,
        )

    def apply_draft(self, draft) -> None:
        self.name = draft.name
        self.size = draft.size
        self.size_unit = draft.size_unit
        self.start_date = draft.start_date
        self.end_date = draft.end_date
        self.notes = draft.notes

    def __repr__(self) -> str:
        return f"<ProjectModel {self.name}>"


class UploadModel(Base):
    """Maps to the ``Upload`` DTO."""

    __tablename__ = "uploads"

    __table_args__ = (Index("idx_upload_project", "project_id"),)

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    upload_date: Mapped[datetime] = mapped_column(nullable=False)
    metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def to_dto(self):
        from labor_modules.projects.models import Upload

        return Upload(
            id=self.id,
            project_id=self.project_id,
            filename=self.filename,
            upload_date=self.upload_date,
            metrics=dict(self.metrics or {}),
        )

    def __repr__(self) -> str:
        return f"<UploadModel {self.filename}>"


class TimeEntryModel(Base):
    """Maps to the ``StoredTimeEntry`` DTO."""

    __tablename__ = "time_entries"

    __table_args__ = (
        Index("idx_time_entry_project_date", "project_id", "date"),
        Index("idx_time_entry_upload", "upload_id"),
    )

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    upload_id: Mapped[UUID] = mapped_column(ForeignKey("uploads.id"), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    pay_id: Mapped[str] = mapped_column(String(10), nullable=False)
    pay_class: Mapped[str] = mapped_column(String(10), nullable=False)
    union_local: Mapped[str | None] = mapped_column(String(10), nullable=True)
    certified_class: Mapped[str] = mapped_column(String(20), nullable=False)
    work_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    hours: Mapped[Decimal] = mapped_column(nullable=False)
    rate: Mapped[Decimal] = mapped_column(nullable=False)
    cost_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    job_description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def to_dto(self):
        from labor_modules.projects.models import StoredTimeEntry

        return StoredTimeEntry(
            id=self.id,
            project_id=self.project_id,
            upload_id=self.upload_id,
            employee_name=self.employee_name,
            pay_id=self.pay_id,
            pay_class=self.pay_class,
            union_local=self.union_local,
            certified_class=self.certified_class,
            date=self.work_date,
            hours=self.hours,
            rate=self.rate,
            cost_code=self.cost_code,
            job_description=self.job_description,
        )

    @classmethod
    def from_entry(cls, entry, project_id: UUID, upload_id: UUID) -> "TimeEntryModel":
        return cls(
            project_id=project_id,
            upload_id=upload_id,
            employee_name=entry.employee_name,
            pay_id=entry.pay_id,
            pay_class=entry.pay_class,
            union_local=entry.union_local,
            certified_class=entry.certified_class,
            work_date=entry.date,
            hours=entry.hours,
            rate=entry.rate,
            cost_code=entry.cost_code,
            job_description=entry.job_description,
        )

    def __repr__(self) -> str:
        return f"<TimeEntryModel {self.employee_name} {self.work_date} {self.hours}h>"
