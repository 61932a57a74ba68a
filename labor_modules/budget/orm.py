"""
SQLAlchemy ORM persistence models for budgets and area configuration.

Hour mappings are stored as JSON objects whose values are Decimal strings,
so hours survive the round trip exactly.  JSON columns are always replaced
wholesale, never mutated in place.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from labor_kernel.db.base import Base


def hours_to_json(hours: dict[str, Decimal]) -> dict[str, str]:
    return {str(k): str(v) for k, v in hours.items()}


def hours_from_json(raw: dict[str, Any] | None) -> dict[str, Decimal]:
    return {k: Decimal(str(v)) for k, v in (raw or {}).items()}


class BudgetRecordModel(Base):
    """Maps to the ``BudgetRecord`` DTO in ``labor_modules.budget.models``."""

    __tablename__ = "budget_records"

    __table_args__ = (Index("idx_budget_record_project", "project_id", "upload_date"),)

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    upload_date: Mapped[datetime] = mapped_column(nullable=False)
    cost_code_hours: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    area_hours: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    cost_code_names: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    area_cost_code_hours: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )

    def to_dto(self):
        from labor_modules.budget.models import BudgetRecord

        return BudgetRecord(
            id=self.id,
            project_id=self.project_id,
            filename=self.filename,
            upload_date=self.upload_date,
            cost_code_hours=hours_from_json(self.cost_code_hours),
            area_hours=hours_from_json(self.area_hours),
            cost_code_names=dict(self.cost_code_names or {}),
            area_cost_code_hours={
                area: hours_from_json(codes)
                for area, codes in (self.area_cost_code_hours or {}).items()
            },
        )

    @classmethod
    def from_dto(cls, dto) -> "BudgetRecordModel":
        return cls(
            id=dto.id,
            project_id=dto.project_id,
            filename=dto.filename,
            upload_date=dto.upload_date,
            cost_code_hours=hours_to_json(dto.cost_code_hours),
            area_hours=hours_to_json(dto.area_hours),
            cost_code_names=dict(dto.cost_code_names),
            area_cost_code_hours={
                area: hours_to_json(codes)
                for area, codes in dto.area_cost_code_hours.items()
            },
        )

    def __repr__(self) -> str:
        return f"<BudgetRecordModel {self.filename} {self.upload_date}>"


class AreaConfigModel(Base):
    """One row per project holding area mappings and manual adjustments."""

    __tablename__ = "area_configs"

    __table_args__ = (UniqueConstraint("project_id", name="uq_area_config_project"),)

    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"), nullable=False)
    mappings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    budget_adjustments: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    actual_adjustments: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )

    def to_config(self):
        from labor_engines.types import AreaConfig

        return AreaConfig(
            mappings=dict(self.mappings or {}),
            budget_adjustments=hours_from_json(self.budget_adjustments),
            actual_adjustments=hours_from_json(self.actual_adjustments),
        )

    def __repr__(self) -> str:
        return f"<AreaConfigModel project={self.project_id}>"
