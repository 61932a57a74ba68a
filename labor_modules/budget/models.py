"""
Budget Domain Models (``labor_modules.budget.models``).

Responsibility
--------------
Frozen DTOs for budget uploads: the raw payload as it arrives from a
spreadsheet (or any caller) and the cleaned record as stored.

Invariants enforced
-------------------
* A stored ``BudgetRecord`` only holds normalized cost codes and Decimal
  hours.  ``BudgetPayload`` holds whatever the source supplied; the
  BudgetService cleans it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class BudgetPayload:
    """
    Budget hours as supplied by a spreadsheet or caller, not yet cleaned.

    Keys are raw cost codes / area labels; values may be numbers or
    numeric strings.  ``cost_code_hours`` is required to be non-empty.
    """

    cost_code_hours: dict[Any, Any]
    area_hours: dict[Any, Any] = field(default_factory=dict)
    area_cost_code_hours: dict[Any, dict[Any, Any]] = field(default_factory=dict)
    cost_code_names: dict[Any, Any] = field(default_factory=dict)
    filename: str | None = None


@dataclass(frozen=True)
class BudgetRecord:
    """One stored budget upload for a project; newest wins for comparisons."""

    id: UUID
    project_id: UUID
    filename: str
    upload_date: datetime
    cost_code_hours: dict[str, Decimal]
    area_hours: dict[str, Decimal] = field(default_factory=dict)
    cost_code_names: dict[str, str] = field(default_factory=dict)
    area_cost_code_hours: dict[str, dict[str, Decimal]] = field(default_factory=dict)
