"""
Value objects shared by parsing, engines and storage.

TimeEntry is the one record the whole tracker revolves around: produced by
the payroll line parser, persisted per upload, and read back by every
aggregation.  It is immutable; stored entries only change through the
repository's whitelisted edit.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

# Fields a stored entry may change after import.
EDITABLE_ENTRY_FIELDS: frozenset[str] = frozenset({"cost_code", "job_description"})


@dataclass(frozen=True)
class TimeEntry:
    """
    One worked-hours line of a certified payroll report.

    Guarantees:
        - hours >= 0.  Negative adjustments never become a TimeEntry.
        - cost_code keeps its raw form; normalization happens at join time.
    """

    employee_name: str
    pay_id: str
    pay_class: str
    union_local: str | None
    certified_class: str
    date: date
    hours: Decimal
    rate: Decimal
    cost_code: str | None
    job_description: str

    def __post_init__(self) -> None:
        if self.hours < 0:
            raise ValueError(f"TimeEntry hours must be non-negative, got {self.hours}")
        if self.rate < 0:
            raise ValueError(f"TimeEntry rate must be non-negative, got {self.rate}")

    @property
    def month(self) -> str:
        """Calendar month key, ``YYYY-MM``."""
        return self.date.isoformat()[:7]
