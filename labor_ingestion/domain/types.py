"""
labor_ingestion.domain.types -- Pure frozen dataclasses for payroll parsing.

ZERO I/O.  Imports only from labor_kernel.domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from labor_kernel.domain.values import TimeEntry


class LineKind(str, Enum):
    """What the parser decided a single line was."""

    BLANK = "blank"
    EMPLOYEE_HEADER = "employee_header"
    STANDALONE_DATE = "standalone_date"
    REPORTED_TOTAL = "reported_total"
    TIME_ENTRY = "time_entry"
    NEGATIVE_HOURS = "negative_hours"  # entry-shaped, diverted to diagnostics
    INVALID_DATE = "invalid_date"  # entry-shaped, context date not a real day
    ORPHAN_ENTRY = "orphan_entry"  # entry-shaped, no header seen yet; dropped
    SUSPECT = "suspect"  # looked like an entry but did not parse
    NOISE = "noise"


@dataclass(frozen=True)
class ParseContext:
    """
    State carried from one line to the next.

    Only employee-header and standalone-date lines produce a new context;
    every other line hands the context through unchanged.  current_date
    keeps the report's raw ``MM/DD/YY`` form.
    """

    employee_name: str | None = None
    union_local: str | None = None
    current_date: str | None = None

    @property
    def ready(self) -> bool:
        """True once both an employee and a date are known."""
        return bool(self.employee_name) and bool(self.current_date)


@dataclass(frozen=True)
class LineOutcome:
    """Result of one step of the scan."""

    kind: LineKind
    context: ParseContext
    entry: TimeEntry | None = None
    diagnostic: str | None = None
    detected_total: Decimal | None = None


@dataclass(frozen=True)
class ParseResult:
    """Output of one parse: entries in source order plus audit material."""

    entries: tuple[TimeEntry, ...]
    ignored_lines: tuple[str, ...]
    detected_totals: tuple[Decimal, ...]
    layout_name: str = "certified_payroll"
    kind_counts: dict[str, int] = field(default_factory=dict)
