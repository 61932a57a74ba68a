"""
Parse summary: what the parser found versus what the report says.

Nothing here corrects anything.  The summary only puts parsed hours next to
the report's own total and lists the lines that need a human look.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from labor_ingestion.domain.types import ParseResult
from labor_kernel.exceptions import InvalidInputError


@dataclass(frozen=True)
class ParseSummary:
    """
    Audit view of one parse.

    detected_total_hours is the largest total the report states (reports
    restate totals at several levels; the grand total is the largest), or
    None when the report states none.
    """

    parsed_hours: Decimal
    detected_total_hours: Decimal | None
    ignored_lines: tuple[str, ...]
    entry_count: int

    @property
    def difference(self) -> Decimal | None:
        """detected - parsed, or None without a detected total."""
        if self.detected_total_hours is None:
            return None
        return self.detected_total_hours - self.parsed_hours

    def to_metrics(self) -> dict[str, Any]:
        """JSON-safe form stored on the upload record."""
        return {
            "parsed_hours": str(self.parsed_hours),
            "detected_total_hours": (
                None
                if self.detected_total_hours is None
                else str(self.detected_total_hours)
            ),
            "ignored_lines": list(self.ignored_lines),
            "entry_count": self.entry_count,
        }


def summarize(result: ParseResult) -> ParseSummary:
    if result is None:
        raise InvalidInputError("A parse result is required", field="result")
    parsed = sum((e.hours for e in result.entries), Decimal("0"))
    detected = max(result.detected_totals) if result.detected_totals else None
    return ParseSummary(
        parsed_hours=parsed,
        detected_total_hours=detected,
        ignored_lines=result.ignored_lines,
        entry_count=len(result.entries),
    )
