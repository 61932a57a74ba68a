"""
Module: labor_ingestion.parsing.parser
Responsibility: Turn the ordered text lines of a certified payroll report
    into TimeEntry records, ignored-line diagnostics, and the totals the
    report states about itself.
Architecture position: Ingestion > Parsing.  Pure: no I/O, no clock.
    Adapters supply the lines; services persist the result.

The scan is a fold.  ``step`` takes the current ParseContext and one line
and returns a LineOutcome holding the next context plus at most one entry,
one diagnostic or one detected total.  ``parse_lines`` threads the context
through every line in order.

Classification, first match wins:
    1. employee header   -> new context (union local, employee, date)
    2. standalone date   -> new context (date only)
    3. reported total    -> first numeric token, kept when > 0
    4. time entry        -> strict pattern, then truncated pattern
    5. anything else     -> diagnostic if entry-shaped, otherwise dropped

Invariants enforced:
    - hours >= 0 on every emitted entry.  A trailing-minus hours token
      produces no entry and one "(ignored negative hours)" diagnostic.
    - An entry-shaped line seen before any header is dropped silently.
    - Malformed lines never raise.  Only a missing line sequence or
      layout is an error (InvalidInputError).
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from datetime import date
from decimal import Decimal, InvalidOperation

from labor_ingestion.domain.types import LineKind, LineOutcome, ParseContext, ParseResult
from labor_ingestion.parsing.layout import DEFAULT_LAYOUT, PayrollLayout
from labor_kernel.domain.values import TimeEntry
from labor_kernel.exceptions import InvalidInputError
from labor_kernel.logging_config import get_logger

logger = get_logger("ingestion.parser")

CENTURY_PIVOT = 50
NEGATIVE_HOURS_NOTE = "(ignored negative hours)"
INVALID_DATE_NOTE = "(invalid date)"

_NOT_NUMERIC = re.compile(r"[^\d.]")


def convert_date(text: str) -> date:
    """
    ``MM/DD/YY`` to a calendar date; YY below the pivot is 20YY, else 19YY.

    Raises:
        ValueError: if the fields do not form a real calendar date.
    """
    month, day, year = (int(part) for part in text.strip().split("/"))
    century = 2000 if year < CENTURY_PIVOT else 1900
    return date(century + year, month, day)


def to_decimal(text: str | None) -> Decimal:
    """Keep only digits and '.', then convert; empty or unparseable is 0."""
    cleaned = _NOT_NUMERIC.sub("", text or "")
    if not cleaned:
        return Decimal("0")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def _entry_outcome(
    line: str,
    match: re.Match[str],
    context: ParseContext,
) -> LineOutcome:
    if not context.ready:
        return LineOutcome(kind=LineKind.ORPHAN_ENTRY, context=context)

    hours_token = match["hours"]
    if hours_token.endswith("-"):
        return LineOutcome(
            kind=LineKind.NEGATIVE_HOURS,
            context=context,
            diagnostic=f"{line.strip()} {NEGATIVE_HOURS_NOTE}",
        )

    try:
        entry_date = convert_date(context.current_date)
    except ValueError:
        return LineOutcome(
            kind=LineKind.INVALID_DATE,
            context=context,
            diagnostic=f"{line.strip()} {INVALID_DATE_NOTE}",
        )

    entry = TimeEntry(
        employee_name=context.employee_name,
        pay_id=match["pay_id"],
        pay_class=match["pay_class"],
        union_local=context.union_local,
        certified_class=match["certified_class"],
        date=entry_date,
        hours=to_decimal(hours_token),
        rate=to_decimal(match["rate"]),
        cost_code=match.groupdict().get("cost_code"),
        job_description=match["job"].strip(),
    )
    return LineOutcome(kind=LineKind.TIME_ENTRY, context=context, entry=entry)


def step(
    context: ParseContext,
    line: str,
    layout: PayrollLayout = DEFAULT_LAYOUT,
) -> LineOutcome:
    """Classify one line against ``context`` and return the outcome."""
    if not line or not line.strip():
        return LineOutcome(kind=LineKind.BLANK, context=context)

    header = layout.employee_header.match(line)
    if header:
        return LineOutcome(
            kind=LineKind.EMPLOYEE_HEADER,
            context=ParseContext(
                employee_name=header["employee"].strip(),
                union_local=header["union_local"],
                current_date=header["date"],
            ),
        )

    date_only = layout.standalone_date.match(line)
    if date_only:
        return LineOutcome(
            kind=LineKind.STANDALONE_DATE,
            context=ParseContext(
                employee_name=context.employee_name,
                union_local=context.union_local,
                current_date=date_only["date"],
            ),
        )

    if layout.reported_total.search(line):
        token = layout.numeric_token.search(line)
        value = to_decimal(token.group(0)) if token else Decimal("0")
        return LineOutcome(
            kind=LineKind.REPORTED_TOTAL,
            context=context,
            detected_total=value if value > 0 else None,
        )

    match = layout.time_entry.match(line) or layout.truncated_entry.match(line)
    if match:
        return _entry_outcome(line, match, context)

    if layout.entry_shape.search(line) and layout.short_decimal.search(line):
        return LineOutcome(kind=LineKind.SUSPECT, context=context, diagnostic=line.strip())

    return LineOutcome(kind=LineKind.NOISE, context=context)


def parse_lines(
    lines: Iterable[str],
    layout: PayrollLayout = DEFAULT_LAYOUT,
) -> ParseResult:
    """
    Parse an ordered sequence of report lines.

    Always returns a (possibly partial) ParseResult; bad lines end up in
    ignored_lines or are dropped.
    """
    if lines is None:
        raise InvalidInputError("Report lines are required", field="lines")
    if layout is None:
        raise InvalidInputError("A payroll layout is required", field="layout")

    context = ParseContext()
    entries: list[TimeEntry] = []
    ignored: list[str] = []
    totals: list[Decimal] = []
    kinds: Counter[str] = Counter()

    for line in lines:
        outcome = step(context, line, layout)
        context = outcome.context
        kinds[outcome.kind.value] += 1
        if outcome.entry is not None:
            entries.append(outcome.entry)
        if outcome.diagnostic is not None:
            ignored.append(outcome.diagnostic)
        if outcome.detected_total is not None:
            totals.append(outcome.detected_total)

    logger.info(
        "payroll_parse_completed",
        extra={
            "layout": layout.name,
            "entry_count": len(entries),
            "ignored_count": len(ignored),
            "detected_total_count": len(totals),
            "orphan_count": kinds.get(LineKind.ORPHAN_ENTRY.value, 0),
        },
    )
    return ParseResult(
        entries=tuple(entries),
        ignored_lines=tuple(ignored),
        detected_totals=tuple(totals),
        layout_name=layout.name,
        kind_counts=dict(kinds),
    )
