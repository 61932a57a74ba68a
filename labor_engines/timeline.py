"""
labor_engines.timeline -- Monthly statistics and relative project timelines.

Responsibility:
    Turn a project's time entries into calendar-month statistics, a
    monthly category breakdown, and a timeline on a project-relative month
    axis so projects that started at different dates can be compared.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - project_month = floor(days since the project's first entry / 30.44) + 1,
      so the first entry always falls in project month 1.
    - Average daily employees = mean over worked days of distinct employees
      on that day, rounded half-up to 2 places.
    - Hours are summed exactly; no rounding on totals.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

from labor_engines.tracer import traced_engine
from labor_engines.types import (
    ZERO,
    EmployeeStat,
    MonthlyCategoryRow,
    MonthlyStat,
    ProjectTimeline,
    TimelineRow,
)
from labor_kernel.domain.values import TimeEntry

AVERAGE_MONTH_DAYS = Decimal("30.44")
AVERAGE_QUANTUM = Decimal("0.01")


def project_month(entry_date: date, start: date) -> int:
    """1-based month number of ``entry_date`` counted from ``start``."""
    days = Decimal((entry_date - start).days)
    return int((days / AVERAGE_MONTH_DAYS).to_integral_value(rounding=ROUND_FLOOR)) + 1


class _DayTally:
    """Distinct employees overall and per worked day within one bucket."""

    def __init__(self) -> None:
        self.employees: set[str] = set()
        self.days: dict[date, set[str]] = {}

    def add(self, entry: TimeEntry) -> None:
        self.employees.add(entry.employee_name)
        self.days.setdefault(entry.date, set()).add(entry.employee_name)

    def average_daily(self) -> Decimal:
        if not self.days:
            return ZERO.quantize(AVERAGE_QUANTUM)
        counts = sum(len(names) for names in self.days.values())
        return (Decimal(counts) / Decimal(len(self.days))).quantize(
            AVERAGE_QUANTUM, rounding=ROUND_HALF_UP
        )

    def stat(self) -> EmployeeStat:
        return EmployeeStat(
            unique_employees=len(self.employees),
            average_daily_employees=self.average_daily(),
        )


def monthly_stats(entries: Iterable[TimeEntry]) -> list[MonthlyStat]:
    """Hours, head count and average daily head count per calendar month."""
    hours: dict[str, Decimal] = {}
    tallies: dict[str, _DayTally] = {}
    for entry in entries:
        hours[entry.month] = hours.get(entry.month, ZERO) + entry.hours
        tallies.setdefault(entry.month, _DayTally()).add(entry)

    return [
        MonthlyStat(
            month=month,
            total_hours=hours[month],
            employee_count=len(tallies[month].employees),
            average_daily_employees=tallies[month].average_daily(),
        )
        for month in sorted(hours)
    ]


def monthly_breakdown(entries: Iterable[TimeEntry]) -> list[MonthlyCategoryRow]:
    """Hours per (month, cost code, pay class, job, employee), ordered by month."""
    totals: dict[tuple, Decimal] = {}
    for entry in entries:
        key = (
            entry.month,
            entry.cost_code,
            entry.pay_class,
            entry.job_description,
            entry.employee_name,
        )
        totals[key] = totals.get(key, ZERO) + entry.hours

    rows = [
        MonthlyCategoryRow(
            month=month,
            cost_code=cost_code,
            pay_class=pay_class,
            job_description=job,
            employee_name=employee,
            total_hours=total,
        )
        for (month, cost_code, pay_class, job, employee), total in totals.items()
    ]
    # Stable: first-seen order is kept within a month
    rows.sort(key=lambda r: r.month)
    return rows


@traced_engine("project_timeline", "1.0", fingerprint_fields=("project_id",))
def build_project_timeline(
    *,
    project_id: str,
    project_name: str,
    entries: Sequence[TimeEntry],
) -> ProjectTimeline:
    """
    Lay one project's entries on a project-relative month axis.

    An empty entry list yields an empty timeline with no start date.
    """
    if not entries:
        return ProjectTimeline(
            project_id=project_id,
            rows=(),
            project_start_date=None,
            project_months={},
            calendar_months={},
        )

    start = min(e.date for e in entries)
    totals: dict[tuple, Decimal] = {}
    by_project_month: dict[int, _DayTally] = {}
    by_calendar_month: dict[str, _DayTally] = {}

    for entry in entries:
        month_no = project_month(entry.date, start)
        by_project_month.setdefault(month_no, _DayTally()).add(entry)
        by_calendar_month.setdefault(entry.month, _DayTally()).add(entry)

        key = (
            entry.month,
            month_no,
            entry.cost_code,
            entry.pay_class,
            entry.job_description,
            entry.employee_name,
        )
        totals[key] = totals.get(key, ZERO) + entry.hours

    rows = [
        TimelineRow(
            project_id=project_id,
            project_name=project_name,
            calendar_month=calendar_month,
            project_month=month_no,
            cost_code=cost_code,
            pay_class=pay_class,
            job_description=job,
            employee_name=employee,
            total_hours=total,
        )
        for (calendar_month, month_no, cost_code, pay_class, job, employee), total
        in totals.items()
    ]
    rows.sort(key=lambda r: r.project_month)

    return ProjectTimeline(
        project_id=project_id,
        rows=tuple(rows),
        project_start_date=start,
        project_months={k: t.stat() for k, t in sorted(by_project_month.items())},
        calendar_months={k: t.stat() for k, t in sorted(by_calendar_month.items())},
    )
