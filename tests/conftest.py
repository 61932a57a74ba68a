"""
Pytest fixtures for the payroll hours tracker test suite.

Provides:
- An in-memory SQLite database per test (engine, tables, session)
- A deterministic clock
- Structured-log capture
- Small builders for time entries and report lines
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from labor_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from labor_kernel.domain.clock import DeterministicClock
from labor_kernel.domain.values import TimeEntry
from labor_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Lines of a two-employee certified payroll report, layout mode.
SAMPLE_REPORT_LINES = [
    "CERTIFIED PAYROLL REPORT                      Week Ending 10/28/23",
    "",
    "4086  Arthur E Stefanick Jr  10/24/23",
    "      J   841       TA01J1       0       2.50      31.68000     79.207552.  Cuy Fal Bld 1 1st Fl     09-170",
    "      J   841       TA01J1       0       5.50      31.68000     174.24000.  Cuy Fal Bld 1 1st Fl     09-170",
    "                                             10/25/23",
    "      J   841       TA01J1       0       8.00      31.68000     253.44000.  Cuy Fal Bld 2",
    "1501  Maria Lopez  10/24/23",
    "      A1  302       CL02B        0       8.00      28.50000     228.00000.  Site Prep     02-100",
    "      A1  302       CL02B        0       1.00-     28.50000     28.50000.  Site Prep     02-100",
    "      A1  302       CL02B  see office 4.5",
    "Total Hours:   24.00",
]


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture labor_tracker logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "budget_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("labor_tracker")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with every table created."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture
def session(engine):
    s = get_session()
    yield s
    s.close()


@pytest.fixture
def clock():
    return DeterministicClock(datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Builders
# =============================================================================


def make_entry(
    hours="8",
    cost_code="09-170",
    job="Bldg 1",
    employee="Arthur Smith",
    work_date=date(2023, 10, 24),
    pay_class="J",
    rate="31.68",
) -> TimeEntry:
    return TimeEntry(
        employee_name=employee,
        pay_id="841",
        pay_class=pay_class,
        union_local="4086",
        certified_class="TA01J1",
        date=work_date,
        hours=Decimal(hours),
        rate=Decimal(rate),
        cost_code=cost_code,
        job_description=job,
    )


@pytest.fixture
def entry_factory():
    return make_entry


@pytest.fixture
def sample_report_lines() -> list[str]:
    return list(SAMPLE_REPORT_LINES)
