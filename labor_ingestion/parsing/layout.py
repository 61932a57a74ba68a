"""
Payroll report layouts.

A layout is a named bundle of compiled patterns describing one report
format.  The field shapes below are the schema of the certified payroll
report: digit counts and code shapes live here as named constants and are
composed into the line patterns, never written inline elsewhere.

Sample lines of the certified payroll layout::

    4086  Arthur E Stefanick Jr  10/24/23
          J   841       TA01J1       0       2.50      31.68000     79.207552.  Cuy Fal Bld 1 1st Fl     09-170
                                             11/07/23
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from labor_kernel.exceptions import InvalidInputError

# ---------------------------------------------------------------------------
# Field shapes
# ---------------------------------------------------------------------------

UNION_LOCAL = r"\d{4}"
EMPLOYEE_NAME = r"[A-Z][A-Za-z\s.'-]+?"
SHORT_DATE = r"\d{2}/\d{2}/\d{2}"
PAY_CLASS = r"[A-Z]\d?"
PAY_ID = r"\d{3}"
CERTIFIED_CLASS = r"[A-Z]{2}\d{2}[A-Z0-9]{1,2}"
PLACEHOLDER = r"\S+"
# Trailing minus marks a negative adjustment
HOURS = r"[\d.,]+-?"
RATE = r"[\d.,]+"
UNUSED_NUMBER = r"[\d.,]+"
COST_CODE = r"\d{1,2}-\d{2,5}"
# Job text starts at a non-blank character
JOB_TEXT = r"\S.*?"

TOTAL_PHRASE = r"total\s+hours|grand\s+totals?"
NUMERIC_TOKEN = r"\d[\d,]*(?:\.\d+)?|\.\d+"
SHORT_DECIMAL = r"\d+\.\d{1,2}\b"

_ENTRY_COLUMNS = (
    rf"^\s+(?P<pay_class>{PAY_CLASS})"
    rf"\s+(?P<pay_id>{PAY_ID})"
    rf"\s+(?P<certified_class>{CERTIFIED_CLASS})"
    rf"\s+{PLACEHOLDER}"
    rf"\s+(?P<hours>{HOURS})"
    rf"\s+(?P<rate>{RATE})"
    rf"\s+{UNUSED_NUMBER}"
)


@dataclass(frozen=True)
class PayrollLayout:
    """
    Compiled patterns for one payroll report format.

    time_entry requires the trailing cost code; truncated_entry is tried
    only when time_entry fails and captures no cost code.
    """

    name: str
    employee_header: re.Pattern[str]
    standalone_date: re.Pattern[str]
    reported_total: re.Pattern[str]
    time_entry: re.Pattern[str]
    truncated_entry: re.Pattern[str]
    entry_shape: re.Pattern[str]
    short_decimal: re.Pattern[str]
    numeric_token: re.Pattern[str]


CERTIFIED_PAYROLL = PayrollLayout(
    name="certified_payroll",
    employee_header=re.compile(
        rf"^(?P<union_local>{UNION_LOCAL})\s+(?P<employee>{EMPLOYEE_NAME})\s+(?P<date>{SHORT_DATE})"
    ),
    standalone_date=re.compile(rf"^\s+(?P<date>{SHORT_DATE})\s*$"),
    reported_total=re.compile(TOTAL_PHRASE, re.IGNORECASE),
    time_entry=re.compile(
        _ENTRY_COLUMNS + rf"\s+(?P<job>{JOB_TEXT})\s+(?P<cost_code>{COST_CODE})(?=\s|$)"
    ),
    truncated_entry=re.compile(
        _ENTRY_COLUMNS + rf"\s+(?!{COST_CODE}\s*$)(?P<job>{JOB_TEXT})\s*$"
    ),
    entry_shape=re.compile(rf"\b{PAY_CLASS}\s+{PAY_ID}\s+{CERTIFIED_CLASS}\b"),
    short_decimal=re.compile(SHORT_DECIMAL),
    numeric_token=re.compile(NUMERIC_TOKEN),
)

DEFAULT_LAYOUT = CERTIFIED_PAYROLL

LAYOUTS: dict[str, PayrollLayout] = {
    CERTIFIED_PAYROLL.name: CERTIFIED_PAYROLL,
}


def get_layout(name: str) -> PayrollLayout:
    """Look up a registered layout by name."""
    try:
        return LAYOUTS[name]
    except KeyError:
        raise InvalidInputError(
            f"Unknown payroll layout: {name!r} (known: {', '.join(sorted(LAYOUTS))})",
            field="layout",
        ) from None
