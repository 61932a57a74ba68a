"""Payroll report text parsing and parse summaries."""

from labor_ingestion.parsing.layout import (
    CERTIFIED_PAYROLL,
    DEFAULT_LAYOUT,
    LAYOUTS,
    PayrollLayout,
    get_layout,
)
from labor_ingestion.parsing.parser import convert_date, parse_lines, step, to_decimal
from labor_ingestion.parsing.summary import ParseSummary, summarize

__all__ = [
    "CERTIFIED_PAYROLL",
    "DEFAULT_LAYOUT",
    "LAYOUTS",
    "PayrollLayout",
    "get_layout",
    "convert_date",
    "parse_lines",
    "step",
    "to_decimal",
    "ParseSummary",
    "summarize",
]
