"""
labor_engines.codes -- Cost-code and job-label canonicalization.

Responsibility:
    Map identifiers coming from two independent sources (payroll report
    text and budget spreadsheets) into one key space so they can be joined.

Architecture position:
    Engines -- pure functions, zero I/O.  Every join between actual and
    budget data in labor_engines goes through these two functions, on both
    sides, before any lookup.

Invariants enforced:
    - Idempotence: normalize_cost_code(normalize_cost_code(x)) equals
      normalize_cost_code(x) for every input.
    - Cost-code output either contains a hyphen or has fewer than four
      characters, so a second pass never re-splits it.

Failure modes:
    None.  Unusable input yields None (cost code) or "unspecified" (label).

Examples:
    >>> normalize_cost_code("1200")
    '01-200'
    >>> normalize_cost_code("09-170")
    '09-170'
    >>> normalize_cost_code("10240")
    '10-240'
    >>> normalize_cost_code(1200.0)
    '01-200'
    >>> normalize_job_label("  Bldg 1 ")
    'bldg 1'
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

UNSPECIFIED_LABEL = "unspecified"

# Width of the category prefix in the CC-NNN form.
CATEGORY_DIGITS = 2
# A bare code this long with a nonzero lead lost its leading zero to
# spreadsheet numeric formatting.
DROPPED_ZERO_LENGTH = 4
MIN_SPLIT_LENGTH = 4

_NOT_CODE_CHARS = re.compile(r"[^\d-]")


def normalize_cost_code(raw: Any) -> str | None:
    """
    Canonical cost-code key for ``raw``, or None when nothing usable remains.

    Steps: drop everything after a decimal point; keep only digits and
    hyphens; pad a 4-digit bare code with nonzero lead to 5 digits; split
    bare codes of 4+ digits as ``CC-NNN``.
    """
    if raw is None:
        return None

    main_part = str(raw).split(".", 1)[0]
    code = _NOT_CODE_CHARS.sub("", main_part)
    if not code:
        return None

    if "-" not in code:
        if len(code) == DROPPED_ZERO_LENGTH and code[0] != "0":
            code = "0" + code
        if len(code) >= MIN_SPLIT_LENGTH:
            code = f"{code[:CATEGORY_DIGITS]}-{code[CATEGORY_DIGITS:]}"

    return code


def normalize_job_label(raw: Any) -> str:
    """Trimmed, lower-cased area/job key; blank or absent -> ``unspecified``."""
    if raw is None:
        return UNSPECIFIED_LABEL
    label = str(raw).strip().lower()
    return label or UNSPECIFIED_LABEL


def coerce_hours(raw: Any) -> Decimal | None:
    """
    Hours value from a spreadsheet cell or payload field.

    Numbers and numeric strings (thousands separators allowed) become
    Decimal.  Blank, non-numeric, NaN and infinite values yield None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    text = str(raw).strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None
