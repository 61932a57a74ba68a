"""
XLSX budget adapter: estimate spreadsheets -> BudgetPayload.

Supports flexible layout:
  - sheet by index (0-based) or name
  - header row by index or auto-detect (scans the first rows for
    budget-like column names)
  - skip_rows before header
  - column roles (cost code, name, hours, area) resolved from header
    aliases, or named explicitly in options

Rows without a numeric hours value are skipped, as are subtotal rows whose
code or name cell starts with "total".  Codes and labels are passed
through raw; BudgetService normalizes them.

source_options:
  sheet, skip_rows, header_row, auto_detect_header: as above.
  code_column, name_column, hours_column, area_column: header names that
    override alias detection.
"""

from __future__ import annotations

import re
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from labor_engines.codes import coerce_hours
from labor_ingestion.adapters.base import SourceProbe
from labor_kernel.exceptions import InvalidInputError
from labor_kernel.logging_config import get_logger
from labor_modules.budget.models import BudgetPayload

logger = get_logger("ingestion.adapters.xlsx_budget")

_COLUMN_ALIASES: dict[str, frozenset[str]] = {
    "code": frozenset({"cost code", "costcode", "cost_code", "code", "phase code", "csi code"}),
    "name": frozenset({"description", "name", "cost code name", "cost code description", "item"}),
    "hours": frozenset({
        "hours", "budget hours", "budgeted hours", "labor hours", "man hours",
        "manhours", "total hours", "est hours", "estimated hours",
    }),
    "area": frozenset({"area", "building", "location", "area name", "zone", "job"}),
}

_HEADER_KEYWORDS = frozenset().union(*_COLUMN_ALIASES.values())

_MAX_SCAN_COLUMNS = 50
_HEADER_SEARCH_ROWS = 15


def _normalize_header_cell(value: Any) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def _cell_value(row: Any, col_idx: int) -> Any:
    """Cell value from an openpyxl row; numbers kept, text stripped, blank -> ""."""
    if col_idx >= len(row):
        return ""
    v = row[col_idx].value
    if v is None:
        return ""
    if isinstance(v, float) and v == int(v):
        return int(v)
    if isinstance(v, (int, float)):
        return v
    return str(v).strip()


def _row_keywords(row: Any) -> set[str]:
    keywords = set()
    for c in range(min(len(row), _MAX_SCAN_COLUMNS)):
        v = _normalize_header_cell(_cell_value(row, c)).lower()
        if v in _HEADER_KEYWORDS:
            keywords.add(v)
    return keywords


def _detect_header_row(rows: list, min_keywords: int = 2) -> int:
    """0-based index of the first row that looks like a budget header."""
    for i, row in enumerate(rows[:_HEADER_SEARCH_ROWS]):
        if len(_row_keywords(row)) >= min_keywords:
            return i
    return 0


def _headers(row: Any) -> list[str]:
    last = 0
    for c in range(min(len(row), _MAX_SCAN_COLUMNS)):
        if _cell_value(row, c) != "":
            last = c + 1
    headers: list[str] = []
    for c in range(max(last, 1)):
        key = _normalize_header_cell(_cell_value(row, c)) or f"Column_{c + 1}"
        base, n = key, 0
        while key in headers:
            n += 1
            key = f"{base}_{n}"
        headers.append(key)
    return headers


def resolve_columns(headers: list[str], options: dict[str, Any]) -> dict[str, str]:
    """Map each role (code, name, hours, area) to a header name."""
    resolved: dict[str, str] = {}
    for role in _COLUMN_ALIASES:
        explicit = options.get(f"{role}_column")
        if explicit:
            if explicit not in headers:
                raise InvalidInputError(
                    f"Column {explicit!r} not found in budget sheet", field=f"{role}_column"
                )
            resolved[role] = explicit

    taken = set(resolved.values())
    for role, aliases in _COLUMN_ALIASES.items():
        if role in resolved:
            continue
        for header in headers:
            if header not in taken and header.lower() in aliases:
                resolved[role] = header
                taken.add(header)
                break

    missing = [role for role in ("code", "hours") if role not in resolved]
    if missing:
        raise InvalidInputError(
            f"Budget sheet is missing required column(s): {', '.join(missing)} "
            f"(headers: {', '.join(headers)})",
            field=missing[0],
        )
    return resolved


def _is_subtotal(*cells: Any) -> bool:
    return any(str(c).strip().lower().startswith("total") for c in cells if c not in (None, ""))


class XlsxBudgetAdapter:
    """Read an estimate workbook into a BudgetPayload."""

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]

    def _load_rows(self, source_path: Path, options: dict[str, Any]) -> tuple[list[str], list[list[Any]]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            sheet = self._get_sheet(wb, options)
            skip_rows = int(options.get("skip_rows", 0))
            rows = list(sheet.iter_rows(min_row=1 + skip_rows))
            if not rows:
                return [], []

            header_row_idx = options.get("header_row")
            if header_row_idx is not None and not options.get("auto_detect_header", False):
                hi = int(header_row_idx)
            else:
                hi = _detect_header_row(rows)

            headers = _headers(rows[hi])
            data = []
            for row in rows[hi + 1:]:
                values = [_cell_value(row, c) for c in range(len(headers))]
                if any(v != "" for v in values):
                    data.append(values)
            return headers, data
        finally:
            wb.close()

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield one dict per non-blank data row, keyed by header."""
        headers, data = self._load_rows(source_path, options)
        for values in data:
            yield dict(zip(headers, values))

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        headers, data = self._load_rows(source_path, options)
        sample = tuple(
            " | ".join(str(v) for v in values) for values in data[:5]
        )
        return SourceProbe(
            line_count=len(data),
            sample_lines=(" | ".join(headers),) + sample if headers else sample,
        )

    def read_budget(self, source_path: Path, options: dict[str, Any] | None = None) -> BudgetPayload:
        """Aggregate the sheet's rows into a BudgetPayload."""
        options = options or {}
        headers, data = self._load_rows(source_path, options)
        if not headers:
            raise InvalidInputError(f"Budget sheet is empty: {source_path}", field="source")
        columns = resolve_columns(headers, options)
        index = {role: headers.index(name) for role, name in columns.items()}

        cost_code_hours: dict[str, Decimal] = {}
        area_hours: dict[str, Decimal] = {}
        area_cost_code_hours: dict[str, dict[str, Decimal]] = {}
        names: dict[str, str] = {}
        skipped = 0

        for values in data:
            code = str(values[index["code"]]).strip()
            name = str(values[index["name"]]).strip() if "name" in index else ""
            area = str(values[index["area"]]).strip() if "area" in index else ""
            hours = coerce_hours(values[index["hours"]])
            if hours is None or _is_subtotal(code, name):
                skipped += 1
                continue

            if code:
                cost_code_hours[code] = cost_code_hours.get(code, Decimal("0")) + hours
                if name and code not in names:
                    names[code] = name
            if area:
                area_hours[area] = area_hours.get(area, Decimal("0")) + hours
                if code:
                    codes = area_cost_code_hours.setdefault(area, {})
                    codes[code] = codes.get(code, Decimal("0")) + hours

        logger.info(
            "budget_sheet_read",
            extra={
                "source": str(source_path),
                "row_count": len(data),
                "skipped_rows": skipped,
                "cost_codes": len(cost_code_hours),
                "areas": len(area_hours),
                "columns": columns,
            },
        )
        return BudgetPayload(
            cost_code_hours=cost_code_hours,
            area_hours=area_hours,
            area_cost_code_hours=area_cost_code_hours,
            cost_code_names=names,
            filename=Path(source_path).name,
        )
