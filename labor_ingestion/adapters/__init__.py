"""Source adapters: turn report files into text lines or budget payloads."""

from __future__ import annotations

from pathlib import Path

from labor_ingestion.adapters.base import LineSourceAdapter, SourceProbe, probe_lines
from labor_ingestion.adapters.pdf_adapter import PdfTextAdapter
from labor_ingestion.adapters.text_adapter import TextLineAdapter
from labor_ingestion.adapters.xlsx_budget_adapter import XlsxBudgetAdapter, resolve_columns
from labor_kernel.exceptions import UnsupportedSourceError

_LINE_ADAPTERS: dict[str, type] = {
    ".pdf": PdfTextAdapter,
    ".txt": TextLineAdapter,
    ".text": TextLineAdapter,
}


def adapter_for(source_path: Path | str) -> LineSourceAdapter:
    """Pick a line adapter by file suffix."""
    suffix = Path(source_path).suffix.lower()
    adapter_cls = _LINE_ADAPTERS.get(suffix)
    if adapter_cls is None:
        raise UnsupportedSourceError(str(source_path))
    return adapter_cls()


__all__ = [
    "LineSourceAdapter",
    "PdfTextAdapter",
    "SourceProbe",
    "TextLineAdapter",
    "XlsxBudgetAdapter",
    "adapter_for",
    "probe_lines",
    "resolve_columns",
]
