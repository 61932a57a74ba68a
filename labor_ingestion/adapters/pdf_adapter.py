"""
PDF text adapter built on pdfplumber.

Extracts each page's text and yields it line by line.  Layout mode is on
by default so that leading whitespace, which separates employee headers
from indented entry lines, survives extraction.

source_options:
  layout: pass ``layout=True`` to ``Page.extract_text``. Default: True.
  pages: optional iterable of 1-based page numbers to read. Default: all.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import pdfplumber

from labor_ingestion.adapters.base import SourceProbe, probe_lines
from labor_kernel.logging_config import get_logger

logger = get_logger("ingestion.adapters.pdf")


class PdfTextAdapter:
    """Read a PDF document as ordered text lines, page after page."""

    def read_lines(self, source_path: Path, options: dict[str, Any]) -> Iterator[str]:
        layout = bool(options.get("layout", True))
        wanted = set(options["pages"]) if options.get("pages") else None

        with pdfplumber.open(source_path) as pdf:
            for number, page in enumerate(pdf.pages, start=1):
                if wanted is not None and number not in wanted:
                    continue
                text = page.extract_text(layout=layout) or ""
                if not text.strip():
                    logger.debug(
                        "pdf_page_without_text",
                        extra={"page": number, "source": str(source_path)},
                    )
                    continue
                yield from text.splitlines()

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        with pdfplumber.open(source_path) as pdf:
            page_count = len(pdf.pages)
        return probe_lines(self.read_lines(source_path, options), page_count=page_count)
