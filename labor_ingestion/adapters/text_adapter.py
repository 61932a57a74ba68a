"""
Plain-text line adapter.

For reports already converted to text (for example with ``pdftotext
-layout``) and for fixtures.  Lines keep their leading whitespace; only the
line terminator is removed.

source_options:
  encoding: file encoding. Default: utf-8.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

from labor_ingestion.adapters.base import SourceProbe, probe_lines


class TextLineAdapter:
    """Read a text file as one string per line."""

    def read_lines(self, source_path: Path, options: dict[str, Any]) -> Iterator[str]:
        encoding = options.get("encoding", "utf-8")
        with open(source_path, encoding=encoding, newline="") as f:
            for line in f:
                yield line.rstrip("\r\n")

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        return probe_lines(
            self.read_lines(source_path, options),
            encoding=options.get("encoding", "utf-8"),
        )
