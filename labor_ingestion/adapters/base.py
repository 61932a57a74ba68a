"""
Line source adapter protocol and probe DTO.

Contract:
    LineSourceAdapter.read_lines() yields the text lines of a report in
    order, with leading whitespace preserved (column position matters to
    the payroll parser).
    LineSourceAdapter.probe() returns a quick snapshot: page and line
    counts plus the first few non-blank lines.

Architecture: labor_ingestion/adapters.  File I/O only, no DB imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

PROBE_SAMPLE_LINES = 5


@runtime_checkable
class LineSourceAdapter(Protocol):
    """Protocol for reading a report file as ordered text lines."""

    def read_lines(self, source_path: Path, options: dict[str, Any]) -> Iterator[str]:
        """Yield each text line in document order."""
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: page count, line count, sample lines."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file."""

    line_count: int
    sample_lines: tuple[str, ...]  # first non-blank lines; do not mutate
    page_count: int | None = None
    encoding: str | None = None


def probe_lines(
    lines: Iterator[str],
    page_count: int | None = None,
    encoding: str | None = None,
) -> SourceProbe:
    """Count lines and keep the first few non-blank ones."""
    count = 0
    sample: list[str] = []
    for line in lines:
        count += 1
        if line.strip() and len(sample) < PROBE_SAMPLE_LINES:
            sample.append(line)
    return SourceProbe(
        line_count=count,
        sample_lines=tuple(sample),
        page_count=page_count,
        encoding=encoding,
    )
