"""
Payroll import service: read -> parse -> store.

Reads a report through a line adapter, folds the lines through the payroll
parser, and stores the entries under a new upload together with the parse
summary.  Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from labor_ingestion.adapters import adapter_for
from labor_ingestion.adapters.base import LineSourceAdapter, SourceProbe
from labor_ingestion.domain.types import ParseResult
from labor_ingestion.parsing.layout import DEFAULT_LAYOUT, PayrollLayout, get_layout
from labor_ingestion.parsing.parser import parse_lines
from labor_ingestion.parsing.summary import ParseSummary, summarize
from labor_kernel.domain.clock import Clock, SystemClock
from labor_kernel.logging_config import LogContext, get_logger
from labor_modules.projects.models import Upload
from labor_modules.repository import LaborRepository, SqlLaborRepository

logger = get_logger("ingestion.import_service")


@dataclass(frozen=True)
class ImportOutcome:
    """What one payroll import stored."""

    upload: Upload
    entries_inserted: int
    summary: ParseSummary
    result: ParseResult


class PayrollImportService:
    """Imports payroll reports into a project. Uses session, clock, layout and an optional adapter."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        layout: PayrollLayout | str = DEFAULT_LAYOUT,
        repository: LaborRepository | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._layout = get_layout(layout) if isinstance(layout, str) else layout
        self._repo = repository or SqlLaborRepository(session)

    def probe_source(self, source_path: Path, options: dict[str, Any] | None = None) -> SourceProbe:
        """Preview a report file: line count, page count, first lines."""
        return adapter_for(source_path).probe(Path(source_path), options or {})

    def import_file(
        self,
        project_id: UUID,
        source_path: Path,
        options: dict[str, Any] | None = None,
        adapter: LineSourceAdapter | None = None,
    ) -> ImportOutcome:
        """
        Import one report file into a project.

        The adapter is picked by file suffix unless one is given.  Raises
        UnsupportedSourceError for unknown suffixes and ProjectNotFoundError
        for unknown projects; the session is rolled back on any failure.
        """
        source_path = Path(source_path)
        adapter = adapter or adapter_for(source_path)
        lines = list(adapter.read_lines(source_path, options or {}))
        logger.info(
            "payroll_source_read",
            extra={"source_file": source_path.name, "line_count": len(lines)},
        )
        return self.import_lines(project_id, source_path.name, lines)

    def import_lines(
        self,
        project_id: UUID,
        filename: str,
        lines: Iterable[str],
    ) -> ImportOutcome:
        """Parse already-extracted report lines and store them as one upload."""
        correlation_id = str(uuid4())
        with LogContext.bind(
            correlation_id=correlation_id,
            project_id=str(project_id),
            source_file=filename,
            layout=self._layout.name,
        ):
            try:
                upload = self._repo.create_upload(
                    project_id, filename, self._clock.now()
                )
                with LogContext.bind(upload_id=str(upload.id)):
                    result = parse_lines(lines, self._layout)
                    summary = summarize(result)
                    inserted = self._repo.add_entries(project_id, upload.id, result.entries)
                    upload = self._repo.record_upload_metrics(
                        upload.id,
                        {**summary.to_metrics(), "layout": result.layout_name},
                    )
                    self._session.commit()

                    logger.info(
                        "payroll_import_committed",
                        extra={
                            "entries_inserted": inserted,
                            "parsed_hours": str(summary.parsed_hours),
                            "detected_total_hours": (
                                None
                                if summary.detected_total_hours is None
                                else str(summary.detected_total_hours)
                            ),
                            "ignored_count": len(summary.ignored_lines),
                        },
                    )
                    if summary.difference:
                        logger.warning(
                            "payroll_total_mismatch",
                            extra={"difference": str(summary.difference)},
                        )
            except Exception:
                self._session.rollback()
                logger.exception("payroll_import_failed")
                raise

        return ImportOutcome(
            upload=upload,
            entries_inserted=inserted,
            summary=summary,
            result=result,
        )
