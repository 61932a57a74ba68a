"""Pure value types for payroll parsing."""

from labor_ingestion.domain.types import LineKind, LineOutcome, ParseContext, ParseResult

__all__ = ["LineKind", "LineOutcome", "ParseContext", "ParseResult"]
