"""Ingestion services: payroll report import."""

from labor_ingestion.services.import_service import ImportOutcome, PayrollImportService

__all__ = ["ImportOutcome", "PayrollImportService"]
