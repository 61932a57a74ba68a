"""
Labor Ingestion - payroll report and budget spreadsheet intake.

Reads source files through adapters, parses payroll text into time entries,
summarizes each parse for audit, and hands results to the record store.
"""
