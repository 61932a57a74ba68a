"""
Labor Kernel - shared infrastructure for the payroll hours tracker.

Provides:
- Typed exceptions with machine-readable codes
- Structured JSON logging with request-scoped context
- SQLAlchemy declarative base and engine/session management
- Injectable clock for deterministic timestamps
"""

__version__ = "0.1.0"
