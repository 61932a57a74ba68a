"""
Typed Exception Hierarchy for the payroll hours tracker.

===============================================================================
WHAT RAISES AND WHAT DOES NOT
===============================================================================

The parsing and reconciliation core is fail-open for bad *data*:

  - An unparseable payroll line is routed to the ignored-lines diagnostics
    or dropped.  It is never an exception.
  - A negative-hours line is excluded from entries and reported.
  - A cost code that normalizes to nothing is left out of cost-code totals.
  - A code present on only one side of a comparison becomes a row with the
    missing side at zero.

Exceptions are reserved for contract violations: a required structural
argument is missing, a record the caller names does not exist, or the caller
asks for something the system does not allow.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LaborTrackerError (base)
    |
    +-- InvalidInputError
    |   +-- EntryEditNotAllowedError
    |   +-- UnsupportedSourceError
    |
    +-- RecordNotFoundError
        +-- ProjectNotFoundError
        +-- EntryNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                    | When Raised
------------------------|---------------------------------------------------
INVALID_INPUT           | Required argument absent or structurally invalid
ENTRY_EDIT_NOT_ALLOWED  | Edit touches a field outside the edit whitelist
UNSUPPORTED_SOURCE      | No adapter can read the given source file
RECORD_NOT_FOUND        | Generic missing record
PROJECT_NOT_FOUND       | Project ID does not exist
ENTRY_NOT_FOUND         | Time entry ID does not exist

Usage:
    try:
        budget_service.record_budget(project_id, payload)
    except InvalidInputError as e:
        return {"error": e.code, "message": str(e)}
"""


class LaborTrackerError(Exception):
    """
    Base exception for all payroll hours tracker errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "LABOR_TRACKER_ERROR"


# Input / contract violations


class InvalidInputError(LaborTrackerError):
    """A required structural argument is absent or unusable."""

    code: str = "INVALID_INPUT"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class EntryEditNotAllowedError(InvalidInputError):
    """An entry edit touched fields outside the allowed whitelist."""

    code: str = "ENTRY_EDIT_NOT_ALLOWED"

    def __init__(self, fields: tuple[str, ...], allowed: tuple[str, ...]):
        self.fields = fields
        self.allowed = allowed
        super().__init__(
            f"Fields not editable: {', '.join(fields)} "
            f"(allowed: {', '.join(allowed)})",
            field=fields[0] if fields else None,
        )


class UnsupportedSourceError(InvalidInputError):
    """No source adapter handles the given file."""

    code: str = "UNSUPPORTED_SOURCE"

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Unsupported source file: {source}", field="source")


# Missing records


class RecordNotFoundError(LaborTrackerError):
    """Base exception for lookups that find nothing."""

    code: str = "RECORD_NOT_FOUND"


class ProjectNotFoundError(RecordNotFoundError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: object):
        self.project_id = str(project_id)
        super().__init__(f"Project not found: {project_id}")


class EntryNotFoundError(RecordNotFoundError):
    """Time entry with given ID was not found."""

    code: str = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: object):
        self.entry_id = str(entry_id)
        super().__init__(f"Time entry not found: {entry_id}")
