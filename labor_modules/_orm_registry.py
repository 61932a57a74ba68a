"""
Module ORM Registry (``labor_modules._orm_registry``).

Ensures every ORM model is imported so ``Base.metadata`` knows all tables
before ``create_tables()`` runs.  Idempotent.
"""


def import_all_orm_models() -> None:
    """Import every ``labor_modules.*.orm`` module to register its models."""
    import labor_modules.budget.orm  # noqa: F401
    import labor_modules.projects.orm  # noqa: F401
