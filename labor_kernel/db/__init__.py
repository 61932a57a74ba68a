"""Database base classes and engine management."""

from labor_kernel.db.base import Base, DecimalString, TrackedBase, UTCDateTime, UUIDString
from labor_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "Base",
    "TrackedBase",
    "UUIDString",
    "DecimalString",
    "UTCDateTime",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "get_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
]
