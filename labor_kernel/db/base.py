"""
Module: labor_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.
    Provides the UUID primary key convention, portable column types for
    UUIDs, exact decimals and UTC timestamps, and the TrackedBase mixin.
Architecture position: Kernel > DB.  Lowest-level import target for every
    ORM module.  MUST NOT import from labor_modules, labor_ingestion or
    labor_engines.

Invariants enforced:
    - UUID primary keys on every table.
    - Hours and rates round-trip exactly: Decimal is stored as its string
      form, so a value read back compares equal to the value written on
      every backend (SQLite has no native decimal type).
    - Timestamps read back timezone-aware in UTC.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import DateTime, TypeDecorator


class UUIDString(TypeDecorator):
    """UUID stored as String(36) for cross-database portability."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class DecimalString(TypeDecorator):
    """
    Decimal stored as its canonical string.

    Contract:
        Whatever Decimal is bound comes back as an equal Decimal.  No
        scale is imposed, so ``Decimal("2.50")`` stays ``2.50``.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime; naive values coming back are tagged UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(UTC)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is a uuid4-generated UUID stored as String(36).
        - Decimal maps to DecimalString (exact, backend independent).
        - datetime maps to UTCDateTime.
        - int maps to BigInteger.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: DecimalString(),
        datetime: UTCDateTime(),
        PyUUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TrackedBase(Base):
    """
    Abstract base with a creation timestamp.

    ``created_at`` is assigned by the owning service from its injected
    Clock, never by the database, so tests can pin it.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(nullable=False)
