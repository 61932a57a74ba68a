"""
labor_engines.tracer -- Engine invocation tracer emitting LABOR_ENGINE_TRACE.

Responsibility:
    Wrap pure engine calls with a structured trace record carrying
    engine_name, engine_version, a deterministic input fingerprint and
    duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; never touches its inputs.

Failure modes:
    - fingerprint_fields naming a kwarg that was not passed are recorded
      as "null".

Usage:
    from labor_engines.tracer import traced_engine

    @traced_engine("budget_comparison", "1.0", fingerprint_fields=("actual_by_code",))
    def compare_cost_codes(*, actual_by_code, budget_by_code):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from labor_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def _canonicalize(value: Any) -> str:
    """Stable string form of a value for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, Decimal):
        return "NaN" if value.is_nan() else str(value.normalize())
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: dict[str, Any],
) -> str:
    """SHA-256 prefix (16 hex chars) over the canonical form of selected kwargs."""
    parts: list[str] = []
    for field in fingerprint_fields:
        parts.append(f"{field}={_canonicalize(kwargs.get(field))}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits LABOR_ENGINE_TRACE for pure engine invocations."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                fp = compute_input_fingerprint(fingerprint_fields, kwargs)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "LABOR_ENGINE_TRACE",
                extra={
                    "trace_type": "LABOR_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
