"""Pure kernel domain helpers."""

from labor_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = ["Clock", "SystemClock", "DeterministicClock"]
