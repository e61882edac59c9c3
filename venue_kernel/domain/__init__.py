"""Pure domain layer: time abstraction with no ORM or database dependencies."""

from venue_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = ["Clock", "DeterministicClock", "SystemClock"]
