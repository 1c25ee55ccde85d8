"""
Pure domain layer.

No dependencies on databases, networks or wall-clock time (except
``SystemClock``, the one sanctioned time boundary).
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.values import ZERO, as_decimal, round_money

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ZERO",
    "as_decimal",
    "round_money",
]
