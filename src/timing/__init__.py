"""Clock constraint derivation."""
from .clock import ClockConstraint, DelayPair, derive_clock_constraint

__all__ = ["ClockConstraint", "DelayPair", "derive_clock_constraint"]
