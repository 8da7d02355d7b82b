"""
Clock constraints.

A clock constraint records the period and the high/low phase durations of
a clock net as delay pairs (min/max), in the architecture's delay unit.
Timing analysers read it from ``Net.clkconstr``; deriving it from a target
frequency is all that is done here.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class DelayPair:
    """Min/max delay interval. A single value gives a zero-width interval."""
    min_delay: float = 0.0
    max_delay: float = 0.0

    @classmethod
    def of(cls, delay: float) -> DelayPair:
        return cls(delay, delay)

    @property
    def min(self) -> float:
        return self.min_delay

    @property
    def max(self) -> float:
        return self.max_delay


@dataclass(frozen=True)
class ClockConstraint:
    """
    Attributes:
        period: Clock period.
        high: Duration of the high phase.
        low: Duration of the low phase.
    """
    period: DelayPair
    high: DelayPair
    low: DelayPair

    @property
    def frequency_mhz(self) -> float:
        """Frequency implied by the period, assuming nanosecond delays."""
        return 1000.0 / self.period.max_delay


def derive_clock_constraint(freq_mhz: float,
                            delay_from_ns: Callable[[float], float] = float
                            ) -> ClockConstraint:
    """
    Build the constraint of a 50% duty cycle clock.

    Args:
        freq_mhz: Target frequency in MHz.
        delay_from_ns: Converts nanoseconds into the architecture's delay
            unit (``Architecture.get_delay_from_ns``).

    Returns:
        period = 1000/freq ns, high = low = 500/freq ns.
    """
    if freq_mhz <= 0:
        raise ValueError(f"clock frequency must be positive, got {freq_mhz}")
    return ClockConstraint(
        period=DelayPair.of(delay_from_ns(1000.0 / freq_mhz)),
        high=DelayPair.of(delay_from_ns(500.0 / freq_mhz)),
        low=DelayPair.of(delay_from_ns(500.0 / freq_mhz)),
    )
