"""
Net representation for the physical design database.

A Net records its logical connectivity (one driver, many users) and the
physical routing currently realised for it: a map from each bound wire
to the pip that drives it (None for a source wire) and the strength of
that binding.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Hashable, Optional

from timing.clock import ClockConstraint

from .attrs import AttrDict
from .cell import PlaceStrength
from .ids import IdString


@dataclass(frozen=True)
class PortRef:
    """
    Reference to a specific port on a specific cell.

    Attributes:
        cell: Name of the cell.
        port: Name of the port on the cell.
    """
    cell: IdString
    port: IdString

    def __repr__(self) -> str:
        return f"{self.cell}/{self.port}"


@dataclass
class PipMap:
    """Binding record of one routed wire."""
    pip: Optional[Hashable] = None
    strength: PlaceStrength = PlaceStrength.NONE


@dataclass
class Net:
    """
    A signal in the design.

    Attributes:
        name: Canonical net identifier.
        driver: Port driving the net, if any.
        users: Ports sinking the net.
        wires: Bound routing, keyed by wire.
        clkconstr: Clock constraint, if this is a constrained clock.
        attrs: Attribute mapping (user metadata and codec snapshot).
    """
    name: IdString
    driver: Optional[PortRef] = None
    users: list[PortRef] = field(default_factory=list)
    wires: dict[Hashable, PipMap] = field(default_factory=dict)
    clkconstr: Optional[ClockConstraint] = None
    attrs: AttrDict = field(default_factory=dict)

    @property
    def degree(self) -> int:
        """Number of connected ports (driver + users)."""
        return len(self.users) + (1 if self.driver is not None else 0)

    @property
    def is_routed(self) -> bool:
        return bool(self.wires)

    def __repr__(self) -> str:
        user_str = ", ".join(repr(u) for u in self.users[:4])
        if len(self.users) > 4:
            user_str += f", ... (+{len(self.users) - 4} more)"
        return f"Net('{self.name}', driver={self.driver!r}, users=[{user_str}])"
