"""
Cell and Port representations for the physical design database.

A Cell is a technology-mapped instance: a typed block with named ports,
an optional placement binding to a bel, and the relative/absolute
placement constraints that placers must honour. Cross-references to other
cells and to regions are held by name and resolved through the owning
Context, so a reference to an entity that does not exist (yet) is simply
unresolved rather than dangling.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Hashable, Optional

from .attrs import AttrDict, Property
from .ids import IdString, NameLike, to_id


class PortType(Enum):
    """Port signal direction."""
    IN = auto()
    OUT = auto()
    INOUT = auto()


class PlaceStrength(IntEnum):
    """
    Binding priority. A binding may only be overridden by one of strictly
    higher strength; the numeric value is what gets serialised.
    """
    NONE = 0
    WEAK = 1
    STRONG = 2
    PLACER = 3
    FIXED = 4
    LOCKED = 5
    USER = 6


@dataclass
class Port:
    """
    A logical connection point on a cell.

    Attributes:
        name: Port identifier within the cell.
        type: Signal direction.
        net: Name of the connected net (None if unconnected). Resolve it
            with ``Context.get_net_by_alias`` so renamed nets are followed.
    """
    name: IdString
    type: PortType = PortType.IN
    net: Optional[IdString] = None

    @property
    def is_connected(self) -> bool:
        return self.net is not None


@dataclass
class Cell:
    """
    A logical instance in the design.

    Attributes:
        name: Unique cell identifier.
        type: Cell type (e.g. LUT4, DFF).
        ports: Ports keyed by name.
        attrs: Attribute mapping (user metadata and codec snapshot).
        bel: Bound bel, or None while unplaced.
        bel_strength: Strength of the current bel binding.
        region: Name of the region this cell is constrained to.
        constr_x: X offset (relative to parent, or absolute for roots).
        constr_y: Y offset, as constr_x.
        constr_z: Sub-site index.
        constr_abs_z: Whether constr_z is absolute rather than relative.
        constr_parent: Name of the constraint-tree parent cell.
        constr_children: Names of constraint-tree child cells, in order.
    """
    UNCONSTR = -2 ** 31

    name: IdString
    type: IdString
    ports: dict[IdString, Port] = field(default_factory=dict)
    attrs: AttrDict = field(default_factory=dict)
    bel: Optional[Hashable] = None
    bel_strength: PlaceStrength = PlaceStrength.NONE
    region: Optional[IdString] = None
    constr_x: int = UNCONSTR
    constr_y: int = UNCONSTR
    constr_z: int = UNCONSTR
    constr_abs_z: bool = False
    constr_parent: Optional[IdString] = None
    constr_children: list[IdString] = field(default_factory=list)

    # ── Port Methods ──────────────────────────────────────────────────

    def add_port(self, name: NameLike, port_type: PortType) -> Port:
        """Create (or retype) a port, keeping any existing connection."""
        name = to_id(name)
        port = self.ports.get(name)
        if port is None:
            port = self.ports[name] = Port(name, port_type)
        else:
            port.type = port_type
        return port

    def add_input(self, name: NameLike) -> Port:
        return self.add_port(name, PortType.IN)

    def add_output(self, name: NameLike) -> Port:
        return self.add_port(name, PortType.OUT)

    def add_inout(self, name: NameLike) -> Port:
        return self.add_port(name, PortType.INOUT)

    # ── Attribute Methods ─────────────────────────────────────────────

    def set_attr(self, key: NameLike, value: Property) -> None:
        self.attrs[to_id(key)] = value

    def unset_attr(self, key: NameLike) -> None:
        self.attrs.pop(to_id(key), None)

    # ── Constraint Queries ────────────────────────────────────────────

    @property
    def is_placed(self) -> bool:
        return self.bel is not None

    @property
    def is_constrained(self) -> bool:
        """Whether any relative/absolute placement constraint applies."""
        return (self.constr_x != self.UNCONSTR or
                self.constr_y != self.UNCONSTR or
                self.constr_z != self.UNCONSTR or
                self.constr_parent is not None or
                bool(self.constr_children))

    def __repr__(self) -> str:
        return (f"Cell('{self.name}', type={self.type}, "
                f"bel={self.bel}, strength={self.bel_strength.name})")
