"""
Architecture service contract.

An Architecture owns the catalogue of physical resources of a target
device (bels, wires, pips, groups), their names and adjacency, the delay
unit, and the exclusive binding of those resources to cells and nets.
The design database calls into it through this interface only; resource
handles are opaque hashables and None stands for "no resource".
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Hashable, Iterable, Optional

from physdb.decal import DecalXY
from physdb.ids import IdString, IdStringList

if TYPE_CHECKING:
    from physdb.cell import Cell, PlaceStrength, PortType
    from physdb.net import Net

BelId = Hashable
WireId = Hashable
PipId = Hashable
GroupId = Hashable


class Architecture(ABC):
    """
    Base class of device architectures.

    Subclasses must implement naming, enumeration and binding. Group and
    decal support is optional and defaults to "no such resource".
    """

    # ── Naming ────────────────────────────────────────────────────────

    @abstractmethod
    def get_bel_name(self, bel: BelId) -> IdStringList: ...

    @abstractmethod
    def get_bel_by_name(self, name: IdStringList) -> Optional[BelId]: ...

    @abstractmethod
    def get_wire_name(self, wire: WireId) -> IdStringList: ...

    @abstractmethod
    def get_wire_by_name(self, name: IdStringList) -> Optional[WireId]: ...

    @abstractmethod
    def get_pip_name(self, pip: PipId) -> IdStringList: ...

    @abstractmethod
    def get_pip_by_name(self, name: IdStringList) -> Optional[PipId]: ...

    def get_group_name(self, group: GroupId) -> IdStringList:
        return IdStringList()

    def get_group_by_name(self, name: IdStringList) -> Optional[GroupId]:
        return None

    # ── Enumeration ───────────────────────────────────────────────────

    @abstractmethod
    def get_bels_by_tile(self, x: int, y: int) -> Iterable[BelId]: ...

    @abstractmethod
    def get_bel_pins(self, bel: BelId) -> Iterable[IdString]: ...

    @abstractmethod
    def get_bel_pin_type(self, bel: BelId, pin: IdString) -> PortType: ...

    @abstractmethod
    def get_pip_dst_wire(self, pip: PipId) -> WireId: ...

    # ── Binding ───────────────────────────────────────────────────────

    @abstractmethod
    def bind_bel(self, bel: BelId, cell: Cell,
                 strength: PlaceStrength) -> None: ...

    @abstractmethod
    def unbind_bel(self, bel: BelId) -> None: ...

    @abstractmethod
    def bind_wire(self, wire: WireId, net: Net,
                  strength: PlaceStrength) -> None: ...

    @abstractmethod
    def unbind_wire(self, wire: WireId) -> None: ...

    @abstractmethod
    def bind_pip(self, pip: PipId, net: Net,
                 strength: PlaceStrength) -> None: ...

    @abstractmethod
    def unbind_pip(self, pip: PipId) -> None: ...

    @abstractmethod
    def check_bel_avail(self, bel: BelId) -> bool: ...

    @abstractmethod
    def check_wire_avail(self, wire: WireId) -> bool: ...

    @abstractmethod
    def check_pip_avail(self, pip: PipId) -> bool: ...

    # ── Delays ────────────────────────────────────────────────────────

    @abstractmethod
    def get_delay_from_ns(self, ns: float) -> float: ...

    @abstractmethod
    def get_delay_ns(self, delay: float) -> float: ...

    # ── Bulk Restore ──────────────────────────────────────────────────

    def assign_arch_info(self) -> None:
        """Re-derive any cached architecture-specific state after a bulk
        restore of bindings."""
        pass

    # ── Decals ────────────────────────────────────────────────────────

    def get_bel_decal(self, bel: BelId) -> DecalXY:
        return DecalXY()

    def get_wire_decal(self, wire: WireId) -> DecalXY:
        return DecalXY()
