"""
Context: the physical-design database of a place-and-route flow.

The Context owns every Cell and Net of a technology-mapped design, the
net alias table, placement regions and the hierarchy index, and exposes
the only sanctioned ways of mutating them: entity creation, constraint
authoring, and the binding primitives that placement, routing and timing
passes call. Physical resources belong to an Architecture, which the
Context delegates naming, enumeration and binding to.

Mutation is single-threaded: callers that parallelise work must serialise
calls into a Context.

Errors follow two tiers. Invariant violations (duplicate names, unknown
names in a mutation primitive) raise a :class:`~physdb.exceptions.PhysDBError`
immediately. Best-effort user input problems are reported through
:meth:`Context.log_warning` and the offending sub-operation is skipped.
"""

from __future__ import annotations
import logging
import re
from typing import TYPE_CHECKING, Callable, Hashable, Iterable, Optional

from timing.clock import derive_clock_constraint

from .cell import Cell, PlaceStrength
from .config import ContextConfig
from .decal import DecalXY, construct_decal_xy
from .design_utils import connect_port, disconnect_port
from .exceptions import DuplicateNameError, UnknownNameError
from .ids import IdString, IdStringList, NameLike, to_id
from .net import Net
from .region import HierarchicalCell, Region

if TYPE_CHECKING:
    from arch.base import Architecture

logger = logging.getLogger(__name__)

WarningObserver = Callable[[str], None]
UiObserver = Callable[[], None]


class Context:
    """
    Design database bound to one architecture.

    Usage:
        ctx = Context(GridArch())
        lut = ctx.create_cell("lut0", "LUT4")
        ctx.copy_bel_ports("lut0", bel)
        ctx.create_net("clk")
        ctx.add_clock("clk", 100.0)

    Attributes:
        arch: The architecture service.
        config: Behavioural switches.
        cells: Cells keyed by name.
        nets: Nets keyed by canonical name.
        net_aliases: Alias -> canonical net name. Append-only.
        regions: Placement regions keyed by name.
        hierarchy: Hierarchy index keyed by instance name.
    """

    def __init__(self, arch: Architecture, config: ContextConfig | None = None):
        self.arch = arch
        self.config = config or ContextConfig()

        self.cells: dict[IdString, Cell] = {}
        self.nets: dict[IdString, Net] = {}
        self.net_aliases: dict[IdString, IdString] = {}
        self.regions: dict[IdString, Region] = {}
        self.hierarchy: dict[IdString, HierarchicalCell] = {}

        self._warning_observers: list[WarningObserver] = []
        self._ui_observers: list[UiObserver] = []

    # ── Identifiers & Names ───────────────────────────────────────────

    @staticmethod
    def id(name: NameLike) -> IdString:
        return to_id(name)

    @staticmethod
    def name_of(name: Optional[IdString]) -> str:
        return "" if name is None else str(name)

    def _format(self, name: IdStringList) -> str:
        return name.join(self.config.name_separator)

    def _parse(self, name: str) -> IdStringList:
        return IdStringList.parse(name, self.config.name_separator)

    def name_of_bel(self, bel: Hashable) -> str:
        return self._format(self.arch.get_bel_name(bel))

    def name_of_wire(self, wire: Hashable) -> str:
        return self._format(self.arch.get_wire_name(wire))

    def name_of_pip(self, pip: Hashable) -> str:
        return self._format(self.arch.get_pip_name(pip))

    def name_of_group(self, group: Hashable) -> str:
        return self._format(self.arch.get_group_name(group))

    def get_bel_by_name_str(self, name: str) -> Optional[Hashable]:
        return self.arch.get_bel_by_name(self._parse(name))

    def get_wire_by_name_str(self, name: str) -> Optional[Hashable]:
        return self.arch.get_wire_by_name(self._parse(name))

    def get_pip_by_name_str(self, name: str) -> Optional[Hashable]:
        return self.arch.get_pip_by_name(self._parse(name))

    def get_group_by_name_str(self, name: str) -> Optional[Hashable]:
        return self.arch.get_group_by_name(self._parse(name))

    # ── Reporting ─────────────────────────────────────────────────────

    def add_warning_observer(self, observer: WarningObserver) -> None:
        """Register a callback receiving the text of every warning."""
        self._warning_observers.append(observer)

    def add_ui_observer(self, observer: UiObserver) -> None:
        """Register a callback invoked whenever the design changes shape."""
        self._ui_observers.append(observer)

    def log_info(self, msg: str) -> None:
        logger.log(logging.INFO if self.config.verbose else logging.DEBUG, msg)

    def log_warning(self, msg: str) -> None:
        logger.warning(msg)
        for observer in self._warning_observers:
            observer(msg)

    def refresh_ui(self) -> None:
        for observer in self._ui_observers:
            observer()

    # ── Entity Registries ─────────────────────────────────────────────

    def create_net(self, name: NameLike) -> Net:
        """Create an empty net which is its own canonical alias."""
        name = to_id(name)
        if name in self.nets:
            raise DuplicateNameError(f"net '{name}' already exists")
        if name in self.net_aliases:
            raise DuplicateNameError(
                f"'{name}' is already an alias of net '{self.net_aliases[name]}'")
        net = Net(name=name)
        self.net_aliases[name] = name
        self.nets[name] = net
        self.refresh_ui()
        return net

    def create_cell(self, name: NameLike, cell_type: NameLike) -> Cell:
        name = to_id(name)
        if name in self.cells:
            raise DuplicateNameError(f"cell '{name}' already exists")
        cell = Cell(name=name, type=to_id(cell_type))
        self.cells[name] = cell
        self.refresh_ui()
        return cell

    def get_cell(self, name: NameLike) -> Cell:
        name = to_id(name)
        try:
            return self.cells[name]
        except KeyError:
            raise UnknownNameError(f"no cell named '{name}'") from None

    def get_net_by_alias(self, name: NameLike) -> Net:
        """Resolve a net name or alias to the canonical net."""
        name = to_id(name)
        canonical = self.net_aliases.get(name)
        if canonical is None:
            raise UnknownNameError(f"no net or net alias named '{name}'")
        return self.nets[canonical]

    def add_net_alias(self, alias: NameLike, net: NameLike) -> Net:
        """Make ``alias`` resolve to the net currently named ``net``."""
        alias = to_id(alias)
        target = self.get_net_by_alias(net)
        if alias in self.net_aliases or alias in self.nets:
            raise DuplicateNameError(f"net alias '{alias}' is already in use")
        self.net_aliases[alias] = target.name
        return target

    def rename_net(self, old: NameLike, new: NameLike) -> Net:
        """
        Give a net a new canonical name.

        The old name, and every alias that resolved to it, keep resolving
        to the same net.
        """
        new = to_id(new)
        net = self.get_net_by_alias(old)
        if new in self.nets or new in self.net_aliases:
            raise DuplicateNameError(f"net name '{new}' is already in use")
        old_name = net.name
        del self.nets[old_name]
        net.name = new
        self.nets[new] = net
        for alias, canonical in self.net_aliases.items():
            if canonical == old_name:
                self.net_aliases[alias] = new
        self.net_aliases[new] = new
        self.refresh_ui()
        return net

    # ── Constraint Subsystem ──────────────────────────────────────────

    def create_rectangular_region(self, name: NameLike, x0: int, y0: int,
                                  x1: int, y1: int) -> Region:
        """
        Create (or replace) a bel-constraining region holding every bel in
        the closed tile rectangle [x0, x1] × [y0, y1].
        """
        region = Region(name=to_id(name), constr_bels=True,
                        constr_wires=False, constr_pips=False)
        for x in range(x0, x1 + 1):
            for y in range(y0, y1 + 1):
                region.bels.update(self.arch.get_bels_by_tile(x, y))
        self.regions[region.name] = region
        return region

    def add_bel_to_region(self, name: NameLike, bel: Hashable) -> None:
        name = to_id(name)
        region = self.regions.get(name)
        if region is None:
            raise UnknownNameError(f"no region named '{name}'")
        region.bels.add(bel)

    def constrain_cell_to_region(self, cell: NameLike, region_name: NameLike) -> None:
        """
        Constrain a cell, or every leaf cell below a hierarchical instance,
        to a region.

        Hierarchical instances are expanded depth-first: leaf children in
        order, then nested instances in order, each fully before the next.
        A name matching neither a hierarchy entry nor a cell is reported as
        a warning and ignored.
        """
        region_name = to_id(region_name)
        stack = [to_id(cell)]
        while stack:
            name = stack.pop()
            matched = False
            if name in self.cells:
                self.cells[name].region = region_name
                matched = True
            hc = self.hierarchy.get(name)
            if hc is not None:
                children = list(hc.leaf_cells.values()) + list(hc.hier_cells.values())
                stack.extend(reversed(children))
                matched = True
            if not matched:
                self.log_warning(
                    f"No cell matched '{name}' when constraining to region '{region_name}'")

    def get_cell_region(self, cell: NameLike) -> Optional[Region]:
        """The region a cell is constrained to, if it exists."""
        region = self.get_cell(cell).region
        return None if region is None else self.regions.get(region)

    def cells_in_region(self, name: NameLike) -> list[Cell]:
        name = to_id(name)
        return [c for c in self.cells.values() if c.region == name]

    def add_hierarchy(self, name: NameLike, leaf_cells: Iterable[NameLike] = (),
                      hier_cells: Iterable[NameLike] = (),
                      cell_type: NameLike = "",
                      parent: Optional[NameLike] = None) -> HierarchicalCell:
        """
        Add an entry to the hierarchy index. Children are given by global
        name; the local name is the last path component.
        """
        hc = HierarchicalCell(name=to_id(name), type=to_id(cell_type),
                              parent=None if parent is None else to_id(parent))
        for child in leaf_cells:
            child = to_id(child)
            hc.leaf_cells[self._local_name(child)] = child
        for child in hier_cells:
            child = to_id(child)
            hc.hier_cells[self._local_name(child)] = child
        self.hierarchy[hc.name] = hc
        return hc

    @staticmethod
    def _local_name(name: IdString) -> IdString:
        return to_id(re.split(r"[./]", str(name))[-1])

    def get_constr_parent(self, cell: NameLike) -> Optional[Cell]:
        parent = self.get_cell(cell).constr_parent
        return None if parent is None else self.cells.get(parent)

    def get_constr_children(self, cell: NameLike) -> list[Cell]:
        """Live children of a cell in the relative-placement tree."""
        return [self.cells[c] for c in self.get_cell(cell).constr_children
                if c in self.cells]

    # ── Binding Mutation Primitives ───────────────────────────────────

    def connect_port(self, net: NameLike, cell: NameLike, port: NameLike) -> None:
        net_info = self.get_net_by_alias(net)
        cell_info = self.get_cell(cell)
        connect_port(net_info, cell_info, to_id(port))

    def disconnect_port(self, cell: NameLike, port: NameLike) -> None:
        cell_info = self.get_cell(cell)
        port = to_id(port)
        held = cell_info.ports.get(port)
        net_info = None
        if held is not None and held.net is not None:
            net_info = self.get_net_by_alias(held.net)
        disconnect_port(net_info, cell_info, port)

    def ripup_net(self, name: NameLike) -> None:
        """Unbind all routing of a net. Logical connectivity is kept."""
        net = self.get_net_by_alias(name)
        to_unbind = list(net.wires)
        for wire in to_unbind:
            self.arch.unbind_wire(wire)

    def lock_net_routing(self, name: NameLike) -> None:
        """Raise every routing binding of a net to user strength."""
        net = self.get_net_by_alias(name)
        for pip_map in net.wires.values():
            pip_map.strength = PlaceStrength.USER

    def copy_bel_ports(self, cell: NameLike, bel: Hashable) -> None:
        """Give a cell one port per pin of a bel, with the pin's direction."""
        cell_info = self.get_cell(cell)
        for pin in self.arch.get_bel_pins(bel):
            cell_info.add_port(pin, self.arch.get_bel_pin_type(bel, pin))

    def add_clock(self, net: NameLike, freq: float) -> None:
        """Constrain a net to a 50% duty cycle clock of ``freq`` MHz."""
        net = to_id(net)
        if net not in self.net_aliases:
            self.log_warning(
                f"net '{net}' does not exist in design, ignoring clock constraint")
            return
        cc = derive_clock_constraint(freq, self.arch.get_delay_from_ns)
        self.get_net_by_alias(net).clkconstr = cc
        self.log_info(f"constraining clock net '{net}' to {freq:.02f} MHz")

    @staticmethod
    def construct_decal_xy(decal: Hashable, x: float, y: float) -> DecalXY:
        return construct_decal_xy(decal, x, y)

    def __repr__(self) -> str:
        return (f"Context({self.arch!r}, cells={len(self.cells)}, "
                f"nets={len(self.nets)}, regions={len(self.regions)})")
