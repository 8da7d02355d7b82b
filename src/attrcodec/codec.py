"""
Attribute codec: physical state <-> flat attributes.

Encoding records each cell's bel binding and placement constraints, and
each net's routing, as reserved attributes on the entity itself. Decoding
replays those attributes through the architecture's bind operations, so
a design written out by any netlist format that preserves attributes can
be reloaded with its placement and routing intact.

Cell keys:
    NEXTPNR_BEL      external bel name
    BEL_STRENGTH     PlaceStrength value
    CONSTR_X/Y/Z     coordinate constraints (only when constrained)
    CONSTR_ABS_Z     1 if CONSTR_Z is absolute, else 0
    CONSTR_PARENT    parent cell name
    CONSTR_CHILDREN  child cell names joined with ';'

Net keys:
    ROUTING          ``wire;pip;strength`` per bound wire, all joined with
                     ';' (pip empty for source wires). Group order follows
                     the binding map and carries no meaning.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Callable, Hashable, Iterable, NamedTuple, Optional

from physdb.attrs import as_int, as_string
from physdb.cell import Cell, PlaceStrength
from physdb.exceptions import UnknownNameError
from physdb.ids import IdString
from physdb.net import Net

from . import keys

if TYPE_CHECKING:
    from physdb.context import Context

logger = logging.getLogger(__name__)


class RoutingEntry(NamedTuple):
    """One ``wire;pip;strength`` group of a ROUTING attribute."""
    wire: str
    pip: str
    strength: PlaceStrength


# ── Routing Field Format ──────────────────────────────────────────────

def format_routing(entries: Iterable[RoutingEntry]) -> str:
    fields = []
    for entry in entries:
        fields.extend((entry.wire, entry.pip, str(int(entry.strength))))
    return keys.FIELD_SEP.join(fields)


def parse_routing(value: str,
                  warn: Callable[[str], None] = logger.warning) -> list[RoutingEntry]:
    """
    Split a ROUTING value into its groups.

    Args:
        value: The attribute value.
        warn: Receives the report of trailing fields that do not make up
            a whole group (they are ignored).

    Raises:
        ValueError: if a strength field is not a valid PlaceStrength.
    """
    fields = value.split(keys.FIELD_SEP)
    if len(fields) % 3 and value:
        warn(f"ROUTING value has {len(fields) % 3} trailing field(s); ignored")
    return [RoutingEntry(fields[i], fields[i + 1], PlaceStrength(int(fields[i + 2])))
            for i in range(0, len(fields) - 2, 3)]


def split_names(value: str) -> list[str]:
    return [s for s in value.split(keys.FIELD_SEP) if s]


# ── Encode ────────────────────────────────────────────────────────────

def encode_cell(ctx: Context, cell: Cell) -> None:
    attrs = cell.attrs
    if cell.bel is not None:
        attrs.pop(keys.BEL, None)
        attrs[keys.NEXTPNR_BEL] = ctx.name_of_bel(cell.bel)
        attrs[keys.BEL_STRENGTH] = int(cell.bel_strength)
    if cell.constr_x != Cell.UNCONSTR:
        attrs[keys.CONSTR_X] = cell.constr_x
    if cell.constr_y != Cell.UNCONSTR:
        attrs[keys.CONSTR_Y] = cell.constr_y
    if cell.constr_z != Cell.UNCONSTR:
        attrs[keys.CONSTR_Z] = cell.constr_z
        attrs[keys.CONSTR_ABS_Z] = 1 if cell.constr_abs_z else 0
    if cell.constr_parent is not None:
        attrs[keys.CONSTR_PARENT] = ctx.name_of(cell.constr_parent)
    if cell.constr_children:
        attrs[keys.CONSTR_CHILDREN] = keys.FIELD_SEP.join(
            ctx.name_of(c) for c in cell.constr_children)


def encode_net(ctx: Context, net: Net) -> None:
    entries = (
        RoutingEntry(
            wire=ctx.name_of_wire(wire),
            pip="" if pip_map.pip is None else ctx.name_of_pip(pip_map.pip),
            strength=pip_map.strength,
        )
        for wire, pip_map in net.wires.items()
    )
    net.attrs[keys.ROUTING] = format_routing(entries)


def arch_info_to_attributes(ctx: Context) -> None:
    """Write the attribute snapshot of every cell and net."""
    for cell in ctx.cells.values():
        encode_cell(ctx, cell)
    for net in ctx.nets.values():
        encode_net(ctx, net)
    logger.debug("encoded %d cells and %d nets", len(ctx.cells), len(ctx.nets))


# ── Decode ────────────────────────────────────────────────────────────

def _lookup(resolve, name: str, kind: str) -> Hashable:
    handle = resolve(name)
    if handle is None:
        raise UnknownNameError(f"no {kind} named '{name}' in architecture")
    return handle


def _resolve_cell(ctx: Context, name: str) -> Optional[IdString]:
    cell_name = IdString.intern(name)
    return cell_name if cell_name in ctx.cells else None


def decode_cell(ctx: Context, cell: Cell) -> None:
    """
    Restore one cell's binding and constraints.

    Fields are applied in order: bel binding, parent check, X, Y, Z,
    ABS_Z, parent, children. A CONSTR_PARENT naming no live cell is
    reported; with ``skip_cell_on_dangling_parent`` the cell's remaining
    constraint fields are then left untouched.
    """
    attrs = cell.attrs

    val = attrs.get(keys.NEXTPNR_BEL)
    if val is not None:
        strength = PlaceStrength.USER
        if keys.BEL_STRENGTH in attrs:
            strength = PlaceStrength(as_int(attrs[keys.BEL_STRENGTH]))
        bel = _lookup(ctx.get_bel_by_name_str, as_string(val), "bel")
        if cell.bel == bel:
            cell.bel_strength = strength
        else:
            # The snapshot wins over a placement made since it was taken.
            if cell.bel is not None:
                ctx.arch.unbind_bel(cell.bel)
            ctx.arch.bind_bel(bel, cell, strength)

    parent = None
    val = attrs.get(keys.CONSTR_PARENT)
    if val is not None:
        parent = _resolve_cell(ctx, as_string(val))
        if parent is None:
            ctx.log_warning(
                f"cell '{cell.name}' has constraint parent '{as_string(val)}' "
                f"which does not exist")
            if ctx.config.skip_cell_on_dangling_parent:
                return

    val = attrs.get(keys.CONSTR_X)
    if val is not None:
        cell.constr_x = as_int(val)

    val = attrs.get(keys.CONSTR_Y)
    if val is not None:
        cell.constr_y = as_int(val)

    val = attrs.get(keys.CONSTR_Z)
    if val is not None:
        cell.constr_z = as_int(val)

    val = attrs.get(keys.CONSTR_ABS_Z)
    if val is not None:
        cell.constr_abs_z = as_int(val) == 1

    if parent is not None:
        cell.constr_parent = parent

    val = attrs.get(keys.CONSTR_CHILDREN)
    if val is not None:
        children = []
        for name in split_names(as_string(val)):
            child = _resolve_cell(ctx, name)
            if child is None:
                logger.debug("dropping unknown constraint child '%s' of '%s'",
                             name, cell.name)
                continue
            children.append(child)
        cell.constr_children = children


def decode_net(ctx: Context, net: Net) -> None:
    """Rebind the routing recorded in a net's ROUTING attribute."""
    val = net.attrs.get(keys.ROUTING)
    if val is None:
        return
    for entry in parse_routing(as_string(val), ctx.log_warning):
        if not entry.pip:
            wire = _lookup(ctx.get_wire_by_name_str, entry.wire, "wire")
            ctx.arch.bind_wire(wire, net, entry.strength)
        else:
            pip = _lookup(ctx.get_pip_by_name_str, entry.pip, "pip")
            ctx.arch.bind_pip(pip, net, entry.strength)


def attributes_to_arch_info(ctx: Context) -> None:
    """Replay the attribute snapshot of every cell and net."""
    for cell in ctx.cells.values():
        decode_cell(ctx, cell)
    for net in ctx.nets.values():
        decode_net(ctx, net)
    ctx.arch.assign_arch_info()
    logger.debug("decoded %d cells and %d nets", len(ctx.cells), len(ctx.nets))
