"""
Grid architecture: a small, regular reference device.

The device is a width × height array of tiles. Each tile holds a few
LUT bels and a bundle of routing tracks:

  - Bels ``X{x}/Y{y}/LUT{z}`` with input pins I0..I{n-1} and output O.
  - Wires ``X{x}/Y{y}/TRACK{i}`` and one wire per bel pin,
    ``X{x}/Y{y}/LUT{z}_{pin}``.
  - Pips from every track to every LUT input of its tile, from every LUT
    output to every track of its tile, and from each track to the track of
    the same index in the four neighbouring tiles.

Wires and pips form a directed routing graph (networkx), which also
provides shortest-path search for simple routers and tests.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Iterable, Optional
import networkx as nx
import numpy as np

from physdb.cell import Cell, PlaceStrength, PortType
from physdb.exceptions import BindingError, UnknownNameError
from physdb.ids import IdString, IdStringList
from physdb.net import Net, PipMap

from physdb.decal import DecalXY, construct_decal_xy

from .base import Architecture


@dataclass(frozen=True, order=True)
class BelId:
    x: int
    y: int
    z: int


@dataclass(frozen=True, order=True)
class WireId:
    index: int


@dataclass(frozen=True, order=True)
class PipId:
    index: int


@dataclass
class GridArchConfig:
    """Dimensions of a grid device."""
    width: int = 4
    height: int = 4
    bels_per_tile: int = 2
    tracks_per_tile: int = 4
    lut_inputs: int = 4
    bel_type: str = "LUT4"

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: str | Path) -> GridArchConfig:
    """Read a GridArchConfig from a JSON file. Missing keys keep defaults."""
    with open(path, 'r') as f:
        data = json.load(f)
    known = GridArchConfig.__dataclass_fields__.keys()
    unknown = set(data) - set(known)
    if unknown:
        raise ValueError(f"unknown grid config keys: {sorted(unknown)}")
    return GridArchConfig(**data)


@dataclass
class _WireInfo:
    name: IdStringList
    x: int
    y: int


@dataclass
class _PipInfo:
    name: IdStringList
    src: WireId
    dst: WireId
    x: int
    y: int


# Direction of the source tile as seen from the destination tile.
_NEIGHBOURS = [("W", -1, 0), ("E", 1, 0), ("S", 0, -1), ("N", 0, 1)]


class GridArch(Architecture):
    """
    Regular tiled device with exclusive resource binding.

    Usage:
        arch = GridArch(GridArchConfig(width=8, height=8))
        ctx = Context(arch)
    """

    def __init__(self, config: GridArchConfig | None = None):
        self.config = config or GridArchConfig()
        cfg = self.config

        self._wires: list[_WireInfo] = []
        self._pips: list[_PipInfo] = []
        self._bel_by_name: dict[IdStringList, BelId] = {}
        self._wire_by_name: dict[IdStringList, WireId] = {}
        self._pip_by_name: dict[IdStringList, PipId] = {}
        self.graph = nx.DiGraph()

        self._pin_names = ([IdString.intern(f"I{k}") for k in range(cfg.lut_inputs)] +
                           [IdString.intern("O")])
        self._bel_type = IdString.intern(cfg.bel_type)

        for x in range(cfg.width):
            for y in range(cfg.height):
                for z in range(cfg.bels_per_tile):
                    bel = BelId(x, y, z)
                    self._bel_by_name[self.get_bel_name(bel)] = bel
                for i in range(cfg.tracks_per_tile):
                    self._add_wire(x, y, f"TRACK{i}")
                for z in range(cfg.bels_per_tile):
                    for pin in self._pin_names:
                        self._add_wire(x, y, f"LUT{z}_{pin}")

        for x in range(cfg.width):
            for y in range(cfg.height):
                self._add_tile_pips(x, y)

        # Binding state
        self._bel_to_cell: dict[BelId, Cell] = {}
        self._wire_to_net: dict[WireId, Net] = {}
        self._pip_to_net: dict[PipId, Net] = {}
        self.tile_usage = np.zeros((cfg.height, cfg.width), dtype=int)

    # ── Construction ──────────────────────────────────────────────────

    def _tile_name(self, x: int, y: int, local: str) -> IdStringList:
        return IdStringList.of((f"X{x}", f"Y{y}", local))

    def _add_wire(self, x: int, y: int, local: str) -> WireId:
        wire = WireId(len(self._wires))
        name = self._tile_name(x, y, local)
        self._wires.append(_WireInfo(name, x, y))
        self._wire_by_name[name] = wire
        self.graph.add_node(wire)
        return wire

    def _local_wire(self, x: int, y: int, local: str) -> WireId:
        return self._wire_by_name[self._tile_name(x, y, local)]

    def _add_pip(self, src: WireId, dst: WireId, x: int, y: int,
                 local: str) -> PipId:
        pip = PipId(len(self._pips))
        name = self._tile_name(x, y, local)
        self._pips.append(_PipInfo(name, src, dst, x, y))
        self._pip_by_name[name] = pip
        self.graph.add_edge(src, dst, pip=pip)
        return pip

    def _add_tile_pips(self, x: int, y: int) -> None:
        cfg = self.config
        for i in range(cfg.tracks_per_tile):
            track = self._local_wire(x, y, f"TRACK{i}")
            for z in range(cfg.bels_per_tile):
                for pin in self._pin_names[:-1]:
                    dst = self._local_wire(x, y, f"LUT{z}_{pin}")
                    self._add_pip(track, dst, x, y, f"TRACK{i}.LUT{z}_{pin}")
                src = self._local_wire(x, y, f"LUT{z}_O")
                self._add_pip(src, track, x, y, f"LUT{z}_O.TRACK{i}")
            for direction, dx, dy in _NEIGHBOURS:
                sx, sy = x + dx, y + dy
                if 0 <= sx < cfg.width and 0 <= sy < cfg.height:
                    src = self._local_wire(sx, sy, f"TRACK{i}")
                    self._add_pip(src, track, x, y, f"{direction}_TRACK{i}.TRACK{i}")

    # ── Naming ────────────────────────────────────────────────────────

    def get_bel_name(self, bel: BelId) -> IdStringList:
        return self._tile_name(bel.x, bel.y, f"LUT{bel.z}")

    def get_bel_by_name(self, name: IdStringList) -> Optional[BelId]:
        return self._bel_by_name.get(name)

    def get_wire_name(self, wire: WireId) -> IdStringList:
        return self._wires[wire.index].name

    def get_wire_by_name(self, name: IdStringList) -> Optional[WireId]:
        return self._wire_by_name.get(name)

    def get_pip_name(self, pip: PipId) -> IdStringList:
        return self._pips[pip.index].name

    def get_pip_by_name(self, name: IdStringList) -> Optional[PipId]:
        return self._pip_by_name.get(name)

    # ── Enumeration ───────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    def get_bels(self) -> list[BelId]:
        return list(self._bel_by_name.values())

    def get_wires(self) -> list[WireId]:
        return [WireId(i) for i in range(len(self._wires))]

    def get_pips(self) -> list[PipId]:
        return [PipId(i) for i in range(len(self._pips))]

    def get_bels_by_tile(self, x: int, y: int) -> Iterable[BelId]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return []
        return [BelId(x, y, z) for z in range(self.config.bels_per_tile)]

    def get_bel_type(self, bel: BelId) -> IdString:
        return self._bel_type

    def get_bel_pins(self, bel: BelId) -> Iterable[IdString]:
        return list(self._pin_names)

    def get_bel_pin_type(self, bel: BelId, pin: IdString) -> PortType:
        return PortType.OUT if str(pin) == "O" else PortType.IN

    def get_bel_pin_wire(self, bel: BelId, pin: IdString) -> WireId:
        return self._local_wire(bel.x, bel.y, f"LUT{bel.z}_{pin}")

    def get_pip_src_wire(self, pip: PipId) -> WireId:
        return self._pips[pip.index].src

    def get_pip_dst_wire(self, pip: PipId) -> WireId:
        return self._pips[pip.index].dst

    def get_pips_downhill(self, wire: WireId) -> list[PipId]:
        return [d["pip"] for _, _, d in self.graph.out_edges(wire, data=True)]

    def get_pips_uphill(self, wire: WireId) -> list[PipId]:
        return [d["pip"] for _, _, d in self.graph.in_edges(wire, data=True)]

    def find_route(self, src: WireId, dst: WireId) -> list[PipId]:
        """
        Shortest pip path from src to dst over the routing graph.

        Raises:
            networkx.NetworkXNoPath: if dst is unreachable.
        """
        path = nx.shortest_path(self.graph, src, dst)
        return [self.graph.edges[a, b]["pip"] for a, b in zip(path, path[1:])]

    # ── Binding ───────────────────────────────────────────────────────

    def bind_bel(self, bel: BelId, cell: Cell, strength: PlaceStrength) -> None:
        self._check_bel(bel)
        bound = self._bel_to_cell.get(bel)
        if bound is not None:
            raise BindingError(
                f"bel '{self.get_bel_name(bel)}' is already bound to cell '{bound.name}'")
        if cell.bel is not None:
            raise BindingError(
                f"cell '{cell.name}' is already bound to bel '{self.get_bel_name(cell.bel)}'")
        self._bel_to_cell[bel] = cell
        cell.bel = bel
        cell.bel_strength = strength
        self.tile_usage[bel.y, bel.x] += 1

    def unbind_bel(self, bel: BelId) -> None:
        cell = self._bel_to_cell.pop(bel, None)
        if cell is None:
            raise BindingError(f"bel '{self.get_bel_name(bel)}' is not bound")
        cell.bel = None
        cell.bel_strength = PlaceStrength.NONE
        self.tile_usage[bel.y, bel.x] -= 1

    def bind_wire(self, wire: WireId, net: Net, strength: PlaceStrength) -> None:
        self._check_wire_free(wire)
        self._wire_to_net[wire] = net
        net.wires[wire] = PipMap(pip=None, strength=strength)

    def unbind_wire(self, wire: WireId) -> None:
        net = self._wire_to_net.pop(wire, None)
        if net is None:
            raise BindingError(f"wire '{self.get_wire_name(wire)}' is not bound")
        pip = net.wires.pop(wire).pip
        if pip is not None:
            del self._pip_to_net[pip]

    def bind_pip(self, pip: PipId, net: Net, strength: PlaceStrength) -> None:
        if pip in self._pip_to_net:
            raise BindingError(f"pip '{self.get_pip_name(pip)}' is already bound")
        dst = self.get_pip_dst_wire(pip)
        self._check_wire_free(dst)
        self._pip_to_net[pip] = net
        self._wire_to_net[dst] = net
        net.wires[dst] = PipMap(pip=pip, strength=strength)

    def unbind_pip(self, pip: PipId) -> None:
        net = self._pip_to_net.pop(pip, None)
        if net is None:
            raise BindingError(f"pip '{self.get_pip_name(pip)}' is not bound")
        dst = self.get_pip_dst_wire(pip)
        del self._wire_to_net[dst]
        del net.wires[dst]

    def check_bel_avail(self, bel: BelId) -> bool:
        return bel not in self._bel_to_cell

    def check_wire_avail(self, wire: WireId) -> bool:
        return wire not in self._wire_to_net

    def check_pip_avail(self, pip: PipId) -> bool:
        return pip not in self._pip_to_net

    def get_bound_bel_cell(self, bel: BelId) -> Optional[Cell]:
        return self._bel_to_cell.get(bel)

    def get_bound_wire_net(self, wire: WireId) -> Optional[Net]:
        return self._wire_to_net.get(wire)

    def get_bound_pip_net(self, pip: PipId) -> Optional[Net]:
        return self._pip_to_net.get(pip)

    def _check_bel(self, bel: BelId) -> None:
        cfg = self.config
        if not (isinstance(bel, BelId) and 0 <= bel.x < cfg.width and
                0 <= bel.y < cfg.height and 0 <= bel.z < cfg.bels_per_tile):
            raise UnknownNameError(f"no such bel: {bel!r}")

    def _check_wire_free(self, wire: WireId) -> None:
        bound = self._wire_to_net.get(wire)
        if bound is not None:
            raise BindingError(
                f"wire '{self.get_wire_name(wire)}' is already bound to net '{bound.name}'")

    # ── Delays ────────────────────────────────────────────────────────

    def get_delay_from_ns(self, ns: float) -> float:
        return float(ns)

    def get_delay_ns(self, delay: float) -> float:
        return float(delay)

    # ── Bulk Restore ──────────────────────────────────────────────────

    def assign_arch_info(self) -> None:
        """Rebuild the per-tile bel usage map from the binding table."""
        usage = np.zeros((self.height, self.width), dtype=int)
        for bel in self._bel_to_cell:
            usage[bel.y, bel.x] += 1
        self.tile_usage = usage

    def utilization_map(self) -> np.ndarray:
        """Fraction of bels bound per tile, indexed [y, x]."""
        return self.tile_usage / float(max(self.config.bels_per_tile, 1))

    # ── Decals ────────────────────────────────────────────────────────

    def get_bel_decal(self, bel: BelId) -> DecalXY:
        step = 1.0 / (self.config.bels_per_tile + 1)
        return construct_decal_xy(("bel", bel), bel.x + 0.1, bel.y + step * (bel.z + 0.5))

    def get_wire_decal(self, wire: WireId) -> DecalXY:
        info = self._wires[wire.index]
        return construct_decal_xy(("wire", wire), info.x + 0.5, info.y + 0.5)

    def __repr__(self) -> str:
        return (f"GridArch({self.width}×{self.height}, "
                f"bels={len(self._bel_by_name)}, wires={len(self._wires)}, "
                f"pips={len(self._pips)})")
