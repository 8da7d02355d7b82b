"""
Unit tests for the physical design database.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import logging
import pytest

from arch.grid import BelId, GridArch, GridArchConfig
from physdb import (
    BindingError, Cell, Context, ContextConfig, DuplicateNameError,
    IdString, IdStringList, PhysDBError, PlaceStrength, PortType,
    UnknownNameError,
)
from physdb.attrs import as_int, as_string
from physdb.net import PortRef
from timing.clock import DelayPair, derive_clock_constraint


@pytest.fixture
def ctx():
    return Context(GridArch(GridArchConfig(width=4, height=4)))


def _warnings(ctx):
    seen = []
    ctx.add_warning_observer(seen.append)
    return seen


def _lut(ctx, name, bel=BelId(0, 0, 0)):
    cell = ctx.create_cell(name, "LUT4")
    ctx.copy_bel_ports(name, bel)
    return cell


class TestIdString:
    """Tests for identifier interning."""

    def test_intern_is_stable(self):
        a = IdString.intern("lut0")
        b = IdString.intern("lut0")
        assert a == b
        assert a.index == b.index
        assert str(a) == "lut0"

    def test_distinct_strings(self):
        assert IdString.intern("a_net") != IdString.intern("b_net")

    def test_empty_sentinel(self):
        assert IdString().empty
        assert not IdString()
        assert str(IdString()) == ""
        assert IdString.intern("") == IdString()

    def test_list_parse_and_join(self):
        name = IdStringList.parse("X1/Y2/LUT0")
        assert len(name) == 3
        assert str(name[2]) == "LUT0"
        assert name.join(".") == "X1.Y2.LUT0"
        assert IdStringList.parse("") == IdStringList()


class TestAttrs:
    """Tests for attribute value coercion."""

    def test_as_int(self):
        assert as_int(7) == 7
        assert as_int("12") == 12
        assert as_int(" -3 ") == -3
        assert as_int(True) == 1

    def test_as_int_rejects_text(self):
        with pytest.raises(ValueError):
            as_int("abc")

    def test_as_string(self):
        assert as_string("x") == "x"
        assert as_string(5) == "5"


class TestRegistries:
    """Tests for cell and net creation and alias resolution."""

    def test_create_net_is_own_alias(self, ctx):
        net = ctx.create_net("n1")
        assert ctx.net_aliases[net.name] == net.name
        assert ctx.get_net_by_alias("n1") is net
        assert net.wires == {}
        assert net.driver is None
        assert net.users == []

    def test_duplicate_net(self, ctx):
        ctx.create_net("n1")
        with pytest.raises(DuplicateNameError):
            ctx.create_net("n1")

    def test_net_name_taken_by_alias(self, ctx):
        ctx.create_net("n1")
        ctx.add_net_alias("a", "n1")
        with pytest.raises(DuplicateNameError):
            ctx.create_net("a")

    def test_duplicate_cell(self, ctx):
        ctx.create_cell("c", "LUT4")
        with pytest.raises(DuplicateNameError):
            ctx.create_cell("c", "DFF")

    def test_new_cell_is_unconstrained(self, ctx):
        cell = ctx.create_cell("c", "LUT4")
        assert cell.bel is None
        assert cell.bel_strength == PlaceStrength.NONE
        assert cell.constr_x == Cell.UNCONSTR
        assert cell.constr_y == Cell.UNCONSTR
        assert cell.constr_z == Cell.UNCONSTR
        assert not cell.constr_abs_z
        assert cell.constr_parent is None
        assert cell.constr_children == []
        assert not cell.is_constrained

    def test_unknown_names(self, ctx):
        with pytest.raises(UnknownNameError):
            ctx.get_cell("nope")
        with pytest.raises(UnknownNameError):
            ctx.get_net_by_alias("nope")
        with pytest.raises(LookupError):
            ctx.get_net_by_alias("nope")

    def test_alias_resolves(self, ctx):
        net = ctx.create_net("n1")
        ctx.add_net_alias("top.u0.n1", "n1")
        assert ctx.get_net_by_alias("top.u0.n1") is net

    def test_alias_of_alias(self, ctx):
        net = ctx.create_net("n1")
        ctx.add_net_alias("a", "n1")
        ctx.add_net_alias("b", "a")
        assert ctx.net_aliases[IdString.intern("b")] == net.name

    def test_duplicate_alias(self, ctx):
        ctx.create_net("n1")
        ctx.create_net("n2")
        ctx.add_net_alias("a", "n1")
        with pytest.raises(DuplicateNameError):
            ctx.add_net_alias("a", "n2")

    def test_rename_keeps_old_names(self, ctx):
        net = ctx.create_net("old")
        ctx.add_net_alias("alias", "old")
        ctx.rename_net("old", "new")
        assert net.name == IdString.intern("new")
        assert IdString.intern("old") not in ctx.nets
        for name in ("old", "alias", "new"):
            assert ctx.get_net_by_alias(name) is net
        for canonical in ctx.net_aliases.values():
            assert canonical in ctx.nets

    def test_rename_to_taken_name(self, ctx):
        ctx.create_net("a")
        ctx.create_net("b")
        with pytest.raises(DuplicateNameError):
            ctx.rename_net("a", "b")

    def test_name_lookup_round_trip(self, ctx):
        bel = BelId(2, 1, 1)
        name = ctx.name_of_bel(bel)
        assert name == "X2/Y1/LUT1"
        assert ctx.get_bel_by_name_str(name) == bel
        assert ctx.get_bel_by_name_str("X9/Y9/LUT0") is None

    def test_name_of(self, ctx):
        assert ctx.name_of(IdString.intern("lut7")) == "lut7"
        assert ctx.name_of(None) == ""

    def test_group_lookup_without_groups(self, ctx):
        assert ctx.get_group_by_name_str("X0/Y0/G0") is None
        assert ctx.name_of_group(object()) == ""

    def test_custom_name_separator(self):
        ctx = Context(GridArch(), ContextConfig(name_separator="."))
        assert ctx.name_of_bel(BelId(1, 0, 0)) == "X1.Y0.LUT0"
        assert ctx.get_bel_by_name_str("X1.Y0.LUT0") == BelId(1, 0, 0)

    def test_ui_refresh_on_create(self, ctx):
        calls = []
        ctx.add_ui_observer(lambda: calls.append(1))
        ctx.create_cell("c", "LUT4")
        ctx.create_net("n")
        assert len(calls) == 2


class TestRegions:
    """Tests for regions and hierarchy fan-out."""

    def test_rectangular_region_inclusive(self, ctx):
        region = ctx.create_rectangular_region("r", 0, 0, 1, 1)
        expected = set()
        for x in (0, 1):
            for y in (0, 1):
                expected.update(ctx.arch.get_bels_by_tile(x, y))
        assert region.bels == expected
        assert len(region) == 8
        assert region.constr_bels
        assert not region.constr_wires
        assert not region.constr_pips

    def test_region_clipped_to_device(self, ctx):
        region = ctx.create_rectangular_region("r", 3, 3, 10, 10)
        assert region.bels == set(ctx.arch.get_bels_by_tile(3, 3))

    def test_region_replaced(self, ctx):
        ctx.create_rectangular_region("r", 0, 0, 3, 3)
        region = ctx.create_rectangular_region("r", 0, 0, 0, 0)
        assert ctx.regions[IdString.intern("r")] is region
        assert len(region) == 2

    def test_add_bel_to_region(self, ctx):
        ctx.create_rectangular_region("r", 0, 0, 0, 0)
        ctx.add_bel_to_region("r", BelId(3, 3, 0))
        assert BelId(3, 3, 0) in ctx.regions[IdString.intern("r")]

    def test_add_bel_to_unknown_region(self, ctx):
        with pytest.raises(UnknownNameError):
            ctx.add_bel_to_region("missing", BelId(0, 0, 0))

    def test_constrain_leaf_cell(self, ctx):
        ctx.create_rectangular_region("r", 0, 0, 1, 1)
        ctx.create_cell("c", "LUT4")
        ctx.constrain_cell_to_region("c", "r")
        assert ctx.get_cell("c").region == IdString.intern("r")
        assert ctx.get_cell_region("c") is ctx.regions[IdString.intern("r")]
        assert [c.name for c in ctx.cells_in_region("r")] == [IdString.intern("c")]

    def test_constrain_to_missing_region_is_unresolved(self, ctx):
        ctx.create_cell("c", "LUT4")
        ctx.constrain_cell_to_region("c", "later")
        assert ctx.get_cell("c").region == IdString.intern("later")
        assert ctx.get_cell_region("c") is None

    def test_constrain_hierarchy(self, ctx):
        for name in ("top.u0.a", "top.u0.b", "top.u1.sub.c", "other"):
            ctx.create_cell(name, "LUT4")
        ctx.add_hierarchy("top.u1.sub", leaf_cells=["top.u1.sub.c"])
        ctx.add_hierarchy("top.u0", leaf_cells=["top.u0.a", "top.u0.b"])
        ctx.add_hierarchy("top", hier_cells=["top.u0", "top.u1.sub"])
        ctx.constrain_cell_to_region("top", "r")
        for name in ("top.u0.a", "top.u0.b", "top.u1.sub.c"):
            assert ctx.get_cell(name).region == IdString.intern("r")
        assert ctx.get_cell("other").region is None

    def test_constrain_mixed_children_replaces_region(self, ctx):
        for name in ("h.c1", "h.c2", "h.h2.c3"):
            ctx.create_cell(name, "LUT4")
            ctx.constrain_cell_to_region(name, "old")
        ctx.add_hierarchy("h", leaf_cells=["h.c1", "h.c2"], hier_cells=["h.h2"])
        ctx.add_hierarchy("h.h2", leaf_cells=["h.h2.c3"])
        ctx.constrain_cell_to_region("h", "R")
        for name in ("h.c1", "h.c2", "h.h2.c3"):
            assert ctx.get_cell(name).region == IdString.intern("R")
        assert ctx.cells_in_region("old") == []

    def test_hierarchy_local_names(self, ctx):
        hc = ctx.add_hierarchy("top.u0", leaf_cells=["top.u0.a", "top/u0/b"])
        assert set(str(k) for k in hc.leaf_cells) == {"a", "b"}
        assert hc.leaf_cells[IdString.intern("a")] == IdString.intern("top.u0.a")

    def test_hierarchy_missing_child_warns(self, ctx):
        seen = _warnings(ctx)
        ctx.create_cell("top.a", "LUT4")
        ctx.add_hierarchy("top", leaf_cells=["top.a", "top.gone"])
        ctx.constrain_cell_to_region("top", "r")
        assert ctx.get_cell("top.a").region == IdString.intern("r")
        assert seen == ["No cell matched 'top.gone' when constraining to region 'r'"]

    def test_no_match_warns(self, ctx):
        seen = _warnings(ctx)
        ctx.constrain_cell_to_region("ghost", "r")
        assert len(seen) == 1
        assert "ghost" in seen[0]

    def test_constraint_tree_queries(self, ctx):
        parent = ctx.create_cell("p", "LUT4")
        child = ctx.create_cell("c", "LUT4")
        child.constr_parent = parent.name
        parent.constr_children = [child.name, IdString.intern("gone")]
        assert ctx.get_constr_parent("c") is parent
        assert ctx.get_constr_children("p") == [child]
        assert parent.is_constrained


class TestConnectivity:
    """Tests for port connection primitives."""

    def test_copy_bel_ports(self, ctx):
        cell = _lut(ctx, "c")
        assert set(str(p) for p in cell.ports) == {"I0", "I1", "I2", "I3", "O"}
        assert cell.ports[IdString.intern("O")].type == PortType.OUT
        assert cell.ports[IdString.intern("I0")].type == PortType.IN

    def test_copy_bel_ports_keeps_connection(self, ctx):
        cell = ctx.create_cell("c", "LUT4")
        cell.add_input("O")
        ctx.create_net("n")
        ctx.connect_port("n", "c", "O")
        ctx.copy_bel_ports("c", BelId(0, 0, 0))
        port = cell.ports[IdString.intern("O")]
        assert port.type == PortType.OUT
        assert port.net == IdString.intern("n")

    def test_connect_driver_and_users(self, ctx):
        _lut(ctx, "drv")
        _lut(ctx, "snk")
        net = ctx.create_net("n")
        ctx.connect_port("n", "drv", "O")
        ctx.connect_port("n", "snk", "I0")
        assert net.driver == PortRef(IdString.intern("drv"), IdString.intern("O"))
        assert net.users == [PortRef(IdString.intern("snk"), IdString.intern("I0"))]
        assert net.degree == 2

    def test_connect_via_alias(self, ctx):
        _lut(ctx, "snk")
        net = ctx.create_net("n")
        ctx.add_net_alias("n_alias", "n")
        ctx.connect_port("n_alias", "snk", "I1")
        assert ctx.get_cell("snk").ports[IdString.intern("I1")].net == net.name

    def test_connect_errors(self, ctx):
        _lut(ctx, "a")
        _lut(ctx, "b")
        ctx.create_net("n")
        ctx.connect_port("n", "a", "O")
        with pytest.raises(UnknownNameError):
            ctx.connect_port("n", "a", "Q")
        with pytest.raises(PhysDBError):
            ctx.connect_port("n", "a", "O")
        with pytest.raises(PhysDBError):
            ctx.connect_port("n", "b", "O")

    def test_disconnect(self, ctx):
        _lut(ctx, "drv")
        _lut(ctx, "snk")
        net = ctx.create_net("n")
        ctx.connect_port("n", "drv", "O")
        ctx.connect_port("n", "snk", "I0")
        ctx.disconnect_port("drv", "O")
        ctx.disconnect_port("snk", "I0")
        assert net.driver is None
        assert net.users == []
        assert ctx.get_cell("snk").ports[IdString.intern("I0")].net is None

    def test_disconnect_after_rename(self, ctx):
        _lut(ctx, "snk")
        net = ctx.create_net("n")
        ctx.connect_port("n", "snk", "I0")
        ctx.rename_net("n", "m")
        ctx.disconnect_port("snk", "I0")
        assert net.users == []


class TestRouting:
    """Tests for rip-up and routing locks."""

    def _route(self, ctx, name="n"):
        arch = ctx.arch
        net = ctx.create_net(name)
        src = arch.get_bel_pin_wire(BelId(0, 0, 0), IdString.intern("O"))
        dst = arch.get_bel_pin_wire(BelId(2, 0, 1), IdString.intern("I2"))
        arch.bind_wire(src, net, PlaceStrength.WEAK)
        for pip in arch.find_route(src, dst):
            arch.bind_pip(pip, net, PlaceStrength.WEAK)
        return net, src, dst

    def test_ripup_net(self, ctx):
        net, src, dst = self._route(ctx)
        assert net.is_routed
        ctx.ripup_net("n")
        assert net.wires == {}
        assert ctx.arch.check_wire_avail(src)
        assert ctx.arch.check_wire_avail(dst)
        assert all(ctx.arch.check_pip_avail(p) for p in ctx.arch.get_pips())

    def test_ripup_keeps_connectivity(self, ctx):
        _lut(ctx, "drv")
        net, _, _ = self._route(ctx)
        ctx.connect_port("n", "drv", "O")
        ctx.ripup_net("n")
        assert net.driver is not None

    def test_ripup_unrouted(self, ctx):
        net = ctx.create_net("n")
        ctx.ripup_net("n")
        assert net.wires == {}

    def test_lock_net_routing(self, ctx):
        net, _, _ = self._route(ctx)
        ctx.lock_net_routing("n")
        assert all(pm.strength == PlaceStrength.USER for pm in net.wires.values())

    def test_lock_twice_same_as_once(self, ctx):
        once, _, _ = self._route(ctx, "once")
        ctx.lock_net_routing("once")
        after_one = {w: (pm.pip, pm.strength) for w, pm in once.wires.items()}
        ctx.ripup_net("once")

        twice, _, _ = self._route(ctx, "twice")
        ctx.lock_net_routing("twice")
        ctx.lock_net_routing("twice")
        after_two = {w: (pm.pip, pm.strength) for w, pm in twice.wires.items()}
        assert after_two == after_one

    def test_lock_unrouted(self, ctx):
        net = ctx.create_net("n")
        ctx.lock_net_routing("n")
        assert net.wires == {}


class TestClock:
    """Tests for clock constraint derivation."""

    def test_derive(self):
        cc = derive_clock_constraint(100.0)
        assert cc.period == DelayPair(10.0, 10.0)
        assert cc.high == DelayPair(5.0, 5.0)
        assert cc.low == DelayPair(5.0, 5.0)
        assert cc.frequency_mhz == pytest.approx(100.0)

    def test_derive_uses_delay_unit(self):
        cc = derive_clock_constraint(250.0, lambda ns: ns * 1000)
        assert cc.period.max == pytest.approx(4000.0)
        assert cc.high.min == pytest.approx(2000.0)

    def test_derive_rejects_nonpositive(self):
        with pytest.raises(ValueError):
            derive_clock_constraint(0.0)

    def test_add_clock(self, ctx, caplog):
        net = ctx.create_net("clk")
        with caplog.at_level(logging.INFO, logger="physdb"):
            ctx.add_clock("clk", 100.0)
        assert net.clkconstr.period.max == pytest.approx(10.0)
        assert net.clkconstr.high.max == pytest.approx(5.0)
        assert "constraining clock net 'clk' to 100.00 MHz" in caplog.text

    def test_add_clock_via_alias(self, ctx):
        net = ctx.create_net("clk")
        ctx.add_net_alias("sys_clk", "clk")
        ctx.add_clock("sys_clk", 50.0)
        assert net.clkconstr.period.max == pytest.approx(20.0)

    def test_add_clock_unknown_net(self, ctx):
        seen = _warnings(ctx)
        ctx.add_clock("ghost", 100.0)
        assert seen == ["net 'ghost' does not exist in design, ignoring clock constraint"]
        assert IdString.intern("ghost") not in ctx.nets

    def test_add_clock_replaces(self, ctx):
        net = ctx.create_net("clk")
        ctx.add_clock("clk", 100.0)
        ctx.add_clock("clk", 200.0)
        assert net.clkconstr.period.max == pytest.approx(5.0)


class TestBinding:
    """Tests for exclusive resource binding through the context."""

    def test_bind_bel(self, ctx):
        cell = ctx.create_cell("c", "LUT4")
        ctx.arch.bind_bel(BelId(1, 1, 0), cell, PlaceStrength.PLACER)
        assert cell.bel == BelId(1, 1, 0)
        assert cell.is_placed
        assert ctx.arch.get_bound_bel_cell(BelId(1, 1, 0)) is cell

    def test_double_bind(self, ctx):
        a = ctx.create_cell("a", "LUT4")
        b = ctx.create_cell("b", "LUT4")
        ctx.arch.bind_bel(BelId(1, 1, 0), a, PlaceStrength.PLACER)
        with pytest.raises(BindingError):
            ctx.arch.bind_bel(BelId(1, 1, 0), b, PlaceStrength.PLACER)
