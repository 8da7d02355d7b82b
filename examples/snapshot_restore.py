"""
Physical Design Database: Snapshot & Restore Example
====================================================

This script demonstrates a small flow against the grid reference device:
  1. Build cells and nets, connect ports
  2. Constrain a hierarchical instance to a region
  3. Place and route by hand, add a clock
  4. Snapshot placement and routing into attributes
  5. Restore the snapshot into a fresh context
  6. Render the restored layout

Usage:
    cd pnr-physdb
    python examples/snapshot_restore.py
"""

import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from arch import BelId, GridArch, GridArchConfig
from attrcodec import arch_info_to_attributes, attributes_to_arch_info, user_attrs
from physdb import Context, IdString, PlaceStrength
from visualizer import LayoutViewer


def build(ctx: Context) -> None:
    arch = ctx.arch
    for name in ("top.u0.lut_a", "top.u0.lut_b"):
        ctx.create_cell(name, "LUT4")
        ctx.copy_bel_ports(name, BelId(0, 0, 0))
    ctx.add_hierarchy("top.u0", leaf_cells=["top.u0.lut_a", "top.u0.lut_b"])
    ctx.add_hierarchy("top", hier_cells=["top.u0"])

    ctx.create_net("data")
    ctx.add_net_alias("top.u0.data", "data")
    ctx.connect_port("data", "top.u0.lut_a", "O")
    ctx.connect_port("top.u0.data", "top.u0.lut_b", "I0")
    ctx.create_net("clk")
    ctx.add_clock("clk", 125.0)

    ctx.create_rectangular_region("left", 0, 0, 1, 3)
    ctx.constrain_cell_to_region("top", "left")

    lut_a, lut_b = ctx.get_cell("top.u0.lut_a"), ctx.get_cell("top.u0.lut_b")
    arch.bind_bel(BelId(0, 1, 0), lut_a, PlaceStrength.PLACER)
    arch.bind_bel(BelId(1, 2, 1), lut_b, PlaceStrength.PLACER)
    lut_b.constr_parent = lut_a.name
    lut_b.constr_x, lut_b.constr_y = 1, 1
    lut_a.constr_children = [lut_b.name]
    lut_a.set_attr("src", "top.v:12")

    net = ctx.get_net_by_alias("data")
    src = arch.get_bel_pin_wire(lut_a.bel, IdString.intern("O"))
    dst = arch.get_bel_pin_wire(lut_b.bel, IdString.intern("I0"))
    arch.bind_wire(src, net, PlaceStrength.STRONG)
    for pip in arch.find_route(src, dst):
        arch.bind_pip(pip, net, PlaceStrength.STRONG)
    ctx.lock_net_routing("data")


def main():
    print("=" * 60)
    print("  Physical Design Database - Snapshot & Restore")
    print("=" * 60)

    # ── Step 1-3: Build, Constrain, Place & Route ─────────────────
    cfg = GridArchConfig(width=4, height=4)
    ctx = Context(GridArch(cfg))
    build(ctx)
    print(f"\n[BUILD] {ctx!r}")
    print(f"   Cells in region 'left': "
          f"{[str(c.name) for c in ctx.cells_in_region('left')]}")

    # ── Step 4: Snapshot ──────────────────────────────────────────
    arch_info_to_attributes(ctx)
    print("\n[SNAPSHOT]")
    for cell in ctx.cells.values():
        print(f"   {cell.name}: {{{', '.join(f'{k}={v}' for k, v in cell.attrs.items())}}}")
    for net in ctx.nets.values():
        print(f"   {net.name}: ROUTING={net.attrs[IdString.intern('ROUTING')]!r}")

    # ── Step 5: Restore ───────────────────────────────────────────
    restored = Context(GridArch(cfg))
    for cell in ctx.cells.values():
        restored.create_cell(cell.name, cell.type).attrs = dict(cell.attrs)
    for net in ctx.nets.values():
        restored.create_net(net.name).attrs = dict(net.attrs)
    attributes_to_arch_info(restored)

    print("\n[RESTORE]")
    for cell in restored.cells.values():
        print(f"   {cell!r}  user attrs: {user_attrs(cell.attrs)}")
    print(f"   data routed over {len(restored.get_net_by_alias('data').wires)} wires")

    # ── Step 6: Visualization ─────────────────────────────────────
    output_dir = os.path.join(os.path.dirname(__file__), '..', 'output')
    os.makedirs(output_dir, exist_ok=True)
    viewer = LayoutViewer(restored)
    viewer.plot_layout(os.path.join(output_dir, 'restored_layout.png'))
    viewer.plot_utilization(os.path.join(output_dir, 'restored_utilization.png'))
    print(f"\n[VIZ] Plots written to {os.path.abspath(output_dir)}")


if __name__ == '__main__':
    main()
