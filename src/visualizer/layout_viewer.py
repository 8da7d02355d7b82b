"""
Layout Viewer: placement and routing visualization for a design Context.

Draws, from the architecture's decals:
  - Every bel, coloured by whether it is bound, labelled with its cell
  - Bound routing of each net, as lines between wire decals
  - Per-tile bel utilization heatmaps

The viewer registers itself as a UI observer of the Context, so a flow can
ask it whether the design changed since the last render.
"""

from __future__ import annotations
import logging
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.patches as patches
from matplotlib.collections import LineCollection
from matplotlib.colors import LinearSegmentedColormap
import numpy as np

from physdb.cell import PlaceStrength
from physdb.context import Context

logger = logging.getLogger(__name__)


# ── Color Palettes ────────────────────────────────────────────────────

BOUND_COLOR = '#50C878'
FREE_COLOR = '#21262d'
LOCKED_COLOR = '#FFD93D'
NET_COLORS = ['#4A90D9', '#7B68EE', '#FF6B6B', '#58a6ff', '#e94560', '#52b788']

UTIL_CMAP = LinearSegmentedColormap.from_list(
    'utilization', ['#1a1a2e', '#2d6a4f', '#52b788', '#ffd93d', '#e94560']
)

DARK_BG = '#0d1117'
DARK_GRID = '#21262d'
DARK_TEXT = '#c9d1d9'
ACCENT = '#58a6ff'


class LayoutViewer:
    """
    Render the physical state of a Context.

    Usage:
        viewer = LayoutViewer(ctx)
        viewer.plot_layout('layout.png')
    """

    def __init__(self, ctx: Context, style: str = 'dark',
                 bel_size: float = 0.3):
        self.ctx = ctx
        self.arch = ctx.arch
        self.style = style
        self.bel_size = bel_size
        self.dirty = True
        self.refresh_count = 0
        ctx.add_ui_observer(self.refresh)

        if style == 'dark':
            plt.rcParams.update({
                'figure.facecolor': DARK_BG,
                'axes.facecolor': DARK_BG,
                'axes.edgecolor': DARK_GRID,
                'text.color': DARK_TEXT,
                'xtick.color': DARK_TEXT,
                'ytick.color': DARK_TEXT,
                'axes.labelcolor': DARK_TEXT,
                'font.family': 'sans-serif',
                'font.size': 10,
            })

    def refresh(self) -> None:
        """UI observer callback: the design changed."""
        self.dirty = True
        self.refresh_count += 1

    def routing_segments(self) -> dict:
        """Line segments (decal to decal) of each routed net, by net name."""
        segments = {}
        for name, net in self.ctx.nets.items():
            lines = []
            for wire, pip_map in net.wires.items():
                if pip_map.pip is None:
                    continue
                src = self.arch.get_wire_decal(self.arch.get_pip_src_wire(pip_map.pip))
                dst = self.arch.get_wire_decal(wire)
                lines.append(((src.x, src.y), (dst.x, dst.y)))
            if lines:
                segments[name] = lines
        return segments

    def plot_layout(self, save_path: str = 'layout.png',
                    show_labels: bool = True,
                    show_routing: bool = True,
                    figsize: tuple = (10, 10),
                    dpi: int = 120) -> None:
        """Plot bels and bound routing."""
        fig, ax = plt.subplots(1, 1, figsize=figsize, dpi=dpi)

        width, height = self.arch.width, self.arch.height
        for x in range(width + 1):
            ax.axvline(x, color=DARK_GRID, linewidth=0.5)
        for y in range(height + 1):
            ax.axhline(y, color=DARK_GRID, linewidth=0.5)

        bound = 0
        for bel in self.arch.get_bels():
            dxy = self.arch.get_bel_decal(bel)
            cell = self.arch.get_bound_bel_cell(bel)
            if cell is None:
                color = FREE_COLOR
            elif cell.bel_strength >= PlaceStrength.LOCKED:
                color = LOCKED_COLOR
            else:
                color = BOUND_COLOR
            rect = patches.Rectangle(
                (dxy.x, dxy.y), self.bel_size, self.bel_size / 2,
                linewidth=1.0, edgecolor='white', facecolor=color, alpha=0.85
            )
            ax.add_patch(rect)
            if cell is not None:
                bound += 1
                if show_labels:
                    ax.text(dxy.x + self.bel_size + 0.02, dxy.y + self.bel_size / 4,
                            str(cell.name), va='center', fontsize=6, color='white')

        if show_routing:
            for i, (name, lines) in enumerate(self.routing_segments().items()):
                ax.add_collection(LineCollection(
                    lines, colors=NET_COLORS[i % len(NET_COLORS)],
                    linewidths=1.5, alpha=0.8, label=str(name)))

        ax.set_xlim(-0.1, width + 0.1)
        ax.set_ylim(-0.1, height + 0.1)
        ax.set_aspect('equal')
        ax.set_xlabel('Tile X', fontsize=11)
        ax.set_ylabel('Tile Y', fontsize=11)
        ax.set_title(f'Placement & Routing ({bound} bound bels)', fontsize=14,
                     fontweight='bold', color=ACCENT, pad=15)

        plt.tight_layout()
        plt.savefig(save_path, bbox_inches='tight', facecolor=fig.get_facecolor())
        plt.close()
        self.dirty = False
        logger.info("saved layout -> %s", save_path)

    def plot_utilization(self, save_path: str = 'utilization.png',
                         figsize: tuple = (8, 8),
                         dpi: int = 120) -> np.ndarray:
        """Plot the per-tile bel utilization heatmap and return the map."""
        util = self.arch.utilization_map()
        fig, ax = plt.subplots(1, 1, figsize=figsize, dpi=dpi)

        im = ax.imshow(
            util, extent=[0, self.arch.width, 0, self.arch.height],
            origin='lower', cmap=UTIL_CMAP, interpolation='nearest',
            aspect='equal', vmin=0, vmax=1.0
        )
        cbar = plt.colorbar(im, ax=ax, shrink=0.8)
        cbar.set_label('Bel Utilization', fontsize=10)

        ax.set_xlabel('Tile X', fontsize=11)
        ax.set_ylabel('Tile Y', fontsize=11)
        ax.set_title('Tile Utilization', fontsize=14, fontweight='bold',
                     color='#52b788', pad=15)

        plt.tight_layout()
        plt.savefig(save_path, bbox_inches='tight', facecolor=fig.get_facecolor())
        plt.close()
        logger.info("saved utilization map -> %s", save_path)
        return util
