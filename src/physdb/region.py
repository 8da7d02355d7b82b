"""
Placement regions and the design hierarchy index.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Hashable, Optional

from .ids import IdString


@dataclass
class Region:
    """
    A named group of physical resources that constrained cells must use.

    Regions hold no back-pointers; a cell's membership is recorded only on
    the cell (``Cell.region``).

    Attributes:
        name: Region identifier.
        constr_bels: Whether placement is restricted to ``bels``.
        constr_wires: Whether routing is restricted to region wires.
        constr_pips: Whether routing is restricted to region pips.
        bels: Member bels.
    """
    name: IdString
    constr_bels: bool = True
    constr_wires: bool = False
    constr_pips: bool = False
    bels: set[Hashable] = field(default_factory=set)

    def __contains__(self, bel: Hashable) -> bool:
        return bel in self.bels

    def __len__(self) -> int:
        return len(self.bels)


@dataclass
class HierarchicalCell:
    """
    An entry of the hierarchy index: one hierarchical instance and its
    children, each keyed by local name and mapped to its global name.

    Attributes:
        name: Global (flattened) name of the instance.
        type: Module type of the instance.
        parent: Global name of the enclosing instance, if any.
        leaf_cells: Leaf-cell children, local name -> cell name.
        hier_cells: Nested hierarchical children, local -> global name.
    """
    name: IdString
    type: IdString = IdString()
    parent: Optional[IdString] = None
    leaf_cells: dict[IdString, IdString] = field(default_factory=dict)
    hier_cells: dict[IdString, IdString] = field(default_factory=dict)
