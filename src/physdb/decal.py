"""Decal placement values used by presentation layers."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Hashable

DecalId = Hashable


@dataclass(frozen=True)
class DecalXY:
    """A visual decal placed at floating-point device coordinates."""
    decal: DecalId = None
    x: float = 0.0
    y: float = 0.0


def construct_decal_xy(decal: DecalId, x: float, y: float) -> DecalXY:
    return DecalXY(decal=decal, x=float(x), y=float(y))
