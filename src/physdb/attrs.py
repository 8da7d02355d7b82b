"""
Attribute values.

Cells and nets carry a mapping of IdString -> scalar used both for user
metadata and as the snapshot format of the attribute codec. A value is
either a string or an integer; integers read back by a file layer may
arrive as decimal strings, so consumers go through :func:`as_int`.
"""

from __future__ import annotations
from typing import Union

from .ids import IdString

Property = Union[str, int]
AttrDict = dict[IdString, Property]


def as_int(value: Property) -> int:
    """Interpret an attribute value as an integer."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    return int(str(value).strip(), 10)


def as_string(value: Property) -> str:
    """Interpret an attribute value as a string."""
    return value if isinstance(value, str) else str(value)
