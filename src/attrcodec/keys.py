"""
Reserved attribute keys of the snapshot format.

These keys share the attribute namespace with user metadata; they are
written and read exclusively by the codec, and :func:`user_attrs` strips
them when only the user-visible metadata is wanted.
"""

from __future__ import annotations
from typing import Mapping

from physdb.attrs import AttrDict, Property
from physdb.ids import IdString

# Stale placement hint removed when a real binding is recorded.
BEL = IdString.intern("BEL")

NEXTPNR_BEL = IdString.intern("NEXTPNR_BEL")
BEL_STRENGTH = IdString.intern("BEL_STRENGTH")
CONSTR_X = IdString.intern("CONSTR_X")
CONSTR_Y = IdString.intern("CONSTR_Y")
CONSTR_Z = IdString.intern("CONSTR_Z")
CONSTR_ABS_Z = IdString.intern("CONSTR_ABS_Z")
CONSTR_PARENT = IdString.intern("CONSTR_PARENT")
CONSTR_CHILDREN = IdString.intern("CONSTR_CHILDREN")

ROUTING = IdString.intern("ROUTING")

RESERVED_CELL_KEYS = frozenset([
    NEXTPNR_BEL, BEL_STRENGTH,
    CONSTR_X, CONSTR_Y, CONSTR_Z, CONSTR_ABS_Z,
    CONSTR_PARENT, CONSTR_CHILDREN,
])
RESERVED_NET_KEYS = frozenset([ROUTING])

# Separator of list-valued fields (CONSTR_CHILDREN, ROUTING).
FIELD_SEP = ";"


def is_reserved(key: IdString) -> bool:
    return key in RESERVED_CELL_KEYS or key in RESERVED_NET_KEYS


def user_attrs(attrs: Mapping[IdString, Property]) -> AttrDict:
    """Copy of ``attrs`` without the codec's reserved keys."""
    return {k: v for k, v in attrs.items() if not is_reserved(k)}
