"""Snapshot and restore of physical design state as entity attributes."""
from .codec import (
    RoutingEntry, arch_info_to_attributes, attributes_to_arch_info,
    decode_cell, decode_net, encode_cell, encode_net,
    format_routing, parse_routing,
)
from .keys import RESERVED_CELL_KEYS, RESERVED_NET_KEYS, is_reserved, user_attrs

__all__ = [
    "RoutingEntry", "arch_info_to_attributes", "attributes_to_arch_info",
    "decode_cell", "decode_net", "encode_cell", "encode_net",
    "format_routing", "parse_routing",
    "RESERVED_CELL_KEYS", "RESERVED_NET_KEYS", "is_reserved", "user_attrs",
]
