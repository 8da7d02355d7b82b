"""Physical design database: cells, nets, constraints and bindings."""
from .ids import IdString, IdStringList
from .attrs import Property, as_int, as_string
from .cell import Cell, PlaceStrength, Port, PortType
from .net import Net, PipMap, PortRef
from .region import HierarchicalCell, Region
from .decal import DecalXY
from .config import ContextConfig
from .exceptions import BindingError, DuplicateNameError, PhysDBError, UnknownNameError
from .log import logger, set_log_level
from .context import Context

__all__ = [
    "IdString", "IdStringList", "Property", "as_int", "as_string",
    "Cell", "PlaceStrength", "Port", "PortType",
    "Net", "PipMap", "PortRef", "HierarchicalCell", "Region", "DecalXY",
    "ContextConfig", "BindingError", "DuplicateNameError", "PhysDBError",
    "UnknownNameError", "logger", "set_log_level", "Context",
]
