"""Architecture service contract and the reference grid device."""
from .base import Architecture
from .grid import BelId, GridArch, GridArchConfig, PipId, WireId, load_config

__all__ = [
    "Architecture", "BelId", "GridArch", "GridArchConfig",
    "PipId", "WireId", "load_config",
]
