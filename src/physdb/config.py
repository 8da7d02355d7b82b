"""Context configuration."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class ContextConfig:
    """
    Behavioural switches for a :class:`~physdb.context.Context`.

    Attributes:
        verbose: Emit informational messages at INFO (otherwise DEBUG).
        name_separator: Separator used when parsing external resource
            names in the ``get_*_by_name_str`` lookups.
        skip_cell_on_dangling_parent: When restoring attributes, a cell
            whose CONSTR_PARENT names no existing cell keeps its placement
            binding but has its remaining constraint attributes ignored.
            Set to False to restore the other constraints regardless.
    """
    verbose: bool = True
    name_separator: str = "/"
    skip_cell_on_dangling_parent: bool = True
