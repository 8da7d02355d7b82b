"""Exceptions raised when a design-database invariant is violated.

These indicate programming errors in the caller (a pass or a frontend) and
are not meant to be caught and recovered from inside a flow. Recoverable
user-input problems are reported as warnings instead, see
:py:meth:`physdb.context.Context.log_warning`.
"""


class PhysDBError(Exception):
    """Base class of all design-database errors."""
    pass


class DuplicateNameError(PhysDBError):
    """A cell, net or net alias was created with a name already in use."""
    pass


class UnknownNameError(PhysDBError, LookupError):
    """A mutation was asked to operate on a name which does not exist.

    Raised for unknown cells, nets, regions, ports and architecture
    resources (bels, wires, pips) named in a snapshot being restored.
    """
    pass


class BindingError(PhysDBError):
    """An architecture resource was bound while already bound, or unbound
    while free.
    """
    pass
