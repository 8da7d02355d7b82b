"""
Logical connectivity helpers.

These keep a port's net reference and the net's driver/users bookkeeping
consistent. They know nothing about physical bindings.
"""

from __future__ import annotations

from .cell import Cell, PortType
from .exceptions import PhysDBError, UnknownNameError
from .ids import IdString
from .net import Net, PortRef


def connect_port(net: Net, cell: Cell, port_name: IdString) -> None:
    """Attach ``cell.port_name`` to ``net``.

    An output becomes the net's driver; inputs and inouts become users.
    The port must exist and be unconnected, and a net has one driver.
    """
    port = cell.ports.get(port_name)
    if port is None:
        raise UnknownNameError(
            f"cell '{cell.name}' has no port '{port_name}'")
    if port.net is not None:
        raise PhysDBError(
            f"port '{cell.name}.{port_name}' is already connected to "
            f"net '{port.net}'")

    ref = PortRef(cell.name, port_name)
    if port.type == PortType.OUT:
        if net.driver is not None:
            raise PhysDBError(
                f"net '{net.name}' is already driven by {net.driver!r}")
        net.driver = ref
    else:
        net.users.append(ref)
    port.net = net.name


def disconnect_port(net: Net | None, cell: Cell, port_name: IdString) -> None:
    """Detach ``cell.port_name`` from ``net`` (the net it currently holds).

    Unknown or already unconnected ports are left alone.
    """
    port = cell.ports.get(port_name)
    if port is None or port.net is None:
        return
    if net is not None:
        ref = PortRef(cell.name, port_name)
        net.users = [u for u in net.users if u != ref]
        if net.driver == ref:
            net.driver = None
    port.net = None
