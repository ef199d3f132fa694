"""
atlonaconnect - Python library for controlling Atlona AT-UHD-PRO3 matrix switches.

This library provides async communication with PRO3 switches over telnet or
RS-232, including the login handshake, routing, volume, mirroring, presets
and the broadcasts the switch sends when someone else changes its state.

Example:
    >>> from atlonaconnect import Capabilities, MatrixClient, MatrixConfig
    >>> from atlonaconnect.session import TcpSession
    >>>
    >>> async def main(callback):
    ...     config = MatrixConfig(host="192.168.1.50")
    ...     async with TcpSession(config.host) as session:
    ...         client = MatrixClient(session, config, Capabilities.for_model("66M"), callback)
    ...         if await client.login() is None:
    ...             await client.set_port_switch(1, 3)
"""

from atlonaconnect.callback import DeviceStatus, HandlerCallback, StatusDetail
from atlonaconnect.client import ClientState, MatrixClient
from atlonaconnect.exceptions import (
    AtlonaConnectError,
    ConnectionError,
    ProtocolError,
    TimeoutError,
    TransportError,
)
from atlonaconnect.models.config import Capabilities, MatrixConfig
from atlonaconnect.session import AbstractSession, SerialSession, SessionListener, TcpSession

__version__ = "0.1.0"
__all__ = [
    # Client
    "MatrixClient",
    "ClientState",
    # Callback
    "HandlerCallback",
    "DeviceStatus",
    "StatusDetail",
    # Models
    "MatrixConfig",
    "Capabilities",
    # Exceptions
    "AtlonaConnectError",
    "ProtocolError",
    "TimeoutError",
    "ConnectionError",
    "TransportError",
    # Session
    "AbstractSession",
    "SessionListener",
    "TcpSession",
    "SerialSession",
    # Version
    "__version__",
]
