"""
Session layer for Atlona protocol communication.

This package provides session implementations for talking to a PRO3 switch
over its telnet port or its RS-232 port.

Available sessions:
- TcpSession: asyncio socket connection
- SerialSession: async serial port using pyserial-asyncio
- MockSession / ScriptedMockSession: for testing without hardware

Example:
    >>> from atlonaconnect.session import TcpSession
    >>> async with TcpSession("192.168.1.50") as session:
    ...     session.add_listener(listener)
    ...     await session.send_command("PWSTA")
"""

from atlonaconnect.session.abc import AbstractSession, SessionListener
from atlonaconnect.session.mock import MockSession, ScriptedMockSession
from atlonaconnect.session.serial_async import SerialSession
from atlonaconnect.session.stream import LineFramer, StreamSession, TcpSession

__all__ = [
    "AbstractSession",
    "SessionListener",
    "StreamSession",
    "TcpSession",
    "SerialSession",
    "LineFramer",
    "MockSession",
    "ScriptedMockSession",
]
