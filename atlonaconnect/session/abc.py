"""
Abstract session interface for Atlona protocol communication.

A session owns the physical connection to the switch (telnet socket or
RS-232 port). It is responsible for:
- Opening/closing the connection
- Writing command lines
- Splitting the inbound byte stream into lines
- Delivering each line (or a transport exception) to the registered listeners

Lines that arrive while no listener is registered are held back until one
is added, so a greeting sent right after connecting is not lost while the
client installs its login listener.

Implementations:
- TcpSession: asyncio socket (telnet port)
- SerialSession: pyserial-asyncio serial port
- MockSession / ScriptedMockSession: for testing without hardware
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from atlonaconnect.exceptions import TransportError
from atlonaconnect.protocol.constants import ProtocolConstants

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)


class SessionListener(ABC):
    """
    Receiver of inbound session traffic.

    Deliveries are sequential: the session awaits each call before
    delivering the next line, so a slow listener back-pressures the session.
    """

    @abstractmethod
    async def on_response(self, response: str) -> None:
        """
        Called for every line received from the switch.

        Args:
            response: The line without its terminator (may be empty).
        """
        ...

    @abstractmethod
    async def on_error(self, error: Exception) -> None:
        """
        Called when the session fails to read from the switch.

        Args:
            error: The transport exception.
        """
        ...


class AbstractSession(ABC):
    """
    Abstract base class for Atlona sessions.

    Subclasses implement the physical connection (open/close/_write) and
    feed inbound lines to ``_deliver``. Listener bookkeeping, command
    encoding and ordered delivery live here.

    Sessions support the async context manager protocol:

        async with TcpSession("192.168.1.50") as session:
            await session.send_command("PWSTA")
    """

    def __init__(self) -> None:
        self._listeners: list[SessionListener] = []
        self._listener_registered = asyncio.Event()

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True if connected and ready for I/O."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Session identifier (e.g. "192.168.1.50:23", "/dev/ttyUSB0")."""
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Open the connection to the switch.

        Raises:
            ConnectionError: If the connection cannot be established.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Close the connection. Safe to call multiple times.
        """
        ...

    @abstractmethod
    async def _write(self, data: bytes) -> None:
        """
        Write raw bytes to the switch.

        Raises:
            TransportError: If the write fails.
        """
        ...

    @property
    def listeners(self) -> list[SessionListener]:
        """Currently registered listeners (copy)."""
        return list(self._listeners)

    def add_listener(self, listener: SessionListener) -> None:
        """Register a listener for inbound lines and transport errors."""
        self._listeners.append(listener)
        self._listener_registered.set()

    def clear_listeners(self) -> None:
        """Remove all listeners. Inbound lines are held until one is added."""
        self._listeners.clear()
        self._listener_registered.clear()

    async def send_command(self, command: str) -> None:
        """
        Send one command line to the switch.

        Args:
            command: Command text without terminator.

        Raises:
            TransportError: If the session is not open or the write fails.
        """
        if not self.is_open:
            raise TransportError(f"Session {self.name} is not open")

        logger.debug("Sending command: %s", command)
        data = (command + ProtocolConstants.COMMAND_TERMINATOR).encode(ProtocolConstants.ENCODING)
        await self._write(data)

    async def _deliver(self, item: str | Exception) -> None:
        """
        Deliver a line or transport exception to the registered listeners.

        Waits for a listener to be registered if there is none.
        """
        while not self._listeners:
            await self._listener_registered.wait()

        for listener in list(self._listeners):
            try:
                if isinstance(item, Exception):
                    await listener.on_error(item)
                else:
                    await listener.on_response(item)
            except asyncio.CancelledError:
                raise
            except Exception:
                # A failing listener must not stop delivery to the next one
                logger.exception("Listener %r failed handling %r", listener, item)

    async def __aenter__(self) -> AbstractSession:
        """Async context manager entry - opens the session."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes the session."""
        await self.close()
