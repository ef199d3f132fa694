"""
asyncio stream sessions.

StreamSession implements reading and writing on an asyncio
StreamReader/StreamWriter pair; subclasses only say how to open the streams.
TcpSession connects to the switch's telnet port.

The switch terminates lines with CR LF, except for its "Login: " and
"Password: " prompts which are left unterminated while it waits for input.
LineFramer surfaces those prompts as lines of their own ("Login",
"Password") so the login handshake can see them.

Example:
    >>> session = TcpSession("192.168.1.50")
    >>> async with session:
    ...     session.add_listener(listener)
    ...     await session.send_command("PWSTA")
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import abstractmethod
from collections.abc import Iterable

from atlonaconnect.exceptions import ConnectionError, TransportError
from atlonaconnect.protocol.constants import ProtocolConstants, Response
from atlonaconnect.session.abc import AbstractSession

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class LineFramer:
    """
    Incremental splitter of the inbound byte stream into lines.

    Feed it whatever the stream returns; it returns the complete lines
    (stripped of surrounding whitespace) and keeps the remainder.

    Example:
        >>> framer = LineFramer()
        >>> framer.feed(b"\\r\\nLogin: ")
        ['', 'Login']
        >>> framer.feed(b"PWO")
        []
        >>> framer.feed(b"N\\r\\n")
        ['PWON']
    """

    def __init__(
        self,
        prompts: Iterable[str] = (Response.LOGIN, Response.PASSWORD),
        encoding: str = ProtocolConstants.ENCODING,
    ) -> None:
        self._prompts = frozenset(prompts)
        self._encoding = encoding
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Data received after the last complete line."""
        return self._buffer

    def reset(self) -> None:
        self._buffer = ""

    def feed(self, data: bytes) -> list[str]:
        """
        Add received bytes and return the lines they complete.

        Args:
            data: Raw bytes from the stream.

        Returns:
            Complete lines, in order. An unterminated prompt counts as a line.
        """
        self._buffer += data.decode(self._encoding, errors="replace")
        lines: list[str] = []

        while True:
            match = _LINE_BREAK.search(self._buffer)
            if match is None:
                break
            # A trailing CR may be the first half of CR LF
            if match.group() == "\r" and match.end() == len(self._buffer):
                break
            lines.append(self._buffer[: match.start()].strip())
            self._buffer = self._buffer[match.end() :]

        prompt = self._buffer.strip()
        if prompt.endswith(":") and prompt[:-1].strip() in self._prompts:
            lines.append(prompt[:-1].strip())
            self._buffer = ""

        return lines


class StreamSession(AbstractSession):
    """
    Session over an asyncio StreamReader/StreamWriter pair.

    A background task reads the stream, frames lines and delivers them to
    the listeners. End of stream or a read failure is delivered to the
    listeners as a TransportError and ends the read task.
    """

    def __init__(self, read_size: int = 1024) -> None:
        super().__init__()
        self._read_size = read_size
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._read_task: asyncio.Task[None] | None = None
        self._framer = LineFramer()

    @abstractmethod
    async def _open_streams(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open the underlying connection."""
        ...

    @property
    def is_open(self) -> bool:
        return (
            self._writer is not None
            and not self._writer.is_closing()
            and self._reader is not None
        )

    async def open(self) -> None:
        """
        Open the connection and start reading.

        Raises:
            ConnectionError: If the connection cannot be established.
        """
        if self.is_open:
            return

        self._reader, self._writer = await self._open_streams()
        self._framer.reset()
        self._read_task = asyncio.create_task(self._read_loop(), name=f"atlona-read-{self.name}")
        logger.info("Session %s opened", self.name)

    async def close(self) -> None:
        if self._read_task is not None:
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
            self._read_task = None

        if self._writer is not None:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except Exception:
                # Ignore errors during close
                pass
            logger.info("Session %s closed", self.name)

        self._reader = None
        self._writer = None

    async def _write(self, data: bytes) -> None:
        if self._writer is None:
            raise TransportError(f"Session {self.name} is not open")

        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise TransportError(f"Write failed: {e}") from e

    async def _read_loop(self) -> None:
        if self._reader is None:
            raise TransportError(f"Session {self.name} is not open")
        try:
            while True:
                data = await self._reader.read(self._read_size)
                if not data:
                    raise TransportError("Connection closed by the switch")

                for line in self._framer.feed(data):
                    logger.debug("Received: %r", line)
                    await self._deliver(line)

        except TransportError as e:
            logger.error("Session %s: %s", self.name, e)
            await self._deliver(e)
        except OSError as e:
            logger.error("Session %s read failed: %s", self.name, e)
            await self._deliver(TransportError(f"Read failed: {e}"))


class TcpSession(StreamSession):
    """
    Session over the switch's telnet port.

    Args:
        host: IP address or host name of the switch.
        port: TCP port (default: 23).
        connect_timeout: Seconds to wait for the connection.
    """

    def __init__(
        self,
        host: str,
        port: int = ProtocolConstants.DEFAULT_TCP_PORT,
        connect_timeout: float = 5.0,
    ) -> None:
        super().__init__()
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout

    @property
    def name(self) -> str:
        return f"{self._host}:{self._port}"

    async def _open_streams(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            return await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self._connect_timeout,
            )
        except asyncio.TimeoutError:
            raise ConnectionError(
                f"Timed out connecting to {self.name} after {self._connect_timeout:.1f}s"
            ) from None
        except OSError as e:
            raise ConnectionError(f"Failed to connect to {self.name}: {e}") from e

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"TcpSession({self._host!r}, port={self._port}, {status})"
