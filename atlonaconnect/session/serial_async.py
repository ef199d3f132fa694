"""
Async serial session using pyserial-asyncio.

The PRO3 RS-232 port uses:
- Baud rate: 115200 (default)
- Data bits: 8
- Parity: None
- Stop bits: 1
- Flow control: None

Example:
    >>> session = SerialSession("/dev/ttyUSB0")
    >>> async with session:
    ...     session.add_listener(listener)
    ...     await session.send_command("PWSTA")
"""

from __future__ import annotations

import asyncio

import serial
import serial_asyncio

from atlonaconnect.exceptions import ConnectionError
from atlonaconnect.protocol.constants import ProtocolConstants
from atlonaconnect.session.stream import StreamSession


class SerialSession(StreamSession):
    """
    Session over the switch's RS-232 port.

    Args:
        port: Serial port path (e.g. "/dev/ttyUSB0", "COM3") or pyserial URL.
        baudrate: Baud rate (default: 115200).
    """

    def __init__(
        self,
        port: str,
        baudrate: int = ProtocolConstants.DEFAULT_BAUD_RATE,
    ) -> None:
        super().__init__()
        self._port = port
        self._baudrate = baudrate

    @property
    def name(self) -> str:
        return self._port

    @property
    def baudrate(self) -> int:
        return self._baudrate

    async def _open_streams(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            return await serial_asyncio.open_serial_connection(
                url=self._port,
                baudrate=self._baudrate,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                bytesize=serial.EIGHTBITS,
                # No flow control
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
        except serial.SerialException as e:
            raise ConnectionError(f"Failed to open serial port {self._port}: {e}") from e
        except OSError as e:
            raise ConnectionError(f"OS error opening {self._port}: {e}") from e

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"SerialSession({self._port!r}, baudrate={self._baudrate}, {status})"
