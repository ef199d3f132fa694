"""Tests for LineFramer and TcpSession."""

import asyncio

import pytest

from atlonaconnect import MatrixClient
from atlonaconnect.callback import DeviceStatus, StatusDetail
from atlonaconnect.exceptions import ConnectionError, TransportError
from atlonaconnect.session.stream import LineFramer, TcpSession

PROBE = b"notvalid$934%912"


class TestLineFramer:
    """Tests for LineFramer class."""

    def test_crlf_lines(self):
        framer = LineFramer()
        assert framer.feed(b"PWON\r\nx1AVx2,x3AVx4\r\n") == ["PWON", "x1AVx2,x3AVx4"]
        assert framer.pending == ""

    def test_partial_line_kept(self):
        framer = LineFramer()
        assert framer.feed(b"Firm") == []
        assert framer.pending == "Firm"
        assert framer.feed(b"ware 1.6.03\r\n") == ["Firmware 1.6.03"]

    def test_split_crlf(self):
        """A CR at the end of a chunk waits for a possible LF."""
        framer = LineFramer()
        assert framer.feed(b"PWON\r") == []
        assert framer.feed(b"\nPWOFF\r\n") == ["PWON", "PWOFF"]

    def test_bare_line_endings(self):
        framer = LineFramer()
        assert framer.feed(b"Lock\nUnlock\rIRON\r\n") == ["Lock", "Unlock", "IRON"]

    def test_empty_lines(self):
        framer = LineFramer()
        assert framer.feed(b"\r\n\r\n") == ["", ""]

    def test_login_prompt(self):
        framer = LineFramer()
        assert framer.feed(b"\r\nLogin: ") == ["", "Login"]
        assert framer.pending == ""

    def test_password_prompt_in_pieces(self):
        framer = LineFramer()
        assert framer.feed(b"\r\nPass") == [""]
        assert framer.feed(b"word: ") == ["Password"]

    def test_prompt_without_colon_kept(self):
        framer = LineFramer()
        assert framer.feed(b"Login") == []
        assert framer.pending == "Login"

    def test_other_colon_text_kept(self):
        framer = LineFramer()
        assert framer.feed(b"Command FAILED:") == []

    def test_reset(self):
        framer = LineFramer()
        framer.feed(b"PWO")
        framer.reset()
        assert framer.pending == ""


class FakeSwitch:
    """Telnet server behaving like a PRO3 with login enabled."""

    def __init__(self):
        self.received = []
        self.logged_in = asyncio.Event()
        self.writer = None
        self.server = None

    @property
    def port(self):
        return self.server.sockets[0].getsockname()[1]

    async def start(self):
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def stop(self):
        if self.writer is not None:
            self.writer.close()
        self.server.close()
        await self.server.wait_closed()

    async def _readline(self, reader):
        line = (await reader.readline()).strip()
        self.received.append(line.decode("ascii"))
        return line

    async def _handle(self, reader, writer):
        self.writer = writer
        writer.write(b"\r\nLogin: ")

        await self._readline(reader)  # probe
        writer.write(b"\r\nLogin: ")
        await self._readline(reader)  # username
        writer.write(b"\r\nPassword: ")
        await self._readline(reader)  # password
        writer.write(b"\r\n")
        await self._readline(reader)  # probe
        writer.write(b"Command FAILED: (notvalid$934%912)\r\n")
        await writer.drain()
        self.logged_in.set()

        while True:
            line = await reader.readline()
            if not line:
                break
            self.received.append(line.strip().decode("ascii"))

    async def send(self, data):
        self.writer.write(data)
        await self.writer.drain()


async def wait_until(predicate, timeout=2.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=timeout)


class TestTcpSession:
    """Tests for TcpSession against a local server."""

    @pytest.mark.asyncio
    async def test_connect_refused(self):
        server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        session = TcpSession("127.0.0.1", port, connect_timeout=1.0)
        with pytest.raises(ConnectionError):
            await session.open()
        assert not session.is_open

    @pytest.mark.asyncio
    async def test_send_when_closed_raises(self):
        session = TcpSession("127.0.0.1")
        with pytest.raises(TransportError):
            await session.send_command("PWSTA")

    @pytest.mark.asyncio
    async def test_read_loop_without_connection_raises(self):
        session = TcpSession("127.0.0.1")
        with pytest.raises(TransportError, match="is not open"):
            await session._read_loop()

    def test_name_and_repr(self):
        session = TcpSession("10.0.0.5", 2323)
        assert session.name == "10.0.0.5:2323"
        assert repr(session) == "TcpSession('10.0.0.5', port=2323, closed)"

    @pytest.mark.asyncio
    async def test_login_and_broadcasts(self, config, capabilities, callback):
        switch = FakeSwitch()
        await switch.start()
        session = TcpSession("127.0.0.1", switch.port)
        await session.open()
        client = MatrixClient(session, config, capabilities, callback)

        try:
            reason = await client.login()
            assert reason is None
            assert switch.received[:4] == [PROBE.decode(), "admin", "secret", PROBE.decode()]
            assert callback.statuses == [(DeviceStatus.ONLINE, StatusDetail.NONE, None)]

            await wait_until(lambda: "Statusx5" in switch.received)
            assert "Broadcast on" in switch.received

            await switch.send(b"x1AVx2,x3AVx4\r\n")
            await wait_until(lambda: len(callback.states) == 2)
            assert callback.states == [("port2#portoutput", 1), ("port4#portoutput", 3)]
        finally:
            await session.close()
            await switch.stop()

    @pytest.mark.asyncio
    async def test_connection_closed_reports_offline(self, config, capabilities, callback):
        switch = FakeSwitch()
        await switch.start()
        session = TcpSession("127.0.0.1", switch.port)
        await session.open()
        client = MatrixClient(session, config, capabilities, callback)

        try:
            assert await client.login() is None
            switch.writer.close()

            await wait_until(lambda: len(callback.statuses) == 2)
            status, detail, message = callback.statuses[1]
            assert status == DeviceStatus.OFFLINE
            assert detail == StatusDetail.COMMUNICATION_ERROR
            assert "Connection closed by the switch" in message
        finally:
            await session.close()
            await switch.stop()
