"""
Mock sessions for testing.

This module provides session implementations that allow testing the
protocol client without a switch. Inbound lines are fed explicitly or
generated in reaction to sent commands, and every sent command is recorded.

Delivery behaves like the real sessions: lines are delivered in order by a
background task, and held back while no listener is registered.

Example:
    >>> from atlonaconnect.session import MockSession
    >>>
    >>> session = MockSession()
    >>> session.feed("")  # greeting
    >>> session.set_response_callback(
    ...     lambda cmd: ["Command FAILED: (notvalid$934%912)"] if cmd.startswith("notvalid") else None
    ... )
    >>> async with session:
    ...     reason = await client.login()
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

from atlonaconnect.exceptions import TransportError
from atlonaconnect.protocol.constants import ProtocolConstants
from atlonaconnect.session.abc import AbstractSession

ResponseCallback = Callable[[str], "Sequence[str] | None"]


class MockSession(AbstractSession):
    """
    Mock session for testing without hardware.

    Attributes:
        commands: All commands sent, without terminators.
        last_command: The most recent command sent.

    Example:
        >>> session = MockSession()
        >>> async with session:
        ...     await session.send_command("PWSTA")
        ...     assert session.commands == ["PWSTA"]
    """

    def __init__(self, name: str = "mock://atlona") -> None:
        super().__init__()
        self._name = name
        self._is_open = False
        self._inbox: asyncio.Queue[str | Exception] = asyncio.Queue()
        self._commands: list[str] = []
        self._response_callback: ResponseCallback | None = None
        self._send_error: Exception | None = None
        self._pump_task: asyncio.Task[None] | None = None

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def name(self) -> str:
        return self._name

    @property
    def commands(self) -> list[str]:
        return self._commands.copy()

    @property
    def last_command(self) -> str | None:
        return self._commands[-1] if self._commands else None

    def feed(self, *lines: str) -> None:
        """
        Queue lines as if the switch had sent them.

        They are delivered in order once the session is open and a listener
        is registered.
        """
        for line in lines:
            self._inbox.put_nowait(line)

    def feed_error(self, error: Exception) -> None:
        """Queue a transport exception for delivery to the listeners."""
        self._inbox.put_nowait(error)

    def set_response_callback(self, callback: ResponseCallback | None) -> None:
        """
        Set a callback generating the switch's reply to each command.

        The callback receives the command text and returns the lines to feed
        back, or None for no reply.
        """
        self._response_callback = callback

    def set_send_error(self, error: Exception | None) -> None:
        """Make every following send fail with the given exception."""
        self._send_error = error

    def clear(self) -> None:
        """Clear the command history."""
        self._commands.clear()

    async def drain(self) -> None:
        """Wait until every queued line has been delivered."""
        await self._inbox.join()

    async def open(self) -> None:
        if self._is_open:
            raise TransportError("Mock session already open")
        self._is_open = True
        self._pump_task = asyncio.create_task(self._pump())

    async def close(self) -> None:
        self._is_open = False
        if self._pump_task is not None:
            self._pump_task.cancel()
            try:
                await self._pump_task
            except asyncio.CancelledError:
                pass
            self._pump_task = None

    async def _write(self, data: bytes) -> None:
        if self._send_error is not None:
            raise self._send_error

        command = data.decode(ProtocolConstants.ENCODING).removesuffix(
            ProtocolConstants.COMMAND_TERMINATOR
        )
        self._commands.append(command)
        self._on_command(command)

    def _on_command(self, command: str) -> None:
        if self._response_callback is not None:
            lines = self._response_callback(command)
            if lines is not None:
                self.feed(*lines)

    async def _pump(self) -> None:
        while True:
            item = await self._inbox.get()
            try:
                await self._deliver(item)
            finally:
                self._inbox.task_done()

    def assert_sent(self, expected: str, index: int = -1) -> None:
        """
        Assert that a specific command was sent.

        Raises:
            AssertionError: If the command doesn't match.
        """
        if not self._commands:
            raise AssertionError("No command sent to mock session")

        actual = self._commands[index]
        if actual != expected:
            raise AssertionError(f"Sent command mismatch: expected {expected!r}, got {actual!r}")

    def assert_not_sent(self, command: str) -> None:
        """Assert that a command was never sent."""
        if command in self._commands:
            raise AssertionError(f"Command {command!r} was sent")


class ScriptedMockSession(MockSession):
    """
    Mock session with scripted command/reply pairs.

    Each sent command consumes the next script step: the command is checked
    (unless the step accepts any command) and the step's reply lines are fed
    back. Commands sent after the script is exhausted get no reply.

    Example:
        >>> session = ScriptedMockSession()
        >>> session.expect("Command FAILED: (notvalid$934%912)", command="notvalid$934%912")
        >>> session.expect("", "Password", command="admin")
    """

    def __init__(self, name: str = "mock://scripted") -> None:
        super().__init__(name)
        self._script: list[tuple[str | None, tuple[str, ...]]] = []
        self._script_index = 0

    @property
    def script_done(self) -> bool:
        """True once every scripted step has been consumed."""
        return self._script_index >= len(self._script)

    def expect(self, *responses: str, command: str | None = None) -> None:
        """
        Add a scripted step.

        Args:
            *responses: Lines the switch replies with.
            command: Expected command (None to match any).
        """
        self._script.append((command, responses))

    def _on_command(self, command: str) -> None:
        if self._script_index < len(self._script):
            expected, responses = self._script[self._script_index]

            if expected is not None and command != expected:
                raise AssertionError(
                    f"Script mismatch at step {self._script_index}: "
                    f"expected {expected!r}, got {command!r}"
                )

            self._script_index += 1
            self.feed(*responses)
            return

        super()._on_command(command)

    def reset_script(self) -> None:
        self._script_index = 0
