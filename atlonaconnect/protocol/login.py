"""
Login handshake for the Atlona PRO3.

When a session connects, the switch is either waiting for a command (telnet
login disabled) or has just printed a "Login: " prompt (telnet login
enabled). Nothing in its greeting says which. The handshake finds out by
sending a string that is neither a valid command nor a valid user name:

    Client: notvalid$934%912
    Switch: Command FAILED: (notvalid$934%912)      -> no login needed
    Switch: "" then "Login"                         -> login needed

    Client: <username>
    Switch: ["" then] "Password"                    (or "Login" again: unknown user)
    Client: <password>
    Switch: ""
    Client: notvalid$934%912
    Switch: Command FAILED: (notvalid$934%912)      -> logged in
    Switch: anything else                           -> bad password

Real switches are not consistent about the empty lines, so a missing or
unexpected empty line is logged, never fatal.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from atlonaconnect.exceptions import TimeoutError
from atlonaconnect.protocol.constants import ProtocolConstants, Response
from atlonaconnect.session.abc import SessionListener

if TYPE_CHECKING:
    from atlonaconnect.models.config import MatrixConfig
    from atlonaconnect.session.abc import AbstractSession

logger = logging.getLogger(__name__)


class LoginCollector(SessionListener):
    """
    Listener that queues everything the session delivers during login.

    The queue is bounded: once it holds ``maxsize`` items, delivery waits
    until the handshake consumes one.
    """

    def __init__(
        self,
        timeout: float = ProtocolConstants.LOGIN_TIMEOUT,
        maxsize: int = ProtocolConstants.LOGIN_QUEUE_SIZE,
    ) -> None:
        self._timeout = timeout
        self._responses: asyncio.Queue[str | Exception] = asyncio.Queue(maxsize=maxsize)
        self._discarded = False

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def pending(self) -> int:
        """Number of queued, unread items."""
        return self._responses.qsize()

    async def on_response(self, response: str) -> None:
        if self._discarded:
            logger.debug("Dropping response after login: '%s'", response)
            return
        await self._responses.put(response)

    async def on_error(self, error: Exception) -> None:
        if self._discarded:
            return
        await self._responses.put(error)

    def discard(self) -> None:
        """
        Stop collecting and drop everything unread.

        Emptying the queue releases a delivery blocked on a full queue.
        """
        self._discarded = True
        while not self._responses.empty():
            self._responses.get_nowait()

    async def get_response(self) -> str:
        """
        Take the next response, in arrival order.

        Returns:
            The next line.

        Raises:
            TimeoutError: If nothing arrives within the timeout.
            Exception: The transport exception, if one was delivered instead.
        """
        try:
            item = await asyncio.wait_for(self._responses.get(), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(
                "Didn't receive response in time",
                timeout_seconds=self._timeout,
            ) from None

        if isinstance(item, Exception):
            raise item
        return item


class LoginHandshake:
    """
    One run of the login probe/response sequence.

    The collector must already be the session's only listener.

    Args:
        session: Open session to the switch.
        config: Supplies the username and password.
        collector: The listener collecting the switch's responses.
    """

    def __init__(
        self,
        session: AbstractSession,
        config: MatrixConfig,
        collector: LoginCollector,
    ) -> None:
        self._session = session
        self._config = config
        self._collector = collector

    async def run(self) -> str | None:
        """
        Perform the handshake.

        Returns:
            None if the switch accepts commands (no login needed, or logged
            in), otherwise the reason the login failed.

        Raises:
            TimeoutError: If the switch stops answering mid-handshake.
            TransportError: If the session fails mid-handshake.
        """
        collector = self._collector

        # Burn the initial empty line
        try:
            response = await collector.get_response()
            if response != "":
                logger.info(
                    "Atlona protocol violation - didn't start with an initial empty response: '%s'",
                    response,
                )
        except TimeoutError:
            logger.debug("No initial response from the switch")

        # Waiting for a command, or for a user name?
        await self._session.send_command(ProtocolConstants.INVALID_PROBE)

        response = await collector.get_response()
        if response.startswith(Response.FAILED):
            logger.debug("Atlona didn't require a login")
            return None

        # Should be followed by a new "\r\nLogin: "
        response = await collector.get_response()
        if response != "":
            logger.info(
                "Atlona protocol violation - didn't start with an initial empty response: '%s'",
                response,
            )

        response = await collector.get_response()
        if response != Response.LOGIN:
            return (
                "Atlona protocol violation - wasn't initially a command failure "
                f"or login prompt: {response}"
            )

        if not self._config.has_username:
            return (
                "Atlona PRO3 has enabled Telnet/IP Login but no username was provided "
                "in the configuration."
            )

        logger.debug("Sending username %s", self._config.username)
        await self._session.send_command(self._config.username)

        response = await collector.get_response()
        if response == "":
            response = await collector.get_response()

        if response != Response.PASSWORD:
            if response == Response.LOGIN:
                return f"Username {self._config.username} is not a valid user on the atlona"
            return f"Atlona protocol violation - invalid response to a login: {response}"

        if not self._config.has_password:
            return (
                "Atlona PRO3 has enabled Telnet/IP Login but no password was provided "
                "in the configuration."
            )

        await self._session.send_command(self._config.password)

        # Either "\r\n" (waiting for a command) or "\r\nLogin: " (bad password)
        response = await collector.get_response()
        if response != "":
            logger.info(
                "Atlona protocol violation - not an empty response after password: '%s'",
                response,
            )

        await self._session.send_command(ProtocolConstants.INVALID_PROBE)

        response = await collector.get_response()
        if response.startswith(Response.FAILED):
            logger.debug("Logged into the switch as %s", self._config.username)
            return None

        return "Password was invalid - please check your atlona setup"
