"""
Exception hierarchy for atlonaconnect.

All exceptions inherit from AtlonaConnectError. The design follows these
principles:

1. Transport errors (socket/serial I/O) are distinct from protocol errors
2. Timeouts carry the timeout that expired
3. Caller mistakes (bad port numbers, blank commands) are plain ValueErrors,
   not library errors

Note that login failures caused by the device (unknown user, bad password,
unexpected prompt) are not exceptions: ``MatrixClient.login()`` returns them
as a human-readable reason.
"""

from __future__ import annotations


class AtlonaConnectError(Exception):
    """
    Base exception for all atlonaconnect errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all atlonaconnect errors with a single except clause.
    """

    pass


class ProtocolError(AtlonaConnectError):
    """
    Protocol-level error.

    Raised when the session is used in a way the protocol does not allow,
    such as starting a login handshake while another one is running.
    """

    pass


class TimeoutError(AtlonaConnectError):  # noqa: A001 - intentionally shadows builtin
    """
    Communication timeout.

    Raised when the switch does not answer within the expected time during
    the login handshake.
    """

    def __init__(
        self,
        message: str = "Communication timeout",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.1f}s)"
        return base


class ConnectionError(AtlonaConnectError):  # noqa: A001 - intentionally shadows builtin
    """
    Switch connection error.

    Raised when:
    - The session cannot reach the switch
    - An operation needs an open session and there is none
    """

    pass


class TransportError(AtlonaConnectError):
    """
    Transport-level error.

    Raised for low-level transport issues:
    - Socket or serial port errors
    - Writes to a closed session
    - Connection closed by the switch
    """

    pass
