"""
Atlona PRO3 protocol commands, responses and channel identifiers.

Based on the Atlona AT-UHD-PRO3 RS-232/telnet command reference.
"""

from __future__ import annotations

from typing import Final


class ProtocolConstants:
    """Protocol-level constants."""

    COMMAND_TERMINATOR: Final[str] = "\r\n"
    """Appended to every outbound command."""

    ENCODING: Final[str] = "ascii"

    DEFAULT_TCP_PORT: Final[int] = 23
    """Telnet port of the switch."""

    DEFAULT_BAUD_RATE: Final[int] = 115200
    """RS-232 baud rate of the switch."""

    LOGIN_TIMEOUT: Final[float] = 5.0
    """Seconds to wait for each response during the login handshake."""

    LOGIN_QUEUE_SIZE: Final[int] = 5
    """Maximum number of responses buffered while logging in."""

    MIN_VOLUME: Final[int] = -79
    """Lowest volume level (dB)."""

    MAX_VOLUME: Final[int] = 15
    """Highest volume level (dB)."""

    INVALID_PROBE: Final[str] = "notvalid$934%912"
    """
    A command that is neither a valid command nor a valid user name.

    The response to it tells whether the switch is waiting for a command
    (command failure) or for a user name (login prompt).
    """


class Command:
    """Outbound command literals and format strings."""

    POWER_ON: Final[str] = "PWON"
    POWER_OFF: Final[str] = "PWOFF"
    POWER_STATUS: Final[str] = "PWSTA"
    VERSION: Final[str] = "Version"
    TYPE: Final[str] = "Type"
    PANEL_LOCK: Final[str] = "Lock"
    PANEL_UNLOCK: Final[str] = "Unlock"
    PORT_RESET_ALL: Final[str] = "All#"
    PORT_POWER_FORMAT: Final[str] = "x{port}$ {value}"
    PORT_ALL_FORMAT: Final[str] = "x{port}All"
    PORT_SWITCH_FORMAT: Final[str] = "x{input}AVx{output}"
    PORT_MIRROR_FORMAT: Final[str] = "MirrorHdmi{hdmi} Out{output}"
    PORT_MIRROR_STATUS_FORMAT: Final[str] = "MirrorHdmi{hdmi} sta"
    PORT_UNMIRROR_FORMAT: Final[str] = "UnMirror{hdmi}"
    VOLUME_FORMAT: Final[str] = "VOUT{port} {value}"
    VOLUME_MUTE_FORMAT: Final[str] = "VOUTMute{port} {value}"
    IR_OFF: Final[str] = "IROFF"
    IR_ON: Final[str] = "IRON"
    PORT_STATUS: Final[str] = "Status"
    PORT_STATUS_FORMAT: Final[str] = "Statusx{port}"
    SAVE_IO_FORMAT: Final[str] = "Save{preset}"
    RECALL_IO_FORMAT: Final[str] = "Recall{preset}"
    CLEAR_IO_FORMAT: Final[str] = "Clear{preset}"
    MATRIX_RESET: Final[str] = "Mreset"
    BROADCAST_ON: Final[str] = "Broadcast on"

    PING: Final[str] = "ping"
    """Not an Atlona command: sent to keep the connection alive."""


class Response:
    """Inbound literal responses and prefixes."""

    FAILED: Final[str] = "Command FAILED:"
    """Prefix of every command failure."""

    LOGIN: Final[str] = "Login"
    PASSWORD: Final[str] = "Password"

    ALL: Final[str] = "All#"
    LOCK: Final[str] = "Lock"
    UNLOCK: Final[str] = "Unlock"
    IR_OFF: Final[str] = "IROFF"
    IR_ON: Final[str] = "IRON"
    MATRIX_RESET: Final[str] = "Mreset"

    PING: Final[str] = "Command FAILED: (ping)"
    """Failure echo of our own keepalive ping."""


# ===== Channel identifiers =====

GROUP_PRIMARY: Final[str] = "primary"
GROUP_PORT: Final[str] = "port"
GROUP_MIRROR: Final[str] = "mirror"
GROUP_VOLUME: Final[str] = "volume"

CHANNEL_POWER: Final[str] = "power"
CHANNEL_PANELLOCK: Final[str] = "panellock"
CHANNEL_IRENABLE: Final[str] = "irenable"
CHANNEL_PORTPOWER: Final[str] = "portpower"
CHANNEL_PORTOUTPUT: Final[str] = "portoutput"
CHANNEL_PORTMIRROR: Final[str] = "portmirror"
CHANNEL_PORTMIRRORENABLED: Final[str] = "portmirrorenabled"
CHANNEL_VOLUME: Final[str] = "volume"
CHANNEL_VOLUME_MUTE: Final[str] = "volumemute"

PROPERTY_VERSION: Final[str] = "version"
PROPERTY_TYPE: Final[str] = "type"


def create_channel_id(group: str, channel: str, port: int | None = None) -> str:
    """
    Build a channel id.

    Device-wide channels are ``<group>#<channel>`` and per-port channels are
    ``<group><port>#<channel>``.

    Example:
        >>> create_channel_id(GROUP_PRIMARY, CHANNEL_POWER)
        'primary#power'
        >>> create_channel_id(GROUP_PORT, CHANNEL_PORTOUTPUT, 3)
        'port3#portoutput'
    """
    if port is None:
        return f"{group}#{channel}"
    return f"{group}{port}#{channel}"
