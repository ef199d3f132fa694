"""
Command formatting for the Atlona PRO3 protocol.

Every function validates its arguments and returns the command text, without
the line terminator (the session appends it). Invalid arguments raise
ValueError before anything can be transmitted.

Example:
    >>> switch_port(2, 4)
    'x2AVx4'
    >>> volume(1, -20)
    'VOUT1 -20'
"""

from __future__ import annotations

from atlonaconnect.protocol.constants import Command, ProtocolConstants


def _require_positive(name: str, value: int) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be greater than 0")


def _on_off(on: bool) -> str:
    return "on" if on else "off"


def validate_command(command: str | None) -> str:
    """
    Ensure a command is not missing or blank.

    Raises:
        ValueError: If the command is None or only whitespace.
    """
    if command is None:
        raise ValueError("command cannot be None")
    if not command.strip():
        raise ValueError("command cannot be empty")
    return command


def format_level(level: float) -> str:
    """Format a volume level, dropping a zero fraction (-20.0 -> '-20')."""
    return f"{level:g}"


def power(on: bool) -> str:
    return Command.POWER_ON if on else Command.POWER_OFF


def power_status() -> str:
    return Command.POWER_STATUS


def version() -> str:
    return Command.VERSION


def model_type() -> str:
    return Command.TYPE


def panel_lock(locked: bool) -> str:
    return Command.PANEL_LOCK if locked else Command.PANEL_UNLOCK


def reset_all_ports() -> str:
    return Command.PORT_RESET_ALL


def port_power(port: int, on: bool) -> str:
    """Turn an output port on or off."""
    _require_positive("port", port)
    return Command.PORT_POWER_FORMAT.format(port=port, value=_on_off(on))


def port_power_status(port: int) -> str:
    _require_positive("port", port)
    return Command.PORT_POWER_FORMAT.format(port=port, value="sta")


def port_all(port: int) -> str:
    """Route an input port to every output."""
    _require_positive("port", port)
    return Command.PORT_ALL_FORMAT.format(port=port)


def switch_port(input_port: int, output_port: int) -> str:
    """Route an input port to an output port."""
    _require_positive("input_port", input_port)
    _require_positive("output_port", output_port)
    return Command.PORT_SWITCH_FORMAT.format(input=input_port, output=output_port)


def mirror(hdmi_port: int, output_port: int) -> str:
    """Mirror an HDMI port onto an output port."""
    _require_positive("hdmi_port", hdmi_port)
    _require_positive("output_port", output_port)
    return Command.PORT_MIRROR_FORMAT.format(hdmi=hdmi_port, output=output_port)


def mirror_status(hdmi_port: int) -> str:
    _require_positive("hdmi_port", hdmi_port)
    return Command.PORT_MIRROR_STATUS_FORMAT.format(hdmi=hdmi_port)


def unmirror(hdmi_port: int) -> str:
    _require_positive("hdmi_port", hdmi_port)
    return Command.PORT_UNMIRROR_FORMAT.format(hdmi=hdmi_port)


def volume(port: int, level: float) -> str:
    """
    Set the volume of an audio output.

    Args:
        port: Audio port number (> 0).
        level: Level in dB, between -79 and +15 inclusive.

    Raises:
        ValueError: If the port or level is out of range.
    """
    _require_positive("port", port)
    if not (ProtocolConstants.MIN_VOLUME <= level <= ProtocolConstants.MAX_VOLUME):
        raise ValueError(
            f"level must be between {ProtocolConstants.MIN_VOLUME} "
            f"and +{ProtocolConstants.MAX_VOLUME}"
        )
    return Command.VOLUME_FORMAT.format(port=port, value=format_level(level))


def volume_status(port: int) -> str:
    _require_positive("port", port)
    return Command.VOLUME_FORMAT.format(port=port, value="sta")


def volume_mute(port: int, mute: bool) -> str:
    _require_positive("port", port)
    return Command.VOLUME_MUTE_FORMAT.format(port=port, value=_on_off(mute))


def volume_mute_status(port: int) -> str:
    _require_positive("port", port)
    return Command.VOLUME_MUTE_FORMAT.format(port=port, value="sta")


def ir(on: bool) -> str:
    return Command.IR_ON if on else Command.IR_OFF


def port_status(port: int | None = None) -> str:
    """Query one port's routing, or every port's when port is None."""
    if port is None:
        return Command.PORT_STATUS
    _require_positive("port", port)
    return Command.PORT_STATUS_FORMAT.format(port=port)


def save_preset(preset: int) -> str:
    _require_positive("preset", preset)
    return Command.SAVE_IO_FORMAT.format(preset=preset)


def recall_preset(preset: int) -> str:
    _require_positive("preset", preset)
    return Command.RECALL_IO_FORMAT.format(preset=preset)


def clear_preset(preset: int) -> str:
    _require_positive("preset", preset)
    return Command.CLEAR_IO_FORMAT.format(preset=preset)


def matrix_reset() -> str:
    return Command.MATRIX_RESET


def broadcast_on() -> str:
    return Command.BROADCAST_ON


def ping() -> str:
    return Command.PING
