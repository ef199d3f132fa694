"""
Protocol layer for Atlona PRO3 communication.

This package contains the text protocol handling:
- Command literals, response literals and channel identifiers (constants)
- Command formatting and argument validation (commands)
- The login handshake (login)
- Classification of inbound lines (dispatcher)

Only constants and commands are imported here; import login and dispatcher
from their modules.
"""

from atlonaconnect.protocol import commands
from atlonaconnect.protocol.constants import (
    Command,
    ProtocolConstants,
    Response,
    create_channel_id,
)

__all__ = [
    "Command",
    "ProtocolConstants",
    "Response",
    "create_channel_id",
    "commands",
]
