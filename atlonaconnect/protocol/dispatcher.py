"""
Response dispatching for the Atlona PRO3.

Once logged in, every line the switch sends goes through the
ResponseDispatcher. Lines are either replies to our own commands or
broadcasts caused by someone else (IR remote, front panel, web UI, another
telnet session); nothing tells them apart, and nothing ties a reply to the
command that caused it. Each line is classified by its content alone.

The rules are tried in table order and the first match wins. Order matters:
the patterns are not mutually exclusive (a routing line is found anywhere
in a line, a bare keyword may satisfy more than one shape), so the table
order is part of the protocol definition.

    Rule             Example line            Effect
    ---------------  ----------------------  ------------------------------------
    port_output      x1AVx2,x3AVx4           port<out>#portoutput = in (per pair)
    power            PWON                    primary#power
    version          Firmware 1.6.03         version property
    type             AT-UHD-PRO3-88M         type property
    port_power       x3$ on                  port<n>#portpower
    volume           VOUT1 -20               volume<n>#volume
    volume_mute      VOUTMute1 on            volume<n>#volumemute
    port_all         x2All                   re-query all routes
    mirror           MirrorHdmi8 Out3        mirror<n>#portmirror(+enabled)
    unmirror         UnMirror8               mirror<n>#portmirror = 0
    save/recall/...  Recall2                 recall re-queries all routes
    broadcast        Broadcast on            none
    ir               IRON                    primary#irenable
    reset_all        All#                    re-query all routes
    panel_lock       Lock                    primary#panellock
    matrix_reset     Mreset                  offline (switch reboots)
    command_failed   Command FAILED: (...)   logged
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from atlonaconnect.callback import DeviceStatus, StatusDetail
from atlonaconnect.protocol.constants import (
    CHANNEL_IRENABLE,
    CHANNEL_PANELLOCK,
    CHANNEL_PORTMIRROR,
    CHANNEL_PORTMIRRORENABLED,
    CHANNEL_PORTOUTPUT,
    CHANNEL_PORTPOWER,
    CHANNEL_POWER,
    CHANNEL_VOLUME,
    CHANNEL_VOLUME_MUTE,
    GROUP_MIRROR,
    GROUP_PORT,
    GROUP_PRIMARY,
    GROUP_VOLUME,
    PROPERTY_TYPE,
    PROPERTY_VERSION,
    Response,
    create_channel_id,
)
from atlonaconnect.session.abc import SessionListener

if TYPE_CHECKING:
    from atlonaconnect.client import MatrixClient

logger = logging.getLogger(__name__)

Handler = Callable[[re.Match[str], str], Awaitable[None]]

PORT_STATUS_PATTERN = re.compile(r"x(\d+)AVx(\d+),?")
POWER_STATUS_PATTERN = re.compile(r"PW(\w+)")
VERSION_PATTERN = re.compile(r"Firmware (.*)")
TYPE_PATTERN = re.compile(r"AT-UHD-PRO3-(\d+)M")
PORT_POWER_PATTERN = re.compile(r"x(\d+)\$ (\w+)")
VOLUME_PATTERN = re.compile(r"VOUT(\d+) (-?\d+)")
VOLUME_MUTE_PATTERN = re.compile(r"VOUTMute(\d+) (\w+)")
PORT_ALL_PATTERN = re.compile(r"x(\d+)All")
PORT_MIRROR_PATTERN = re.compile(r"MirrorHdmi(\d+) ([A-Za-z]+)(\d*)")
PORT_UNMIRROR_PATTERN = re.compile(r"UnMirror(\d+)")
SAVE_IO_PATTERN = re.compile(r"Save(\d+)")
RECALL_IO_PATTERN = re.compile(r"Recall(\d+)")
CLEAR_IO_PATTERN = re.compile(r"Clear(\d+)")
BROADCAST_PATTERN = re.compile(r"Broadcast (\w+)")


def _literal(*values: str) -> re.Pattern[str]:
    return re.compile("|".join(re.escape(value) for value in values))


class MatchMode(Enum):
    """How a rule's pattern is applied to a line."""

    FULL = auto()
    """The whole line must match."""

    SEARCH = auto()
    """The pattern may match anywhere in the line."""

    PREFIX = auto()
    """The line must start with a match."""


@dataclass(frozen=True)
class ResponseRule:
    """One entry of the dispatch table."""

    name: str
    pattern: re.Pattern[str]
    handler: Handler
    mode: MatchMode = MatchMode.FULL

    def match(self, response: str) -> re.Match[str] | None:
        if self.mode is MatchMode.SEARCH:
            return self.pattern.search(response)
        if self.mode is MatchMode.PREFIX:
            return self.pattern.match(response)
        return self.pattern.fullmatch(response)


class ResponseDispatcher(SessionListener):
    """
    Listener classifying every line received after login.

    Handlers push their results through the client's callback. A handler
    that cannot parse a number logs a warning and drops the line; the
    connection stays up.

    Args:
        client: The client owning the connection (its callback, cached
            properties and commands are used by the handlers).
    """

    def __init__(self, client: MatrixClient) -> None:
        self._client = client
        self._rules: tuple[ResponseRule, ...] = (
            ResponseRule("port_output", PORT_STATUS_PATTERN, self._handle_port_output, MatchMode.SEARCH),
            ResponseRule("power", POWER_STATUS_PATTERN, self._handle_power),
            ResponseRule("version", VERSION_PATTERN, self._handle_version),
            ResponseRule("type", TYPE_PATTERN, self._handle_type),
            ResponseRule("port_power", PORT_POWER_PATTERN, self._handle_port_power),
            ResponseRule("volume", VOLUME_PATTERN, self._handle_volume),
            ResponseRule("volume_mute", VOLUME_MUTE_PATTERN, self._handle_volume_mute),
            ResponseRule("port_all", PORT_ALL_PATTERN, self._handle_refresh_ports),
            ResponseRule("mirror", PORT_MIRROR_PATTERN, self._handle_mirror),
            ResponseRule("unmirror", PORT_UNMIRROR_PATTERN, self._handle_unmirror),
            ResponseRule("save_io", SAVE_IO_PATTERN, self._handle_acknowledgement),
            ResponseRule("recall_io", RECALL_IO_PATTERN, self._handle_refresh_ports),
            ResponseRule("clear_io", CLEAR_IO_PATTERN, self._handle_acknowledgement),
            ResponseRule("broadcast", BROADCAST_PATTERN, self._handle_acknowledgement),
            ResponseRule("ir", _literal(Response.IR_ON, Response.IR_OFF), self._handle_ir),
            ResponseRule("reset_all", _literal(Response.ALL), self._handle_refresh_ports),
            ResponseRule("panel_lock", _literal(Response.LOCK, Response.UNLOCK), self._handle_panel_lock),
            ResponseRule("matrix_reset", _literal(Response.MATRIX_RESET), self._handle_matrix_reset),
            ResponseRule(
                "command_failed", _literal(Response.FAILED), self._handle_command_failure, MatchMode.PREFIX
            ),
        )

    @property
    def rules(self) -> tuple[ResponseRule, ...]:
        """The dispatch table, in match order."""
        return self._rules

    def find_rule(self, response: str) -> tuple[ResponseRule, re.Match[str]] | None:
        """Return the first rule matching the line, with its match."""
        for rule in self._rules:
            match = rule.match(response)
            if match is not None:
                return rule, match
        return None

    async def on_response(self, response: str) -> None:
        if not response:
            return

        if response == Response.PING:
            # Echo of our keepalive
            return

        found = self.find_rule(response)
        if found is None:
            logger.info("Unhandled response: %s", response)
            return

        rule, match = found
        logger.debug("Dispatching %r to %s", response, rule.name)
        await rule.handler(match, response)

    async def on_error(self, error: Exception) -> None:
        self._client.report_status(
            DeviceStatus.OFFLINE,
            StatusDetail.COMMUNICATION_ERROR,
            f"Exception occurred reading from Atlona: {error}",
        )

    # ------------------------------------------------------------------
    # Handlers

    def _state_changed(self, channel_id: str, state: bool | int | float) -> None:
        self._client.callback.state_changed(channel_id, state)

    async def _handle_port_output(self, match: re.Match[str], response: str) -> None:
        # One line may carry several comma separated routes
        for route in PORT_STATUS_PATTERN.finditer(response):
            try:
                input_port = int(route.group(1))
                output_port = int(route.group(2))
            except ValueError:
                logger.warning("Invalid port output response (can't parse number): '%s'", response)
                continue
            self._state_changed(
                create_channel_id(GROUP_PORT, CHANNEL_PORTOUTPUT, output_port), input_port
            )

    async def _handle_power(self, match: re.Match[str], response: str) -> None:
        value = match.group(1)
        if value == "ON":
            self._state_changed(create_channel_id(GROUP_PRIMARY, CHANNEL_POWER), True)
        elif value == "OFF":
            self._state_changed(create_channel_id(GROUP_PRIMARY, CHANNEL_POWER), False)
        else:
            logger.warning("Invalid power response: '%s'", response)

    async def _handle_version(self, match: re.Match[str], response: str) -> None:
        version = self._client.record_firmware_version(match.group(1))
        self._client.callback.set_property(PROPERTY_VERSION, version)

    async def _handle_type(self, match: re.Match[str], response: str) -> None:
        model_type = self._client.record_model_type(response)
        self._client.callback.set_property(PROPERTY_TYPE, model_type)

    async def _handle_port_power(self, match: re.Match[str], response: str) -> None:
        try:
            port = int(match.group(1))
        except ValueError:
            logger.warning("Invalid port power (can't parse number): '%s'", response)
            return

        # Case sensitive: the switch answers in lower case
        value = match.group(2)
        if value not in ("on", "off"):
            logger.warning("Invalid port power response: '%s'", response)
            return
        self._state_changed(create_channel_id(GROUP_PORT, CHANNEL_PORTPOWER, port), value == "on")

    async def _handle_volume(self, match: re.Match[str], response: str) -> None:
        try:
            port = int(match.group(1))
            level = int(match.group(2))
        except ValueError:
            logger.warning("Invalid volume response (can't parse number): '%s'", response)
            return
        self._state_changed(create_channel_id(GROUP_VOLUME, CHANNEL_VOLUME, port), level)

    async def _handle_volume_mute(self, match: re.Match[str], response: str) -> None:
        try:
            port = int(match.group(1))
        except ValueError:
            logger.warning("Invalid volume mute (can't parse number): '%s'", response)
            return

        value = match.group(2)
        if value not in ("on", "off"):
            logger.warning("Invalid volume mute response: '%s'", response)
            return
        self._state_changed(create_channel_id(GROUP_VOLUME, CHANNEL_VOLUME_MUTE, port), value == "on")

    async def _handle_refresh_ports(self, match: re.Match[str], response: str) -> None:
        # The switch doesn't report the routes this changed
        await self._client.refresh_all_port_statuses()

    async def _handle_mirror(self, match: re.Match[str], response: str) -> None:
        try:
            hdmi_port = int(match.group(1))

            # "off", or "on"/"Out" followed by the output port
            operation = match.group(2).strip().lower()
            if operation == "off":
                self._state_changed(
                    create_channel_id(GROUP_MIRROR, CHANNEL_PORTMIRRORENABLED, hdmi_port), False
                )
                return

            output_port = int(match.group(3))
        except ValueError:
            logger.warning("Invalid mirror response (can't parse number): '%s'", response)
            return

        self._state_changed(create_channel_id(GROUP_MIRROR, CHANNEL_PORTMIRROR, hdmi_port), output_port)
        self._state_changed(create_channel_id(GROUP_MIRROR, CHANNEL_PORTMIRRORENABLED, hdmi_port), True)

    async def _handle_unmirror(self, match: re.Match[str], response: str) -> None:
        try:
            hdmi_port = int(match.group(1))
        except ValueError:
            logger.warning("Invalid unmirror response (can't parse number): '%s'", response)
            return
        self._state_changed(create_channel_id(GROUP_MIRROR, CHANNEL_PORTMIRROR, hdmi_port), 0)

    async def _handle_acknowledgement(self, match: re.Match[str], response: str) -> None:
        logger.debug("Acknowledged: %s", response)

    async def _handle_ir(self, match: re.Match[str], response: str) -> None:
        self._state_changed(
            create_channel_id(GROUP_PRIMARY, CHANNEL_IRENABLE), response == Response.IR_ON
        )

    async def _handle_panel_lock(self, match: re.Match[str], response: str) -> None:
        self._state_changed(
            create_channel_id(GROUP_PRIMARY, CHANNEL_PANELLOCK), response == Response.LOCK
        )

    async def _handle_matrix_reset(self, match: re.Match[str], response: str) -> None:
        self._client.report_status(
            DeviceStatus.OFFLINE,
            StatusDetail.COMMUNICATION_ERROR,
            "System is rebooting due to matrix reset",
        )

    async def _handle_command_failure(self, match: re.Match[str], response: str) -> None:
        logger.info("%s", response)
