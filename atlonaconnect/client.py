"""
Atlona PRO3 Matrix Client.

This module provides the main client interface for controlling an Atlona
AT-UHD-PRO3 matrix switch over its telnet or RS-232 text protocol.

The client implements a small state machine around the session's single
listener slot:
    IDLE -> login() -> AUTHENTICATING (LoginCollector listening)
    AUTHENTICATING -> success -> OPERATIONAL (ResponseDispatcher listening)
    AUTHENTICATING -> failure -> IDLE (no listener)

Commands are fire-and-forget: no operation waits for its reply. Replies and
broadcasts arrive through the dispatcher and are pushed to the
HandlerCallback.

Example:
    >>> from atlonaconnect import Capabilities, MatrixClient, MatrixConfig
    >>> from atlonaconnect.session import TcpSession
    >>>
    >>> async def main(callback):
    ...     config = MatrixConfig(host="192.168.1.50", username="admin", password="secret")
    ...     async with TcpSession(config.host, config.port) as session:
    ...         client = MatrixClient(session, config, Capabilities.for_model("88M"), callback)
    ...         reason = await client.login()
    ...         if reason is None:
    ...             await client.set_port_switch(2, 4)
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING

from atlonaconnect.callback import DeviceStatus, StatusDetail
from atlonaconnect.exceptions import ProtocolError, TransportError
from atlonaconnect.protocol import commands
from atlonaconnect.protocol.constants import PROPERTY_TYPE, PROPERTY_VERSION
from atlonaconnect.protocol.dispatcher import ResponseDispatcher
from atlonaconnect.protocol.login import LoginCollector, LoginHandshake

if TYPE_CHECKING:
    from atlonaconnect.callback import HandlerCallback
    from atlonaconnect.models.config import Capabilities, MatrixConfig
    from atlonaconnect.session.abc import AbstractSession, SessionListener

# Module logger
logger = logging.getLogger(__name__)


class ClientState(Enum):
    """Matrix client connection states."""

    IDLE = auto()
    """Not logged in; no listener registered."""

    AUTHENTICATING = auto()
    """Login handshake running; the LoginCollector is listening."""

    OPERATIONAL = auto()
    """Logged in; the ResponseDispatcher is listening."""


class MatrixClient:
    """
    Client for one Atlona PRO3 switch.

    The client owns the session's listener slot: at any time the session
    has no listener, the login collector, or the response dispatcher.

    Attributes:
        state: Current client state.
        model_type: Model reported by the switch (e.g. "AT-UHD-PRO3-88M").
        firmware_version: Firmware reported by the switch.

    Example:
        >>> client = MatrixClient(session, config, capabilities, callback)
        >>> await client.login()
        >>> await client.set_volume(1, -20)
        >>> await client.recall_io_settings(2)
    """

    def __init__(
        self,
        session: AbstractSession,
        config: MatrixConfig,
        capabilities: Capabilities,
        callback: HandlerCallback,
    ) -> None:
        """
        Initialize the matrix client.

        Args:
            session: Session to the switch (may be open or not yet open).
            config: Login settings.
            capabilities: Ports supported by the switch model.
            callback: Receiver of status, property and state notifications.
        """
        self._session = session
        self._config = config
        self._capabilities = capabilities
        self._callback = callback
        self._state = ClientState.IDLE
        self._model_type: str | None = None
        self._firmware_version: str | None = None
        self._status: tuple[DeviceStatus, StatusDetail] | None = None
        self._dispatcher = ResponseDispatcher(self)

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def is_operational(self) -> bool:
        return self._state == ClientState.OPERATIONAL

    @property
    def session(self) -> AbstractSession:
        return self._session

    @property
    def callback(self) -> HandlerCallback:
        return self._callback

    @property
    def capabilities(self) -> Capabilities:
        return self._capabilities

    @property
    def dispatcher(self) -> ResponseDispatcher:
        return self._dispatcher

    @property
    def model_type(self) -> str | None:
        return self._model_type

    @property
    def firmware_version(self) -> str | None:
        return self._firmware_version

    # ------------------------------------------------------------------
    # Login

    async def login(self) -> str | None:
        """
        Log into the switch, if it asks for a login.

        Runs the login handshake (see atlonaconnect.protocol.login), then
        installs the response dispatcher, reports ONLINE, turns broadcasts
        on and refreshes all state.

        Returns:
            None if logged in (or no login was needed), otherwise a
            human-readable reason the login failed.

        Raises:
            ProtocolError: If a login is already running.
            TimeoutError: If the switch stops answering during the handshake.
            TransportError: If the session fails during the handshake.
        """
        if self._state == ClientState.AUTHENTICATING:
            raise ProtocolError("Login already in progress")

        logger.debug("Logging into atlona switch %s", self._session.name)

        # Void them so they are retrieved again
        self._model_type = None
        self._firmware_version = None
        self._status = None

        collector = LoginCollector(timeout=self._config.login_timeout)
        self._set_listener(collector, ClientState.AUTHENTICATING)

        try:
            reason = await LoginHandshake(self._session, self._config, collector).run()
        except BaseException:
            self._detach()
            raise
        finally:
            collector.discard()

        if reason is not None:
            logger.warning("Login to %s failed: %s", self._session.name, reason)
            self._detach()
            return reason

        await self._post_login()
        return None

    async def _post_login(self) -> None:
        logger.debug("Atlona switch now connected")
        self._set_listener(self._dispatcher, ClientState.OPERATIONAL)
        self.report_status(DeviceStatus.ONLINE, StatusDetail.NONE, None)

        # Get notified when routing changes (web page, presets, IR, ...)
        await self._send_command(commands.broadcast_on())

        await self.refresh_all()

    def _set_listener(self, listener: SessionListener, state: ClientState) -> None:
        self._session.clear_listeners()
        self._session.add_listener(listener)
        self._state = state

    def _detach(self) -> None:
        self._session.clear_listeners()
        self._state = ClientState.IDLE

    # ------------------------------------------------------------------
    # Connection state (used by the dispatcher)

    def report_status(
        self,
        status: DeviceStatus,
        detail: StatusDetail,
        message: str | None,
    ) -> None:
        """
        Push a status change to the callback.

        Repeats of the current (status, detail) are not pushed again.
        """
        if self._status == (status, detail):
            logger.debug("Status already %s/%s: %s", status.name, detail.name, message)
            return

        self._status = (status, detail)
        if status == DeviceStatus.OFFLINE:
            logger.warning("Switch %s offline: %s", self._session.name, message)
        self._callback.status_changed(status, detail, message)

    def record_firmware_version(self, version: str) -> str:
        """Cache the firmware version, keeping the first one seen this login."""
        if self._firmware_version is None:
            self._firmware_version = version
        return self._firmware_version

    def record_model_type(self, model_type: str) -> str:
        """Cache the model type, keeping the first one seen this login."""
        if self._model_type is None:
            self._model_type = model_type
        return self._model_type

    # ------------------------------------------------------------------
    # Operations

    async def ping(self) -> None:
        """Send an (invalid) ping command to keep the connection alive."""
        await self._send_command(commands.ping())

    async def refresh_all(self) -> None:
        """
        Refresh every state the switch can report.

        Model type and firmware are only queried when not already known.
        """
        logger.debug("Refreshing matrix state")
        if self._firmware_version is None:
            await self.refresh_version()
        else:
            self._callback.set_property(PROPERTY_VERSION, self._firmware_version)

        if self._model_type is None:
            await self.refresh_type()
        else:
            self._callback.set_property(PROPERTY_TYPE, self._model_type)

        await self.refresh_power()
        await self.refresh_all_port_statuses()

        for port in range(1, self._capabilities.nbr_power_ports + 1):
            await self.refresh_port_power(port)

        for port in range(1, self._capabilities.nbr_audio_ports + 1):
            await self.refresh_volume_status(port)
            await self.refresh_volume_mute(port)

        for port in sorted(self._capabilities.hdmi_ports):
            await self.refresh_port_status(port)

    async def set_power(self, on: bool) -> None:
        await self._send_command(commands.power(on))

    async def refresh_power(self) -> None:
        await self._send_command(commands.power_status())

    async def refresh_version(self) -> None:
        await self._send_command(commands.version())

    async def refresh_type(self) -> None:
        await self._send_command(commands.model_type())

    async def set_panel_lock(self, locked: bool) -> None:
        """Lock or unlock the front panel."""
        await self._send_command(commands.panel_lock(locked))

    async def reset_all_ports(self) -> None:
        """Reset all ports back to their default routing."""
        await self._send_command(commands.reset_all_ports())

    async def set_port_power(self, port: int, on: bool) -> None:
        """
        Set whether an output port is powered (outputting).

        Raises:
            ValueError: If port is not greater than 0.
        """
        await self._send_command(commands.port_power(port, on))

    async def refresh_port_power(self, port: int) -> None:
        await self._send_command(commands.port_power_status(port))

    async def set_port_all(self, port: int) -> None:
        """Route one input port to every output port."""
        await self._send_command(commands.port_all(port))

    async def set_port_switch(self, input_port: int, output_port: int) -> None:
        """
        Route an input port to an output port.

        Raises:
            ValueError: If either port is not greater than 0.
        """
        await self._send_command(commands.switch_port(input_port, output_port))

    async def set_port_mirror(self, hdmi_port: int, output_port: int) -> None:
        """
        Mirror an HDMI port onto an output port.

        Ports that are not mirror-capable on this model are logged and
        ignored.

        Raises:
            ValueError: If either port is not greater than 0.
        """
        command = commands.mirror(hdmi_port, output_port)
        if not self._capabilities.is_hdmi_port(hdmi_port):
            logger.info("Trying to set port mirroring on a non-hdmi port: %d", hdmi_port)
            return
        await self._send_command(command)

    async def remove_port_mirror(self, hdmi_port: int) -> None:
        """Stop mirroring an HDMI port."""
        command = commands.unmirror(hdmi_port)
        if not self._capabilities.is_hdmi_port(hdmi_port):
            logger.info("Trying to remove port mirroring on a non-hdmi port: %d", hdmi_port)
            return
        await self._send_command(command)

    async def refresh_port_mirror(self, hdmi_port: int) -> None:
        await self._send_command(commands.mirror_status(hdmi_port))

    async def set_volume(self, port: int, level: float) -> None:
        """
        Set an audio output's volume.

        Args:
            port: Audio port number (> 0).
            level: Level in dB, -79 to +15.

        Raises:
            ValueError: If the port or level is out of range.
        """
        await self._send_command(commands.volume(port, level))

    async def refresh_volume_status(self, port: int) -> None:
        await self._send_command(commands.volume_status(port))

    async def set_volume_mute(self, port: int, mute: bool) -> None:
        await self._send_command(commands.volume_mute(port, mute))

    async def refresh_volume_mute(self, port: int) -> None:
        await self._send_command(commands.volume_mute_status(port))

    async def set_ir_on(self, on: bool) -> None:
        """Enable or disable the IR receiver."""
        await self._send_command(commands.ir(on))

    async def refresh_port_status(self, port: int) -> None:
        await self._send_command(commands.port_status(port))

    async def refresh_all_port_statuses(self) -> None:
        """Query the routing of every output port."""
        await self._send_command(commands.port_status())

    async def save_io_settings(self, preset: int) -> None:
        """Save the current routing as a preset."""
        await self._send_command(commands.save_preset(preset))

    async def recall_io_settings(self, preset: int) -> None:
        """Restore the routing saved in a preset."""
        await self._send_command(commands.recall_preset(preset))

    async def clear_io_settings(self, preset: int) -> None:
        await self._send_command(commands.clear_preset(preset))

    async def reset_matrix(self) -> None:
        """Reset (reboot) the switch."""
        await self._send_command(commands.matrix_reset())

    async def _send_command(self, command: str) -> None:
        """
        Send a command, turning transport failures into an OFFLINE status.

        Raises:
            ValueError: If the command is blank.
        """
        commands.validate_command(command)
        try:
            await self._session.send_command(command)
        except (TransportError, OSError) as e:
            logger.error("Failed sending %r to %s: %s", command, self._session.name, e)
            self.report_status(
                DeviceStatus.OFFLINE,
                StatusDetail.COMMUNICATION_ERROR,
                f"Exception occurred sending to Atlona: {e}",
            )

    def __repr__(self) -> str:
        model = self._model_type or "None"
        return f"MatrixClient(state={self._state.name}, model={model}, session={self._session.name})"
