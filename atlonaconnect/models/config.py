"""
Pydantic models for switch configuration and hardware capabilities.

Both models are frozen (immutable): the client reads them but never changes
them.

Example:
    >>> config = MatrixConfig(host="192.168.1.50", username="admin", password="secret")
    >>> caps = Capabilities.for_model("AT-UHD-PRO3-88M")
    >>> sorted(caps.hdmi_ports)
    [8, 9, 10]
"""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from atlonaconnect.protocol.constants import ProtocolConstants


class MatrixConfig(BaseModel):
    """
    Connection settings for one switch.

    The username and password are only used when the switch has telnet/IP
    login enabled; the handshake discovers that by itself.
    """

    model_config = ConfigDict(frozen=True, hide_input_in_errors=True)

    host: str | None = Field(default=None, description="IP address or host name (TCP sessions)")
    port: int = Field(default=ProtocolConstants.DEFAULT_TCP_PORT, ge=1, le=65535)
    username: str | None = None
    password: str | None = None
    login_timeout: float = Field(
        default=ProtocolConstants.LOGIN_TIMEOUT,
        gt=0,
        description="Seconds to wait for each response during login",
    )

    @field_validator("username", "password")
    @classmethod
    def _validate_credential(cls, value: str | None) -> str | None:
        # Sent verbatim as one command line
        if value is not None and not all(" " <= char <= "~" for char in value):
            raise ValueError("credentials must be printable ASCII without control characters")
        return value

    @property
    def has_username(self) -> bool:
        return bool(self.username and self.username.strip())

    @property
    def has_password(self) -> bool:
        return bool(self.password and self.password.strip())

    def __repr__(self) -> str:
        # Keep the password out of logs
        return (
            f"MatrixConfig(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, login_timeout={self.login_timeout})"
        )


class Capabilities(BaseModel):
    """
    What a particular PRO3 model supports.

    Attributes:
        nbr_power_ports: Number of output ports whose power can be switched.
        nbr_audio_ports: Number of audio outputs (volume/mute).
        hdmi_ports: Port numbers that can be mirrored.
    """

    model_config = ConfigDict(frozen=True)

    nbr_power_ports: int = Field(ge=0)
    nbr_audio_ports: int = Field(ge=0)
    hdmi_ports: frozenset[int] = Field(default_factory=frozenset)

    @field_validator("hdmi_ports")
    @classmethod
    def _validate_hdmi_ports(cls, value: frozenset[int]) -> frozenset[int]:
        if any(port <= 0 for port in value):
            raise ValueError("hdmi port numbers must be greater than 0")
        return value

    def is_hdmi_port(self, port: int) -> bool:
        return port in self.hdmi_ports

    @classmethod
    def for_model(cls, model: str) -> Capabilities:
        """
        Get the capabilities of a known model.

        Args:
            model: Model name, with or without the "AT-UHD-PRO3-" prefix
                (e.g. "AT-UHD-PRO3-66M" or "66M").

        Raises:
            KeyError: If the model is unknown.
        """
        key = model.upper().removeprefix("AT-UHD-PRO3-")
        try:
            return MODEL_CAPABILITIES[key]
        except KeyError:
            raise KeyError(f"Unknown PRO3 model: {model}") from None


MODEL_CAPABILITIES: Final[dict[str, Capabilities]] = {
    "44M": Capabilities(nbr_power_ports=5, nbr_audio_ports=3, hdmi_ports=frozenset({5})),
    "66M": Capabilities(nbr_power_ports=8, nbr_audio_ports=4, hdmi_ports=frozenset({6, 7, 8})),
    "88M": Capabilities(nbr_power_ports=10, nbr_audio_ports=6, hdmi_ports=frozenset({8, 9, 10})),
    "1616M": Capabilities(
        nbr_power_ports=5, nbr_audio_ports=3, hdmi_ports=frozenset({17, 18, 19, 20})
    ),
}
