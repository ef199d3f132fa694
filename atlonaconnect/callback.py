"""
Callback interface between the protocol client and its owner.

The client never holds device state on behalf of the caller; every state it
learns from the switch is pushed through a HandlerCallback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Union

StateValue = Union[bool, int, float]
"""On/off channels carry a bool, numeric channels an int or float."""


class DeviceStatus(Enum):
    """Connection status reported to the callback."""

    ONLINE = auto()
    OFFLINE = auto()


class StatusDetail(Enum):
    """Why the status changed."""

    NONE = auto()
    COMMUNICATION_ERROR = auto()
    CONFIGURATION_ERROR = auto()


class HandlerCallback(ABC):
    """
    Receiver of status, property and channel state notifications.

    Implementations are called from the session's delivery task and from
    caller coroutines; they must not block.
    """

    @abstractmethod
    def status_changed(
        self,
        status: DeviceStatus,
        detail: StatusDetail,
        message: str | None,
    ) -> None:
        """Called when the connection goes online or offline."""
        ...

    @abstractmethod
    def state_changed(self, channel_id: str, state: StateValue) -> None:
        """Called when the switch reports a new channel state."""
        ...

    @abstractmethod
    def set_property(self, name: str, value: str) -> None:
        """Called when the switch reports a static property (model, firmware)."""
        ...
