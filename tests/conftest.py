"""Shared fixtures for atlonaconnect tests."""

from __future__ import annotations

import pytest
import pytest_asyncio

from atlonaconnect import Capabilities, MatrixClient, MatrixConfig
from atlonaconnect.callback import DeviceStatus, HandlerCallback, StatusDetail
from atlonaconnect.session.mock import MockSession, ScriptedMockSession


class RecordingCallback(HandlerCallback):
    """HandlerCallback that records every notification."""

    def __init__(self) -> None:
        self.statuses: list[tuple[DeviceStatus, StatusDetail, str | None]] = []
        self.states: list[tuple[str, bool | int | float]] = []
        self.properties: list[tuple[str, str]] = []

    def status_changed(self, status, detail, message) -> None:
        self.statuses.append((status, detail, message))

    def state_changed(self, channel_id, state) -> None:
        self.states.append((channel_id, state))

    def set_property(self, name, value) -> None:
        self.properties.append((name, value))


@pytest.fixture
def callback():
    """Create a RecordingCallback."""
    return RecordingCallback()


@pytest.fixture
def config():
    """Config with credentials and a short login timeout."""
    return MatrixConfig(host="mock", username="admin", password="secret", login_timeout=0.2)


@pytest.fixture
def capabilities():
    """Capabilities of the 4x4 model."""
    return Capabilities.for_model("AT-UHD-PRO3-44M")


@pytest.fixture
def mock_session():
    """Create a MockSession instance (not yet open)."""
    return MockSession()


@pytest.fixture
def scripted_session():
    """Create a ScriptedMockSession instance (not yet open)."""
    return ScriptedMockSession()


@pytest_asyncio.fixture
async def open_session():
    """An open MockSession, closed after the test."""
    session = MockSession()
    await session.open()
    yield session
    await session.close()


@pytest.fixture
def client(open_session, config, capabilities, callback):
    """A MatrixClient on an open MockSession, not logged in."""
    return MatrixClient(open_session, config, capabilities, callback)


@pytest.fixture
def idle_client(mock_session, config, capabilities, callback):
    """A MatrixClient on a session that is not open."""
    return MatrixClient(mock_session, config, capabilities, callback)
