"""Pytest configuration and global fixtures.

This module provides fixtures and configuration that are available to all tests.
Fixtures defined here are automatically discovered by pytest and can be used
by any test function by including them as parameters.

Common Fixtures:
    - mock_mqtt_client: Mocked MQTT client for testing without broker
    - clock / event_loop: Event loop driven by a manual clock
    - settings: In-memory settings pointing at a test broker
    - supervisor: Connection supervisor wired to the mocked client
    - connect / disconnect: Simulate broker connection events
    - connected_supervisor: Same, after a successful connect
    - published: Helper listing what the mocked client published

Example:
    def test_something(connected_supervisor, published):
        sensor = Sensor(connected_supervisor, "cpu")
        sensor.set_state(5)
        assert ("test-host/cpu", "5", True) in published()
"""

from unittest.mock import MagicMock

import paho.mqtt.client as mqtt
import pytest

from hostbridge.core.config import Settings
from hostbridge.core.connection import ConnectionSupervisor
from hostbridge.core.eventloop import EventLoop

TEST_HOST = "test-host"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def connack(failure: bool = False):
    """Reason code stand-in for the paho on_connect/on_disconnect callbacks."""
    return MagicMock(is_failure=failure)


def make_message(topic: str, payload: bytes) -> mqtt.MQTTMessage:
    msg = mqtt.MQTTMessage(topic=topic.encode())
    msg.payload = payload
    return msg


@pytest.fixture
def mock_mqtt_client():
    """Provide a mocked MQTT client for testing.

    This fixture creates a fully mocked paho-mqtt client that can be used
    in tests without requiring an actual MQTT broker connection.

    Returns:
        MagicMock: Mocked MQTT client with common methods stubbed
    """
    client = MagicMock()
    # Configure return values for common methods
    client.connect.return_value = 0
    client.publish.return_value = MagicMock(rc=0)
    client.subscribe.return_value = (0, 1)
    client.loop.return_value = mqtt.MQTT_ERR_SUCCESS
    client.disconnect.return_value = None
    return client


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def event_loop(clock):
    """Event loop that never blocks: timeouts are zero and time is manual."""
    return EventLoop(clock=clock, poll_interval=0)


@pytest.fixture
def settings(tmp_path):
    """In-memory settings for a test broker, saved under tmp_path."""
    return Settings.from_dict(
        {"general": {"host": "test.broker.local", "port": "1883"}},
        path=tmp_path / "config.ini",
    )


@pytest.fixture
def supervisor(mock_mqtt_client, settings, event_loop):
    return ConnectionSupervisor(mock_mqtt_client, settings, event_loop, hostname=TEST_HOST)


@pytest.fixture
def connect(supervisor, mock_mqtt_client):
    """Return a function that takes the supervisor through a successful connect."""

    def _connect():
        supervisor.connect()
        mock_mqtt_client.on_connect(mock_mqtt_client, None, {}, connack(), None)

    return _connect


@pytest.fixture
def disconnect(supervisor, mock_mqtt_client):
    """Return a function simulating an unexpected connection loss."""

    def _disconnect():
        mock_mqtt_client.on_disconnect(mock_mqtt_client, None, {}, connack(failure=True), None)

    return _disconnect


@pytest.fixture
def connected_supervisor(supervisor, mock_mqtt_client, connect):
    """Supervisor that has completed a connect; earlier publishes are cleared."""
    connect()
    mock_mqtt_client.publish.reset_mock()
    mock_mqtt_client.subscribe.reset_mock()
    return supervisor


@pytest.fixture
def published(mock_mqtt_client):
    """Return a function listing (topic, payload, retain) for every publish so far."""

    def _published():
        return [
            (c.args[0], c.kwargs.get("payload"), c.kwargs.get("retain", False))
            for c in mock_mqtt_client.publish.call_args_list
        ]

    return _published


@pytest.fixture
def mock_subprocess_popen(monkeypatch):
    """Mock subprocess.Popen for testing command launches."""
    mock = MagicMock()
    monkeypatch.setattr("subprocess.Popen", mock)
    return mock


@pytest.fixture
def mock_subprocess_run(monkeypatch):
    """Mock subprocess.run for testing command execution.

    Returns:
        Mock: Mock object that can be configured per test
    """
    mock = MagicMock()
    mock.return_value.returncode = 0
    mock.return_value.stdout = ""
    mock.return_value.stderr = ""
    monkeypatch.setattr("subprocess.run", mock)
    return mock


# Pytest hooks for custom behavior


def pytest_configure(config):
    """Configure pytest with custom settings.

    This hook runs before test collection begins.
    """
    import os

    # Never prompt while creating a config file in tests
    os.environ["HB_NON_INTERACTIVE"] = "1"


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add automatic markers.

    Args:
        config: pytest config object
        items: list of collected test items
    """
    for item in items:
        # Auto-mark all tests in tests/unit as unit tests
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Auto-mark integration tests
        if "tests/integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
