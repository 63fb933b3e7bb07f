"""Unit tests for switch and lock entities.

Example Run:
    pytest tests/unit/hostbridge/entities/test_switch.py -v
"""

import logging
from unittest.mock import MagicMock

import pytest

from hostbridge.entities import Lock, Switch
from tests.conftest import TEST_HOST, make_message


@pytest.fixture(params=[Switch, Lock])
def entity_class(request):
    return request.param


class TestBooleanCommands:
    """Test suite shared by Switch and Lock."""

    def test_command_requests_change(self, connected_supervisor, mock_mqtt_client, entity_class):
        """Test that a valid command asks the owner without changing state."""
        entity = entity_class(connected_supervisor, "dnd")
        entity.on_state_change_requested = MagicMock()
        entity.runtime_registration()

        mock_mqtt_client.on_message(mock_mqtt_client, None, make_message(f"{TEST_HOST}/dnd/set", b"true"))

        entity.on_state_change_requested.assert_called_once_with(True)
        assert entity.state is False

    def test_malformed_command_ignored(self, connected_supervisor, mock_mqtt_client, entity_class, caplog):
        """Test that a non-boolean payload only logs a warning."""
        entity = entity_class(connected_supervisor, "dnd")
        entity.on_state_change_requested = MagicMock()
        entity.runtime_registration()
        mock_mqtt_client.publish.reset_mock()

        with caplog.at_level(logging.WARNING):
            mock_mqtt_client.on_message(mock_mqtt_client, None, make_message(f"{TEST_HOST}/dnd/set", b"maybe"))

        entity.on_state_change_requested.assert_not_called()
        mock_mqtt_client.publish.assert_not_called()
        assert entity.state is False
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 1

    def test_command_without_callback(self, connected_supervisor, mock_mqtt_client, entity_class):
        """Test that a command without an owner callback is ignored."""
        entity = entity_class(connected_supervisor, "dnd")
        entity.runtime_registration()

        mock_mqtt_client.on_message(mock_mqtt_client, None, make_message(f"{TEST_HOST}/dnd/set", b"true"))

        assert entity.state is False

    def test_set_state_publishes(self, connected_supervisor, published, entity_class):
        """Test that confirming a state publishes it retained."""
        entity = entity_class(connected_supervisor, "dnd")

        entity.set_state(True)

        assert published() == [(f"{TEST_HOST}/dnd", "true", True)]


class TestLockDiscovery:
    """Test suite for lock-specific discovery fields."""

    def test_lock_payloads(self, connected_supervisor):
        """Test the lock/unlock literals in the discovery payload."""
        lock = Lock(connected_supervisor, "locked")

        payload = lock.discovery_payload()

        assert payload["payload_lock"] == "true"
        assert payload["payload_unlock"] == "false"
        assert payload["state_locked"] == "true"
        assert payload["command_topic"] == f"{TEST_HOST}/locked/set"
