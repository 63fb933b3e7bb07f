"""Unit tests for the device presence entity.

Example Run:
    pytest tests/unit/hostbridge/core/test_presence.py -v
"""

import json

from hostbridge.core.config import VERSION
from hostbridge.core.presence import DevicePresence
from tests.conftest import TEST_HOST

PRESENCE_DISCOVERY = f"homeassistant/binary_sensor/{TEST_HOST}/connected/config"
AVAILABILITY = f"{TEST_HOST}/connected"


class TestDevicePresence:
    """Test suite for DevicePresence."""

    def test_last_will_bound(self, supervisor, mock_mqtt_client):
        """Test that construction binds an 'off' retained last-will."""
        DevicePresence(supervisor)

        mock_mqtt_client.will_set.assert_called_once_with(AVAILABILITY, payload="off", qos=0, retain=True)

    def test_discovery_payload(self, supervisor, connect, published):
        """Test the presence discovery payload."""
        DevicePresence(supervisor)

        connect()

        payload = json.loads([p for t, p, _ in published() if t == PRESENCE_DISCOVERY][0])
        assert payload["payload_on"] == "on"
        assert payload["payload_off"] == "off"
        assert payload["device_class"] == "power"
        assert payload["state_topic"] == AVAILABILITY
        assert payload["unique_id"] == f"hostbridge_{TEST_HOST}_connected"
        assert payload["device"]["name"] == TEST_HOST
        assert payload["device"]["identifiers"] == f"hostbridge_{TEST_HOST}"
        assert payload["device"]["sw_version"] == VERSION
        assert "availability_topic" not in payload

    def test_on_after_registration(self, supervisor, connect, published):
        """Test that 'on' is published retained right after discovery."""
        DevicePresence(supervisor)

        connect()

        assert published()[:2] == [
            (PRESENCE_DISCOVERY, published()[0][1], True),
            (AVAILABILITY, "on", True),
        ]

    def test_close_publishes_off(self, supervisor, connect, published):
        """Test that closing announces the bridge offline."""
        presence = DevicePresence(supervisor)
        connect()

        presence.close()

        assert published()[-1] == (AVAILABILITY, "off", True)
        assert presence not in supervisor.entities()

    def test_close_when_disconnected(self, supervisor, published):
        """Test that closing while offline publishes nothing."""
        presence = DevicePresence(supervisor)

        presence.close()

        assert published() == []
