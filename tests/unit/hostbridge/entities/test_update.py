"""Unit tests for the update entity.

Example Run:
    pytest tests/unit/hostbridge/entities/test_update.py -v
"""

import json
from unittest.mock import MagicMock

from hostbridge.entities import Update
from tests.conftest import TEST_HOST, make_message


class TestUpdate:
    """Test suite for Update."""

    def test_state_document(self, connected_supervisor, published):
        """Test that the state is one JSON document."""
        update = Update(connected_supervisor, "update")

        update.set_installed_version("1.0.0")
        update.set_latest_version("1.1.0")

        assert json.loads(published()[-1][1]) == {
            "installed_version": "1.0.0",
            "latest_version": "1.1.0",
            "in_progress": False,
            "update_percentage": None,
        }

    def test_unchanged_field_not_republished(self, connected_supervisor, mock_mqtt_client):
        """Test that setting the same version twice publishes once."""
        update = Update(connected_supervisor, "update")

        update.set_latest_version("1.1.0")
        update.set_latest_version("1.1.0")

        assert mock_mqtt_client.publish.call_count == 1

    def test_progress(self, connected_supervisor, published):
        """Test install progress reporting and reset."""
        update = Update(connected_supervisor, "update")

        update.set_in_progress(True)
        update.set_update_percentage(40)
        assert json.loads(published()[-1][1])["update_percentage"] == 40

        update.set_update_percentage(140)
        assert json.loads(published()[-1][1])["update_percentage"] == 40

        update.set_in_progress(False)
        document = json.loads(published()[-1][1])
        assert document["in_progress"] is False
        assert document["update_percentage"] is None

    def test_install_command(self, connected_supervisor, mock_mqtt_client):
        """Test that 'install' requests an install and other payloads do not."""
        update = Update(connected_supervisor, "update")
        update.on_install_requested = MagicMock()
        update.runtime_registration()

        for payload in (b"upgrade", b"install"):
            mock_mqtt_client.on_message(mock_mqtt_client, None, make_message(f"{TEST_HOST}/update/set", payload))

        update.on_install_requested.assert_called_once_with()
