"""Unit tests for select and text entities.

Example Run:
    pytest tests/unit/hostbridge/entities/test_select.py -v
"""

import json
from unittest.mock import MagicMock

from hostbridge.entities import Select, Text
from tests.conftest import TEST_HOST, make_message


class TestSelect:
    """Test suite for Select."""

    def test_valid_option_applied_and_echoed(self, connected_supervisor, mock_mqtt_client, published):
        """Test that a known option is set, echoed and reported."""
        select = Select(connected_supervisor, "profile", options=["quiet", "performance"])
        select.on_option_selected = MagicMock()
        select.runtime_registration()
        mock_mqtt_client.publish.reset_mock()

        mock_mqtt_client.on_message(
            mock_mqtt_client, None, make_message(f"{TEST_HOST}/profile/set", b"performance")
        )

        assert select.state == "performance"
        assert published() == [(f"{TEST_HOST}/profile", "performance", True)]
        select.on_option_selected.assert_called_once_with("performance")

    def test_unknown_option_ignored(self, connected_supervisor, mock_mqtt_client):
        """Test that an unknown option changes nothing."""
        select = Select(connected_supervisor, "profile", options=["quiet"])
        select.on_option_selected = MagicMock()
        select.runtime_registration()

        mock_mqtt_client.on_message(mock_mqtt_client, None, make_message(f"{TEST_HOST}/profile/set", b"turbo"))

        assert select.state is None
        select.on_option_selected.assert_not_called()

    def test_set_options_reregisters(self, connected_supervisor, published):
        """Test that replacing the options re-publishes discovery."""
        select = Select(connected_supervisor, "profile", options=["quiet"])

        select.set_options(["quiet", "balanced"])

        discovery = [p for t, p, _ in published() if t.endswith("/profile/config")]
        assert json.loads(discovery[-1])["options"] == ["quiet", "balanced"]


class TestText:
    """Test suite for Text."""

    def test_text_applied_and_echoed(self, connected_supervisor, mock_mqtt_client, published):
        """Test that received text is set, echoed and reported."""
        text = Text(connected_supervisor, "status")
        text.on_text_change_requested = MagicMock()
        text.runtime_registration()
        mock_mqtt_client.publish.reset_mock()

        mock_mqtt_client.on_message(mock_mqtt_client, None, make_message(f"{TEST_HOST}/status/set", b"away"))

        assert text.state == "away"
        assert published() == [(f"{TEST_HOST}/status", "away", True)]
        text.on_text_change_requested.assert_called_once_with("away")
