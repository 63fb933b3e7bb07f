"""Unit tests for the screen lock integration.

Example Run:
    pytest tests/unit/hostbridge/integrations/test_locked_state.py -v
"""

import sys
from unittest.mock import MagicMock

import pytest

from hostbridge.integrations import locked_state
from tests.conftest import TEST_HOST, make_message


@pytest.fixture
def screensaver():
    proxy = MagicMock()
    proxy.GetActive.return_value = True
    return proxy


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def watcher(connected_supervisor, event_loop, screensaver, session):
    return locked_state.LockedState(connected_supervisor, event_loop, screensaver, lambda: session)


class TestLockedState:
    """Test suite for LockedState."""

    def test_initial_state(self, watcher):
        """Test that the lock starts from the screen saver's state."""
        assert watcher.lock.state is True
        assert watcher.lock.icon == "mdi:monitor-lock"

    def test_signal_marshalled_to_loop(self, watcher, screensaver, event_loop, published):
        """Test that ActiveChanged only takes effect on the event loop."""
        on_active_changed = screensaver.ActiveChanged.connect.call_args.args[0]

        on_active_changed(False)
        assert watcher.lock.state is True

        event_loop.run_once(timeout=0)

        assert watcher.lock.state is False
        assert published()[-1] == (f"{TEST_HOST}/locked", "false", True)

    @pytest.mark.parametrize("payload,method", [(b"true", "Lock"), (b"false", "Unlock")])
    def test_command_goes_to_logind(self, watcher, session, mock_mqtt_client, payload, method):
        """Test that hub commands lock or unlock the session."""
        watcher.lock.runtime_registration()

        mock_mqtt_client.on_message(mock_mqtt_client, None, make_message(f"{TEST_HOST}/locked/set", payload))

        getattr(session, method).assert_called_once_with()

    def test_command_does_not_change_state(self, watcher, session):
        """Test that the state waits for the screen saver to confirm."""
        watcher.request_state(False)

        assert watcher.lock.state is True

    def test_session_error_logged(self, connected_supervisor, event_loop, screensaver, caplog):
        """Test that D-Bus failures are logged, not raised."""

        def broken_factory():
            raise RuntimeError("no session")

        watcher = locked_state.LockedState(connected_supervisor, event_loop, screensaver, broken_factory)

        watcher.request_state(True)

        assert "Failed to lock session" in caplog.text


class TestSetupLockedState:
    """Test suite for the LockedState integration."""

    def test_without_pydbus(self, bridge, monkeypatch, caplog):
        """Test that a missing pydbus disables the integration."""
        monkeypatch.setitem(sys.modules, "pydbus", None)

        assert locked_state.setup_locked_state(bridge) is None
        assert "pydbus is not available" in caplog.text

    def test_screensaver_unreachable(self, bridge, monkeypatch, caplog):
        """Test that a missing screen saver service disables the integration."""
        pydbus = MagicMock()
        pydbus.SessionBus.return_value.get.side_effect = RuntimeError("service unknown")
        monkeypatch.setitem(sys.modules, "pydbus", pydbus)

        assert locked_state.setup_locked_state(bridge) is None
        assert "Screen saver is not reachable" in caplog.text
