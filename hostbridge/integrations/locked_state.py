"""Screen lock state exposed as a lock entity.

The state follows the freedesktop screen saver over the D-Bus session bus.
Locking and unlocking from Home Assistant goes through logind. pydbus
delivers signals on a GLib main loop thread; they are handed over to the
bridge's event loop before the entity is touched.
"""

# Standard library imports
import logging
import threading
from typing import Any, Callable, Optional

# Local imports
from ..core.connection import ConnectionSupervisor
from ..core.eventloop import EventLoop
from ..core.registry import register_integration
from ..entities import Lock

logger = logging.getLogger(__name__)

SCREENSAVER_SERVICE = "org.freedesktop.ScreenSaver"
SCREENSAVER_PATH = "/ScreenSaver"
LOGIN1_SERVICE = "org.freedesktop.login1"
LOGIN1_SESSION_PATH = "/org/freedesktop/login1/session/auto"


class LockedState:
    """Mirrors the screen saver's active state onto a lock entity.

    Args:
        supervisor: Connection supervisor for the lock entity.
        loop: Event loop signals are marshalled onto.
        screensaver: ``org.freedesktop.ScreenSaver`` proxy.
        session_factory: Returns the logind session proxy used to lock
            and unlock; called per request.
    """

    def __init__(
        self,
        supervisor: ConnectionSupervisor,
        loop: EventLoop,
        screensaver: Any,
        session_factory: Callable[[], Any],
    ):
        self.loop = loop
        self.screensaver = screensaver
        self.session_factory = session_factory

        self.lock = Lock(supervisor, "locked", "Locked", icon="mdi:monitor-lock")
        self.lock.on_state_change_requested = self.request_state
        self.lock.set_state(bool(screensaver.GetActive()))

        screensaver.ActiveChanged.connect(self._on_active_changed)

    def _on_active_changed(self, active: bool) -> None:
        # GLib thread
        self.loop.call_soon_threadsafe(self.lock.set_state, bool(active))

    def request_state(self, locked: bool) -> None:
        try:
            session = self.session_factory()
            if locked:
                session.Lock()
            else:
                session.Unlock()
        except Exception as e:
            logger.error(f"Failed to {'lock' if locked else 'unlock'} session: {e}")


def start_glib_loop() -> threading.Thread:
    """Run a GLib main loop in a daemon thread so D-Bus signals are delivered."""
    from gi.repository import GLib

    glib_loop = GLib.MainLoop()
    thread = threading.Thread(target=glib_loop.run, name="LockedState-DBus", daemon=True)
    thread.start()
    return thread


@register_integration("LockedState", default_enabled=True)
def setup_locked_state(bridge) -> Optional[LockedState]:
    try:
        from pydbus import SessionBus, SystemBus
    except ImportError as e:
        logger.warning(f"pydbus is not available, screen lock state disabled: {e}")
        return None

    try:
        screensaver = SessionBus().get(SCREENSAVER_SERVICE, SCREENSAVER_PATH)
    except Exception as e:
        logger.warning(f"Screen saver is not reachable over D-Bus, screen lock state disabled: {e}")
        return None

    def session_factory():
        return SystemBus().get(LOGIN1_SERVICE, LOGIN1_SESSION_PATH)

    locked_state = LockedState(bridge.supervisor, bridge.loop, screensaver, session_factory)
    start_glib_loop()
    logger.info("Screen lock state monitoring started")
    return locked_state
