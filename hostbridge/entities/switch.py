"""Switch and lock entities.

Both carry a boolean state and accept ``true``/``false`` on ``<base>/set``.
A command does not change the state by itself: the owner is asked through
``on_state_change_requested`` and confirms with ``set_state`` once the host
has actually changed.
"""

# Standard library imports
import logging
from typing import Callable, Optional

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity
from ..core.messaging import decode_bool, encode_bool

logger = logging.getLogger(__name__)


class _BooleanCommandEntity(Entity):
    """Shared state handling for the boolean command kinds."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._state = False
        self.on_state_change_requested: Optional[Callable[[bool], None]] = None
        self.handle_command("set", self._on_set)

    @property
    def state(self) -> bool:
        return self._state

    def set_state(self, state: bool) -> None:
        self._state = bool(state)
        self.publish_state()

    def publish_state(self) -> None:
        self.publish(encode_bool(self._state))

    def _on_set(self, payload: bytes) -> None:
        requested = decode_bool(payload)
        if requested is None:
            logger.warning(f"Ignoring invalid {self.kind.value} command for '{self.id}': {payload!r}")
            return
        self._invoke(self.on_state_change_requested, requested)


class Switch(_BooleanCommandEntity):
    kind = EntityKind.SWITCH


class Lock(_BooleanCommandEntity):
    """Lock entity; ``True`` means locked."""

    kind = EntityKind.LOCK
