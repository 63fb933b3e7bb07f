"""Button and event entities."""

# Standard library imports
import logging
from typing import Any, Callable, Dict, Optional

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity

logger = logging.getLogger(__name__)

EVENT_PAYLOAD = "pressed"


class Button(Entity):
    """Stateless button; any message on the base topic triggers it."""

    kind = EntityKind.BUTTON

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.on_triggered: Optional[Callable[[], None]] = None
        self.handle_command(None, self._on_press)

    def _on_press(self, payload: bytes) -> None:
        logger.debug(f"Button '{self.id}' pressed")
        self._invoke(self.on_triggered)


class Event(Entity):
    """Device trigger fired from the host side.

    ``trigger()`` publishes ``pressed`` without retain and then clears the
    retained state, so the hub sees one event and late subscribers see none.
    """

    kind = EntityKind.EVENT

    def kind_config(self) -> Dict[str, Any]:
        return {"subtype": self.name}

    def trigger(self) -> bool:
        if not self.publish(EVENT_PAYLOAD, retain=False):
            return False
        self.publish("", retain=True)
        logger.debug(f"Event '{self.id}' triggered")
        return True
