"""Free text input entity."""

# Standard library imports
import logging
from typing import Callable, Optional

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity

logger = logging.getLogger(__name__)


class Text(Entity):
    kind = EntityKind.TEXT

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._state = ""
        self.on_text_change_requested: Optional[Callable[[str], None]] = None
        self.handle_command("set", self._on_set)

    @property
    def state(self) -> str:
        return self._state

    def set_state(self, text: str) -> None:
        self._state = text
        self.publish_state()

    def publish_state(self) -> None:
        self.publish(self._state)

    def _on_set(self, payload: bytes) -> None:
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning(f"Ignoring non UTF-8 text for '{self.id}'")
            return
        self.set_state(text)
        self._invoke(self.on_text_change_requested, text)
