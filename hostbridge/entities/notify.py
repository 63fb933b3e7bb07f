"""Notification target entity."""

# Standard library imports
import logging
from typing import Callable, Optional

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity

logger = logging.getLogger(__name__)


class Notify(Entity):
    """Receives notification text on ``<base>/notifications``."""

    kind = EntityKind.NOTIFY

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.on_notification: Optional[Callable[[str], None]] = None
        self.handle_command("notifications", self._on_notification)

    def _on_notification(self, payload: bytes) -> None:
        self._invoke(self.on_notification, payload.decode("utf-8", errors="replace"))
