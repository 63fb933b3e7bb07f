"""Select entity offering a fixed list of options."""

# Standard library imports
import logging
from typing import Any, Callable, Dict, List, Optional

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity

logger = logging.getLogger(__name__)


class Select(Entity):
    """Select; a valid command is applied and echoed back immediately."""

    kind = EntityKind.SELECT

    def __init__(self, *args, options: Optional[List[str]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._options: List[str] = list(options or [])
        self._state: Optional[str] = None
        self.on_option_selected: Optional[Callable[[str], None]] = None
        self.handle_command("set", self._on_set)

    @property
    def options(self) -> List[str]:
        return list(self._options)

    def set_options(self, options: List[str]) -> None:
        """Replace the options and re-register."""
        self._options = list(options)
        self.register()

    def kind_config(self) -> Dict[str, Any]:
        return {"options": list(self._options)}

    @property
    def state(self) -> Optional[str]:
        return self._state

    def set_state(self, option: str) -> None:
        self._state = option
        self.publish_state()

    def publish_state(self) -> None:
        if self._state is None:
            return
        self.publish(self._state)

    def _on_set(self, payload: bytes) -> None:
        option = payload.decode("utf-8", errors="replace")
        if option not in self._options:
            logger.warning(f"Ignoring unknown option for '{self.id}': {option!r}")
            return
        self.set_state(option)
        self._invoke(self.on_option_selected, option)
