"""Read-only sensor entity."""

# Standard library imports
import logging
from typing import Any

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity
from ..core.messaging import encode_number

logger = logging.getLogger(__name__)


class Sensor(Entity):
    """Publishes a text or numeric value on its state topic.

    Example:
        >>> cpu = Sensor(supervisor, "cpu", "CPU", discovery_config={"unit_of_measurement": "%"})
        >>> cpu.set_state(12.5)
    """

    kind = EntityKind.SENSOR

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._state: Any = None

    @property
    def state(self) -> Any:
        return self._state

    def set_state(self, value: Any) -> None:
        self._state = value
        self.publish_state()

    def publish_state(self) -> None:
        if self._state is None:
            return
        if isinstance(self._state, (int, float)) and not isinstance(self._state, bool):
            payload = encode_number(self._state)
        else:
            payload = str(self._state)
        self.publish(payload)
