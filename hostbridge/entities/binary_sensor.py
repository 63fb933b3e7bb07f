"""Read-only boolean sensor entity."""

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity
from ..core.messaging import encode_bool


class BinarySensor(Entity):
    kind = EntityKind.BINARY_SENSOR

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._state = False

    @property
    def state(self) -> bool:
        return self._state

    def set_state(self, state: bool) -> None:
        self._state = bool(state)
        self.publish_state()

    def publish_state(self) -> None:
        self.publish(encode_bool(self._state))
