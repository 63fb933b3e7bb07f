"""Numeric input entity."""

# Standard library imports
import logging
from typing import Any, Callable, Dict, Optional, Union

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity
from ..core.messaging import encode_number

logger = logging.getLogger(__name__)

Numeric = Union[int, float]


def parse_number(payload: bytes) -> Optional[Numeric]:
    """Parse a command payload as an int, falling back to float."""
    text = payload.decode("utf-8", errors="replace").strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


class Number(Entity):
    """Number with a range; commands go to ``on_value_change_requested``.

    Example:
        >>> volume = Number(supervisor, "volume", "Volume")
        >>> volume.set_range(0, 100, step=5, unit="%")
        >>> volume.on_value_change_requested = set_system_volume
    """

    kind = EntityKind.NUMBER

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._value: Optional[Numeric] = None
        self.minimum: Numeric = 1
        self.maximum: Numeric = 100
        self.step: Numeric = 1
        self.unit: Optional[str] = None
        self.on_value_change_requested: Optional[Callable[[Numeric], None]] = None
        self.handle_command("set", self._on_set)

    def set_range(self, minimum: Numeric, maximum: Numeric, step: Numeric = 1, unit: Optional[str] = None) -> None:
        """Set the accepted range; sent with the next registration."""
        if minimum > maximum:
            raise ValueError(f"Invalid range for '{self.id}': {minimum} > {maximum}")
        self.minimum = minimum
        self.maximum = maximum
        self.step = step
        self.unit = unit

    def kind_config(self) -> Dict[str, Any]:
        config = {"min": self.minimum, "max": self.maximum, "step": self.step}
        if self.unit:
            config["unit_of_measurement"] = self.unit
        return config

    @property
    def value(self) -> Optional[Numeric]:
        return self._value

    def set_value(self, value: Numeric) -> None:
        self._value = value
        self.publish_state()

    def publish_state(self) -> None:
        if self._value is None:
            return
        self.publish(encode_number(self._value))

    def _on_set(self, payload: bytes) -> None:
        value = parse_number(payload)
        if value is None:
            logger.warning(f"Ignoring non-numeric value for '{self.id}': {payload!r}")
            return
        if not self.minimum <= value <= self.maximum:
            logger.warning(f"Ignoring out-of-range value for '{self.id}': {value} not in [{self.minimum}, {self.maximum}]")
            return
        self._invoke(self.on_value_change_requested, value)
