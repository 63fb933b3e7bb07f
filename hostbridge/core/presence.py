"""Device presence for Host Bridge.

The presence entity is the ``connected`` binary sensor every other entity
points its availability at. It binds the broker last-will to ``off`` so the
hub marks the whole device unavailable when the bridge dies, and publishes
``on`` once it is registered.
"""

# Standard library imports
import logging
import platform
from typing import Any, Dict

# Local imports
from ..entities.binary_sensor import BinarySensor
from .config import VERSION
from .connection import ConnectionSupervisor
from .messaging import PAYLOAD_OFF, PAYLOAD_ON, PRESENCE_ID

logger = logging.getLogger(__name__)

MANUFACTURER = "Host Bridge"


def device_info(supervisor: ConnectionSupervisor) -> Dict[str, Any]:
    """Full Home Assistant device block for this host."""
    return {
        "name": supervisor.topics.hostname,
        "identifiers": supervisor.topics.device_identifier(),
        "sw_version": VERSION,
        "manufacturer": MANUFACTURER,
        "model": platform.system() or "Unknown",
    }


class DevicePresence(BinarySensor):
    """Bridge liveness entity, always registered before any other entity.

    Construct it before the first connect so the last-will is in place.
    """

    def __init__(self, supervisor: ConnectionSupervisor):
        super().__init__(
            supervisor,
            PRESENCE_ID,
            "Connected",
            discovery_config={"device_class": "power", "device": device_info(supervisor)},
        )
        supervisor.set_will(self.topics.availability(), PAYLOAD_OFF, retain=True)

    @property
    def is_presence(self) -> bool:
        return True

    def kind_config(self) -> Dict[str, Any]:
        return {"payload_on": PAYLOAD_ON, "payload_off": PAYLOAD_OFF}

    def publish_state(self) -> None:
        self.supervisor.publish(self.topics.availability(), PAYLOAD_ON, retain=True)

    def close(self) -> None:
        """Announce the bridge as offline; best effort."""
        if self.supervisor.publish(self.topics.availability(), PAYLOAD_OFF, retain=True):
            logger.info("Published offline availability")
        self.supervisor.detach(self)
