"""Battery level sensor backed by psutil."""

# Standard library imports
import logging
from typing import Optional

# Third-party imports
import psutil

# Local imports
from ..core.connection import ConnectionSupervisor
from ..core.eventloop import EventLoop
from ..core.registry import register_integration
from ..entities import Sensor

logger = logging.getLogger(__name__)

POLL_INTERVAL = 30.0
BATTERY_ID = "battery"


def read_battery():
    """Return psutil's battery reading, or None when there is no battery."""
    try:
        return psutil.sensors_battery()
    except (AttributeError, NotImplementedError, OSError) as e:
        logger.debug(f"Battery information unavailable: {e}")
        return None


class BatteryWatcher:
    """Keeps a battery sensor in sync with the system battery.

    The sensor is created when a battery appears and closed when it goes
    away, so a plugged-in battery shows up without a restart.
    """

    def __init__(self, supervisor: ConnectionSupervisor, loop: EventLoop, interval: float = POLL_INTERVAL):
        self.supervisor = supervisor
        self.sensor: Optional[Sensor] = None
        self.timer = loop.create_timer(interval, self.poll)

    def start(self) -> bool:
        battery = read_battery()
        if battery is None:
            logger.info("No battery found, battery sensor not created")
            return False
        self._update(battery)
        self.timer.start()
        return True

    def stop(self) -> None:
        self.timer.stop()
        if self.sensor is not None:
            self.sensor.close()
            self.sensor = None

    def poll(self) -> None:
        battery = read_battery()
        if battery is None:
            if self.sensor is not None:
                logger.info("Battery removed")
                self.sensor.close()
                self.sensor = None
            return
        self._update(battery)

    def _update(self, battery) -> None:
        if self.sensor is None:
            self.sensor = Sensor(
                self.supervisor,
                BATTERY_ID,
                "Battery",
                discovery_config={
                    "device_class": "battery",
                    "unit_of_measurement": "%",
                    "state_class": "measurement",
                },
            )
            self.sensor.runtime_registration()
            logger.info("Battery sensor created")

        seconds_left = battery.secsleft if battery.secsleft is not None and battery.secsleft >= 0 else None
        attributes = {"power_plugged": battery.power_plugged, "seconds_left": seconds_left}
        if self.sensor.attributes != attributes:
            self.sensor.set_attributes(attributes)

        percent = round(battery.percent)
        if self.sensor.state != percent:
            self.sensor.set_state(percent)


@register_integration("Battery", default_enabled=True)
def setup_battery(bridge) -> BatteryWatcher:
    interval = bridge.settings.getint("Battery", "interval", fallback=int(POLL_INTERVAL))
    watcher = BatteryWatcher(bridge.supervisor, bridge.loop, float(interval))
    watcher.start()
    return watcher
