"""Composition root of Host Bridge.

``HostBridge`` wires the event loop, the connection supervisor, the
presence entity and the integration registry together. Integrations receive
it as their activation argument and reach everything else through it.
"""

# Standard library imports
import logging
from typing import Optional

# Third-party imports
import paho.mqtt.client as mqtt

# Local imports
from .config import Settings
from .connection import ConnectionSupervisor, create_client
from .eventloop import EventLoop
from .presence import DevicePresence
from .registry import IntegrationRegistry, registry as default_registry

logger = logging.getLogger(__name__)


class HostBridge:
    """The running bridge.

    Attributes:
        settings: Loaded settings.
        loop: Event loop everything runs on.
        client: The paho-mqtt client.
        supervisor: Connection supervisor.
        presence: Device presence entity.
        registry: Integration registry activated by :meth:`start`.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[mqtt.Client] = None,
        loop: Optional[EventLoop] = None,
        hostname: Optional[str] = None,
        registry: Optional[IntegrationRegistry] = None,
    ):
        self.settings = settings
        self.loop = loop or EventLoop()
        self.client = client or create_client()
        self.supervisor = ConnectionSupervisor(self.client, settings, self.loop, hostname)
        self.presence = DevicePresence(self.supervisor)
        self.registry = registry if registry is not None else default_registry

    def start(self) -> None:
        """Activate integrations, then start connecting."""
        started = self.registry.load_and_run(self.settings, self)
        logger.info(f"Started {len(started)} integration(s)")
        self.supervisor.connect()

    def run(self) -> None:
        """Start and block until the loop is stopped."""
        self.start()
        self.loop.run_forever()

    def stop(self) -> None:
        self.loop.stop()

    def shutdown(self) -> None:
        """Announce offline and disconnect; best effort."""
        logger.info("Shutting down Host Bridge...")
        self.presence.close()
        self.supervisor.shutdown()
