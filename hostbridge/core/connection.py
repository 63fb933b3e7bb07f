"""Broker connection supervisor for Host Bridge.

The supervisor owns the single paho-mqtt client of the process. It runs the
reconnect state machine, gates every publish on the connection state and
tells the entities when to (re-)register.

Connection Management:
    - Fixed 1 second reconnect interval, retried forever, no back-off
    - 3 second keep-alive so the last-will reaches the hub soon after the
      process stops responding (e.g. system suspend)
    - On every transition into CONNECTED the presence entity is notified
      first, then all other entities in attachment order
    - Publishing while not connected is a silent no-op
    - The TCP connect runs on the loop thread, bounded by CONNECT_TIMEOUT;
      name resolution is not covered by that bound

Thread Safety:
    The supervisor is confined to the event loop thread. The paho network
    loop is driven by the event loop, so all paho callbacks run there too.
"""

# Standard library imports
import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Union

# Third-party imports
import paho.mqtt.client as mqtt

# Local imports
from .config import Settings, get_hostname
from .errors import DuplicateEntityError
from .eventloop import EventLoop
from .messaging import TopicNamespace

if TYPE_CHECKING:
    from .entity import Entity

logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 3
RECONNECT_INTERVAL = 1.0
SHUTDOWN_FLUSH_TIMEOUT = 0.5
# Longest the loop thread blocks in one TCP connect attempt
CONNECT_TIMEOUT = 1.0

MessageHandler = Callable[[bytes], None]


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def create_client(client_id: str = "") -> mqtt.Client:
    """Create the paho client used by the supervisor."""
    return mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        protocol=mqtt.MQTTv311,
    )


class ConnectionSupervisor:
    """Single source of truth for broker connectivity.

    Created once at startup and passed to every entity. ``shutdown()`` ends
    its lifetime.

    Attributes:
        client: The paho-mqtt client.
        settings: Bridge settings; the broker is read from ``[general]``.
        loop: Event loop driving the network loop and the reconnect timer.
        topics: Topic namespace shared by all entities.
        state: Current connection state.
        connection_count: Number of successful connections so far.

    Example:
        >>> loop = EventLoop()
        >>> supervisor = ConnectionSupervisor(create_client(), settings, loop)
        >>> supervisor.connect()
        >>> loop.run_forever()
    """

    def __init__(
        self,
        client: mqtt.Client,
        settings: Settings,
        loop: EventLoop,
        hostname: Optional[str] = None,
    ):
        self.client = client
        self.settings = settings
        self.loop = loop
        self.topics = TopicNamespace(hostname or get_hostname(), settings.discovery_prefix)
        self.state = ConnectionState.DISCONNECTED
        self.connection_count = 0

        self._presence: Optional["Entity"] = None
        self._entities: Dict[str, "Entity"] = {}
        self._handlers: Dict[str, MessageHandler] = {}
        self._state_listeners: List[Callable[[ConnectionState], None]] = []
        self._tls_configured = False
        self._shutting_down = False
        self._reconnect_timer = loop.create_timer(RECONNECT_INTERVAL, self._on_reconnect_timer)

        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message
        client.connect_timeout = CONNECT_TIMEOUT
        if settings.user:
            client.username_pw_set(settings.user, settings.password or None)
        loop.add_poller(self._poll)

        if not settings.host:
            logger.critical("MQTT host is not configured, please set [general] host")
            logger.critical(f"Configuration expected at {settings.path}")

        logger.debug(f"ConnectionSupervisor initialized for host '{self.topics.hostname}'")

    # -- connection -----------------------------------------------------

    def connect(self) -> bool:
        """Start a connection attempt.

        Returns True when the attempt was started; the outcome arrives later
        through the paho callbacks. Failures leave the supervisor
        DISCONNECTED with the reconnect timer armed.
        """
        if self._shutting_down:
            return False

        host = self.settings.host
        port = self.settings.port
        if not host:
            logger.debug("No MQTT host configured, staying disconnected")
            self._set_state(ConnectionState.DISCONNECTED)
            return False

        self._set_state(ConnectionState.CONNECTING)
        try:
            if self.settings.use_ssl and not self._tls_configured:
                self.client.tls_set()
                self._tls_configured = True
            self.client.connect(host, port, keepalive=KEEPALIVE_SECONDS)
        except (OSError, ValueError) as e:
            logger.warning(f"Connection to MQTT broker at {host}:{port} failed: {e}")
            self._set_state(ConnectionState.DISCONNECTED)
            return False

        logger.info(f"Connecting to MQTT broker at {host}:{port}...")
        return True

    def shutdown(self) -> None:
        """Disarm the reconnect timer and disconnect cleanly.

        Best effort: a final message published just before may not reach
        the broker if the connection is already failing.
        """
        self._shutting_down = True
        self._reconnect_timer.stop()
        if self.state is not ConnectionState.DISCONNECTED:
            try:
                # Flush pending publishes (e.g. the offline availability)
                self.client.loop(timeout=SHUTDOWN_FLUSH_TIMEOUT)
                self.client.disconnect()
            except OSError as e:
                logger.warning(f"Error disconnecting from MQTT broker: {e}")
        self._set_state(ConnectionState.DISCONNECTED)
        logger.info("Connection supervisor shut down")

    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    # -- messaging ------------------------------------------------------

    def publish(self, topic: str, payload: Union[str, bytes], retain: bool = False, qos: int = 0) -> bool:
        """Publish a message; a silent no-op unless connected.

        Returns True when the message was handed to the client.
        """
        if self.state is not ConnectionState.CONNECTED:
            logger.debug(f"Not connected, skipping publish to {topic}")
            return False
        self.client.publish(topic, payload=payload, qos=qos, retain=retain)
        logger.debug(f"Published to {topic} (retain={retain})")
        return True

    def subscribe(self, topic: str, handler: MessageHandler) -> bool:
        """Route messages on ``topic`` to ``handler``.

        A topic has at most one handler; subscribing again replaces it, so
        re-subscribing on every connect never duplicates delivery.
        """
        self._handlers[topic] = handler
        if self.state is not ConnectionState.CONNECTED:
            return False
        self.client.subscribe(topic)
        logger.debug(f"Subscribed to topic: {topic}")
        return True

    def unsubscribe(self, topic: str) -> None:
        if self._handlers.pop(topic, None) is None:
            return
        if self.state is ConnectionState.CONNECTED:
            self.client.unsubscribe(topic)
            logger.debug(f"Unsubscribed from topic: {topic}")

    def set_will(self, topic: str, payload: str, retain: bool = True) -> None:
        """Bind the last-will message; must happen before connecting."""
        self.client.will_set(topic, payload=payload, qos=0, retain=retain)
        logger.debug(f"Last will configured on {topic}")

    # -- entities -------------------------------------------------------

    def attach(self, entity: "Entity") -> None:
        """Track ``entity`` so it is notified on every connect."""
        existing = self._entities.get(entity.id)
        if existing is not None and existing is not entity:
            raise DuplicateEntityError(f"Entity id '{entity.id}' is already in use")
        if entity.is_presence:
            self._presence = entity
        self._entities[entity.id] = entity

    def detach(self, entity: "Entity") -> None:
        if self._entities.get(entity.id) is entity:
            del self._entities[entity.id]
        if self._presence is entity:
            self._presence = None

    def rename(self, entity: "Entity", old_id: str, new_id: str) -> None:
        """Move ``entity`` from ``old_id`` to ``new_id``, keeping ids unique."""
        existing = self._entities.get(new_id)
        if existing is not None and existing is not entity:
            raise DuplicateEntityError(f"Entity id '{new_id}' is already in use")
        entities = {}
        for key, value in self._entities.items():
            if value is entity and key == old_id:
                entities[new_id] = entity
            else:
                entities[key] = value
        self._entities = entities

    def entities(self) -> List["Entity"]:
        return list(self._entities.values())

    def add_state_listener(self, listener: Callable[[ConnectionState], None]) -> None:
        self._state_listeners.append(listener)

    # -- internals ------------------------------------------------------

    def _set_state(self, state: ConnectionState) -> None:
        if state is ConnectionState.DISCONNECTED:
            if not self._shutting_down and not self._reconnect_timer.is_active():
                self._reconnect_timer.start()
        elif state is ConnectionState.CONNECTED:
            self._reconnect_timer.stop()

        if state is self.state:
            return

        previous = self.state
        self.state = state
        logger.debug(f"Connection state {previous.value} -> {state.value}")

        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Error in connection state listener: {e}", exc_info=True)

        if state is ConnectionState.CONNECTED:
            self.connection_count += 1
            logger.info(f"Connection established (total connections: {self.connection_count})")
            self._notify_connected()

    def _notify_connected(self) -> None:
        entities = [e for e in self._entities.values() if e is not self._presence]
        if self._presence is not None:
            entities.insert(0, self._presence)
        for entity in entities:
            if self.state is not ConnectionState.CONNECTED:
                break
            try:
                entity.on_connect()
            except Exception as e:
                logger.error(f"Error registering entity '{entity.id}': {e}", exc_info=True)

    def _on_reconnect_timer(self) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            self.connect()

    def _poll(self, timeout: float) -> bool:
        if self.state is ConnectionState.DISCONNECTED:
            return False
        rc = self.client.loop(timeout=timeout)
        if rc != mqtt.MQTT_ERR_SUCCESS and self.state is not ConnectionState.DISCONNECTED:
            logger.warning(f"MQTT network loop failed: {mqtt.error_string(rc)}")
            self._set_state(ConnectionState.DISCONNECTED)
        return True

    def _on_connect(self, client, userdata, flags, reason_code, properties=None) -> None:
        if self._shutting_down:
            logger.debug("Ignoring CONNACK received during shutdown")
            return
        if reason_code.is_failure:
            logger.error(f"MQTT connection refused: {reason_code}")
            self._set_state(ConnectionState.DISCONNECTED)
            return
        logger.info("MQTT connected successfully")
        self._set_state(ConnectionState.CONNECTED)

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties=None) -> None:
        if reason_code.is_failure:
            logger.warning(f"MQTT disconnected unexpectedly: {reason_code}")
        else:
            logger.info("MQTT client disconnected cleanly")
        self._set_state(ConnectionState.DISCONNECTED)

    def _on_message(self, client, userdata, msg) -> None:
        handler = self._handlers.get(msg.topic)
        if handler is None:
            logger.debug(f"No handler for message on {msg.topic}")
            return
        try:
            handler(msg.payload)
        except Exception as e:
            logger.error(f"Error handling message on {msg.topic}: {e}", exc_info=True)
