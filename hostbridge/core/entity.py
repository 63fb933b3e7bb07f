"""Entity base class for Host Bridge.

An entity is one piece of host state exposed to Home Assistant. It announces
itself with a retained discovery message, keeps a retained state topic in
sync and turns command messages back into local actions.

Concrete kinds live in :mod:`hostbridge.entities`. Each class binds exactly
one :class:`~hostbridge.core.discovery.EntityKind`; binding a kind twice, or
using a value outside the enumeration, raises
:class:`~hostbridge.core.errors.UnknownEntityKindError` at class creation.

Lifecycle:
    1. Construct with the supervisor; the entity is attached to it.
    2. On every connect the supervisor calls :meth:`Entity.on_connect`, which
       registers, flushes cached state and attributes and re-subscribes.
    3. :meth:`Entity.close` clears the discovery message and detaches.

Callbacks are plain attributes in the paho style, e.g.::

    switch = Switch(supervisor, "dnd", "Do not disturb")
    switch.on_state_change_requested = handle_dnd
"""

# Standard library imports
import logging
from typing import Any, Callable, Dict, Optional, Type

# Local imports
from .connection import ConnectionSupervisor
from .discovery import EntityKind, build_discovery_payload, kind_fields
from .errors import EntityError, ImmutableEntityError, UnknownEntityKindError
from .messaging import PAYLOAD_ON, TopicNamespace, encode_attributes, encode_json

logger = logging.getLogger(__name__)

# EntityKind -> the one class implementing it
ENTITY_CLASSES: Dict[EntityKind, Type["Entity"]] = {}


class Entity:
    """Base class of every entity kind.

    Attributes:
        supervisor: Connection supervisor the entity publishes through.
        name: Display name in Home Assistant.
        kind: Entity kind, fixed per class.
    """

    kind: Optional[EntityKind] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        kind = cls.__dict__.get("kind")
        if kind is None:
            return
        if not isinstance(kind, EntityKind):
            raise UnknownEntityKindError(f"{cls.__name__}: '{kind}' is not an entity kind")
        bound = ENTITY_CLASSES.get(kind)
        if bound is not None:
            raise UnknownEntityKindError(
                f"{cls.__name__}: kind '{kind.name}' is already implemented by {bound.__name__}"
            )
        ENTITY_CLASSES[kind] = cls

    def __init__(
        self,
        supervisor: ConnectionSupervisor,
        entity_id: str,
        name: Optional[str] = None,
        discovery_config: Optional[Dict[str, Any]] = None,
        icon: str = "",
    ):
        if type(self).kind is None:
            raise UnknownEntityKindError(f"{type(self).__name__} does not declare an entity kind")
        if not entity_id:
            raise EntityError("Entity id must not be empty")

        self.supervisor = supervisor
        self._id = entity_id
        self.name = name or entity_id
        self._discovery_config: Dict[str, Any] = dict(discovery_config or {})
        self._icon = icon
        self._attributes: Optional[Dict[str, Any]] = None
        self._command_handlers: Dict[Optional[str], Callable[[bytes], None]] = {}
        self._registered = False
        self._ever_registered = False

        supervisor.attach(self)

    # -- identity -------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @id.setter
    def id(self, value: str) -> None:
        if value == self._id:
            return
        if self._ever_registered:
            raise ImmutableEntityError(f"Entity '{self._id}' has been registered, its id cannot change")
        if not value:
            raise EntityError("Entity id must not be empty")
        self.supervisor.rename(self, self._id, value)
        self._id = value

    @property
    def is_presence(self) -> bool:
        return False

    @property
    def topics(self) -> TopicNamespace:
        return self.supervisor.topics

    @property
    def base_topic(self) -> str:
        return self.topics.state(self.id)

    @property
    def is_registered(self) -> bool:
        return self._registered

    # -- discovery ------------------------------------------------------

    @property
    def discovery_config(self) -> Dict[str, Any]:
        return dict(self._discovery_config)

    def set_discovery_config(self, key: str, value: Any) -> None:
        """Set a discovery field; it is sent with the next registration."""
        self._discovery_config[key] = value

    @property
    def icon(self) -> str:
        return self._icon

    def set_icon(self, icon: str) -> None:
        """Change the icon and re-register so the hub picks it up."""
        self._icon = icon
        self.register()

    def kind_config(self) -> Dict[str, Any]:
        """Discovery fields derived from the entity's own settings."""
        return {}

    def discovery_payload(self) -> Dict[str, Any]:
        fields = dict(self._discovery_config)
        fields.update(kind_fields(self.kind, self.topics, self.id))
        fields.update(self.kind_config())
        return build_discovery_payload(
            self.topics,
            self.kind,
            self.id,
            self.name,
            fields,
            icon=self._icon,
            is_presence=self.is_presence,
        )

    def register(self) -> bool:
        """Publish the discovery message, then mark the bridge available."""
        topic = self.topics.discovery(self.kind.value, self.id)
        if not self.supervisor.publish(topic, encode_json(self.discovery_payload()), retain=True):
            return False
        self._registered = True
        self._ever_registered = True
        logger.debug(f"Registered {self.kind.value} '{self.id}'")
        if not self.is_presence:
            self.supervisor.publish(self.topics.availability(), PAYLOAD_ON, retain=True)
        return True

    def unregister(self) -> bool:
        """Clear the retained discovery message so the hub drops the entity."""
        topic = self.topics.discovery(self.kind.value, self.id)
        if not self.supervisor.publish(topic, "", retain=True):
            logger.debug(f"Not connected, '{self.id}' stays registered on the broker")
            return False
        self._registered = False
        logger.debug(f"Unregistered {self.kind.value} '{self.id}'")
        return True

    # -- lifecycle ------------------------------------------------------

    def on_connect(self) -> None:
        """Register, flush cached state and re-subscribe; safe to repeat."""
        if not self.register():
            return
        self.publish_state()
        self.publish_attributes()
        for suffix, handler in self._command_handlers.items():
            self.supervisor.subscribe(self.topics.command(self.id, suffix), handler)

    def runtime_registration(self) -> None:
        """Register an entity created after the connection came up."""
        if self.supervisor.is_connected():
            self.on_connect()

    def close(self) -> None:
        """Remove the entity from the hub and from the supervisor."""
        self.unregister()
        for suffix in self._command_handlers:
            self.supervisor.unsubscribe(self.topics.command(self.id, suffix))
        self.supervisor.detach(self)

    # -- state ----------------------------------------------------------

    def publish_state(self) -> None:
        """Publish the cached state; kinds without state do nothing."""

    def set_attributes(self, attributes: Dict[str, Any]) -> None:
        self._attributes = dict(attributes)
        self.publish_attributes()

    @property
    def attributes(self) -> Dict[str, Any]:
        return dict(self._attributes or {})

    def publish_attributes(self) -> None:
        if self._attributes is None:
            return
        self.supervisor.publish(
            self.topics.attributes(self.id), encode_attributes(self._attributes), retain=True
        )

    def publish(self, payload: str, retain: bool = True, suffix: str = "") -> bool:
        """Publish ``payload`` on the base topic or a sub-topic of it."""
        return self.supervisor.publish(self.topics.command(self.id, suffix), payload, retain=retain)

    # -- commands -------------------------------------------------------

    def handle_command(self, suffix: Optional[str], handler: Callable[[bytes], None]) -> None:
        """Route commands on ``host/id/<suffix>`` (or the base topic) to ``handler``.

        Call from the constructor; the subscription is made on every connect.
        """
        self._command_handlers[suffix] = handler

    def _invoke(self, callback: Optional[Callable], *args) -> None:
        if callback is None:
            logger.debug(f"No callback set on '{self.id}', command ignored")
            return
        callback(*args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, name={self.name!r})"
