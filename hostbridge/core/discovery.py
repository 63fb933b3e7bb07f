"""Home Assistant MQTT discovery for Host Bridge entities.

This module owns the closed set of entity kinds and assembles the discovery
payload every entity publishes. Kind-specific wiring (state/command topics
and payload literals) comes from one table, so adding a kind means adding
an enum member and a table entry.
"""

# Standard library imports
import logging
from enum import Enum
from typing import Any, Callable, Dict

# Local imports
from .messaging import PAYLOAD_OFF, PAYLOAD_ON, TopicNamespace

logger = logging.getLogger(__name__)


class EntityKind(Enum):
    """Entity kinds understood by the hub; the value is the discovery component."""

    SENSOR = "sensor"
    BINARY_SENSOR = "binary_sensor"
    SWITCH = "switch"
    LOCK = "lock"
    BUTTON = "button"
    NUMBER = "number"
    SELECT = "select"
    TEXT = "text"
    EVENT = "device_automation"
    CAMERA = "camera"
    MEDIA_PLAYER = "media_player"
    UPDATE = "update"
    NOTIFY = "notify"


# Media player per-field state topics, in publish order
MEDIA_PLAYER_FIELDS = (
    "state",
    "title",
    "artist",
    "album",
    "duration",
    "position",
    "volume",
    "albumart",
    "mediatype",
)

# Media player command name -> topic suffix
MEDIA_PLAYER_COMMANDS = {
    "play": "play",
    "pause": "pause",
    "playpause": "playpause",
    "stop": "stop",
    "next": "next",
    "previous": "previous",
    "volume": "set_volume",
    "playmedia": "playmedia",
    "seek_position": "setposition",
}


def _sensor(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {"state_topic": topics.state(entity_id)}


def _binary_sensor(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {
        "state_topic": topics.state(entity_id),
        "payload_on": "true",
        "payload_off": "false",
    }


def _switch(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {
        "state_topic": topics.state(entity_id),
        "command_topic": topics.command(entity_id),
        "payload_on": "true",
        "payload_off": "false",
    }


def _lock(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {
        "state_topic": topics.state(entity_id),
        "command_topic": topics.command(entity_id),
        "payload_lock": "true",
        "payload_unlock": "false",
        "state_locked": "true",
        "state_unlocked": "false",
    }


def _button(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {"command_topic": topics.state(entity_id)}


def _state_and_set(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {
        "state_topic": topics.state(entity_id),
        "command_topic": topics.command(entity_id),
    }


def _event(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {
        "automation_type": "trigger",
        "topic": topics.state(entity_id),
        "type": "button_short_press",
    }


def _camera(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {
        "topic": topics.state(entity_id),
        "image_encoding": "b64",
        "command_topic": topics.command(entity_id, "command"),
    }


def _media_player(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    config = {"state_topic": topics.state(entity_id)}
    for field in MEDIA_PLAYER_FIELDS:
        config[f"state_{field}_topic"] = topics.command(entity_id, field)
    for command, suffix in MEDIA_PLAYER_COMMANDS.items():
        config[f"command_{command}_topic"] = topics.command(entity_id, suffix)
    return config


def _update(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {
        "state_topic": topics.state(entity_id),
        "command_topic": topics.command(entity_id),
        "payload_install": "install",
    }


def _notify(topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    return {"command_topic": topics.command(entity_id, "notifications")}


KIND_FIELDS: Dict[EntityKind, Callable[[TopicNamespace, str], Dict[str, Any]]] = {
    EntityKind.SENSOR: _sensor,
    EntityKind.BINARY_SENSOR: _binary_sensor,
    EntityKind.SWITCH: _switch,
    EntityKind.LOCK: _lock,
    EntityKind.BUTTON: _button,
    EntityKind.NUMBER: _state_and_set,
    EntityKind.SELECT: _state_and_set,
    EntityKind.TEXT: _state_and_set,
    EntityKind.EVENT: _event,
    EntityKind.CAMERA: _camera,
    EntityKind.MEDIA_PLAYER: _media_player,
    EntityKind.UPDATE: _update,
    EntityKind.NOTIFY: _notify,
}


def kind_fields(kind: EntityKind, topics: TopicNamespace, entity_id: str) -> Dict[str, Any]:
    """Return the topic wiring and payload literals for ``kind``."""
    return KIND_FIELDS[kind](topics, entity_id)


def build_discovery_payload(
    topics: TopicNamespace,
    kind: EntityKind,
    entity_id: str,
    name: str,
    fields: Dict[str, Any],
    icon: str = "",
    is_presence: bool = False,
) -> Dict[str, Any]:
    """Assemble the discovery payload for one entity.

    Args:
        topics: Topic namespace of the bridge.
        kind: Entity kind.
        entity_id: Entity id.
        name: Display name.
        fields: Discovery fields set by the entity and its owner.
        icon: Material Design Icon, omitted when empty.
        is_presence: True for the device-presence entity, which is its own
            availability reference and so carries no availability triple.

    Returns:
        The discovery payload as a dictionary.

    Example:
        >>> topics = TopicNamespace("my-pc")
        >>> payload = build_discovery_payload(
        ...     topics, EntityKind.SENSOR, "cpu", "CPU", kind_fields(EntityKind.SENSOR, topics, "cpu")
        ... )
        >>> payload["availability_topic"]
        'my-pc/connected'
    """
    config = dict(fields)
    config["name"] = name

    if not is_presence:
        config["availability_topic"] = topics.availability()
        config["payload_available"] = PAYLOAD_ON
        config["payload_not_available"] = PAYLOAD_OFF
        if icon:
            config["icon"] = icon

    # Every mqtt entity accepts attributes
    config["json_attributes_topic"] = topics.attributes(entity_id)
    if "device" not in config:
        config["device"] = {"identifiers": topics.device_identifier()}
    config["unique_id"] = topics.unique_id(entity_id)
    return config
