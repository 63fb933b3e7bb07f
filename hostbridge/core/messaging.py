"""Topic namespace and payload encoding for Host Bridge.

Every topic the bridge uses is derived from the hostname and the entity id,
so the derivation lives in one place. The encoders turn Python values into
the payload conventions Home Assistant expects.

Topic layout:
    <host>/<id>                                 - Entity state (retained)
    <host>/<id>/set                             - Commands (kind-specific suffixes exist)
    <host>/<id>/attributes                      - JSON attributes (retained)
    <host>/connected                            - Bridge availability ("on"/"off", LWT)
    <prefix>/<kind>/<host>/<id>/config          - Discovery (retained)
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

PRESENCE_ID = "connected"
PAYLOAD_ON = "on"
PAYLOAD_OFF = "off"
UNIQUE_ID_PREFIX = "hostbridge_"


class TopicNamespace:
    """Derives the MQTT topics for one bridge.

    Derivation is pure: the same hostname and id always give the same topic.

    Attributes:
        hostname: Lower-cased host name used as the topic root.
        discovery_prefix: Home Assistant MQTT discovery prefix.

    Example:
        >>> topics = TopicNamespace("my-pc", "homeassistant")
        >>> topics.state("dnd")
        'my-pc/dnd'
        >>> topics.discovery("switch", "dnd")
        'homeassistant/switch/my-pc/dnd/config'
    """

    def __init__(self, hostname: str, discovery_prefix: str = "homeassistant"):
        self.hostname = hostname.lower()
        self.discovery_prefix = discovery_prefix
        logger.debug(f"TopicNamespace initialized with hostname='{self.hostname}'")

    def state(self, entity_id: str) -> str:
        return f"{self.hostname}/{entity_id}"

    def command(self, entity_id: str, suffix: Optional[str] = "set") -> str:
        if not suffix:
            return self.state(entity_id)
        return f"{self.state(entity_id)}/{suffix}"

    def attributes(self, entity_id: str) -> str:
        return f"{self.state(entity_id)}/attributes"

    def availability(self) -> str:
        return self.state(PRESENCE_ID)

    def discovery(self, kind: str, entity_id: str) -> str:
        return f"{self.discovery_prefix}/{kind}/{self.hostname}/{entity_id}/config"

    def unique_id(self, entity_id: str) -> str:
        return f"{UNIQUE_ID_PREFIX}{self.hostname}_{entity_id}"

    def device_identifier(self) -> str:
        return f"{UNIQUE_ID_PREFIX}{self.hostname}"


def encode_bool(value: bool) -> str:
    """Encode a boolean the way the bridge's switches and sensors do."""
    return "true" if value else "false"


def decode_bool(payload: bytes) -> Optional[bool]:
    """Decode a boolean command payload; None when it is neither literal."""
    if payload == b"true":
        return True
    if payload == b"false":
        return False
    return None


def encode_number(value: Any) -> str:
    """Encode a number as plain text, dropping a redundant ``.0``."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def encode_json(data: Any) -> str:
    """Serialize ``data`` as compact JSON."""
    return json.dumps(data, separators=(",", ":"))


def convert_for_home_assistant(value: Any) -> Any:
    """Convert an attribute value to a form Home Assistant templates handle well.

    Booleans become ``"true"``/``"false"`` strings and datetimes become
    ISO-8601 strings; lists and dicts are converted element-wise.

    Example:
        >>> convert_for_home_assistant(True)
        'true'
        >>> convert_for_home_assistant({"docked": False})
        {'docked': 'false'}
    """
    if isinstance(value, bool):
        return encode_bool(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [convert_for_home_assistant(v) for v in value]
    if isinstance(value, dict):
        return {str(k): convert_for_home_assistant(v) for k, v in value.items()}
    return value


def encode_attributes(attrs: Dict[str, Any]) -> str:
    """Encode an attribute mapping as compact JSON with converted values."""
    return encode_json({str(k): convert_for_home_assistant(v) for k, v in attrs.items()})
