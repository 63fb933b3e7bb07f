"""Media player entity.

The player state is published twice: as one JSON document on the base topic
and field by field on ``<base>/<field>`` topics, which is what the hub's
MQTT media player reads. Transport commands arrive on one topic each.
"""

# Standard library imports
import base64
import logging
from typing import Any, Callable, Dict, Iterable, Optional

# Local imports
from ..core.discovery import MEDIA_PLAYER_COMMANDS, MEDIA_PLAYER_FIELDS, EntityKind
from ..core.entity import Entity
from ..core.messaging import encode_json, encode_number

logger = logging.getLogger(__name__)

PLAYING = "playing"
PAUSED = "paused"
STOPPED = "stopped"
IDLE = "idle"


def _encode_field(field: str, value: Any) -> str:
    if value is None:
        return ""
    if field == "albumart" and isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return encode_number(value)
    return str(value)


class MediaPlayer(Entity):
    """Media player mirroring a local player.

    ``set_state`` takes a partial mapping of the fields in
    :data:`~hostbridge.core.discovery.MEDIA_PLAYER_FIELDS`; only the changed
    fields are re-published on their own topics.

    Example:
        >>> player = MediaPlayer(supervisor, "mediaplayer", "Media Player")
        >>> player.set_state({"state": "playing", "title": "Song", "volume": 0.5})
        >>> player.on_pause = pause_local_player
    """

    kind = EntityKind.MEDIA_PLAYER

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._state: Dict[str, Any] = {"state": IDLE}

        self.on_play: Optional[Callable[[], None]] = None
        self.on_pause: Optional[Callable[[], None]] = None
        self.on_stop: Optional[Callable[[], None]] = None
        self.on_next: Optional[Callable[[], None]] = None
        self.on_previous: Optional[Callable[[], None]] = None
        self.on_volume_change_requested: Optional[Callable[[float], None]] = None
        self.on_play_media: Optional[Callable[[str], None]] = None
        self.on_seek: Optional[Callable[[int], None]] = None

        handlers = {
            "play": lambda payload: self._invoke(self.on_play),
            "pause": lambda payload: self._invoke(self.on_pause),
            "playpause": self._on_playpause,
            "stop": lambda payload: self._invoke(self.on_stop),
            "next": lambda payload: self._invoke(self.on_next),
            "previous": lambda payload: self._invoke(self.on_previous),
            "volume": self._on_volume,
            "playmedia": self._on_play_media,
            "seek_position": self._on_seek,
        }
        for command, suffix in MEDIA_PLAYER_COMMANDS.items():
            self.handle_command(suffix, handlers[command])

    @property
    def state(self) -> Dict[str, Any]:
        return dict(self._state)

    def set_state(self, info: Dict[str, Any]) -> None:
        changed = {}
        for field, value in info.items():
            if field not in MEDIA_PLAYER_FIELDS:
                logger.warning(f"Ignoring unknown media player field for '{self.id}': {field}")
                continue
            if self._state.get(field) != value:
                changed[field] = value
        if not changed:
            return
        self._state.update(changed)
        self.publish_state(changed)

    def publish_state(self, fields: Optional[Iterable[str]] = None) -> None:
        document = {k: v for k, v in self._state.items() if k != "albumart"}
        self.publish(encode_json(document))
        for field in fields if fields is not None else list(self._state):
            self.publish(_encode_field(field, self._state.get(field)), suffix=field)

    # -- commands -------------------------------------------------------

    def _on_playpause(self, payload: bytes) -> None:
        if self._state.get("state") == PLAYING:
            self._invoke(self.on_pause)
        else:
            self._invoke(self.on_play)

    def _on_volume(self, payload: bytes) -> None:
        try:
            volume = float(payload.decode("utf-8", errors="replace"))
        except ValueError:
            logger.warning(f"Ignoring non-numeric volume for '{self.id}': {payload!r}")
            return
        if not 0.0 <= volume <= 1.0:
            logger.warning(f"Ignoring out-of-range volume for '{self.id}': {volume}")
            return
        self._invoke(self.on_volume_change_requested, volume)

    def _on_play_media(self, payload: bytes) -> None:
        self._invoke(self.on_play_media, payload.decode("utf-8", errors="replace"))

    def _on_seek(self, payload: bytes) -> None:
        try:
            position = int(payload.decode("utf-8", errors="replace").strip())
        except ValueError:
            logger.warning(f"Ignoring non-numeric position for '{self.id}': {payload!r}")
            return
        self._invoke(self.on_seek, position)
