"""Update entity reporting software versions."""

# Standard library imports
import logging
from typing import Any, Callable, Dict, Optional

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity
from ..core.messaging import encode_json

logger = logging.getLogger(__name__)

INSTALL_PAYLOAD = b"install"

UPDATE_FIELDS = (
    "installed_version",
    "latest_version",
    "title",
    "release_summary",
    "release_url",
    "entity_picture",
)


class Update(Entity):
    """Update entity; the state is one JSON document.

    Example:
        >>> update = Update(supervisor, "update", "Host Bridge")
        >>> update.set_installed_version("1.0.0")
        >>> update.set_latest_version("1.1.0")
        >>> update.on_install_requested = run_upgrade
    """

    kind = EntityKind.UPDATE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._fields: Dict[str, str] = {}
        self._in_progress = False
        self._update_percentage: Optional[int] = None
        self.on_install_requested: Optional[Callable[[], None]] = None
        self.handle_command("set", self._on_set)

    def _set_field(self, field: str, value: str) -> None:
        if self._fields.get(field) == value:
            return
        self._fields[field] = value
        self.publish_state()

    def set_installed_version(self, version: str) -> None:
        self._set_field("installed_version", version)

    def set_latest_version(self, version: str) -> None:
        self._set_field("latest_version", version)

    def set_title(self, title: str) -> None:
        self._set_field("title", title)

    def set_release_summary(self, summary: str) -> None:
        self._set_field("release_summary", summary)

    def set_release_url(self, url: str) -> None:
        self._set_field("release_url", url)

    def set_entity_picture(self, url: str) -> None:
        self._set_field("entity_picture", url)

    @property
    def installed_version(self) -> Optional[str]:
        return self._fields.get("installed_version")

    @property
    def latest_version(self) -> Optional[str]:
        return self._fields.get("latest_version")

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def set_in_progress(self, in_progress: bool) -> None:
        if self._in_progress == in_progress:
            return
        self._in_progress = in_progress
        if not in_progress:
            self._update_percentage = None
        self.publish_state()

    def set_update_percentage(self, percentage: Optional[int]) -> None:
        """Report install progress; None clears it."""
        if percentage is not None and not 0 <= percentage <= 100:
            logger.warning(f"Ignoring invalid update percentage for '{self.id}': {percentage}")
            return
        self._update_percentage = percentage
        self.publish_state()

    def state_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {f: self._fields[f] for f in UPDATE_FIELDS if f in self._fields}
        document["in_progress"] = self._in_progress
        document["update_percentage"] = self._update_percentage
        return document

    def publish_state(self) -> None:
        self.publish(encode_json(self.state_document()))

    def _on_set(self, payload: bytes) -> None:
        if payload != INSTALL_PAYLOAD:
            logger.warning(f"Ignoring unknown update command for '{self.id}': {payload!r}")
            return
        self._invoke(self.on_install_requested)
