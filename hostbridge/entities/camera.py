"""Camera entity publishing still images."""

# Standard library imports
import base64
import logging
from datetime import datetime
from typing import Callable, Optional, Union

# Local imports
from ..core.discovery import EntityKind
from ..core.entity import Entity

logger = logging.getLogger(__name__)


class Camera(Entity):
    """Camera showing the last published image.

    Images are sent base64 encoded and retained; a ``timestamp`` and
    ``size_bytes`` attribute accompany each one.
    """

    kind = EntityKind.CAMERA

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._image: Optional[str] = None
        self.on_command: Optional[Callable[[str], None]] = None
        self.handle_command("command", self._on_command)

    def publish_image(self, image: Union[bytes, str], encoded: bool = False) -> None:
        """Publish an image.

        Args:
            image: Raw image bytes, or base64 data when ``encoded`` is True.
            encoded: The image is already base64 encoded.
        """
        if encoded:
            try:
                data = image if isinstance(image, str) else image.decode("ascii")
                size = len(base64.b64decode(data, validate=True))
            except ValueError as e:
                logger.warning(f"Ignoring invalid base64 image for '{self.id}': {e}")
                return
        else:
            size = len(image)
            data = base64.b64encode(image).decode("ascii")
        self._image = data
        self.publish_state()
        self.set_attributes({"timestamp": datetime.now().astimezone(), "size_bytes": size})

    def publish_state(self) -> None:
        if self._image is None:
            return
        self.publish(self._image)

    def _on_command(self, payload: bytes) -> None:
        self._invoke(self.on_command, payload.decode("utf-8", errors="replace"))
