"""Entity kinds exposed to Home Assistant.

Importing this package binds every :class:`~hostbridge.core.discovery.EntityKind`
to its entity class.
"""

from .binary_sensor import BinarySensor
from .button import Button, Event
from .camera import Camera
from .media_player import MediaPlayer
from .notify import Notify
from .number import Number
from .select import Select
from .sensor import Sensor
from .switch import Lock, Switch
from .text import Text
from .update import Update

__all__ = [
    "BinarySensor",
    "Button",
    "Camera",
    "Event",
    "Lock",
    "MediaPlayer",
    "Notify",
    "Number",
    "Select",
    "Sensor",
    "Switch",
    "Text",
    "Update",
]
