"""Core infrastructure of Host Bridge.

Modules:
    config: Settings file and path constants
    eventloop: Single-threaded event loop and timers
    messaging: Topic namespace and payload encoding
    discovery: Entity kinds and discovery payload assembly
    connection: Broker connection supervisor
    entity: Entity base class
    presence: Device presence entity
    registry: Integration registry
    bridge: Composition root
"""

from .config import CONFIG_PATH, VERSION, Settings
from .connection import ConnectionState, ConnectionSupervisor
from .discovery import EntityKind
from .entity import Entity
from .errors import (
    DuplicateEntityError,
    EntityError,
    ImmutableEntityError,
    IntegrationError,
    UnknownEntityKindError,
)
from .eventloop import EventLoop, Timer

__all__ = [
    "CONFIG_PATH",
    "VERSION",
    "Settings",
    "ConnectionState",
    "ConnectionSupervisor",
    "EntityKind",
    "Entity",
    "EventLoop",
    "Timer",
    "EntityError",
    "DuplicateEntityError",
    "ImmutableEntityError",
    "UnknownEntityKindError",
    "IntegrationError",
]
