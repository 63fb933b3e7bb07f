"""Integration registry for Host Bridge.

Feature modules register an activation function at import time::

    from hostbridge.core.registry import register_integration

    @register_integration("Battery", default_enabled=True)
    def setup_battery(bridge):
        ...

At startup :meth:`IntegrationRegistry.load_and_run` writes the default flag
of every new module into the ``[Integrations]`` section, persists it, and
activates the enabled modules. One failing module never stops the others.
"""

# Standard library imports
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Set

# Local imports
from .config import INTEGRATIONS_SECTION, Settings
from .errors import IntegrationError

logger = logging.getLogger(__name__)

Activation = Callable[[Any], None]


class IntegrationEntry(NamedTuple):
    name: str
    activation: Activation
    default_enabled: bool


class IntegrationRegistry:
    """Static table of feature modules, activated once per process."""

    def __init__(self):
        self._entries: Dict[str, IntegrationEntry] = {}
        self._activated: Set[str] = set()

    def register(self, name: str, activation: Activation, default_enabled: bool = True) -> IntegrationEntry:
        if not name:
            raise IntegrationError("Integration name must not be empty")
        if name in self._entries:
            raise IntegrationError(f"Integration '{name}' is already registered")
        entry = IntegrationEntry(name, activation, default_enabled)
        self._entries[name] = entry
        logger.debug(f"Registered integration '{name}' (default {'on' if default_enabled else 'off'})")
        return entry

    def entries(self) -> List[IntegrationEntry]:
        return list(self._entries.values())

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def load_and_run(self, settings: Settings, bridge: Any) -> List[str]:
        """Activate every enabled integration.

        Args:
            settings: Settings holding the ``[Integrations]`` flags.
            bridge: Handle passed to each activation function.

        Returns:
            Names of the integrations activated by this call.
        """
        added_defaults = False
        for entry in self._entries.values():
            if not settings.has_option(INTEGRATIONS_SECTION, entry.name):
                settings.set(INTEGRATIONS_SECTION, entry.name, entry.default_enabled)
                added_defaults = True
        if added_defaults:
            settings.save()

        for name in settings.items(INTEGRATIONS_SECTION):
            if name not in self._entries:
                logger.debug(f"Integration '{name}' in config is not available, ignoring")

        started = []
        for entry in self._entries.values():
            enabled = settings.getboolean(INTEGRATIONS_SECTION, entry.name, fallback=entry.default_enabled)
            if not enabled:
                logger.info(f"Skipping disabled integration: {entry.name}")
                continue
            if entry.name in self._activated:
                logger.debug(f"Integration '{entry.name}' already running")
                continue

            self._activated.add(entry.name)
            logger.info(f"Starting integration: {entry.name}")
            try:
                entry.activation(bridge)
            except Exception as e:
                logger.error(f"Integration '{entry.name}' failed to start: {e}", exc_info=True)
                continue
            started.append(entry.name)
        return started


# Process-wide table populated by feature modules at import time
registry = IntegrationRegistry()


def register_integration(name: str, default_enabled: bool = True):
    """Decorator registering an activation function with :data:`registry`."""

    def decorator(func: Activation) -> Activation:
        registry.register(name, func, default_enabled)
        return func

    return decorator
