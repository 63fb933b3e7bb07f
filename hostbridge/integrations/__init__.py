"""Built-in integrations.

Importing this package registers every built-in integration with
:data:`hostbridge.core.registry.registry`.

Modules:
    scripts: One button per configured script
    battery: Battery level sensor
    locked_state: Screen lock state over D-Bus
    updater: GitHub release check
"""

from . import battery, locked_state, scripts, updater

__all__ = ["battery", "locked_state", "scripts", "updater"]
