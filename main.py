#!/usr/bin/env python3
"""Host Bridge - Expose host state to Home Assistant over MQTT.

Host Bridge announces pieces of desktop state (screen lock, battery,
scripts, updates) as Home Assistant entities through MQTT discovery, keeps
their retained state topics in sync and turns command messages back into
local actions.

Architecture:
    1. **Core** (hostbridge/core/):
       - config: Settings file and path constants
       - eventloop: Single-threaded event loop and timers
       - connection: Broker connection supervisor
       - entity / presence: Entity lifecycle and device presence
       - registry: Integration registry

    2. **Entities** (hostbridge/entities/): one class per entity kind

    3. **Integrations** (hostbridge/integrations/): feature modules,
       enabled per module in the [Integrations] section

MQTT Topics Structure:
    {host}/connected                               - Availability ("on"/"off", LWT)
    {host}/{id}                                    - Entity state (retained)
    {host}/{id}/set                                - Entity commands
    {host}/{id}/attributes                         - Entity attributes (JSON)
    homeassistant/{kind}/{host}/{id}/config        - Discovery (retained)

Connection Management:
    - Reconnect every second, forever
    - 3 second keep-alive with an "off" last-will on {host}/connected
    - All entities re-register on every reconnect

Usage:
    python main.py

Exit Codes:
    0: Clean shutdown
    1: Configuration could not be loaded
"""

# Standard library imports
import configparser
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler

# Local imports
import hostbridge.integrations  # noqa: F401  registers the built-in integrations
from hostbridge.core.bridge import HostBridge
from hostbridge.core.config import CONFIG_PATH, LOG_PATH, VERSION, Settings


# ----------------------------
# Logging Configuration
# ----------------------------

# Create logger
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Create formatter
formatter = logging.Formatter(
    "%(asctime)s [%(levelname)s] %(module)s: %(message)s",
    datefmt="%m/%d/%Y %H:%M:%S",
)

# Console handler
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
logger.addHandler(console_handler)


def add_file_handler() -> None:
    """Log to a rotating file next to the config."""
    LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_PATH,
        maxBytes=5 * 1024 * 1024,  # 5MB per file
        backupCount=3,
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)


# ----------------------------
# Main
# ----------------------------


def main() -> int:
    """
    Main entry point for Host Bridge.

    1. Loads the settings, creating them on first run
    2. Builds the bridge (event loop, supervisor, presence entity)
    3. Activates the enabled integrations and starts connecting
    4. Runs the event loop until SIGINT/SIGTERM

    On shutdown the bridge publishes "off" on its availability topic and
    disconnects; delivery is best effort.
    """
    add_file_handler()

    try:
        settings = Settings.load(CONFIG_PATH)
    except configparser.Error:
        return 1

    level = getattr(logging, settings.log_level, None)
    if isinstance(level, int):
        logger.setLevel(level)
    else:
        logger.warning(f"Unknown logLevel '{settings.log_level}', using INFO")
    logger.info(f"Starting Host Bridge v{VERSION}...")

    bridge = HostBridge(settings)

    def signal_handler(sig, frame):
        """Handle shutdown signals gracefully."""
        logger.info("Shutdown signal received, stopping...")
        bridge.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        bridge.run()
    finally:
        bridge.shutdown()
        logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
