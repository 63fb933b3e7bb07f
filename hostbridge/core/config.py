"""Configuration management for Host Bridge.

This module loads the bridge settings from an INI file, creates the file on
first run and gives the rest of the application typed access to it. The same
file stores the per-integration enable flags, so it is written back when the
integration registry adds defaults for newly compiled-in modules.

Configuration Structure:
    [general]
        host: MQTT broker hostname or IP address (required)
        port: MQTT broker port (default: 1883)
        user: MQTT authentication username
        password: MQTT authentication password
        useSSL: Connect with TLS (default: false)
        discoveryPrefix: Home Assistant discovery prefix (default: homeassistant)
        logLevel: Root log level (default: INFO)

    [Integrations]
        <IntegrationName>: true/false, written with the module default on first sight

    [Scripts/<id>]
        Exec: Command line run when the script button is pressed
        Name: Display name (default: the id)
        icon: Material Design Icon (default: mdi:script-text)

    [Updater]
        interval: Release check interval in seconds (default: 3600)
        command: Command run when an install is requested from the hub

Usage:
    from hostbridge.core.config import Settings, CONFIG_PATH

    settings = Settings.load(CONFIG_PATH)
    print(settings.host, settings.port)
"""

# Standard library imports
import configparser
import logging
import os
import socket
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Configure logger for config module
logger = logging.getLogger(__name__)


# ----------------------------
# Paths
# ----------------------------

BASE_DIR = Path(__file__).resolve().parent.parent.parent
CONFIG_PATH = Path(os.getenv("HOSTBRIDGE_CONFIG", BASE_DIR / "data" / "config.ini"))
LOG_PATH = BASE_DIR / "data" / "hostbridge.log"
VERSION_PATH = BASE_DIR / "VERSION"


# ----------------------------
# Load version
# ----------------------------

try:
    with VERSION_PATH.open("r", encoding="utf-8") as f:
        VERSION = f.read().strip()
except FileNotFoundError:
    VERSION = "0.0.0"  # fallback if VERSION file is missing
    logger.warning(f"VERSION file not found at {VERSION_PATH}, using fallback: {VERSION}")


# ----------------------------
# Repository Information
# ----------------------------

REPO_OWNER = "hostbridge"
REPO_NAME = "hostbridge"
REPO_URL = f"https://github.com/{REPO_OWNER}/{REPO_NAME}"


# ----------------------------
# Section names and defaults
# ----------------------------

GENERAL_SECTION = "general"
INTEGRATIONS_SECTION = "Integrations"
DEFAULT_PORT = 1883
DEFAULT_DISCOVERY_PREFIX = "homeassistant"


# ----------------------------
# Helper Functions
# ----------------------------


def is_interactive_environment() -> bool:
    """
    Determine if running in interactive environment.

    Returns True if:
    - stdin is a TTY (terminal)
    - HB_NON_INTERACTIVE env var is NOT set

    Returns False if:
    - stdin is not a TTY (pipe, file, systemd unit)
    - HB_NON_INTERACTIVE is explicitly set
    """
    # Explicit override takes precedence
    if os.getenv("HB_NON_INTERACTIVE"):
        return False

    return sys.stdin.isatty()


def prompt_yes_no(prompt: str, default: bool = False) -> bool:
    """
    Prompt user for yes/no question with validation.

    Accepts: y, yes, n, no (case insensitive)
    Returns: boolean
    """
    default_str = "Y/n" if default else "y/N"

    while True:
        response = input(f"{prompt} [{default_str}]: ").strip().lower()

        if not response:  # User pressed Enter (use default)
            return default

        if response in ("y", "yes"):
            return True
        elif response in ("n", "no"):
            return False
        else:
            print("  Invalid input. Please enter 'y' for yes or 'n' for no.")


def get_hostname() -> str:
    """Return the lower-cased local hostname used as the topic root."""
    return socket.gethostname().lower()


# ----------------------------
# Validation Functions
# ----------------------------


def validate_required_mqtt(
    host: str, port: str, user: str, password: str
) -> tuple[bool, str]:
    """
    Validate the broker settings.

    Anonymous brokers are allowed, so only the host and port are mandatory.

    Returns (is_valid, error_message).
    """
    if not host or not host.strip():
        return False, "MQTT host cannot be empty"

    if user and not password:
        logger.warning("MQTT password is empty - ensure your broker allows this")

    try:
        port_int = int(port)
        if not (1 <= port_int <= 65535):
            return False, f"MQTT port must be between 1-65535, got {port}"
    except ValueError:
        return False, f"MQTT port must be a number, got '{port}'"

    return True, ""


# ----------------------------
# Settings
# ----------------------------


class Settings:
    """Key/value settings organised in named sections, backed by an INI file.

    Keys keep their case so integration names read back exactly as they
    were registered.

    Attributes:
        path: Location of the INI file, or None for an in-memory store.
        parser: The underlying ConfigParser.
    """

    def __init__(self, path: Optional[Path] = None, parser: Optional[configparser.ConfigParser] = None):
        self.path = Path(path) if path is not None else None
        if parser is None:
            parser = configparser.ConfigParser(interpolation=None)
            parser.optionxform = str  # preserve key case
        self.parser = parser

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load settings from ``path``, creating the file on first run."""
        path = Path(path)
        if not path.exists():
            create_config(path)

        settings = cls(path)
        try:
            files_read = settings.parser.read(path, encoding="utf-8")
        except configparser.Error as e:
            logger.error(f"Configuration file is corrupt: {e}")
            logger.error(f"Location: {path}")
            raise

        if not files_read:
            logger.error(f"Configuration file could not be read: {path}")
        return settings

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, str]], path: Optional[Path] = None) -> "Settings":
        settings = cls(path)
        settings.parser.read_dict(data)
        return settings

    # -- generic access -------------------------------------------------

    def get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        return self.parser.get(section, key, fallback=fallback)

    def getint(self, section: str, key: str, fallback: Optional[int] = None) -> Optional[int]:
        try:
            return self.parser.getint(section, key, fallback=fallback)
        except ValueError:
            logger.warning(f"Invalid integer for [{section}] {key}, using {fallback}")
            return fallback

    def getboolean(self, section: str, key: str, fallback: Optional[bool] = None) -> Optional[bool]:
        try:
            return self.parser.getboolean(section, key, fallback=fallback)
        except ValueError:
            logger.warning(f"Invalid boolean for [{section}] {key}, using {fallback}")
            return fallback

    def has_option(self, section: str, key: str) -> bool:
        return self.parser.has_option(section, key)

    def set(self, section: str, key: str, value) -> None:
        if not self.parser.has_section(section):
            self.parser.add_section(section)
        if isinstance(value, bool):
            value = str(value).lower()
        self.parser.set(section, key, str(value))

    def items(self, section: str) -> Dict[str, str]:
        if not self.parser.has_section(section):
            return {}
        return dict(self.parser.items(section))

    def subsections(self, prefix: str) -> List[str]:
        """Return the ids of all ``[<prefix>/<id>]`` sections, in file order."""
        marker = f"{prefix}/"
        return [s[len(marker):] for s in self.parser.sections() if s.startswith(marker)]

    def save(self) -> None:
        """Write the settings back to disk."""
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                self.parser.write(f)
            logger.debug(f"Settings saved to {self.path}")
        except OSError as e:
            logger.error(f"Failed to write settings to {self.path}: {e}")

    # -- broker settings ------------------------------------------------

    @property
    def host(self) -> str:
        return (self.get(GENERAL_SECTION, "host", fallback="") or "").strip()

    @property
    def port(self) -> int:
        return self.getint(GENERAL_SECTION, "port", fallback=DEFAULT_PORT)

    @property
    def user(self) -> str:
        return self.get(GENERAL_SECTION, "user", fallback="") or ""

    @property
    def password(self) -> str:
        return self.get(GENERAL_SECTION, "password", fallback="") or ""

    @property
    def use_ssl(self) -> bool:
        return self.getboolean(GENERAL_SECTION, "useSSL", fallback=False)

    @property
    def discovery_prefix(self) -> str:
        return self.get(GENERAL_SECTION, "discoveryPrefix", fallback=DEFAULT_DISCOVERY_PREFIX)

    @property
    def log_level(self) -> str:
        return (self.get(GENERAL_SECTION, "logLevel", fallback="INFO") or "INFO").upper()


# ----------------------------
# First Run Configuration
# ----------------------------


def create_config(config_path: Path) -> None:
    """
    Create the configuration file on first run.

    On a terminal the broker settings are prompted for; otherwise they are
    taken from environment variables.

    Environment Variables (for automation only):
        HB_MQTT_HOST: MQTT broker hostname
        HB_MQTT_PORT: MQTT broker port (default: 1883)
        HB_MQTT_USER: MQTT username
        HB_MQTT_PASS: MQTT password
        HB_MQTT_SSL: Use TLS (default: false)
        HB_NON_INTERACTIVE: Set to skip prompts
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if is_interactive_environment():
        print("\n" + "=" * 70)
        print("Host Bridge - First Run Configuration")
        print("=" * 70)
        print("You can press Enter to accept default values shown in [brackets].\n")

        host = ""
        while not host:
            host = input("  MQTT broker hostname/IP: ").strip()
            if not host:
                print("  Error: MQTT broker is required!")
        port = input(f"  MQTT port [{DEFAULT_PORT}]: ").strip() or str(DEFAULT_PORT)
        user = input("  MQTT username (empty for anonymous): ").strip()
        password = input("  MQTT password: ").strip() if user else ""
        use_ssl = prompt_yes_no("  Use TLS?")

        valid, error = validate_required_mqtt(host, port, user, password)
        if not valid:
            print(f"  Error: {error}")
            print("  Please run Host Bridge again to reconfigure.")
            sys.exit(1)
    else:
        host = os.getenv("HB_MQTT_HOST", "")
        port = os.getenv("HB_MQTT_PORT", str(DEFAULT_PORT))
        user = os.getenv("HB_MQTT_USER", "")
        password = os.getenv("HB_MQTT_PASS", "")
        use_ssl = os.getenv("HB_MQTT_SSL", "false").lower() in ("1", "true", "yes")
        logger.warning("Non-interactive mode: Using environment variables or defaults")

    settings = Settings(config_path)
    settings.set(GENERAL_SECTION, "host", host)
    settings.set(GENERAL_SECTION, "port", port)
    settings.set(GENERAL_SECTION, "user", user)
    settings.set(GENERAL_SECTION, "password", password)
    settings.set(GENERAL_SECTION, "useSSL", use_ssl)
    settings.set(GENERAL_SECTION, "discoveryPrefix", DEFAULT_DISCOVERY_PREFIX)
    settings.save()
    logger.info(f"Configuration created at {config_path}")
