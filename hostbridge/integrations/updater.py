"""Update entity tracking GitHub releases.

Compares the installed version against the latest GitHub release and
exposes the result as an update entity. The HTTP check runs in a background
thread so the event loop never blocks; the result is handed back with
``call_soon_threadsafe``.

Configuration:
    [Updater]
    interval = 3600                  # seconds between checks (min 60)
    command = /opt/hostbridge/upgrade.sh  # run when install is pressed
"""

# Standard library imports
import logging
import subprocess
import threading
from typing import Optional

# Third-party imports
import requests

# Local imports
from ..core.config import REPO_NAME, REPO_OWNER, REPO_URL, VERSION, Settings
from ..core.connection import ConnectionSupervisor
from ..core.eventloop import EventLoop
from ..core.registry import register_integration
from ..entities import Update
from ..utils.formatting import truncate
from .scripts import safe_split_command

logger = logging.getLogger(__name__)

# ----------------------------
# Config
# ----------------------------
REPO = f"{REPO_OWNER}/{REPO_NAME}"
GITHUB_API = "https://api.github.com"
UPDATER_SECTION = "Updater"
DEFAULT_INTERVAL = 3600
MIN_INTERVAL = 60
INSTALL_TIMEOUT = 600

# Home Assistant caps release_summary at 255 characters
MAX_SUMMARY_LENGTH = 255


# ----------------------------
# GitHub helpers
# ----------------------------


def _github_get(url: str, timeout: int = 10) -> dict:
    """Perform a GET request to GitHub API with proper headers.

    Raises:
        requests.HTTPError: If the request fails with HTTP error.
        requests.RequestException: If the request fails for other reasons.
    """
    headers = {"Accept": "application/vnd.github+json"}
    response = requests.get(url, timeout=timeout, headers=headers)
    response.raise_for_status()
    return response.json()


def _normalize_version(version: Optional[str]) -> str:
    """Normalize version string for comparison.

    Example:
        >>> _normalize_version("v1.0.0")
        '1.0.0'
        >>> _normalize_version(None)
        ''
    """
    if not version:
        return ""
    return version.strip().lower().lstrip("v")


def fetch_latest_release() -> dict:
    """Return the latest release of the bridge repository."""
    return _github_get(f"{GITHUB_API}/repos/{REPO}/releases/latest")


# ----------------------------
# Update checker
# ----------------------------


class UpdateChecker:
    """Periodically checks for a new release and runs the install command.

    Args:
        supervisor: Connection supervisor for the update entity.
        loop: Event loop the results are applied on.
        interval: Seconds between checks, at least 60.
        install_command: Command line run on an install request, or None.
    """

    def __init__(
        self,
        supervisor: ConnectionSupervisor,
        loop: EventLoop,
        interval: int = DEFAULT_INTERVAL,
        install_command: Optional[str] = None,
    ):
        self.loop = loop
        self.install_command = install_command
        self.interval = max(MIN_INTERVAL, int(interval))
        self._checking = False

        self.entity = Update(
            supervisor,
            "update",
            "Host Bridge",
            discovery_config={"device_class": "firmware", "entity_category": "diagnostic"},
        )
        self.entity.set_title("Host Bridge")
        self.entity.set_installed_version(VERSION)
        self.entity.set_latest_version(VERSION)
        self.entity.set_release_url(REPO_URL)
        self.entity.on_install_requested = self.install

        self.timer = loop.create_timer(self.interval, self.check)

    def start(self) -> None:
        self.check()
        self.timer.start()
        logger.info(f"Update checks every {self.interval}s")

    def check(self) -> bool:
        """Start a release check in the background; False if one is running."""
        if self._checking:
            return False
        self._checking = True
        threading.Thread(target=self._fetch, name="Updater-Check", daemon=True).start()
        return True

    def _fetch(self) -> None:
        try:
            release = fetch_latest_release()
        except requests.RequestException as e:
            logger.warning(f"Update check failed: {e}")
            release = None
        except ValueError as e:
            logger.warning(f"Update check returned invalid JSON: {e}")
            release = None
        self.loop.call_soon_threadsafe(self.apply_release, release)

    def apply_release(self, release: Optional[dict]) -> None:
        """Update the entity from a GitHub release document."""
        self._checking = False
        if not release:
            return

        latest = _normalize_version(release.get("tag_name"))
        if not latest:
            logger.warning("Latest release has no tag, ignoring")
            return

        self.entity.set_latest_version(latest)
        if release.get("html_url"):
            self.entity.set_release_url(release["html_url"])
        self.entity.set_release_summary(truncate(release.get("body") or "", MAX_SUMMARY_LENGTH))

        if latest != _normalize_version(self.entity.installed_version):
            logger.info(f"Update available: {self.entity.installed_version} -> {latest}")
        else:
            logger.debug(f"Host Bridge is up to date ({latest})")

    def install(self) -> None:
        if not self.install_command:
            logger.warning("Install requested but no [Updater] command is configured")
            return
        if self.entity.in_progress:
            logger.info("Install already in progress")
            return

        self.entity.set_in_progress(True)
        threading.Thread(target=self._run_install, name="Updater-Install", daemon=True).start()

    def _run_install(self) -> None:
        logger.info(f"Running update command: {self.install_command}")
        try:
            result = subprocess.run(
                safe_split_command(self.install_command),
                capture_output=True,
                text=True,
                timeout=INSTALL_TIMEOUT,
            )
            success = result.returncode == 0
            if not success:
                logger.error(f"Update command failed ({result.returncode}): {result.stderr.strip()}")
        except subprocess.TimeoutExpired:
            logger.error(f"Update command timed out after {INSTALL_TIMEOUT}s")
            success = False
        except (OSError, ValueError) as e:
            logger.error(f"Update command could not be started: {e}")
            success = False
        self.loop.call_soon_threadsafe(self.install_finished, success)

    def install_finished(self, success: bool) -> None:
        self.entity.set_in_progress(False)
        if success:
            logger.info("Update installed, restart Host Bridge to use the new version")
            self.check()


def checker_from_settings(bridge) -> UpdateChecker:
    settings: Settings = bridge.settings
    return UpdateChecker(
        bridge.supervisor,
        bridge.loop,
        interval=settings.getint(UPDATER_SECTION, "interval", fallback=DEFAULT_INTERVAL),
        install_command=settings.get(UPDATER_SECTION, "command", fallback=None),
    )


@register_integration("Updater", default_enabled=False)
def setup_updater(bridge) -> UpdateChecker:
    checker = checker_from_settings(bridge)
    checker.start()
    return checker
