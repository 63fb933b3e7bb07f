"""Script buttons.

Every ``[Scripts/<id>]`` section of the settings becomes a button. Pressing
it in Home Assistant launches the ``Exec`` command line detached, without a
shell::

    [Scripts/backup]
    Exec = rsync -a /home/me /mnt/backup
    Name = Run backup
    icon = mdi:backup-restore
"""

# Standard library imports
import logging
import re
import shlex
import subprocess
from typing import Any, Dict, List, Tuple

# Local imports
from ..core.errors import EntityError
from ..core.registry import register_integration
from ..entities import Button
from ..utils.formatting import sanitize_id

logger = logging.getLogger(__name__)

SCRIPTS_PREFIX = "Scripts"
DEFAULT_ICON = "mdi:script-text"

# ----------------------------
# Security and Validation
# ----------------------------

MAX_SCRIPT_ID_LENGTH = 100
MAX_COMMAND_LENGTH = 1000

# Shell metacharacters; commands are never run through a shell
SHELL_METACHARACTERS = frozenset(["|", ">", "<", "&", ";", "$", "`", "\n", "(", ")"])

SCRIPT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def has_shell_features(cmd: str) -> bool:
    """
    Detect if a command string contains shell-specific features.

    Examples:
        >>> has_shell_features("echo hello")
        False
        >>> has_shell_features("ps aux | grep python")
        True
    """
    return any(char in cmd for char in SHELL_METACHARACTERS)


def validate_script_id(script_id: str) -> Tuple[bool, str]:
    """
    Validate that a script id is safe and well-formed.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not script_id:
        return False, "Script id cannot be empty"

    if len(script_id) > MAX_SCRIPT_ID_LENGTH:
        return False, f"Script id too long (max {MAX_SCRIPT_ID_LENGTH} characters)"

    if not SCRIPT_ID_PATTERN.match(script_id):
        return False, "Script id must contain only letters, numbers, underscores, and dashes"

    return True, "OK"


def validate_script_command(cmd: str) -> Tuple[bool, str]:
    """
    Validate that a command line can be run without a shell.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not cmd or not cmd.strip():
        return False, "Command cannot be empty"

    if len(cmd) > MAX_COMMAND_LENGTH:
        return False, f"Command too long (max {MAX_COMMAND_LENGTH} characters)"

    if has_shell_features(cmd):
        return False, "Command contains shell features (pipes, redirects, etc.); wrap it in a script file"

    try:
        shlex.split(cmd)
    except ValueError as e:
        return False, f"Invalid command syntax: {e}"

    return True, "OK"


def safe_split_command(cmd: str) -> List[str]:
    """
    Split a command string into arguments using shell-like parsing.

    Raises:
        ValueError: If the command has unmatched quotes or invalid syntax

    Examples:
        >>> safe_split_command('echo "hello world"')
        ['echo', 'hello world']
    """
    try:
        return shlex.split(cmd)
    except ValueError as e:
        raise ValueError(f"Invalid command syntax: {e}")


# ----------------------------
# Execution
# ----------------------------


def run_script(script_id: str, cmd: str) -> Dict[str, Any]:
    """
    Launch a script detached from the bridge.

    Returns:
        Dictionary with success status and output
    """
    try:
        cmd_list = safe_split_command(cmd)
        logger.info(f"Launching script '{script_id}': {cmd_list}")
        subprocess.Popen(
            cmd_list,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except (OSError, ValueError) as e:
        logger.error(f"Script '{script_id}' failed to start: {e}")
        return {"success": False, "output": str(e)}

    return {"success": True, "output": f"Script '{script_id}' launched."}


def _make_button(bridge, script_id: str, section: Dict[str, str]) -> Button:
    cmd = section.get("Exec", "")
    button = Button(
        bridge.supervisor,
        f"script_{sanitize_id(script_id)}",
        section.get("Name") or script_id,
        icon=section.get("icon") or DEFAULT_ICON,
    )
    button.on_triggered = lambda: run_script(script_id, cmd)
    return button


@register_integration("Scripts", default_enabled=True)
def setup_scripts(bridge) -> List[Button]:
    """Create one button per valid ``[Scripts/<id>]`` section."""
    buttons = []
    for script_id in bridge.settings.subsections(SCRIPTS_PREFIX):
        valid, error = validate_script_id(script_id)
        if not valid:
            logger.warning(f"Skipping script '{script_id}': {error}")
            continue

        section = bridge.settings.items(f"{SCRIPTS_PREFIX}/{script_id}")
        valid, error = validate_script_command(section.get("Exec", ""))
        if not valid:
            logger.warning(f"Skipping script '{script_id}': {error}")
            continue

        try:
            buttons.append(_make_button(bridge, script_id, section))
        except EntityError as e:
            logger.warning(f"Skipping script '{script_id}': {e}")

    if buttons:
        logger.info(f"Loaded {len(buttons)} script(s): {', '.join(b.name for b in buttons)}")
    else:
        logger.info("No scripts configured")
    return buttons
