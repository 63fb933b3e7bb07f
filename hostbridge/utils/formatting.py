"""Formatting helpers for ids and topics."""


def sanitize_id(name: str) -> str:
    """Sanitize a string for use as an entity id.

    Replaces spaces and MQTT special characters with underscores, converts
    to lowercase, and collapses repeated underscores.

    Args:
        name: String to sanitize.

    Returns:
        Sanitized string safe for MQTT topics and unique ids.

    Example:
        >>> sanitize_id("My PC Name")
        'my_pc_name'
        >>> sanitize_id("Test/Device")
        'test_device'
        >>> sanitize_id("CPU #1 Temp")
        'cpu_1_temp'
    """
    name = name.lower().replace(" ", "_")

    # MQTT wildcards and separators: +, #, /, $, \, ?
    for char in ["/", "+", "#", "$", "\\", "?"]:
        name = name.replace(char, "_")

    while "__" in name:
        name = name.replace("__", "_")

    return name.strip("_")


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters, marking the cut with an ellipsis.

    Example:
        >>> truncate("release notes", 8)
        'relea...'
    """
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 3)] + "..."
