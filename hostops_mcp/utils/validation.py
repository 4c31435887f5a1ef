"""Path and input validation utilities."""

import re
from typing import Final

OCTAL_MODE: Final = re.compile(r"^[0-7]{3,4}$")


def validate_remote_path(path: str) -> str:
    """Validate a remote file path.

    Args:
        path: The path to validate

    Returns:
        The path, unchanged

    Raises:
        ValueError: If path is empty or contains a null byte
    """
    if not path or not path.strip():
        raise ValueError("Path cannot be empty")

    # Null bytes truncate paths in C-level file APIs
    if "\x00" in path:
        raise ValueError(f"Path contains null byte: {path!r}")

    return path


def validate_permissions(mode: str) -> str:
    """Validate an octal permission string such as "0644".

    Args:
        mode: Permission string

    Returns:
        The stripped permission string

    Raises:
        ValueError: If mode is not 3 or 4 octal digits
    """
    mode = mode.strip()
    if not OCTAL_MODE.match(mode):
        raise ValueError(
            f"Permissions must be an octal mode like '0644', got {mode!r}"
        )
    return mode
