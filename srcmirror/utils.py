"""Utility functions and constants for srcmirror."""

# =============================================================================
# Constants for sync operations
# =============================================================================

# Page size for remote listing (S3 caps ListObjectsV2 at 1000)
DEFAULT_PAGE_SIZE: int = 1000

# Emit a progress event after this many successfully written objects
PROGRESS_INTERVAL: int = 100

DEFAULT_BRANCH: str = "main"

DEFAULT_REGION: str = "us-east-1"

DEFAULT_MOUNT_ROOT: str = "/mnt/source"

# Directories and build artefacts that are rarely useful for code search.
# Only applied when explicitly requested (--default-excludes).
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    r"node_modules/",
    r"\.next/",
    r"dist/",
    r"\.git/",
    r"\.DS_Store$",
    r"__pycache__/",
    r"\.pyc$",
    r"\.pyo$",
    r"\.cache/",
    r"coverage/",
    r"\.turbo/",
    r"\.vercel/",
)


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def format_megabytes(size_bytes: int) -> str:
    """Format a byte count as megabytes with exactly two decimals.

    Examples:
        >>> format_megabytes(0)
        '0.00'
        >>> format_megabytes(1572864)
        '1.50'
    """
    return f"{size_bytes / 1024 / 1024:.2f}"


def parse_bool(value: object) -> bool:
    """Interpret a loosely typed flag value.

    Accepts real booleans as well as the strings ``"true"``, ``"1"``,
    ``"yes"`` and ``"on"`` (case-insensitive). Anything else is False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(value, (int, float)):
        return value != 0
    return False
