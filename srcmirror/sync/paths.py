"""Mapping of remote keys to local paths inside a target directory."""

import os
from pathlib import Path, PurePosixPath

from ..exceptions import PathTraversalError


def relative_key(key: str, prefix: str) -> str:
    """Strip the sync prefix from a key.

    Args:
        key: Full object key
        prefix: Request prefix (``owner/repo/branch/``)

    Returns:
        Key relative to the prefix

    Raises:
        PathTraversalError: If the key does not start with the prefix
    """
    if not key.startswith(prefix):
        raise PathTraversalError(key, f"Key {key!r} is outside prefix {prefix!r}")
    return key[len(prefix) :]


def resolve_target_path(target_dir: Path, rel_key: str, key: str = "") -> Path:
    """Resolve a relative key to an absolute path below ``target_dir``.

    Keys containing ``..`` segments, absolute paths, backslashes, NUL bytes or
    nothing at all are rejected. The resolved path is also checked against
    the resolved target directory so symlinked parents cannot redirect writes.

    Args:
        target_dir: Local target directory
        rel_key: Key relative to the sync prefix (forward slashes)
        key: Full key, used in error messages

    Returns:
        Absolute local path for the object

    Raises:
        PathTraversalError: If the key would escape the target directory
    """
    key = key or rel_key

    if not rel_key or "\x00" in rel_key or "\\" in rel_key:
        raise PathTraversalError(key, f"Invalid key: {key!r}")

    posix = PurePosixPath(rel_key)
    if posix.is_absolute() or ".." in posix.parts:
        raise PathTraversalError(key, f"Key escapes target directory: {key!r}")

    parts = [p for p in posix.parts if p not in ("", ".")]
    if not parts:
        raise PathTraversalError(key, f"Invalid key: {key!r}")

    base = Path(os.path.realpath(target_dir))
    candidate = Path(os.path.realpath(base.joinpath(*parts)))
    if candidate == base or base not in candidate.parents:
        raise PathTraversalError(key, f"Key escapes target directory: {key!r}")

    return candidate
