"""Validation and normalization of incoming sync requests."""

from collections.abc import Mapping
from typing import Any, Optional

from ..exceptions import ValidationError
from ..models import SyncRequest
from ..utils import DEFAULT_BRANCH, parse_bool

REQUIRED_FIELDS_MESSAGE = "owner and repo are required"


def _clean_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _check_segment(name: str, value: str, allow_slash: bool = False) -> None:
    """Ensure a request field is safe to use as a path below the mount root.

    Branch names may contain slashes (``feature/login``); each segment must
    still be a plain name.
    """
    if "\\" in value or "\x00" in value:
        raise ValidationError(f"Invalid {name}: {value!r}")
    segments = value.split("/") if allow_slash else [value]
    for segment in segments:
        if segment in ("", ".", "..") or "/" in segment:
            raise ValidationError(f"Invalid {name}: {value!r}")


def _string_list(name: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{name} must be a list of strings")
    items = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f"{name} must be a list of strings")
        if item:
            items.append(item)
    return tuple(items)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def validate_request(raw: Mapping[str, Any]) -> SyncRequest:
    """Validate a raw request and apply defaults.

    Accepts both snake_case and the camelCase field names of the invocation
    contract (``includePaths``, ``excludePatterns``).

    Args:
        raw: Incoming request fields

    Returns:
        Normalized SyncRequest (``branch`` defaults to "main", ``clean``
        to False)

    Raises:
        ValidationError: If owner or repo is missing, or a field is malformed

    Examples:
        >>> validate_request({"owner": "acme", "repo": "web"}).prefix
        'acme/web/main/'
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    owner = _clean_str(raw.get("owner"))
    repo = _clean_str(raw.get("repo"))
    if not owner or not repo:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    branch = _clean_str(raw.get("branch")) or DEFAULT_BRANCH

    _check_segment("owner", owner)
    _check_segment("repo", repo)
    _check_segment("branch", branch, allow_slash=True)

    include_paths = _string_list(
        "include_paths", _first(raw, "include_paths", "includePaths")
    )
    exclude_patterns = _string_list(
        "exclude_patterns", _first(raw, "exclude_patterns", "excludePatterns")
    )

    return SyncRequest(
        owner=owner,
        repo=repo,
        branch=branch,
        clean=parse_bool(raw.get("clean", False)),
        include_paths=include_paths,
        exclude_patterns=exclude_patterns,
    )
