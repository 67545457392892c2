"""Include/exclude filtering of relative keys."""

import logging
import re
from collections.abc import Iterable
from typing import Optional

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


class KeyFilter:
    """Decides which relative keys take part in a sync.

    With no include paths and no exclude patterns every key passes.

    Examples:
        >>> f = KeyFilter(include_paths=["app/"], exclude_patterns=[r"\\.pyc$"])
        >>> f.matches("app/main.py")
        True
        >>> f.matches("app/main.pyc")
        False
        >>> f.matches("docs/readme.md")
        False
    """

    def __init__(
        self,
        include_paths: Optional[Iterable[str]] = None,
        exclude_patterns: Optional[Iterable[str]] = None,
    ):
        """Initialize the filter.

        Args:
            include_paths: Relative key prefixes to keep (e.g. ``["app/"]``)
            exclude_patterns: Regular expressions; matching keys are dropped

        Raises:
            ValidationError: If an exclude pattern is not a valid regex
        """
        self.include_paths = tuple(include_paths or ())
        self._excludes: list[re.Pattern[str]] = []
        for pattern in exclude_patterns or ():
            try:
                self._excludes.append(re.compile(pattern))
            except re.error as e:
                raise ValidationError(
                    f"Invalid exclude pattern {pattern!r}: {e}"
                ) from e

    @property
    def is_active(self) -> bool:
        return bool(self.include_paths or self._excludes)

    def is_included(self, rel_key: str) -> bool:
        if not self.include_paths:
            return True
        return any(rel_key.startswith(prefix) for prefix in self.include_paths)

    def is_excluded(self, rel_key: str) -> bool:
        return any(pattern.search(rel_key) for pattern in self._excludes)

    def matches(self, rel_key: str) -> bool:
        """Return True if the key should be synced."""
        return self.is_included(rel_key) and not self.is_excluded(rel_key)
