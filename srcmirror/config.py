"""Configuration management for srcmirror.

Settings are resolved in this order: environment variables, then the
config file at ``~/.config/srcmirror/config`` (``KEY=VALUE`` lines), then
built-in defaults.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import SrcMirrorConfigError
from .utils import DEFAULT_MOUNT_ROOT, DEFAULT_PAGE_SIZE, DEFAULT_REGION

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    "SRCMIRROR_BUCKET",
    "AWS_REGION",
    "SRCMIRROR_MOUNT_ROOT",
    "SRCMIRROR_ENDPOINT_URL",
    "SRCMIRROR_PAGE_SIZE",
    "SRCMIRROR_MAX_WORKERS",
)


class Config:
    """Reads srcmirror settings from the environment and the config file."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_file: Path to the config file. Defaults to
                ~/.config/srcmirror/config
        """
        if config_file is None:
            config_file = Path.home() / ".config" / "srcmirror" / "config"
        self.config_file = config_file

    def _read_file(self) -> dict[str, str]:
        """Parse the config file into a dictionary (empty if missing)."""
        values: dict[str, str] = {}
        if not self.config_file.exists():
            return values

        try:
            content = self.config_file.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read config file {self.config_file}: {e}")
            return values

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip('"').strip("'")
        return values

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a setting, environment first."""
        value = os.environ.get(key)
        if value:
            return value
        return self._read_file().get(key, default)

    def _get_int(self, key: str, default: int) -> int:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError as e:
            raise SrcMirrorConfigError(
                f"{key} must be an integer, got {raw!r}"
            ) from e

    @property
    def bucket(self) -> Optional[str]:
        """Source bucket name (``SRCMIRROR_BUCKET`` or ``SOURCE_BUCKET``)."""
        return self.get("SRCMIRROR_BUCKET") or self.get("SOURCE_BUCKET")

    @property
    def region(self) -> str:
        return self.get("AWS_REGION") or DEFAULT_REGION

    @property
    def endpoint_url(self) -> Optional[str]:
        """Custom endpoint for S3-compatible stores (MinIO, SeaweedFS)."""
        return self.get("SRCMIRROR_ENDPOINT_URL")

    @property
    def mount_root(self) -> Path:
        return Path(self.get("SRCMIRROR_MOUNT_ROOT") or DEFAULT_MOUNT_ROOT)

    @property
    def page_size(self) -> int:
        page_size = self._get_int("SRCMIRROR_PAGE_SIZE", DEFAULT_PAGE_SIZE)
        if not 1 <= page_size <= 1000:
            raise SrcMirrorConfigError("SRCMIRROR_PAGE_SIZE must be between 1 and 1000")
        return page_size

    @property
    def max_workers(self) -> int:
        max_workers = self._get_int("SRCMIRROR_MAX_WORKERS", 1)
        if max_workers < 1:
            raise SrcMirrorConfigError("SRCMIRROR_MAX_WORKERS must be at least 1")
        return max_workers

    def require_bucket(self) -> str:
        """Return the bucket name or raise if none is configured."""
        bucket = self.bucket
        if not bucket:
            raise SrcMirrorConfigError(
                "Bucket not configured. Please set SRCMIRROR_BUCKET environment "
                "variable or run 'srcmirror config set SRCMIRROR_BUCKET <name>'."
            )
        return bucket

    def save_value(self, key: str, value: str) -> None:
        """Persist a setting to the config file.

        Args:
            key: One of :data:`CONFIG_KEYS`
            value: Value to store

        Raises:
            SrcMirrorConfigError: If the key is unknown
        """
        if key not in CONFIG_KEYS:
            raise SrcMirrorConfigError(
                f"Unknown config key: {key}. Valid keys: {', '.join(CONFIG_KEYS)}"
            )

        values = self._read_file()
        values[key] = value

        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        lines = [f"{k}={v}" for k, v in sorted(values.items())]
        self.config_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
        # Owner read/write only
        self.config_file.chmod(0o600)

    def as_dict(self) -> dict[str, Optional[str]]:
        """Return the effective value of every known setting."""
        return {
            "SRCMIRROR_BUCKET": self.bucket,
            "AWS_REGION": self.region,
            "SRCMIRROR_MOUNT_ROOT": str(self.mount_root),
            "SRCMIRROR_ENDPOINT_URL": self.endpoint_url,
            "SRCMIRROR_PAGE_SIZE": self.get("SRCMIRROR_PAGE_SIZE")
            or str(DEFAULT_PAGE_SIZE),
            "SRCMIRROR_MAX_WORKERS": self.get("SRCMIRROR_MAX_WORKERS") or "1",
        }


config = Config()
