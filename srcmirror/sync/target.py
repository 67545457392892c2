"""Preparation of the local target directory."""

import logging
from pathlib import Path

from ..exceptions import TargetPreparationError
from ..filesystem import FilesystemClient

logger = logging.getLogger(__name__)


def prepare_target(fs: FilesystemClient, target_dir: Path, clean: bool) -> None:
    """Make sure the target directory exists, wiping it first if requested.

    Warning:
        With ``clean=True`` the existing directory and everything below it
        is deleted permanently before being recreated.

    Args:
        fs: Filesystem client
        target_dir: Local directory for this owner/repo/branch
        clean: If True, delete the existing directory first

    Raises:
        TargetPreparationError: If the directory cannot be removed or created
    """
    try:
        if clean and fs.exists(target_dir):
            logger.info("Cleaning existing directory: %s", target_dir)
            fs.remove_all(target_dir)
        fs.mkdir_all(target_dir)
    except OSError as e:
        raise TargetPreparationError(
            f"Failed to prepare target directory {target_dir}: {e}"
        ) from e
