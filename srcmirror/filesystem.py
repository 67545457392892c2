"""Local filesystem operations used by the sync engine."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Protocol, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Process umask, read once at import
_UMASK = _read_umask()


class FilesystemClient(Protocol):
    """Filesystem operations the sync engine relies on."""

    def exists(self, path: PathLike) -> bool: ...

    def mkdir_all(self, path: PathLike) -> None: ...

    def remove_all(self, path: PathLike) -> None: ...

    def write_file(self, path: PathLike, data: bytes) -> None: ...


class LocalFilesystem:
    """Filesystem client backed by the local (or network-mounted) disk."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def mkdir_all(self, path: PathLike) -> None:
        """Create a directory and all parents; no error if it exists."""
        Path(path).mkdir(parents=True, exist_ok=True)

    def remove_all(self, path: PathLike) -> None:
        """Recursively delete a directory tree (or a single file).

        Warning:
            This is irreversible. Missing paths are ignored.
        """
        target = Path(path)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()

    def write_file(self, path: PathLike, data: bytes) -> None:
        """Write bytes to a file, replacing any existing file atomically.

        The data goes to a temporary file in the same directory first and is
        then renamed over the destination, so readers never observe a
        partially written file.

        Args:
            path: Destination file path (parent directory must exist)
            data: Complete file content
        """
        target = Path(path)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates files 0600
            os.chmod(tmp_name, 0o666 & ~_UMASK)
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise


def _branch_roots(parent: Path) -> list[Path]:
    """Find branch directories below a repository directory.

    Branch names may contain ``/``, so a branch can sit several levels down.
    A directory is a branch root once it holds a regular file or has no
    subdirectories; otherwise its subdirectories are searched.
    """
    roots: list[Path] = []
    for child in sorted(p for p in parent.iterdir() if _is_real_dir(p)):
        entries = list(child.iterdir())
        subdirs = [p for p in entries if _is_real_dir(p)]
        if not subdirs or any(p.is_file() for p in entries):
            roots.append(child)
        else:
            roots.extend(_branch_roots(child))
    return roots


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def list_targets(mount_root: PathLike) -> list[str]:
    """List synced ``owner/repo/branch`` directories under a mount root.

    A branch such as ``feature/login`` is reported as
    ``owner/repo/feature/login``. A branch whose top level holds only
    directories is reported at the first level that holds a file.

    Args:
        mount_root: Root directory of the mirror

    Returns:
        Sorted list of ``owner/repo/branch`` strings (empty if the root
        does not exist or cannot be read)
    """
    root = Path(mount_root)
    targets: list[str] = []

    try:
        for owner in sorted(p for p in root.iterdir() if _is_real_dir(p)):
            for repo in sorted(p for p in owner.iterdir() if _is_real_dir(p)):
                for branch in _branch_roots(repo):
                    targets.append(branch.relative_to(root).as_posix())
    except FileNotFoundError:
        return []
    except PermissionError as e:
        logger.warning(f"Permission denied while listing targets: {e}")

    return sorted(targets)
