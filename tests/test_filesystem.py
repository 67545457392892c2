"""Unit tests for the local filesystem client."""

import stat

import pytest

from srcmirror import filesystem
from srcmirror.filesystem import LocalFilesystem, list_targets
from srcmirror.sync import SyncEngine


class TestLocalFilesystem:
    """Tests for LocalFilesystem."""

    def test_mkdir_all_is_idempotent(self, tmp_path):
        fs = LocalFilesystem()
        target = tmp_path / "a" / "b" / "c"

        fs.mkdir_all(target)
        fs.mkdir_all(target)

        assert target.is_dir()

    def test_write_file_overwrites(self, tmp_path):
        """Test that an existing file is replaced completely."""
        fs = LocalFilesystem()
        path = tmp_path / "file.txt"
        path.write_bytes(b"old content that is longer")

        fs.write_file(path, b"new")

        assert path.read_bytes() == b"new"

    def test_write_file_leaves_no_temp_files(self, tmp_path):
        fs = LocalFilesystem()

        fs.write_file(tmp_path / "a.txt", b"a")
        fs.write_file(tmp_path / "a.txt", b"b")

        assert [p.name for p in tmp_path.iterdir()] == ["a.txt"]

    def test_write_file_failure_leaves_nothing(self, tmp_path):
        """Test that a failed write does not leave a partial file."""
        fs = LocalFilesystem()
        target = tmp_path / "dir_in_the_way"
        target.mkdir()

        try:
            fs.write_file(target, b"data")
        except OSError:
            pass

        assert target.is_dir()
        assert list(target.iterdir()) == []
        assert [p.name for p in tmp_path.iterdir()] == ["dir_in_the_way"]

    def test_remove_all(self, tmp_path):
        fs = LocalFilesystem()
        tree = tmp_path / "tree"
        (tree / "sub").mkdir(parents=True)
        (tree / "sub" / "f.txt").write_text("x")

        fs.remove_all(tree)

        assert not fs.exists(tree)

    def test_remove_all_missing_path(self, tmp_path):
        """Test that removing a missing path is a no-op."""
        LocalFilesystem().remove_all(tmp_path / "missing")

    @pytest.mark.parametrize("umask,expected", [(0o022, 0o644), (0o002, 0o664)])
    def test_write_file_mode_follows_umask(
        self, tmp_path, monkeypatch, umask, expected
    ):
        """Test that written files are readable by other users per the umask."""
        monkeypatch.setattr(filesystem, "_UMASK", umask)
        path = tmp_path / "shared.txt"

        LocalFilesystem().write_file(path, b"data")

        assert stat.S_IMODE(path.stat().st_mode) == expected

    def test_synced_files_are_world_readable(
        self, fake_store, mount_root, monkeypatch
    ):
        """Test that a synced tree is readable by other users on the mount."""
        monkeypatch.setattr(filesystem, "_UMASK", 0o022)

        SyncEngine(fake_store, mount_root).sync({"owner": "acme", "repo": "web"})

        readme = mount_root / "acme" / "web" / "main" / "README.md"
        assert stat.S_IMODE(readme.stat().st_mode) == 0o644


class TestListTargets:
    """Tests for list_targets."""

    def test_lists_owner_repo_branch(self, tmp_path):
        (tmp_path / "acme" / "web" / "main").mkdir(parents=True)
        (tmp_path / "acme" / "web" / "dev").mkdir(parents=True)
        (tmp_path / "other" / "api" / "main").mkdir(parents=True)
        (tmp_path / "stray.txt").write_text("x")

        assert list_targets(tmp_path) == [
            "acme/web/dev",
            "acme/web/main",
            "other/api/main",
        ]

    def test_missing_root(self, tmp_path):
        assert list_targets(tmp_path / "nope") == []

    def test_branch_with_slash(self, tmp_path):
        """Test that a feature/login branch is listed as one target."""
        main = tmp_path / "acme" / "web" / "main"
        (main / "app").mkdir(parents=True)
        (main / "README.md").write_text("x")
        login = tmp_path / "acme" / "web" / "feature" / "login"
        (login / "src").mkdir(parents=True)
        (login / "package.json").write_text("{}")

        assert list_targets(tmp_path) == ["acme/web/feature/login", "acme/web/main"]
