"""Tests for the request/response entry point."""

import threading
from unittest.mock import Mock, patch

from srcmirror.exceptions import SrcMirrorConfigError
from srcmirror.handler import handle, lambda_handler
from srcmirror.sync import SyncEngine


class TestHandle:
    """Tests for handle()."""

    def test_missing_owner_response(self):
        """Test the exact failure response for a missing owner."""
        engine = Mock(spec=SyncEngine)

        response = handle({"repo": "web"}, engine=engine)

        assert response == {"success": False, "error": "owner and repo are required"}
        engine.sync.assert_not_called()

    def test_validation_runs_before_configuration(self):
        """Test that invalid requests fail even without a configured bucket."""
        with patch.object(SyncEngine, "from_config") as from_config:
            response = handle({"owner": "acme"})

        assert response["error"] == "owner and repo are required"
        from_config.assert_not_called()

    def test_success_response(self, fake_store, mount_root):
        """Test the camelCase success response."""
        engine = SyncEngine(fake_store, mount_root)

        response = handle({"owner": "acme", "repo": "web"}, engine=engine)

        assert response == {
            "success": True,
            "owner": "acme",
            "repo": "web",
            "branch": "main",
            "filesSynced": 3,
            "totalSizeMB": "0.00",
            "targetDir": str(mount_root / "acme" / "web" / "main"),
            "filesSkipped": 0,
            "filesFiltered": 0,
            "skipped": [],
        }

    def test_skipped_objects_in_response(self, store_factory, mount_root):
        """Test that per-object failures appear in the response."""
        key = "acme/web/main/broken.bin"
        store = store_factory(
            {key: b"x", "acme/web/main/ok.txt": b"ok"}, fail_keys=(key,)
        )

        response = handle(
            {"owner": "acme", "repo": "web"}, engine=SyncEngine(store, mount_root)
        )

        assert response["success"] is True
        assert response["filesSynced"] == 1
        assert response["filesSkipped"] == 1
        assert response["skipped"][0]["key"] == key

    def test_configuration_error(self):
        """Test that a missing bucket becomes a failure response."""
        with patch.object(
            SyncEngine,
            "from_config",
            side_effect=SrcMirrorConfigError("Bucket not configured"),
        ):
            response = handle({"owner": "acme", "repo": "web"})

        assert response == {"success": False, "error": "Bucket not configured"}

    def test_cancel_event_forwarded(self, fake_store, mount_root):
        """Test that a set cancel event produces a cancelled response."""
        cancel = threading.Event()
        cancel.set()

        response = handle(
            {"owner": "acme", "repo": "web"},
            engine=SyncEngine(fake_store, mount_root),
            cancel_event=cancel,
        )

        assert response["success"] is False
        assert response["cancelled"] is True
        assert response["filesSynced"] == 0

    def test_lambda_handler(self):
        """Test the Lambda wrapper delegates to handle()."""
        with patch("srcmirror.handler.handle", return_value={"success": True}) as h:
            assert lambda_handler({"owner": "a", "repo": "b"}, object()) == {
                "success": True
            }

        h.assert_called_once_with({"owner": "a", "repo": "b"})

    def test_invalid_endpoint_becomes_failure(self, monkeypatch):
        """Test that a malformed endpoint URL yields a failure response."""
        monkeypatch.setenv("SRCMIRROR_BUCKET", "sources")
        monkeypatch.setenv("SRCMIRROR_ENDPOINT_URL", "not a url")
        for key in ("SRCMIRROR_PAGE_SIZE", "SRCMIRROR_MAX_WORKERS"):
            monkeypatch.delenv(key, raising=False)

        response = handle({"owner": "acme", "repo": "web"})

        assert response["success"] is False
        assert "Could not create S3 client" in response["error"]
        assert "not a url" in response["error"]

    def test_unexpected_engine_error_becomes_failure(self):
        """Test that any error while building the engine is returned."""
        with patch.object(
            SyncEngine, "from_config", side_effect=RuntimeError("socket exhausted")
        ):
            response = handle({"owner": "acme", "repo": "web"})

        assert response == {"success": False, "error": "socket exhausted"}
