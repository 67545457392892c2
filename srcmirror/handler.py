"""Request/response entry point for invoking a sync (e.g. from a Lambda)."""

import json
import logging
import threading
from collections.abc import Mapping
from typing import Any, Optional

from .exceptions import SrcMirrorError, UnexpectedError, ValidationError
from .models import SyncResult
from .sync import SyncEngine, validate_request

logger = logging.getLogger(__name__)


def handle(
    event: Mapping[str, Any],
    engine: Optional[SyncEngine] = None,
    cancel_event: Optional[threading.Event] = None,
) -> dict[str, Any]:
    """Run a sync for one request and return the wire response.

    Args:
        event: Request fields (``owner``, ``repo``, ``branch``, ``clean``,
            optional ``includePaths`` and ``excludePatterns``)
        engine: Engine to use (built from configuration if omitted)
        cancel_event: Optional cancellation signal

    Returns:
        ``{"success": True, "owner": ..., "filesSynced": ..., ...}`` or
        ``{"success": False, "error": ...}``
    """
    try:
        logger.info("Event: %s", json.dumps(dict(event), default=str))
    except (TypeError, ValueError):
        logger.info("Event: %r", event)

    # Invalid requests must not touch the store or the filesystem
    try:
        request = validate_request(event)
    except ValidationError as e:
        logger.error("Invalid request: %s", e)
        return SyncResult.failure(str(e)).to_response()

    if engine is None:
        try:
            engine = SyncEngine.from_config()
        except SrcMirrorError as e:
            logger.error("Configuration error: %s", e)
            return SyncResult.failure(str(e)).to_response()
        except Exception as e:
            logger.exception("Unexpected error while building the sync engine")
            wrapped = UnexpectedError(str(e) or e.__class__.__name__)
            return SyncResult.failure(str(wrapped)).to_response()

    result = engine.sync(request, cancel_event=cancel_event)
    return result.to_response()


def lambda_handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
    """AWS Lambda compatible wrapper around :func:`handle`."""
    return handle(event)
