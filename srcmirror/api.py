"""Read-only object store client (AWS S3 and S3-compatible stores)."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
)

from .config import config
from .exceptions import (
    SrcMirrorConfigError,
    StoreAPIError,
    StoreAuthenticationError,
    StoreNetworkError,
    StoreNotFoundError,
    StorePermissionError,
)
from .models import ListPage
from .utils import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

_AUTH_ERROR_CODES = {
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
}
_NOT_FOUND_ERROR_CODES = {"NoSuchBucket", "NoSuchKey", "NotFound", "404"}
_PERMISSION_ERROR_CODES = {"AccessDenied", "AllAccessDisabled", "403"}


class StoreClient(Protocol):
    """Minimal read-only interface the sync engine needs from a store."""

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
    ) -> ListPage: ...

    def get_object(self, key: str) -> bytes: ...


class S3StoreClient:
    """Client for reading source trees from an S3 bucket."""

    def __init__(
        self,
        bucket: str | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
        max_attempts: int = 3,
        client: Any = None,
    ):
        """Initialize the store client.

        Args:
            bucket: Bucket name (uses config if not provided)
            region: AWS region (uses config if not provided)
            endpoint_url: Optional endpoint for S3-compatible stores
            max_attempts: Attempts made by botocore's standard retry mode
            client: Pre-built boto3 S3 client (mainly for tests)

        Raises:
            SrcMirrorConfigError: If no bucket is configured or the endpoint
                or region is invalid
        """
        self.bucket = bucket or config.require_bucket()
        self.region = region or config.region
        self.endpoint_url = endpoint_url or config.endpoint_url

        if client is None:
            kwargs: dict[str, Any] = {
                "config": BotoConfig(
                    region_name=self.region,
                    signature_version="s3v4",
                    retries={"max_attempts": max_attempts, "mode": "standard"},
                ),
            }
            if self.endpoint_url:
                kwargs["endpoint_url"] = self.endpoint_url
            try:
                client = boto3.client("s3", **kwargs)
            except (BotoCoreError, ValueError) as e:
                raise SrcMirrorConfigError(
                    f"Could not create S3 client for bucket {self.bucket}: {e}"
                ) from e

        self._client = client

    def _translate_error(self, e: Exception, action: str) -> StoreAPIError:
        """Map a botocore exception to a store exception.

        Args:
            e: The botocore exception
            action: Human-readable description of what was attempted

        Returns:
            StoreAPIError (or subclass) to raise
        """
        if isinstance(e, NoCredentialsError):
            return StoreAuthenticationError(f"{action}: no AWS credentials found")
        if isinstance(e, EndpointConnectionError):
            return StoreNetworkError(f"{action}: {e}")
        if isinstance(e, ClientError):
            error = e.response.get("Error", {})
            code = str(error.get("Code", ""))
            message = error.get("Message") or code or str(e)
            if code in _AUTH_ERROR_CODES:
                return StoreAuthenticationError(f"{action}: {message}")
            if code in _PERMISSION_ERROR_CODES:
                return StorePermissionError(f"{action}: access denied")
            if code in _NOT_FOUND_ERROR_CODES:
                return StoreNotFoundError(f"{action}: {message}")
            return StoreAPIError(f"{action}: {message}")
        return StoreAPIError(f"{action}: {e}")

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
    ) -> ListPage:
        """List one page of objects under a prefix.

        Args:
            prefix: Key prefix to list
            continuation_token: Token returned by the previous page
            max_keys: Page size (at most 1000 for S3)

        Returns:
            ListPage with the page items and the next continuation token

        Raises:
            StoreAPIError: If the listing call fails
        """
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Prefix": prefix,
            "MaxKeys": max_keys,
        }
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        try:
            response = self._client.list_objects_v2(**params)
        except (BotoCoreError, ClientError) as e:
            raise self._translate_error(
                e, f"Listing s3://{self.bucket}/{prefix} failed"
            ) from e

        page = ListPage.from_api_response(response)
        logger.debug(
            "Listed %d object(s) under %s (more=%s)",
            len(page.items),
            prefix,
            page.has_more,
        )
        return page

    def get_object(self, key: str) -> bytes:
        """Download an object and return its full content.

        Args:
            key: Object key

        Returns:
            Object bytes

        Raises:
            StoreAPIError: If the object cannot be retrieved
        """
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except (BotoCoreError, ClientError) as e:
            raise self._translate_error(
                e, f"Download of s3://{self.bucket}/{key} failed"
            ) from e
