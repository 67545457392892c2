"""srcmirror - mirror source trees from object storage onto a shared mount."""

from .api import S3StoreClient
from .exceptions import (
    ListingError,
    ObjectFetchOrWriteError,
    PathTraversalError,
    SrcMirrorConfigError,
    SrcMirrorError,
    StoreAPIError,
    StoreAuthenticationError,
    StoreNetworkError,
    StoreNotFoundError,
    StorePermissionError,
    SyncError,
    TargetPreparationError,
    UnexpectedError,
    ValidationError,
)
from .filesystem import LocalFilesystem
from .handler import handle
from .models import ObjectDescriptor, SkippedObject, SyncRequest, SyncResult
from .sync import SyncEngine, validate_request

__all__ = [
    "S3StoreClient",
    "LocalFilesystem",
    "SyncEngine",
    "SyncRequest",
    "SyncResult",
    "ObjectDescriptor",
    "SkippedObject",
    "handle",
    "validate_request",
    "SrcMirrorError",
    "SrcMirrorConfigError",
    "StoreAPIError",
    "StoreAuthenticationError",
    "StoreNetworkError",
    "StoreNotFoundError",
    "StorePermissionError",
    "SyncError",
    "ValidationError",
    "TargetPreparationError",
    "ListingError",
    "ObjectFetchOrWriteError",
    "PathTraversalError",
    "UnexpectedError",
]
