"""Custom exceptions for srcmirror."""


class SrcMirrorError(Exception):
    """Base exception for all srcmirror errors."""

    pass


class SrcMirrorConfigError(SrcMirrorError):
    """Raised when required configuration (bucket, mount root) is missing."""

    pass


# =============================================================================
# Object store client errors
# =============================================================================


class StoreAPIError(SrcMirrorError):
    """Raised when a call to the remote object store fails."""

    pass


class StoreAuthenticationError(StoreAPIError):
    """Raised when the store rejects our credentials."""

    pass


class StorePermissionError(StoreAPIError):
    """Raised when access to a bucket or key is forbidden."""

    pass


class StoreNotFoundError(StoreAPIError):
    """Raised when a bucket or key does not exist."""

    pass


class StoreNetworkError(StoreAPIError):
    """Raised when the store cannot be reached."""

    pass


# =============================================================================
# Sync run errors
# =============================================================================


class SyncError(SrcMirrorError):
    """Base class for errors raised while executing a sync run."""

    pass


class ValidationError(SyncError):
    """Raised when a sync request is missing required fields."""

    pass


class TargetPreparationError(SyncError):
    """Raised when the local target directory cannot be created or wiped.

    Fatal: the whole run is aborted.
    """

    pass


class ListingError(SyncError):
    """Raised when listing any page of the remote prefix fails.

    Fatal: the run is aborted. Files already written by earlier pages stay
    on disk.
    """

    pass


class ObjectFetchOrWriteError(SyncError):
    """Raised when a single object cannot be fetched or written.

    Non-fatal: the object is skipped and the run continues.
    """

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)


class PathTraversalError(ObjectFetchOrWriteError):
    """Raised when a remote key would resolve outside the target directory."""

    pass


class UnexpectedError(SyncError):
    """Wraps any other exception that escapes a sync run."""

    pass
