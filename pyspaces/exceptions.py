"""Exceptions raised by pyspaces."""


class SpacesError(Exception):
    """Base exception for all pyspaces errors."""


class SpacesConfigError(SpacesError):
    """Credentials or configuration are missing or invalid."""


class SpacesAPIError(SpacesError):
    """Base exception for object store errors."""


class SpacesAuthenticationError(SpacesAPIError):
    """Access key or secret rejected by the store."""


class SpacesPermissionError(SpacesAPIError):
    """Access to the bucket or object was denied."""


class SpacesNotFoundError(SpacesAPIError):
    """Requested object or bucket does not exist."""


class SpacesRateLimitError(SpacesAPIError):
    """The store throttled the request."""


class SpacesNetworkError(SpacesAPIError):
    """Connection to the store failed."""


class SpacesListError(SpacesAPIError):
    """The store returned no listing for the bucket."""


class SpacesUploadError(SpacesAPIError):
    """Uploading an object failed."""


class SpacesDeleteError(SpacesAPIError):
    """Deleting an object failed."""


class LocalStatError(SpacesError):
    """Checking a local path failed for a reason other than absence."""

    def __init__(self, path: str, original: OSError):
        self.path = path
        self.original = original
        super().__init__(f"Cannot check local file {path}: {original}")


class SyncTimeoutError(SpacesError):
    """The sync run exceeded its deadline."""
