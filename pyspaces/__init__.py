"""pyspaces - deploy a static content directory to DigitalOcean Spaces."""

from .api import SpacesClient
from .config import SpacesCredentials
from .exceptions import (
    LocalStatError,
    SpacesAPIError,
    SpacesAuthenticationError,
    SpacesConfigError,
    SpacesDeleteError,
    SpacesError,
    SpacesListError,
    SpacesNetworkError,
    SpacesNotFoundError,
    SpacesPermissionError,
    SpacesRateLimitError,
    SpacesUploadError,
    SyncTimeoutError,
)
from .sync import SyncEngine

__version__ = "0.1.0"

__all__ = [
    "SpacesClient",
    "SpacesCredentials",
    "SyncEngine",
    "LocalStatError",
    "SpacesAPIError",
    "SpacesAuthenticationError",
    "SpacesConfigError",
    "SpacesDeleteError",
    "SpacesError",
    "SpacesListError",
    "SpacesNetworkError",
    "SpacesNotFoundError",
    "SpacesPermissionError",
    "SpacesRateLimitError",
    "SpacesUploadError",
    "SyncTimeoutError",
]
