"""Sync operations wrapper around the object store and local filesystem."""

import logging
import stat
from pathlib import Path
from typing import Any, Optional

from ..api import SpacesClient
from ..exceptions import LocalStatError, SpacesAPIError, SpacesNotFoundError
from ..utils import sha256_file
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class SyncOperations:
    """Presence checks, fetches and mutations used by the sync engine."""

    def __init__(self, client: SpacesClient, lenient: bool = False):
        """Initialize sync operations.

        Args:
            client: Object store client
            lenient: Treat every failed local check or remote fetch as
                absence, instead of only genuine not-found errors
        """
        self.client = client
        self.lenient = lenient

    def local_exists(self, path: Path) -> bool:
        """Check whether a regular file exists at path.

        Raises:
            LocalStatError: If the check fails for a reason other than
                absence and lenient mode is off
        """
        try:
            st = path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            if self.lenient:
                logger.debug(f"Treating {path} as missing: {e}")
                return False
            raise LocalStatError(str(path), e) from e
        return stat.S_ISREG(st.st_mode)

    def fetch_remote(self, key: str) -> Optional[bytes]:
        """Fetch the content of a remote object.

        Returns:
            Object content, or None if the object does not exist
        """
        try:
            return self.client.get_object(key)
        except SpacesNotFoundError:
            return None
        except SpacesAPIError as e:
            if self.lenient:
                logger.debug(f"Treating {key} as new after fetch error: {e}")
                return None
            raise

    def fetch_remote_digest(self, key: str) -> Optional[str]:
        """Fetch the SHA-256 digest of a remote object.

        Returns:
            Hex digest, or None if the object does not exist
        """
        try:
            return self.client.get_object_digest(key)
        except SpacesNotFoundError:
            return None
        except SpacesAPIError as e:
            if self.lenient:
                logger.debug(f"Treating {key} as new after fetch error: {e}")
                return None
            raise

    def local_digest(self, local_file: LocalFile) -> str:
        """SHA-256 digest of a local file."""
        return sha256_file(local_file.path)

    def upload_file(
        self,
        local_file: LocalFile,
        content: Optional[bytes] = None,
        public_read: bool = True,
    ) -> Any:
        """Upload a local file to its key.

        Args:
            local_file: Local file to upload
            content: Already-read file content (read from disk if None)
            public_read: Make the object publicly readable

        Returns:
            Response from the store
        """
        if content is None:
            content = local_file.read_bytes()
        return self.client.put_object(
            key=local_file.key, body=content, public_read=public_read
        )

    def delete_remote(self, key: str) -> Any:
        """Delete a remote object.

        Returns:
            Response from the store
        """
        return self.client.delete_object(key)
