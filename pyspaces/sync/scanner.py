"""Directory scanning utilities for sync operations."""

import logging
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import LocalStatError
from ..models import RemoteObject
from ..utils import path_to_key

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Represents a local file with metadata."""

    path: Path
    """Absolute path to the file"""

    key: str
    """Object key (path relative to the content root, forward slashes)"""

    size: int
    """File size in bytes"""

    mtime: float
    """Last modification time (Unix timestamp)"""

    @classmethod
    def from_path(cls, file_path: Path, content_root: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            content_root: Directory mirrored to the bucket

        Returns:
            LocalFile instance
        """
        file_stat = file_path.stat()
        return cls(
            path=file_path,
            key=path_to_key(file_path, content_root),
            size=file_stat.st_size,
            mtime=file_stat.st_mtime,
        )

    def read_bytes(self) -> bytes:
        """Read the full file content."""
        return self.path.read_bytes()


@dataclass
class RemoteFile:
    """Represents a remote object that is a file (not a directory marker)."""

    obj: RemoteObject
    """Listing entry from the store"""

    @property
    def key(self) -> str:
        """Object key."""
        return self.obj.key

    @property
    def size(self) -> int:
        """Object size in bytes."""
        return self.obj.size

    @property
    def etag(self) -> Optional[str]:
        """Object ETag."""
        return self.obj.etag


class DirectoryScanner:
    """Builds the local and remote file sets compared during a sync.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> files = scanner.scan_local(Path("/site/content"))
        >>> remote = scanner.scan_remote(client.list_objects())
    """

    def __init__(self, lenient: bool = False):
        """Initialize the scanner.

        Args:
            lenient: Skip unreadable directories and files with a warning
                instead of raising LocalStatError
        """
        self.lenient = lenient

    def scan_local(
        self, directory: Path, content_root: Optional[Path] = None
    ) -> list[LocalFile]:
        """Recursively scan a local directory.

        Only regular files are returned; directories are descended into
        but never emitted. Paths that vanish during the scan and dangling
        symlinks are skipped. Order is unspecified.

        Args:
            directory: Directory to scan
            content_root: Root for key calculation (defaults to directory)

        Returns:
            List of LocalFile objects

        Raises:
            LocalStatError: If a directory or file cannot be read (unless
                lenient)
        """
        if content_root is None:
            content_root = directory

        try:
            entries = list(directory.iterdir())
        except OSError as e:
            self._unreadable(directory, e)
            return []

        files: list[LocalFile] = []

        for item in entries:
            try:
                mode = item.stat().st_mode
            except FileNotFoundError:
                logger.debug(f"Skipping missing or dangling path {item}")
                continue
            except OSError as e:
                self._unreadable(item, e)
                continue

            if stat.S_ISREG(mode):
                try:
                    files.append(LocalFile.from_path(item, content_root))
                except OSError as e:
                    self._unreadable(item, e)
            elif stat.S_ISDIR(mode):
                files.extend(self.scan_local(item, content_root))

        return files

    def _unreadable(self, path: Path, error: OSError) -> None:
        """Raise for an unreadable path, or log and skip it when lenient."""
        if not self.lenient:
            raise LocalStatError(str(path), error) from error
        logger.warning(f"Skipping unreadable path {path}: {error}")

    def scan_remote(self, objects: list[RemoteObject]) -> list[RemoteFile]:
        """Filter a bucket listing down to files.

        Args:
            objects: Objects returned by the store listing

        Returns:
            List of RemoteFile objects, directory markers removed
        """
        remote_files: list[RemoteFile] = []

        for obj in objects:
            if obj.is_directory_marker:
                logger.debug(f"Ignoring directory marker: {obj.key}")
                continue
            remote_files.append(RemoteFile(obj=obj))

        return remote_files
