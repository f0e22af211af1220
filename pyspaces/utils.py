"""Utility functions for pyspaces."""

import hashlib
import mimetypes
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Optional

# =============================================================================
# Constants
# =============================================================================

# Name of the directory under the base directory that is mirrored
DEFAULT_CONTENT_DIR: str = "content"

# Separator used in object keys
KEY_SEPARATOR: str = "/"

# Objects at least this large are compared by SHA-256 digest (32 MB)
DEFAULT_HASH_THRESHOLD: int = 32 * 1024 * 1024

# Read size when hashing files and response bodies (1 MB)
HASH_CHUNK_SIZE: int = 1024 * 1024

# Retry configuration for transient errors
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY: float = 1.0  # seconds

# Maximum keys returned per list_objects_v2 page
DEFAULT_PAGE_SIZE: int = 1000


# =============================================================================
# Key utilities
# =============================================================================


def is_directory_marker(key: str) -> bool:
    """Check whether an object key is a directory marker.

    Examples:
        >>> is_directory_marker("assets/")
        True
        >>> is_directory_marker("assets/logo.png")
        False
    """
    return key.endswith(KEY_SEPARATOR)


def path_to_key(file_path: Path, content_root: Path) -> str:
    """Derive the object key of a local file.

    The key is the path relative to the content root, using forward
    slashes on all platforms.

    Raises:
        ValueError: If file_path is not inside content_root

    Examples:
        >>> path_to_key(Path("/site/content/css/main.css"), Path("/site/content"))
        'css/main.css'
    """
    return file_path.relative_to(content_root).as_posix()


def key_to_path(key: str, content_root: Path) -> Path:
    """Map an object key to the local path it mirrors.

    Only canonical keys map to a path, i.e. keys that path_to_key would
    produce for a file under content_root. Keys with empty, '.' or '..'
    segments, a leading separator or a NUL byte have no local counterpart.

    Raises:
        ValueError: If no local path has this key

    Examples:
        >>> key_to_path("css/main.css", Path("/site/content")).as_posix()
        '/site/content/css/main.css'
    """
    segments = key.split(KEY_SEPARATOR)
    if "\x00" in key or any(s in ("", ".", "..") for s in segments):
        raise ValueError(f"Not a canonical object key: {key!r}")
    path = content_root.joinpath(*segments)
    # Catches platform separators inside a segment, e.g. '\' on Windows
    if path_to_key(path, content_root) != key:
        raise ValueError(f"Not a canonical object key: {key!r}")
    return path


def guess_content_type(name: str) -> str:
    """Guess the Content-Type of an object from its name.

    Returns:
        MIME type string (defaults to 'application/octet-stream')
    """
    mime_type, _ = mimetypes.guess_type(name)
    return mime_type or "application/octet-stream"


# =============================================================================
# Hash utilities
# =============================================================================


def sha256_stream(stream: BinaryIO, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Compute the SHA-256 hex digest of a readable binary stream."""
    digest = hashlib.sha256()
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        digest.update(chunk)
    return digest.hexdigest()


def sha256_file(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Compute the SHA-256 hex digest of a local file."""
    with open(file_path, "rb") as f:
        return sha256_stream(f, chunk_size)


# =============================================================================
# Formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def format_timestamp(value: Any) -> Optional[str]:
    """Format a datetime returned by the store for display."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return None
