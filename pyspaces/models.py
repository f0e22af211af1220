"""Data models for object store responses."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .utils import is_directory_marker


@dataclass
class RemoteObject:
    """An object listed in the bucket."""

    key: str
    """Object key"""

    size: int = 0
    """Object size in bytes"""

    etag: Optional[str] = None
    """ETag without surrounding quotes"""

    last_modified: Optional[datetime] = None
    """Last modification time reported by the store"""

    @property
    def is_directory_marker(self) -> bool:
        """True for keys ending in '/', which are not files."""
        return is_directory_marker(self.key)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteObject":
        """Create a RemoteObject from one ``Contents`` entry of list_objects_v2."""
        etag = data.get("ETag")
        return cls(
            key=data["Key"],
            size=int(data.get("Size", 0)),
            etag=etag.strip('"') if etag else None,
            last_modified=data.get("LastModified"),
        )


@dataclass
class ListObjectsPage:
    """One page of a bucket listing."""

    objects: list[RemoteObject]
    is_truncated: bool = False

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ListObjectsPage":
        """Parse a list_objects_v2 response."""
        return cls(
            objects=[
                RemoteObject.from_api_response(item)
                for item in data.get("Contents", [])
            ],
            is_truncated=bool(data.get("IsTruncated", False)),
        )
