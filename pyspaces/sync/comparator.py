"""Content comparison and decision logic for sync operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .scanner import LocalFile, RemoteFile


REASON_NEW = "New local file"
REASON_UP_TO_DATE = "Up to date"
REASON_OUT_OF_DATE = "Out of date"
REASON_ORPHAN = "No local counterpart"


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    UPLOAD = "upload"
    """Upload local file to the bucket"""

    DELETE = "delete"
    """Delete object from the bucket"""

    SKIP = "skip"
    """Skip file (no action needed)"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync one key."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    key: str
    """Object key"""

    local_file: Optional[LocalFile] = None
    """Local file (if exists)"""

    remote_file: Optional[RemoteFile] = None
    """Remote file (if listed)"""


def contents_equal(local_content: bytes, remote_content: bytes) -> bool:
    """Check two buffers for byte-for-byte equality (length and content)."""
    return len(local_content) == len(remote_content) and (
        local_content == remote_content
    )


class FileComparator:
    """Decides what to do with each remote object and local file."""

    def __init__(
        self, hash_threshold: Optional[int] = None, overwrite: bool = False
    ):
        """Initialize file comparator.

        Args:
            hash_threshold: Files at least this many bytes are compared by
                SHA-256 digest instead of full buffers (None disables)
            overwrite: Replace changed objects with a single upload instead
                of a delete followed by an upload
        """
        self.hash_threshold = hash_threshold
        self.overwrite = overwrite

    def use_digest(self, local_file: LocalFile) -> bool:
        """Whether a file should be compared by digest."""
        if self.hash_threshold is None:
            return False
        return local_file.size >= self.hash_threshold

    def decide_remote(
        self, remote_file: RemoteFile, local_exists: bool
    ) -> SyncDecision:
        """Decide the fate of a listed remote object during the prune pass."""
        if local_exists:
            return SyncDecision(
                action=SyncAction.SKIP,
                reason="Local counterpart exists",
                key=remote_file.key,
                remote_file=remote_file,
            )
        return SyncDecision(
            action=SyncAction.DELETE,
            reason=REASON_ORPHAN,
            key=remote_file.key,
            remote_file=remote_file,
        )

    def decide_new(self, local_file: LocalFile) -> list[SyncDecision]:
        """Decisions for a local file with no remote object."""
        return [
            SyncDecision(
                action=SyncAction.UPLOAD,
                reason=REASON_NEW,
                key=local_file.key,
                local_file=local_file,
            )
        ]

    def compare_contents(
        self, local_file: LocalFile, local_content: bytes, remote_content: bytes
    ) -> list[SyncDecision]:
        """Compare full buffers of a local file and its remote object."""
        return self._decide_existing(
            local_file, contents_equal(local_content, remote_content)
        )

    def compare_digests(
        self, local_file: LocalFile, local_digest: str, remote_digest: str
    ) -> list[SyncDecision]:
        """Compare SHA-256 digests of a local file and its remote object."""
        return self._decide_existing(local_file, local_digest == remote_digest)

    def _decide_existing(
        self, local_file: LocalFile, equal: bool
    ) -> list[SyncDecision]:
        """Decisions for a local file whose remote object exists."""
        if equal:
            return [
                SyncDecision(
                    action=SyncAction.SKIP,
                    reason=REASON_UP_TO_DATE,
                    key=local_file.key,
                    local_file=local_file,
                )
            ]

        upload = SyncDecision(
            action=SyncAction.UPLOAD,
            reason=REASON_OUT_OF_DATE,
            key=local_file.key,
            local_file=local_file,
        )
        if self.overwrite:
            return [upload]

        # Replace is realized as delete, then upload, in that order
        delete = SyncDecision(
            action=SyncAction.DELETE,
            reason=REASON_OUT_OF_DATE,
            key=local_file.key,
            local_file=local_file,
        )
        return [delete, upload]
