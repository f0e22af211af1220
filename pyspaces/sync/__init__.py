"""Sync engine for pyspaces - mirrors a local directory into a bucket."""

from .comparator import FileComparator, SyncAction, SyncDecision, contents_equal
from .engine import SyncEngine
from .operations import SyncOperations
from .scanner import DirectoryScanner, LocalFile, RemoteFile

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "DirectoryScanner",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "LocalFile",
    "RemoteFile",
    "contents_equal",
]
