"""Tests for the FileComparator class."""

from pathlib import Path

from pyspaces.models import RemoteObject
from pyspaces.sync.comparator import (
    REASON_NEW,
    REASON_OUT_OF_DATE,
    REASON_UP_TO_DATE,
    FileComparator,
    SyncAction,
    contents_equal,
)
from pyspaces.sync.scanner import LocalFile, RemoteFile


def _create_local_file(key: str = "test.txt", size: int = 100) -> LocalFile:
    """Create a LocalFile for testing."""
    return LocalFile(
        path=Path(f"/site/content/{key}"),
        key=key,
        size=size,
        mtime=1234567890.0,
    )


class TestContentsEqual:
    """Tests for byte-exact comparison."""

    def test_identical(self):
        assert contents_equal(b"hello", b"hello")

    def test_different_content_same_length(self):
        assert not contents_equal(b"hello", b"hellO")

    def test_prefix_is_not_equal(self):
        assert not contents_equal(b"hello", b"hello world")

    def test_empty(self):
        assert contents_equal(b"", b"")


class TestDecideRemote:
    """Tests for prune pass decisions."""

    def test_orphan_is_deleted(self):
        comparator = FileComparator()
        remote = RemoteFile(obj=RemoteObject(key="c.txt", size=3))

        decision = comparator.decide_remote(remote, local_exists=False)

        assert decision.action == SyncAction.DELETE
        assert decision.key == "c.txt"
        assert decision.remote_file is remote

    def test_present_locally_is_kept(self):
        comparator = FileComparator()
        remote = RemoteFile(obj=RemoteObject(key="a.txt", size=5))

        decision = comparator.decide_remote(remote, local_exists=True)

        assert decision.action == SyncAction.SKIP


class TestDecideLocal:
    """Tests for sync pass decisions."""

    def test_new_file_uploads_once(self):
        comparator = FileComparator()
        local_file = _create_local_file("b.txt")

        decisions = comparator.decide_new(local_file)

        assert [d.action for d in decisions] == [SyncAction.UPLOAD]
        assert decisions[0].reason == REASON_NEW
        assert decisions[0].key == "b.txt"

    def test_unchanged_file_is_skipped(self):
        comparator = FileComparator()
        local_file = _create_local_file("a.txt")

        decisions = comparator.compare_contents(local_file, b"hello", b"hello")

        assert [d.action for d in decisions] == [SyncAction.SKIP]
        assert decisions[0].reason == REASON_UP_TO_DATE

    def test_changed_file_is_deleted_then_uploaded(self):
        comparator = FileComparator()
        local_file = _create_local_file("a.txt")

        decisions = comparator.compare_contents(local_file, b"new", b"old")

        assert [d.action for d in decisions] == [SyncAction.DELETE, SyncAction.UPLOAD]
        assert all(d.key == "a.txt" for d in decisions)
        assert all(d.reason == REASON_OUT_OF_DATE for d in decisions)

    def test_changed_file_with_overwrite_uploads_only(self):
        comparator = FileComparator(overwrite=True)
        local_file = _create_local_file("a.txt")

        decisions = comparator.compare_contents(local_file, b"new", b"old")

        assert [d.action for d in decisions] == [SyncAction.UPLOAD]

    def test_compare_digests_equal(self):
        comparator = FileComparator()
        decisions = comparator.compare_digests(_create_local_file(), "abc", "abc")
        assert [d.action for d in decisions] == [SyncAction.SKIP]

    def test_compare_digests_different(self):
        comparator = FileComparator()
        decisions = comparator.compare_digests(_create_local_file(), "abc", "def")
        assert [d.action for d in decisions] == [SyncAction.DELETE, SyncAction.UPLOAD]


class TestUseDigest:
    """Tests for the digest threshold."""

    def test_disabled_by_default(self):
        comparator = FileComparator()
        assert not comparator.use_digest(_create_local_file(size=10**9))

    def test_below_threshold(self):
        comparator = FileComparator(hash_threshold=1000)
        assert not comparator.use_digest(_create_local_file(size=999))

    def test_at_threshold(self):
        comparator = FileComparator(hash_threshold=1000)
        assert comparator.use_digest(_create_local_file(size=1000))
