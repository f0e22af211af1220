"""Unit tests for utility functions."""

import hashlib
import io
from datetime import datetime
from pathlib import Path

import pytest

from pyspaces.utils import (
    format_size,
    format_timestamp,
    guess_content_type,
    is_directory_marker,
    key_to_path,
    path_to_key,
    sha256_file,
    sha256_stream,
)


class TestKeyConversion:
    """Tests for path_to_key and key_to_path."""

    def test_path_to_key_nested(self):
        """Nested files use forward slashes relative to the root."""
        root = Path("/site/content")
        assert path_to_key(root / "css" / "main.css", root) == "css/main.css"

    def test_path_to_key_top_level(self):
        """Top-level files map to their name."""
        root = Path("/site/content")
        assert path_to_key(root / "index.html", root) == "index.html"

    def test_path_to_key_never_contains_root(self):
        """The root prefix is stripped from keys."""
        root = Path("/site/content")
        key = path_to_key(root / "content" / "a.txt", root)
        assert key == "content/a.txt"
        assert not key.startswith("/")

    def test_path_to_key_outside_root_raises(self):
        """Files outside the root cannot be mapped."""
        with pytest.raises(ValueError):
            path_to_key(Path("/elsewhere/a.txt"), Path("/site/content"))

    def test_key_to_path_splits_on_separator(self):
        """Keys are split on '/' and joined under the root."""
        root = Path("/site/content")
        assert key_to_path("img/logo.png", root) == root / "img" / "logo.png"

    @pytest.mark.parametrize(
        "key",
        [
            "",
            "/a.txt",
            "./a.txt",
            "img//logo.png",
            "sub/../a.txt",
            "../outside.txt",
            "sub/.",
            "a\x00.txt",
        ],
    )
    def test_key_to_path_rejects_non_canonical_keys(self, key):
        """Keys no local file could produce have no local path."""
        with pytest.raises(ValueError):
            key_to_path(key, Path("/site/content"))

    def test_round_trip(self):
        """A key derived from a path maps back to the same path."""
        root = Path("/site/content")
        path = root / "a" / "b" / "c.txt"
        assert key_to_path(path_to_key(path, root), root) == path


class TestDirectoryMarker:
    """Tests for is_directory_marker."""

    def test_trailing_slash_is_marker(self):
        assert is_directory_marker("assets/")

    def test_file_key_is_not_marker(self):
        assert not is_directory_marker("assets/logo.png")

    def test_root_marker(self):
        assert is_directory_marker("/")


class TestHashing:
    """Tests for SHA-256 helpers."""

    def test_sha256_stream_matches_hashlib(self):
        data = b"hello world" * 1000
        assert sha256_stream(io.BytesIO(data), chunk_size=7) == (
            hashlib.sha256(data).hexdigest()
        )

    def test_sha256_stream_empty(self):
        assert sha256_stream(io.BytesIO(b"")) == hashlib.sha256(b"").hexdigest()

    def test_sha256_file(self, tmp_path):
        file_path = tmp_path / "data.bin"
        file_path.write_bytes(b"\x00\x01\x02")
        assert sha256_file(file_path) == hashlib.sha256(b"\x00\x01\x02").hexdigest()


class TestGuessContentType:
    """Tests for guess_content_type."""

    def test_html(self):
        assert guess_content_type("index.html") == "text/html"

    def test_css_in_subdirectory(self):
        assert guess_content_type("css/main.css") == "text/css"

    def test_unknown_extension_defaults_to_octet_stream(self):
        assert guess_content_type("data.unknownext") == "application/octet-stream"


class TestFormatting:
    """Tests for format_size and format_timestamp."""

    def test_format_size_bytes(self):
        assert format_size(256) == "256 B"

    def test_format_size_kilobytes(self):
        assert format_size(1536) == "1.5 KB"

    def test_format_size_megabytes(self):
        assert format_size(5 * 1024 * 1024) == "5.0 MB"

    def test_format_size_gigabytes(self):
        assert format_size(2 * 1024 * 1024 * 1024) == "2.0 GB"

    def test_format_timestamp(self):
        assert format_timestamp(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02 03:04:05"

    def test_format_timestamp_none(self):
        assert format_timestamp(None) is None
