"""
Unit tests for MIME type detection.
"""

import pytest

from webserver.http.mime_types import get_mime_type, DEFAULT_MIME_TYPE


class TestGetMimeType:
    """Tests for get_mime_type()."""

    @pytest.mark.parametrize("resource, expected", [
        ("/index.html", "text/html"),
        ("/old/page.htm", "text/html"),
        ("/photo.jpg", "image/jpeg"),
        ("/photo.jpeg", "image/jpeg"),
        ("/anim.gif", "image/gif"),
        ("/logo.png", "image/png"),
        ("/style.css", "text/css"),
        ("/app.js", "application/javascript"),
        ("/notes.txt", "text/plain"),
    ])
    def test_known_extensions(self, resource, expected):
        """Every documented extension maps to its content type."""
        assert get_mime_type(resource) == expected

    @pytest.mark.parametrize("resource", [
        "/INDEX.HTML",
        "/Photo.JpEg",
        "/LOGO.PNG",
    ])
    def test_case_insensitive(self, resource):
        """Extensions match regardless of case."""
        assert get_mime_type(resource) != DEFAULT_MIME_TYPE

    @pytest.mark.parametrize("resource", [
        "/archive.zip",
        "/data.json",
        "/README",
        "/",
        "",
        "/dir.html/file",
        "/trailing.",
    ])
    def test_unknown_is_octet_stream(self, resource):
        """Unmatched or missing suffixes fall back to application/octet-stream."""
        assert get_mime_type(resource) == "application/octet-stream"

    def test_never_raises_on_odd_input(self):
        """Resolution is total: odd strings still get a type."""
        for resource in ["\x00", "/a\x00.png", "////", "/..", "/ü.txt"]:
            assert isinstance(get_mime_type(resource), str)

    def test_accepts_paths(self, tmp_path):
        """Filesystem paths work as well as resource strings."""
        assert get_mime_type(tmp_path / "page.html") == "text/html"
