"""Tests for resolve_canonical_key."""

import pytest

from shared.identity import resolve_canonical_key


class TestPassThrough:
    def test_none_returns_none(self):
        assert resolve_canonical_key(None) is None

    def test_empty_returns_none(self):
        assert resolve_canonical_key("") is None

    def test_bare_key_unchanged(self):
        assert resolve_canonical_key("1712345678901-poster") == "1712345678901-poster"

    def test_bare_key_with_dot_unchanged(self):
        # No scheme and no slash: already a key, extension and all.
        assert resolve_canonical_key("poster.jpg") == "poster.jpg"


class TestUrls:
    def test_versioned_upload_url(self):
        url = "https://res.cloudinary.com/demo/image/upload/v1712345678/events/photos/poster.jpg"
        assert resolve_canonical_key(url) == "events/photos/poster"

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://cdn.example.com/a/upload/v1/folder/name.png", "folder/name"),
            ("https://cdn.example.com/uploads/v99/x/a.webp", "x/a"),
            ("https://cdn.example.com/upload/folder/name.png", "folder/name"),
        ],
    )
    def test_upload_segment_variants(self, url, expected):
        assert resolve_canonical_key(url) == expected

    def test_url_without_upload_segment_keeps_whole_path(self):
        url = "https://festival-media.s3.us-west-2.amazonaws.com/events/photos/1712345678901-poster"
        assert resolve_canonical_key(url) == "events/photos/1712345678901-poster"

    def test_only_trailing_extension_stripped(self):
        assert resolve_canonical_key("https://cdn/x/archive.tar.gz") == "x/archive.tar"

    def test_version_only_after_upload_falls_back_to_last_segment(self):
        assert resolve_canonical_key("https://cdn.example.com/upload/v123/") == "v123"

    def test_url_with_no_path_returns_none(self):
        assert resolve_canonical_key("https://cdn.example.com/") is None

    def test_query_string_ignored(self):
        assert resolve_canonical_key("https://cdn/upload/v1/x/a.jpg?w=300") == "x/a"

    def test_scheme_without_host_keeps_whole_path(self):
        assert resolve_canonical_key("file:///x/y/a.jpg") == "x/y/a"


class TestPathFallback:
    def test_relative_path_returns_last_segment(self):
        assert resolve_canonical_key("events/photos/poster.jpg") == "poster"

    def test_trailing_slash_ignored(self):
        assert resolve_canonical_key("events/photos/") == "photos"

    def test_only_slashes_returns_input(self):
        assert resolve_canonical_key("///") == "///"

    def test_extension_only_segment_returns_input(self):
        assert resolve_canonical_key("folder/.jpg") == "folder/.jpg"

    def test_malformed_url_does_not_raise(self):
        # urlsplit rejects the unbalanced bracket; the path fallback takes over.
        assert resolve_canonical_key("http://[::1/upload/x.jpg") == "x"


@pytest.mark.parametrize(
    "value",
    ["", "a", "/", "http://", "https://", "::::", "v1/", "upload", "http://x/upload/v1", "%%/..", "\x00/\x01"],
)
def test_never_raises(value):
    result = resolve_canonical_key(value)
    assert result is None or isinstance(result, str)
