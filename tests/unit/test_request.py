"""
Unit tests for HTTP request parsing.
"""

import os

import pytest

from fileserver.http.request import HTTPRequest, RequestParser, parse_request


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a full browser-style GET request."""
        request = RequestParser().parse(sample_get_request)

        assert request.method == "GET"
        assert request.path == "/docs/notes.md"
        assert request.version == "HTTP/1.1"

    def test_headers_and_body_ignored(self):
        """Only the first line matters; later lines never leak into the path."""
        request = parse_request(b"GET /a HTTP/1.1\r\nX-Path: /b\r\n\r\nbody /c")

        assert request == HTTPRequest(method="GET", path="/a", version="HTTP/1.1")

    def test_path_is_opaque(self):
        """Query strings and percent-escapes are kept verbatim."""
        request = parse_request(b"GET /a%20b.txt?x=1 HTTP/1.1\r\n\r\n")
        assert request.path == "/a%20b.txt?x=1"

    def test_method_not_validated(self):
        """Any method token is accepted at this layer."""
        request = parse_request(b"BREW /pot HTTP/1.1\r\n\r\n")
        assert request.method == "BREW"
        assert request.path == "/pot"

    def test_missing_path(self):
        """A first line with only a method yields no path."""
        request = parse_request(b"GET\r\n\r\n")

        assert request.method == "GET"
        assert request.path is None
        assert not request.has_path

    def test_empty_buffer(self):
        request = parse_request(b"")
        assert request.method == ""
        assert request.path is None

    def test_extra_whitespace(self):
        """Tokens are split on any run of whitespace."""
        request = parse_request(b"GET \t /spaced   HTTP/1.1\r\n")
        assert request.path == "/spaced"

    def test_bare_newline_line_ending(self):
        request = parse_request(b"GET /unix HTTP/1.0\nHost: x\n\n")
        assert request.path == "/unix"
        assert request.version == "HTTP/1.0"

    def test_utf8_path(self):
        request = parse_request("GET /café.txt HTTP/1.1\r\n".encode("utf-8"))
        assert request.path == "/café.txt"

    def test_non_utf8_bytes_do_not_fail(self):
        """Invalid UTF-8 never raises and maps back to the same bytes."""
        request = parse_request(b"GET /caf\xe9.txt HTTP/1.1\r\n")
        assert os.fsencode(request.path) == b"/caf\xe9.txt"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_immutable(self):
        request = HTTPRequest(method="GET", path="/")
        with pytest.raises(AttributeError):
            request.path = "/other"

    def test_version_optional(self):
        assert HTTPRequest(method="GET", path="/").version is None
