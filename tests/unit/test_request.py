"""
Unit tests for HTTP request parsing.
"""

import pytest

from simplehttp.core.connection import LineTooLongError
from simplehttp.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    BytesLineReader,
    parse_request,
)


class FailingReader:
    """LineReader that raises the given exception on every read."""

    def __init__(self, exc: Exception):
        self.exc = exc

    def read_line(self, limit: int) -> bytes:
        raise self.exc


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(BytesLineReader(sample_get_request), ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/index.html"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed correctly."""
        request = parse_request(sample_get_request)

        assert request.get_header("host") == "localhost:8080"
        assert request.user_agent == "pytest"
        assert request.headers["accept"] == "text/html"

    def test_header_names_are_lowercased(self):
        """Test that header keys are stored lowercase."""
        request = parse_request(b"GET / HTTP/1.1\r\nX-Custom-Header: Value\r\n\r\n")

        assert request.headers == {"x-custom-header": "Value"}
        assert request.get_header("X-CUSTOM-HEADER") == "Value"

    def test_header_values_are_trimmed(self):
        """Test that whitespace around names and values is removed."""
        request = parse_request(b"GET / HTTP/1.1\r\n  Host  :   example.com   \r\n\r\n")

        assert request.headers["host"] == "example.com"

    def test_value_may_contain_colons(self):
        """Test that only the first colon splits name from value."""
        request = parse_request(b"GET / HTTP/1.1\r\nHost: localhost:8080\r\n\r\n")

        assert request.get_header("host") == "localhost:8080"

    def test_repeated_header_last_wins(self):
        """Test that a repeated header keeps its last value."""
        request = parse_request(
            b"GET / HTTP/1.1\r\n"
            b"Accept: text/html\r\n"
            b"accept: application/json\r\n"
            b"\r\n"
        )

        assert request.headers["accept"] == "application/json"

    def test_header_line_without_colon_is_skipped(self):
        """Test lenient handling of malformed header lines."""
        request = parse_request(
            b"GET / HTTP/1.1\r\n"
            b"this line has no colon\r\n"
            b"Host: example.com\r\n"
            b"\r\n"
        )

        assert request.headers == {"host": "example.com"}

    def test_bare_lf_line_endings(self):
        """Test that \\n without \\r is accepted."""
        request = parse_request(b"GET /a.txt HTTP/1.0\nHost: x\n\n")

        assert request.path == "/a.txt"
        assert request.version == "HTTP/1.0"
        assert request.get_header("host") == "x"

    def test_no_headers(self):
        """Test a request line followed directly by the blank line."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.headers == {}

    def test_path_kept_verbatim(self):
        """Test that the query string and escapes are not touched."""
        request = parse_request(b"GET /search%20me?q=1&x=%2F HTTP/1.1\r\n\r\n")

        assert request.path == "/search%20me?q=1&x=%2F"

    def test_method_not_validated(self):
        """Test that any method token is accepted by the parser."""
        request = parse_request(b"BREW /pot HTTP/1.1\r\n\r\n")

        assert request.method == "BREW"

    def test_bytes_after_headers_are_ignored(self):
        """Test that anything after the blank line is never read."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\nthis is not read")

        assert request.path == "/"


class TestParseErrors:
    """Tests for malformed and oversized requests."""

    @pytest.mark.parametrize("line", [
        b"GET\r\n\r\n",
        b"GET /\r\n\r\n",
        b"GET / HTTP/1.1 extra\r\n\r\n",
        b"\r\n\r\n",
    ])
    def test_invalid_request_line(self, line: bytes):
        """Test that anything but three tokens is rejected."""
        with pytest.raises(HTTPParseError, match="Invalid request line"):
            parse_request(line)

    def test_empty_input(self):
        """Test that a stream ending before any line is an error."""
        with pytest.raises(HTTPParseError):
            parse_request(b"")

    def test_missing_blank_line(self):
        """Test that headers cut off before the blank line are an error."""
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1\r\nHost: x\r\n")

    def test_request_line_too_long(self):
        """Test that a request line over the limit is rejected."""
        data = b"GET /" + b"a" * 300 + b" HTTP/1.1\r\n\r\n"

        with pytest.raises(HTTPParseError, match="exceeds 256 bytes"):
            parse_request(data, max_size=256)

    def test_header_block_too_large(self):
        """Test that the limit covers request line and headers together."""
        headers = b"".join(b"X-Header-%d: value\r\n" % i for i in range(50))
        data = b"GET / HTTP/1.1\r\n" + headers + b"\r\n"
        assert len(data) > 512

        with pytest.raises(HTTPParseError, match="exceeds 512 bytes"):
            parse_request(data, max_size=512)

    def test_request_within_limit(self):
        """Test that a request just under the limit parses."""
        data = b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"

        request = parse_request(data, max_size=len(data))

        assert request.get_header("host") == "x"

    def test_read_errors_become_parse_errors(self):
        """Test that transport failures surface as HTTPParseError."""
        parser = RequestParser()

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(FailingReader(TimeoutError("timed out")))

        assert isinstance(exc_info.value.__cause__, TimeoutError)

    def test_line_too_long_becomes_parse_error(self):
        """Test that LineTooLongError is reported as an oversized request."""
        parser = RequestParser(max_request_size=1024)

        with pytest.raises(HTTPParseError, match="exceeds 1024 bytes"):
            parser.parse(FailingReader(LineTooLongError("no newline")))


class TestHTTPRequest:
    """Tests for HTTPRequest class."""

    def test_get_header_default(self):
        """Test missing headers fall back to the default."""
        request = HTTPRequest(method="GET", path="/")

        assert request.get_header("host") == ""
        assert request.get_header("host", "none") == "none"

    def test_remote_and_user_agent(self):
        """Test the fields the access log reads."""
        request = parse_request(
            b"GET / HTTP/1.1\r\nUser-Agent: curl/8.0\r\n\r\n",
            client_address=("10.0.0.7", 41000),
        )

        assert request.remote == "10.0.0.7:41000"
        assert request.user_agent == "curl/8.0"

    def test_request_is_immutable(self):
        """Test that a parsed request cannot be modified."""
        request = HTTPRequest(method="GET", path="/")

        with pytest.raises(AttributeError):
            request.path = "/other"
