"""
Integration tests: a real HTTPServer on a loopback port, driven over raw
sockets.
"""

import json
import logging
import socket
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from simplehttp import HTTPServer, ServerConfig
from simplehttp.core.connection import Connection


class TestStaticFiles:
    """Serving files from the document root."""

    def test_json_round_trip(self, test_server, parse_response, doc_root):
        """Test that a .json file arrives intact with its MIME type."""
        expected = (doc_root / "api.json").read_bytes()
        status, headers, body = parse_response(test_server.get("/api.json"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "application/json"
        assert headers["content-length"] == str(len(expected))
        assert body == expected
        assert json.loads(body)["status"] == "running"

    def test_root_serves_index(self, test_server, parse_response, doc_root):
        """Test that GET / returns index.html as text/html."""
        status, headers, body = parse_response(test_server.get("/"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["content-type"] == "text/html"
        assert body == (doc_root / "index.html").read_bytes()

    def test_standard_headers(self, test_server, parse_response):
        """Test Server, Date and Connection headers."""
        _, headers, _ = parse_response(test_server.get("/style.css"))

        assert headers["server"] == "SimpleHTTP/1.0"
        assert headers["date"].endswith(" GMT")
        assert headers["connection"] == "close"
        assert headers["content-type"] == "text/css"

    def test_response_bytes_exact(self, test_server, doc_root):
        """Test the full wire format of a 200 response."""
        raw = test_server.get("/style.css")

        head, _, body = raw.partition(b"\r\n\r\n")
        lines = head.split(b"\r\n")
        assert lines[0] == b"HTTP/1.1 200 OK"
        assert [line.split(b":")[0] for line in lines[1:]] == [
            b"Server", b"Date", b"Content-Type", b"Content-Length", b"Connection",
        ]
        assert body == (doc_root / "style.css").read_bytes()

    def test_missing_file_404(self, test_server, parse_response):
        """Test the 404 page for a file that does not exist."""
        status, headers, body = parse_response(test_server.get("/missing.html"))

        assert status == "HTTP/1.1 404 Not Found"
        assert headers["content-type"] == "text/html"
        assert b"Not Found" in body
        assert b"SimpleHTTP/1.0" in body

    def test_traversal_404(self, test_server, parse_response):
        """Test that ../ cannot reach files outside the root."""
        status, _, body = parse_response(test_server.get("/../secret.txt"))

        assert status == "HTTP/1.1 404 Not Found"
        assert b"top secret" not in body

    def test_directory_404(self, test_server, parse_response):
        """Test that a directory without a trailing slash is not served."""
        status, _, _ = parse_response(test_server.get("/docs"))

        assert status == "HTTP/1.1 404 Not Found"


class TestErrors:
    """Error responses and how they are counted."""

    def test_post_405(self, test_server, parse_response):
        """Test that non-GET methods are refused."""
        raw = test_server.request(b"POST /index.html HTTP/1.1\r\nHost: x\r\n\r\n")
        status, headers, _ = parse_response(raw)

        assert status == "HTTP/1.1 405 Method Not Allowed"
        assert headers["allow"] == "GET"

        stats = test_server.stats
        assert stats.total_requests == 1
        assert stats.error_requests == 1
        assert stats.successful_requests == 0

    def test_malformed_request_line_400(self, test_server, parse_response):
        """Test that a request line without three tokens gets 400."""
        status, headers, body = parse_response(test_server.request(b"GARBAGE\r\n\r\n"))

        assert status == "HTTP/1.1 400 Bad Request"
        assert headers["content-type"] == "text/html"
        assert b"Bad Request" in body

    def test_oversized_headers_400(self, test_server, parse_response):
        """Test that headers over the size limit get 400 and are not counted as requests."""
        before = test_server.stats
        padding = b"".join(b"X-Padding-%04d: %s\r\n" % (i, b"x" * 100) for i in range(100))
        raw = b"GET / HTTP/1.1\r\n" + padding + b"\r\n"
        assert len(raw) > 8192

        status, _, _ = parse_response(test_server.request(raw))

        after = test_server.stats
        assert status == "HTTP/1.1 400 Bad Request"
        assert after.total_requests == before.total_requests
        assert after.error_requests == before.error_requests + 1

    def test_client_disconnects_without_request(self, test_server):
        """Test that an empty connection is counted as an error and the server carries on."""
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5) as s:
            s.shutdown(socket.SHUT_WR)
            assert s.recv(4096).startswith(b"HTTP/1.1 400 Bad Request")

        assert b"200 OK" in test_server.get("/")


class TestStatistics:
    """Counters under real traffic."""

    def test_counters_after_mixed_traffic(self, test_server):
        """Test success and error counters for a known sequence."""
        test_server.get("/")
        test_server.get("/api.json")
        test_server.get("/missing")
        test_server.request(b"DELETE / HTTP/1.1\r\n\r\n")

        stats = test_server.stats
        assert stats.total_requests == 4
        assert stats.successful_requests == 2
        assert stats.error_requests == 2

    def test_concurrent_requests(self, test_server, doc_root):
        """Test that M parallel requests for distinct files each get their own body."""
        count = 50
        files = {}
        for i in range(count):
            content = f"file {i:03d} ".encode() * (i + 1)
            (doc_root / f"file{i:03d}.txt").write_bytes(content)
            files[f"/file{i:03d}.txt"] = content

        with ThreadPoolExecutor(max_workers=10) as pool:
            responses = dict(zip(files, pool.map(test_server.get, files)))

        for path, raw in responses.items():
            head, _, body = raw.partition(b"\r\n\r\n")
            assert head.startswith(b"HTTP/1.1 200 OK"), path
            assert f"Content-Length: {len(files[path])}\r\n".encode() in head
            assert body == files[path], path

        stats = test_server.stats
        assert stats.total_requests == count
        assert stats.successful_requests == count
        assert stats.error_requests == 0

    def test_send_failure_counted_as_error(self, test_server, monkeypatch, caplog):
        """Test that a failed send counts total and error, never success, and logs no access line."""
        def broken_send(self, data):
            raise BrokenPipeError("peer went away")

        monkeypatch.setattr(Connection, "send_response", broken_send)

        with caplog.at_level(logging.INFO, logger="simplehttp.access"):
            raw = test_server.get("/index.html")

        assert raw == b""

        stats = test_server.stats
        assert stats.total_requests == 1
        assert stats.successful_requests == 0
        assert stats.error_requests == 1
        assert [r for r in caplog.records if r.name == "simplehttp.access"] == []


class TestLifecycle:
    """Starting and stopping."""

    def test_bind_failure(self, config: ServerConfig):
        """Test that a port in use surfaces as OSError from start()."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            server = HTTPServer(ServerConfig(
                host="127.0.0.1",
                port=port,
                document_root=config.document_root,
            ))
            with pytest.raises(OSError):
                server.start()

    def test_creates_missing_document_root(self, tmp_path):
        """Test that bind() creates the document root."""
        root = tmp_path / "new" / "www"
        server = HTTPServer(ServerConfig(host="127.0.0.1", port=0, document_root=str(root)))

        server.bind()
        server.stop()

        assert root.is_dir()

    def test_invalid_config_rejected(self):
        """Test that HTTPServer validates its configuration."""
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(port=-1))

    def test_stop_ends_serve_forever(self, config: ServerConfig):
        """Test that stop() from another thread ends the accept loop."""
        server = HTTPServer(config)
        server.bind()
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        server.stop()
        thread.join(timeout=5)

        assert not thread.is_alive()
