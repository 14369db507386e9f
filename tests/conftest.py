"""Pytest fixtures for loguploader tests."""
import re
import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from loguploader import LogMetadata


class FakeResponse:
    """Stands in for requests.Response."""
    
    def __init__(self, status_code=200, content=b"", content_type="text/plain; charset=utf-8", read_error=None):
        self.status_code = status_code
        self._content = content
        self.headers = CaseInsensitiveDict({"Content-Type": content_type} if content_type else {})
        # Same guess real requests makes, ISO-8859-1 for text/* without a charset
        self.encoding = get_encoding_from_headers(self.headers)
        self._read_error = read_error
        self.drained = False
        self.closed = False
    
    @property
    def content(self):
        if self._read_error:
            raise self._read_error
        return self._content
    
    def iter_content(self, chunk_size=1):
        if self._read_error:
            raise self._read_error
        self.drained = True
        if self._content:
            yield self._content
    
    def __enter__(self):
        return self
    
    def __exit__(self, *exc):
        self.closed = True


class FakeSession:
    """
    Stands in for requests.Session.
    
    Each post() consumes the next outcome: an exception instance is
    raised, a FakeResponse is returned.
    """
    
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False
    
    def post(self, url, data=None, headers=None, timeout=None, stream=False):
        body = b"".join(data) if data is not None else b""
        self.calls.append({"url": url, "body": body, "headers": dict(headers or {}), "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome
    
    def __enter__(self):
        return self
    
    def __exit__(self, *exc):
        self.closed = True


class FakeAsyncResponse:
    """Stands in for aiohttp.ClientResponse."""
    
    def __init__(self, status=200, body=b"", charset="utf-8", read_error=None):
        self.status = status
        self._body = body
        self.charset = charset
        self._read_error = read_error
    
    async def read(self):
        if self._read_error:
            raise self._read_error
        return self._body


class _FakePostContext:
    def __init__(self, session, url, data, headers):
        self._session = session
        self._url = url
        self._data = data
        self._headers = headers
    
    async def __aenter__(self):
        body = b""
        async for chunk in self._data:
            body += chunk
        self._session.calls.append({"url": self._url, "body": body, "headers": dict(self._headers)})
        outcome = self._session.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome
    
    async def __aexit__(self, *exc):
        return False


class FakeAsyncSession:
    """Stands in for aiohttp.ClientSession."""
    
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False
    
    def post(self, url, data=None, headers=None):
        return _FakePostContext(self, url, data, headers or {})
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, *exc):
        self.closed = True


class _RecordingHandler(BaseHTTPRequestHandler):
    """Records each complete POST and answers with the server's canned reply."""
    
    def do_POST(self):
        body = self._read_body()
        if body is None:
            # Client gave up mid-body
            return
        self.server.received.append({
            "path": self.path,
            "headers": {name: value for name, value in self.headers.items()},
            "body": body,
        })
        status, content_type, content = self.server.reply
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(content)))
        self.end_headers()
        self.wfile.write(content)
    
    def _read_body(self):
        try:
            if self.headers.get("Transfer-Encoding", "").lower() != "chunked":
                return self.rfile.read(int(self.headers.get("Content-Length", 0)))
            body = b""
            while True:
                line = self.rfile.readline()
                if not line:
                    return None
                size = int(line.split(b";")[0].strip(), 16)
                if size == 0:
                    self.rfile.readline()
                    return body
                body += self.rfile.read(size)
                self.rfile.readline()
        except (OSError, ValueError):
            return None
    
    def log_message(self, format, *args):
        pass


class LocalLogServer:
    """Real HTTP endpoint on 127.0.0.1 recording the uploads it receives."""
    
    def __init__(self):
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), _RecordingHandler)
        self._server.daemon_threads = True
        self._server.received = []
        self._server.reply = (200, "text/plain", b"ok")
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
    
    @property
    def url(self):
        return f"http://127.0.0.1:{self._server.server_port}"
    
    @property
    def received(self):
        return self._server.received
    
    def reply(self, status, content, content_type="text/plain"):
        self._server.reply = (status, content_type, content)
    
    def start(self):
        self._thread.start()
    
    def stop(self):
        self._server.shutdown()
        self._server.server_close()


def parse_multipart(raw, boundary):
    """Split a raw multipart body into {name: (header_text, value_bytes)}."""
    parts = {}
    delimiter = b"--" + boundary.encode("ascii")
    for chunk in raw.split(delimiter)[1:]:
        if chunk.startswith(b"--"):
            break
        head, _, value = chunk[2:].partition(b"\r\n\r\n")
        name = re.search(rb'name="([^"]+)"', head).group(1).decode()
        parts[name] = (head.decode(), value[:-2])
    return parts


def boundary_of(headers):
    """Extract the multipart boundary from request headers."""
    return headers["Content-Type"].split("boundary=", 1)[1]


@pytest.fixture
def end_time():
    return datetime(2024, 5, 1, 12, 30, 15, tzinfo=timezone.utc)


@pytest.fixture
def metadata(end_time):
    """Metadata of the reference upload."""
    return LogMetadata(
        end_time=end_time,
        logger_name="L",
        tag="build-1",
        headers={"log-process-context": "ctx-1", "log-request-context": "req-9"}
    )


@pytest.fixture
def log_file(tmp_path):
    """Log file with known content."""
    path = tmp_path / "build.log"
    path.write_bytes(b"line one\nline two\n" * 100)
    return path


@pytest.fixture
def log_server(monkeypatch):
    """Local HTTP server standing in for the log ingestion service."""
    for name in ("HTTP_PROXY", "http_proxy", "HTTPS_PROXY", "https_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    
    server = LocalLogServer()
    server.start()
    yield server
    server.stop()
