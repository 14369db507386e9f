"""Tests for the blocking log uploader."""
import gzip
from unittest.mock import Mock, patch

import pytest
import requests

from conftest import FakeResponse, FakeSession, boundary_of, parse_multipart
from loguploader import (
    ChecksumComputationError,
    FailureKind,
    FilePayload,
    LogUploader,
    PayloadReadError,
    ServerRejectionError,
    TextPayload,
    TransportExhaustedError,
    UploaderConfig,
)
from loguploader.core.api import LinearBackoffStrategy, RequestHandler, SessionFactory

BASE_URL = "https://logs.example.com"
UPLOAD_URL = "https://logs.example.com/final-log/upload"
HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"
SLEEP = "loguploader.core.api.retry.retry_strategy.time.sleep"


def reset():
    return requests.exceptions.ConnectionError("Connection reset by peer")


@pytest.fixture
def supplier():
    return Mock(return_value="Bearer abc")


def run_upload(session, uploader, *args, method="upload_string"):
    with patch.object(SessionFactory, "create_sync_session", return_value=session) as factory, \
            patch(SLEEP) as sleep:
        result = getattr(uploader, method)(*args)
    return result, factory, sleep


class TestLogUploader:
    """Test suite for LogUploader."""
    
    def test_upload_string_success(self, metadata, supplier):
        """Test a single POST carrying all parts succeeds."""
        session = FakeSession([FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=3, delay_seconds=1)
        
        result, _, sleep = run_upload(session, uploader, "hello", metadata)
        
        assert result.md5sum == HELLO_MD5
        assert result.attempts == 1
        assert result.url == UPLOAD_URL
        assert len(session.calls) == 1
        sleep.assert_not_called()
        
        call = session.calls[0]
        assert call["url"] == UPLOAD_URL
        assert call["headers"]["Authorization"] == "Bearer abc"
        assert call["headers"]["Content-Encoding"] == "gzip"
        assert call["headers"]["log-process-context"] == "ctx-1"
        
        parts = parse_multipart(gzip.decompress(call["body"]), boundary_of(call["headers"]))
        assert parts["md5sum"][1] == HELLO_MD5.encode()
        assert parts["loggerName"][1] == b"L"
        assert parts["tag"][1] == b"build-1"
        assert parts["endTime"][1] == b"2024-05-01T12:30:15Z"
        assert parts["logfile"][1] == b"hello"
    
    def test_upload_file_success(self, metadata, supplier, log_file):
        """Test file upload sends the file content."""
        session = FakeSession([FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier)
        
        result, _, _ = run_upload(session, uploader, log_file, metadata, method="upload_file")
        
        call = session.calls[0]
        parts = parse_multipart(gzip.decompress(call["body"]), boundary_of(call["headers"]))
        assert parts["logfile"][1] == log_file.read_bytes()
        assert parts["md5sum"][1] == result.md5sum.encode()
    
    def test_precomputed_checksum_is_used(self, metadata, supplier):
        """Test a given checksum is sent as is."""
        session = FakeSession([FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier)
        
        result, _, _ = run_upload(session, uploader, "hello", metadata, "0" * 32)
        
        assert result.md5sum == "0" * 32
    
    def test_server_error_is_not_retried(self, metadata, supplier):
        """Test a 503 response fails at once without retries."""
        session = FakeSession([FakeResponse(503, b"Service Unavailable")] * 4)
        uploader = LogUploader(BASE_URL, supplier, max_retries=3, delay_seconds=1)
        
        with pytest.raises(ServerRejectionError) as exc_info:
            run_upload(session, uploader, "hello", metadata)
        
        assert len(session.calls) == 1
        assert exc_info.value.status_code == 503
        assert exc_info.value.attempts == 1
        assert exc_info.value.kind is FailureKind.SERVER_REJECTION
        assert session.closed
    
    def test_connection_reset_then_success(self, metadata, supplier):
        """Test two resets are retried with waits of 1 and 2 units."""
        session = FakeSession([reset(), reset(), FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=3, delay_seconds=1)
        
        result, _, sleep = run_upload(session, uploader, "hello", metadata)
        
        assert result.attempts == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1, 2]
        assert len(session.calls) == 3
        assert session.closed
    
    def test_retries_exhausted(self, metadata, supplier):
        """Test persistent resets end after max_retries + 1 attempts."""
        session = FakeSession([reset(), reset(), reset(), FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=2, delay_seconds=1)
        
        with patch.object(SessionFactory, "create_sync_session", return_value=session), \
                patch(SLEEP) as sleep:
            with pytest.raises(TransportExhaustedError) as exc_info:
                uploader.upload_string("hello", metadata)
        
        assert len(session.calls) == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1, 2]
        assert exc_info.value.attempts == 3
        assert exc_info.value.retryable
        assert exc_info.value.kind is FailureKind.TRANSPORT
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)
        assert session.closed
    
    def test_timeouts_are_retried(self, metadata, supplier):
        """Test transport timeouts count as connectivity failures."""
        session = FakeSession([requests.exceptions.ReadTimeout("slow"), FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=1, delay_seconds=5)
        
        result, _, sleep = run_upload(session, uploader, "hello", metadata)
        
        assert result.attempts == 2
        sleep.assert_called_once_with(5)
    
    def test_ssl_error_not_retried(self, metadata, supplier):
        """Test TLS failures fail at once."""
        session = FakeSession([requests.exceptions.SSLError("bad cert")])
        uploader = LogUploader(BASE_URL, supplier, max_retries=3, delay_seconds=1)
        
        with patch.object(SessionFactory, "create_sync_session", return_value=session), \
                patch(SLEEP) as sleep:
            with pytest.raises(TransportExhaustedError) as exc_info:
                uploader.upload_string("hello", metadata)
        
        assert not exc_info.value.retryable
        assert exc_info.value.attempts == 1
        sleep.assert_not_called()
    
    def test_credentials_fetched_per_attempt(self, metadata, supplier):
        """Test each retry asks the supplier again."""
        supplier.side_effect = ["Bearer one", "Bearer two"]
        session = FakeSession([reset(), FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=1, delay_seconds=1)
        
        run_upload(session, uploader, "hello", metadata)
        
        assert [c["headers"]["Authorization"] for c in session.calls] == ["Bearer one", "Bearer two"]
    
    def test_retried_body_is_identical(self, metadata, supplier, log_file):
        """Test the retried attempt sends the same bytes."""
        session = FakeSession([reset(), FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=1, delay_seconds=1)
        
        run_upload(session, uploader, log_file, metadata, method="upload_file")
        
        assert session.calls[0]["body"] == session.calls[1]["body"]
    
    def test_unreadable_file_fails_before_network(self, metadata, supplier, tmp_path):
        """Test checksum failure happens before any request."""
        uploader = LogUploader(BASE_URL, supplier)
        
        with patch.object(SessionFactory, "create_sync_session") as factory:
            with pytest.raises(ChecksumComputationError) as exc_info:
                uploader.upload_file(tmp_path / "missing.log", metadata)
        
        factory.assert_not_called()
        supplier.assert_not_called()
        assert exc_info.value.kind is FailureKind.CHECKSUM
        assert isinstance(exc_info.value.__cause__, OSError)
    
    def test_file_removed_while_streaming_not_retried(self, metadata, supplier, log_file):
        """Test a payload read failure during the POST fails at once."""
        session = FakeSession([FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=3, delay_seconds=1)
        md5sum = uploader.compute_checksum(FilePayload(log_file))
        log_file.unlink()

        with patch.object(SessionFactory, "create_sync_session", return_value=session), \
                patch(SLEEP) as sleep:
            with pytest.raises(TransportExhaustedError) as exc_info:
                uploader.upload_file(log_file, metadata, md5sum)

        assert exc_info.value.attempts == 1
        assert not exc_info.value.retryable
        assert isinstance(exc_info.value.__cause__, PayloadReadError)
        sleep.assert_not_called()
        assert session.closed

    def test_execute_reports_status_and_attempts(self, metadata, supplier):
        """Test the handler returns the response status with the attempt count."""
        session = FakeSession([reset(), FakeResponse(200)])
        uploader = LogUploader(BASE_URL, supplier, max_retries=1, delay_seconds=1)
        body = uploader.builder.build_body(metadata, TextPayload("hello"), HELLO_MD5)
        handler = RequestHandler(session, LinearBackoffStrategy(1), max_retries=1)

        with patch(SLEEP):
            assert handler.execute(uploader.builder, metadata, body) == (200, 2)

    def test_session_created_per_call(self, metadata, supplier):
        """Test every upload call opens and closes its own session."""
        sessions = [FakeSession([FakeResponse(200)]), FakeSession([FakeResponse(200)])]
        uploader = LogUploader(BASE_URL, supplier)
        
        with patch.object(SessionFactory, "create_sync_session", side_effect=sessions):
            uploader.upload_string("one", metadata)
            uploader.upload_string("two", metadata)
        
        assert all(s.closed and len(s.calls) == 1 for s in sessions)
    
    def test_timeout_passed_to_transport(self, metadata, supplier):
        """Test per-attempt timeouts reach the session."""
        session = FakeSession([FakeResponse(200)])
        uploader = LogUploader(UploaderConfig(BASE_URL), supplier)
        
        run_upload(session, uploader, "hello", metadata)
        
        assert session.calls[0]["timeout"] == (30.0, 300.0)
    
    def test_config_extra_headers(self, metadata, supplier):
        """Test configured headers are sent, caller headers win."""
        config = UploaderConfig(BASE_URL, extra_headers={"x-client": "ci", "log-process-context": "default"})
        session = FakeSession([FakeResponse(200)])
        uploader = LogUploader(config, supplier)
        
        run_upload(session, uploader, "hello", metadata)
        
        headers = session.calls[0]["headers"]
        assert headers["x-client"] == "ci"
        assert headers["log-process-context"] == "ctx-1"
    
    def test_zero_retries(self, metadata, supplier):
        """Test max_retries=0 makes exactly one attempt."""
        session = FakeSession([reset()])
        uploader = LogUploader(BASE_URL, supplier, max_retries=0, delay_seconds=1)
        
        with patch.object(SessionFactory, "create_sync_session", return_value=session):
            with pytest.raises(TransportExhaustedError) as exc_info:
                uploader.upload_string("hello", metadata)
        
        assert exc_info.value.attempts == 1


class TestSessionFactory:
    """Test suite for SessionFactory."""
    
    def test_sync_session_has_no_transport_retries(self):
        session = SessionFactory.create_sync_session("agent/1.0")
        
        try:
            adapter = session.get_adapter("https://logs.example.com")
            assert adapter.max_retries.total == 0
            assert session.headers["User-Agent"] == "agent/1.0"
            assert session.verify is True
        finally:
            session.close()
