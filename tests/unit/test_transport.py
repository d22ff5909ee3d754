"""
Tests for dcprecalc.dataset.transport.HttpTransport with a mocked requests session.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from dcprecalc.dataset.transport import DEFAULT_HEADERS, HttpTransport
from dcprecalc.errors import ErrorCode, ErrorKind, FileSystemError, TransportError


def make_session(status_code=200, chunks=(b"PK\x03\x04", b"rest"), headers=None, history=()):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers if headers is not None else {"content-length": "8"}
    response.history = list(history)
    response.url = "https://example.org/planetlab.zip"
    response.iter_content.return_value = list(chunks)

    session = MagicMock()
    session.get.return_value.__enter__.return_value = response
    return session, response


@pytest.fixture(autouse=True)
def non_interactive():
    with patch("dcprecalc.progress.is_interactive_terminal", return_value=False):
        yield


class TestHttpTransportFetch:

    def test_streams_body_to_destination(self, tmp_path, mock_logger):
        session, _ = make_session()
        transport = HttpTransport(session=session, logger=mock_logger)
        dest = tmp_path / "planetlab.zip"

        written = transport.fetch("https://example.org/planetlab.zip", str(dest))

        assert written == 8
        assert dest.read_bytes() == b"PK\x03\x04rest"
        mock_logger.assert_logged('status', 'Download complete')

    def test_sends_browser_user_agent_and_timeout(self, tmp_path):
        session, _ = make_session()
        transport = HttpTransport(session=session, timeout=12)
        transport.fetch("https://example.org/a.zip", str(tmp_path / "a.zip"))

        _, kwargs = session.get.call_args
        assert kwargs["headers"]["User-Agent"] == DEFAULT_HEADERS["User-Agent"]
        assert kwargs["stream"] is True
        assert kwargs["timeout"] == 12

    def test_redirect_limit_applied_to_session(self):
        session, _ = make_session()
        HttpTransport(session=session, max_redirects=10)
        assert session.max_redirects == 10

    def test_logs_redirect_hops(self, tmp_path, mock_logger):
        hop = MagicMock(status_code=302, headers={"location": "https://cdn.example.org/x.zip"})
        session, _ = make_session(history=[hop])
        HttpTransport(session=session, logger=mock_logger).fetch("https://example.org/x", str(tmp_path / "x.zip"))
        mock_logger.assert_logged('verbose', 'cdn.example.org')

    def test_non_200_status(self, tmp_path):
        session, _ = make_session(status_code=404)
        dest = tmp_path / "a.zip"
        with pytest.raises(TransportError) as exc_info:
            HttpTransport(session=session).fetch("https://example.org/a.zip", str(dest))
        assert exc_info.value.code == ErrorCode.TRANSPORT_HTTP_STATUS
        assert exc_info.value.kind == ErrorKind.TRANSPORT
        assert not dest.exists()

    @pytest.mark.parametrize("exc,code", [
        (requests.exceptions.Timeout("read timed out"), ErrorCode.TRANSPORT_TIMEOUT),
        (requests.exceptions.ConnectionError("name resolution failed"), ErrorCode.TRANSPORT_CONNECTION),
        (requests.exceptions.TooManyRedirects("Exceeded 10 redirects."), ErrorCode.TRANSPORT_TOO_MANY_REDIRECTS),
    ])
    def test_request_failures_map_to_transport_error(self, tmp_path, exc, code):
        session = MagicMock()
        session.get.side_effect = exc
        with pytest.raises(TransportError) as exc_info:
            HttpTransport(session=session).fetch("https://example.org/a.zip", str(tmp_path / "a.zip"))
        assert exc_info.value.code == code

    def test_unwritable_destination_is_filesystem_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        session, _ = make_session()
        with pytest.raises(FileSystemError) as exc_info:
            HttpTransport(session=session).fetch("https://example.org/a.zip", str(blocker / "a.zip"))
        assert exc_info.value.kind == ErrorKind.FILESYSTEM
