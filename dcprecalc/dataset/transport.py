"""
HTTP transport for the dataset archive.

Streams the response body into the destination path through
:func:`dcprecalc.artifacts.io_utils.atomic_write`, so a failed or interrupted
transfer never leaves a partial archive where a previous one was.
"""

import os
from typing import Dict, Iterator, Optional

import requests

from dcprecalc.artifacts.io_utils import atomic_write
from dcprecalc.config import DEFAULT_DOWNLOAD_TIMEOUT, MAX_REDIRECTS
from dcprecalc.errors import ErrorCode, FileSystemError, TransportError
from dcprecalc.progress import download_progress

DEFAULT_HEADERS = {
    # Some file-sharing hosts only redirect to the payload for browser-like clients.
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "*/*",
}

DEFAULT_CHUNK_SIZE = 1 << 20


class HttpTransport:
    """
    Fetch a URL into a local file with requests.

    Args:
        session: Optional requests.Session (a new one is created otherwise).
        timeout: Connect/read timeout in seconds.
        max_redirects: Redirect limit before giving up.
        chunk_size: Streaming chunk size in bytes.
        headers: Extra request headers merged over DEFAULT_HEADERS.
        logger: Logger for progress and diagnostics.
    """

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
                 max_redirects: int = MAX_REDIRECTS,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 headers: Optional[Dict[str, str]] = None,
                 logger=None):
        self.session = session or requests.Session()
        self.session.max_redirects = max_redirects
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.headers = dict(DEFAULT_HEADERS)
        if headers:
            self.headers.update(headers)
        self.logger = logger

    def _iter_body(self, response: requests.Response, total: Optional[int]) -> Iterator[bytes]:
        with download_progress(os.path.basename(response.url or "") or "archive", total=total,
                               logger=self.logger) as advance:
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    advance(len(chunk))
                    yield chunk

    def fetch(self, url: str, dest_path: str) -> int:
        """Download ``url`` to ``dest_path`` and return the number of bytes written.

        Raises:
            TransportError: Connection, DNS, timeout, redirect or HTTP status failure.
            FileSystemError: The destination could not be written.
        """
        if self.logger:
            self.logger.status(f"Downloading from: {url}")
            self.logger.verbose(f"Saving to: {dest_path}")

        try:
            with self.session.get(url, headers=self.headers, stream=True, timeout=self.timeout) as response:
                if response.history and self.logger:
                    for hop in response.history:
                        self.logger.verbose(f"Redirected ({hop.status_code}) to: {hop.headers.get('location')}")

                if response.status_code != 200:
                    raise TransportError(f"Failed to download: HTTP {response.status_code}", url=url,
                                         status_code=response.status_code,
                                         code=ErrorCode.TRANSPORT_HTTP_STATUS)

                total = int(response.headers.get("content-length") or 0) or None
                if total and self.logger:
                    self.logger.info(f"File size: {total / 1024 / 1024:.2f} MB")

                written = atomic_write(dest_path, self._iter_body(response, total))
        except requests.exceptions.TooManyRedirects as e:
            raise TransportError(f"Too many redirects (max {self.session.max_redirects})", url=url,
                                 cause=str(e), code=ErrorCode.TRANSPORT_TOO_MANY_REDIRECTS) from e
        except requests.exceptions.Timeout as e:
            raise TransportError("Download timed out", url=url, cause=str(e),
                                 code=ErrorCode.TRANSPORT_TIMEOUT) from e
        except requests.exceptions.RequestException as e:
            # RequestException derives from OSError, so it must be handled before the disk errors below.
            raise TransportError("Download failed", url=url, cause=str(e),
                                 code=ErrorCode.TRANSPORT_CONNECTION) from e
        except OSError as e:
            raise FileSystemError.from_os_error(e, dest_path, "write") from e

        if self.logger:
            self.logger.status(f"Download complete: {written / 1024 / 1024:.2f} MB")
        return written
