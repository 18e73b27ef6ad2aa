"""HTTP client for downloading images referenced in posts.

Each download is bounded by a single deadline. Connect and header reads use
the request timeout; once headers arrive, a watchdog shuts the socket down
when the deadline passes, so a slow body cannot hold a worker longer than
the timeout.
"""

import socket
import threading
import time
from typing import Optional

import requests

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_BYTES = 50 * 1024 * 1024
DEFAULT_USER_AGENT = "nostr-exif-scan/0.1"

_CHUNK_SIZE = 64 * 1024


class FetchError(Exception):
    """Raised when an image cannot be downloaded."""
    pass


class ReadError(FetchError):
    """Raised when the response arrived but its body could not be read."""
    pass


def _abort(response: requests.Response, expired: threading.Event) -> None:
    """Unblock any pending body read on the response's socket."""
    expired.set()
    connection = getattr(response.raw, "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is None:
        response.close()
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Already closed by the reader
        pass


class ImageFetcher:
    """Downloads image bytes with a hard per-request deadline."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_bytes: Optional[int] = DEFAULT_MAX_BYTES,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize the fetcher.

        Args:
            timeout: Total seconds allowed for one download
            max_bytes: Abort downloads larger than this. None disables the cap.
            user_agent: User-Agent header sent with every request
        """
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.user_agent = user_agent

    def _get_headers(self) -> dict:
        return {"User-Agent": self.user_agent, "Accept": "image/*,*/*;q=0.8"}

    def fetch(self, url: str) -> bytes:
        """Download the body at url.

        Returns:
            The response body

        Raises:
            ReadError: If the body could not be read after a success status
            FetchError: On network errors, non-success status, oversized
                bodies or when the deadline passes
        """
        deadline = time.monotonic() + self.timeout
        try:
            response = requests.get(
                url,
                headers=self._get_headers(),
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise FetchError(f"Request failed: {e}") from e

        with response:
            if not response.ok:
                raise FetchError(f"HTTP {response.status_code} for {url}")

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise FetchError(f"Timed out after {self.timeout:g}s")

            expired = threading.Event()
            watchdog = threading.Timer(remaining, _abort, args=(response, expired))
            watchdog.daemon = True
            watchdog.start()
            try:
                buf = self._read_body(response, deadline)
            except (requests.RequestException, OSError) as e:
                if expired.is_set() or time.monotonic() >= deadline:
                    raise FetchError(f"Timed out after {self.timeout:g}s") from e
                raise ReadError(f"Read failed: {e}") from e
            finally:
                watchdog.cancel()

            if expired.is_set():
                # Shutdown can end the body early without an error
                raise FetchError(f"Timed out after {self.timeout:g}s")

        return bytes(buf)

    def _read_body(self, response: requests.Response, deadline: float) -> bytearray:
        buf = bytearray()
        for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
            buf.extend(chunk)
            if self.max_bytes is not None and len(buf) > self.max_bytes:
                raise FetchError(f"Body exceeds {self.max_bytes} bytes")
            if time.monotonic() > deadline:
                raise FetchError(f"Timed out after {self.timeout:g}s")
        return buf
