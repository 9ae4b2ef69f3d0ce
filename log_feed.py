# File: log_feed.py
"""
log_feed.py

Provides LogFeed, a lazy line iterator over one followed Docker log stream.
Docker hands out arbitrary byte chunks; LogFeed reassembles them into text
lines and can be closed from another thread to unblock a pending read.
"""
import logging
import threading

import docker
import requests

from errors import StreamError

log = logging.getLogger(__name__)

READ_ERRORS = (requests.exceptions.RequestException, docker.errors.DockerException, OSError)
MAX_LINE_BYTES = 1024 * 1024


class LogFeed:
    def __init__(self, raw_stream, container_id, max_line_bytes=MAX_LINE_BYTES):
        self.container_id = container_id
        self.max_line_bytes = max_line_bytes
        self._raw = raw_stream
        self._closed = threading.Event()

    @property
    def closed(self):
        return self._closed.is_set()

    def close(self):
        """Close the underlying stream. Safe to call repeatedly and from any thread."""
        if self._closed.is_set():
            return
        self._closed.set()
        close = getattr(self._raw, 'close', None)
        if close is None:
            return
        try:
            close()
        except READ_ERRORS as e:
            log.debug(f"[{self.container_id}] Log stream close raised: {e}")

    def __iter__(self):
        return self._lines()

    def _lines(self):
        buffer = bytearray()
        try:
            for chunk in self._raw:
                if self._closed.is_set():
                    return
                if isinstance(chunk, str):
                    chunk = chunk.encode('utf-8')
                buffer += chunk
                start = 0
                while True:
                    end = buffer.find(b'\n', start)
                    if end < 0:
                        break
                    yield _decode(buffer[start:end])
                    start = end + 1
                del buffer[:start]
                # a line without newline is cut into max_line_bytes pieces
                while len(buffer) > self.max_line_bytes:
                    log.warning(f"[{self.container_id}] Log line longer than {self.max_line_bytes} bytes, splitting it")
                    yield _decode(buffer[:self.max_line_bytes])
                    del buffer[:self.max_line_bytes]
        except READ_ERRORS as e:
            if self._closed.is_set():
                return
            raise StreamError(f"Error reading logs for container {self.container_id}: {e}") from e
        if buffer and not self._closed.is_set():
            yield _decode(buffer)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


def _decode(raw) -> str:
    return raw.decode('utf-8', errors='replace').rstrip('\r')
