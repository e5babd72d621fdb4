"""Line reassembly for chunked HTTP response bodies."""

import logging
from typing import List, Optional

from common.constants import MAX_STREAM_BUFFER_BYTES
from common.exception.exceptions import StreamBufferOverflowError

logger = logging.getLogger(__name__)


class ChunkReassembler:
    """Accumulates network chunks and yields complete newline-delimited lines.

    A line split across two chunks is held back until its newline arrives.
    An optional ``strip_prefix`` is removed once from the very start of the
    stream, even if it arrives split over several chunks.
    """

    def __init__(
        self,
        strip_prefix: Optional[bytes] = None,
        max_buffer_size: int = MAX_STREAM_BUFFER_BYTES,
        encoding: str = "utf-8",
    ):
        self._buffer = bytearray()
        self._pending_prefix = strip_prefix or None
        self.max_buffer_size = max_buffer_size
        self.encoding = encoding

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet terminated by a newline."""
        return bytes(self._buffer)

    def reset(self) -> None:
        self._buffer.clear()

    def feed(self, chunk: bytes) -> List[str]:
        """Append a chunk and return every line it completes.

        Raises:
            StreamBufferOverflowError: If the unprocessed buffer would exceed
                ``max_buffer_size``.
        """
        size = len(self._buffer) + len(chunk)
        if size > self.max_buffer_size:
            raise StreamBufferOverflowError(size, self.max_buffer_size)
        self._buffer.extend(chunk)

        if self._pending_prefix is not None and not self._consume_prefix():
            return []

        lines = []
        start = 0
        while True:
            end = self._buffer.find(b"\n", start)
            if end < 0:
                break
            raw = bytes(self._buffer[start:end])
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            lines.append(raw.decode(self.encoding, errors="replace"))
            start = end + 1
        if start:
            del self._buffer[:start]
        return lines

    def _consume_prefix(self) -> bool:
        """Strip the stream prefix; False while it may still be arriving."""
        prefix = self._pending_prefix
        if len(self._buffer) < len(prefix) and prefix.startswith(bytes(self._buffer)):
            return False
        if self._buffer.startswith(prefix):
            del self._buffer[: len(prefix)]
        self._pending_prefix = None
        return True
