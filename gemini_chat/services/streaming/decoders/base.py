"""Common decoder interface for streamed response lines."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from common.constants import MAX_STREAM_BUFFER_BYTES
from gemini_chat.services.streaming.reassembler import ChunkReassembler

logger = logging.getLogger(__name__)


@dataclass
class StreamingAccumulator:
    """Transient state of one attempt: raw line buffer and decoded text."""

    reassembler: ChunkReassembler = field(default_factory=ChunkReassembler)
    full_text: str = ""

    def append(self, text: str) -> None:
        self.full_text += text

    def replace(self, text: str) -> None:
        self.full_text = text


def walk_path(node: Any, path: Sequence[int]) -> Optional[Any]:
    """Follow list indices through nested arrays.

    Returns None as soon as a step is missing or is not a list, so partial
    structures read as "not available yet" rather than as errors.
    """
    for index in path:
        if not isinstance(node, list) or index >= len(node):
            return None
        node = node[index]
    return node


class StreamDecoder(ABC):
    """Decodes complete lines of one streaming protocol.

    A decoder is selected once per request. The transport calls
    :meth:`new_accumulator` at the start of every attempt and then
    :meth:`feed` for each network chunk.
    """

    #: Bytes stripped once from the beginning of the response body
    stream_prefix: Optional[bytes] = None
    #: Upper bound for the unprocessed line buffer of an attempt
    max_buffer_size: int = MAX_STREAM_BUFFER_BYTES

    def __init__(self, sink: Any):
        self.sink = sink
        self.accumulator = StreamingAccumulator()

    def new_accumulator(self) -> StreamingAccumulator:
        """Start a fresh attempt."""
        self.accumulator = StreamingAccumulator(
            reassembler=ChunkReassembler(
                strip_prefix=self.stream_prefix, max_buffer_size=self.max_buffer_size
            )
        )
        return self.accumulator

    def feed(self, chunk: bytes) -> None:
        """Reassemble a network chunk and decode every line it completes."""
        for line in self.accumulator.reassembler.feed(chunk):
            if self.accepts(line):
                self.decode(line)
            if self.abort_requested:
                break

    def finish(self) -> None:
        """End of body: an unterminated last line is never decoded."""
        reassembler = self.accumulator.reassembler
        tail = reassembler.pending
        if tail:
            logger.debug(f"Discarding {len(tail)} bytes of unterminated stream data")
            reassembler.reset()

    @abstractmethod
    def accepts(self, line: str) -> bool:
        """Cheap pre-filter applied before parsing."""

    @abstractmethod
    def decode(self, line: str) -> None:
        """Decode one line, emit new text and update the accumulator."""

    @property
    def full_text(self) -> str:
        return self.accumulator.full_text

    @property
    def abort_requested(self) -> bool:
        """True when the decoder wants the transfer stopped early."""
        return False

    @property
    def side_channel_complete(self) -> bool:
        """True when an early stop should count as success."""
        return False
