"""Streaming decode pipeline: line reassembly, protocol decoders, output sinks."""

from gemini_chat.services.streaming.decoders import (
    LegacyDecoder,
    StandardDecoder,
    StreamDecoder,
    StreamingAccumulator,
)
from gemini_chat.services.streaming.output import BufferSink, ConsoleSink
from gemini_chat.services.streaming.reassembler import ChunkReassembler

__all__ = [
    "BufferSink",
    "ChunkReassembler",
    "ConsoleSink",
    "LegacyDecoder",
    "StandardDecoder",
    "StreamDecoder",
    "StreamingAccumulator",
]
