"""Protocol decoders for streamed response lines."""

from gemini_chat.services.streaming.decoders.base import (
    StreamDecoder,
    StreamingAccumulator,
    walk_path,
)
from gemini_chat.services.streaming.decoders.legacy_decoder import LegacyDecoder
from gemini_chat.services.streaming.decoders.standard_decoder import StandardDecoder

__all__ = [
    "LegacyDecoder",
    "StandardDecoder",
    "StreamDecoder",
    "StreamingAccumulator",
    "walk_path",
]
