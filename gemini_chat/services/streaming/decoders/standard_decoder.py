"""Decoder for the official event-stream protocol (``data: <json>`` lines)."""

import json
import logging
from typing import Any, Optional

from common.constants import SSE_DATA_PREFIX
from gemini_chat.services.streaming.decoders.base import StreamDecoder

logger = logging.getLogger(__name__)


def extract_candidate_text(event: Any) -> Optional[str]:
    """Return ``candidates[0].content.parts[0].text`` if present and a string."""
    if not isinstance(event, dict):
        return None
    candidates = event.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return None
    content = candidate.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None


class StandardDecoder(StreamDecoder):
    """Each event carries only new text, so chunks are emitted and appended as-is."""

    def accepts(self, line: str) -> bool:
        return line.startswith(SSE_DATA_PREFIX)

    def decode(self, line: str) -> None:
        try:
            event = json.loads(line[len(SSE_DATA_PREFIX):])
        except json.JSONDecodeError:
            logger.debug(f"Dropping unparsable event line ({len(line)} chars)")
            return

        text = extract_candidate_text(event)
        if text is None:
            return
        self.sink.write(text)
        self.accumulator.append(text)
