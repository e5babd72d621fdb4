"""Attachments staged for the next user turn."""

import base64
import logging
from typing import Iterator, List

from common.constants import ATTACHMENT_LIMIT
from common.exception.exceptions import (
    AttachmentError,
    AttachmentLimitError,
    HistoryIndexError,
)
from gemini_chat.models.content import Part

logger = logging.getLogger(__name__)

STDIN_SOURCE = "stdin"


def format_text_attachment(source: str, content: str) -> str:
    """Wrap attachment content for the key-free endpoint, which only takes text."""
    if source == STDIN_SOURCE:
        return f"\n--- Pasted Text ---\n{content}\n--- End of Pasted Text ---\n"
    return f"\n--- Attached File: {source} ---\n{content}\n--- End of File ---\n"


class PendingAttachments:
    """Bounded list of parts waiting to be sent with the next prompt."""

    def __init__(self, limit: int = ATTACHMENT_LIMIT):
        self.limit = limit
        self._parts: List[Part] = []

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[Part]:
        return iter(list(self._parts))

    def add(self, part: Part) -> None:
        if len(self._parts) >= self.limit:
            raise AttachmentLimitError(self.limit)
        self._parts.append(part.model_copy(deep=True))

    def add_content(
        self, source: str, data: bytes, mime_type: str, as_text: bool
    ) -> Part:
        """Stage raw content read from a file or a pipe.

        Args:
            source: File name, or "stdin" for pasted content
            data: Raw bytes
            mime_type: MIME type used for file parts
            as_text: Stage as formatted text (key-free mode) instead of a file part

        Returns:
            The staged part
        """
        if not data:
            raise AttachmentError(f"No data received from '{source}', attachment skipped")
        if as_text:
            content = data.decode("utf-8", errors="replace")
            part = Part.text_part(format_text_attachment(source, content))
        else:
            part = Part.file_part(
                mime_type=mime_type,
                base64_data=base64.b64encode(data).decode("ascii"),
                filename=source,
            )
        self.add(part)
        logger.info(f"Attached {source} (MIME: {mime_type}, Size: {len(data)} bytes)")
        return part

    def remove(self, index: int) -> Part:
        if index < 0 or index >= len(self._parts):
            raise HistoryIndexError(f"Invalid attachment index {index}")
        return self._parts.pop(index)

    def clear(self) -> None:
        self._parts.clear()

    def consume(self) -> List[Part]:
        """Return all staged parts and empty the list."""
        parts, self._parts = self._parts, []
        return parts

    def combined_text(self) -> str:
        """Concatenated text of all staged text parts."""
        return "".join(part.text for part in self._parts if part.text is not None)
