"""
Unit tests for PendingAttachments.
"""

import base64

import pytest

from common.exception.exceptions import (
    AttachmentError,
    AttachmentLimitError,
    HistoryIndexError,
)
from gemini_chat.entity.attachments import PendingAttachments, format_text_attachment
from gemini_chat.models.content import Part, PartType


class TestPendingAttachments:
    """Tests for staging attachments."""

    def test_add_file_content(self):
        """Test that API mode stages a base64 file part."""
        pending = PendingAttachments()

        part = pending.add_content("logo.png", b"\x89PNG", "image/png", as_text=False)

        assert part.type == PartType.FILE
        assert part.mime_type == "image/png"
        assert base64.b64decode(part.base64_data) == b"\x89PNG"
        assert part.filename == "logo.png"
        assert len(pending) == 1

    def test_add_text_content(self):
        """Test that key-free mode stages wrapped text."""
        pending = PendingAttachments()

        part = pending.add_content("notes.txt", b"line 1", "text/plain", as_text=True)

        assert part.type == PartType.TEXT
        assert part.text == "\n--- Attached File: notes.txt ---\nline 1\n--- End of File ---\n"

    def test_pasted_text_wrapper(self):
        assert format_text_attachment("stdin", "abc") == (
            "\n--- Pasted Text ---\nabc\n--- End of Pasted Text ---\n"
        )

    def test_empty_content_rejected(self):
        pending = PendingAttachments()

        with pytest.raises(AttachmentError):
            pending.add_content("empty.txt", b"", "text/plain", as_text=True)
        assert len(pending) == 0

    def test_limit_enforced(self):
        pending = PendingAttachments(limit=2)
        pending.add(Part.text_part("a"))
        pending.add(Part.text_part("b"))

        with pytest.raises(AttachmentLimitError):
            pending.add(Part.text_part("c"))
        assert len(pending) == 2

    def test_consume_empties_list(self):
        pending = PendingAttachments()
        pending.add(Part.text_part("a"))

        parts = pending.consume()

        assert [part.text for part in parts] == ["a"]
        assert len(pending) == 0

    def test_combined_text_skips_files(self):
        pending = PendingAttachments()
        pending.add(Part.text_part("one "))
        pending.add(Part.file_part("image/png", "AAAA"))
        pending.add(Part.text_part("two "))

        assert pending.combined_text() == "one two "

    def test_remove(self):
        pending = PendingAttachments()
        pending.add(Part.text_part("a"))
        pending.add(Part.text_part("b"))

        removed = pending.remove(0)

        assert removed.text == "a"
        assert [part.text for part in pending] == ["b"]
        with pytest.raises(HistoryIndexError):
            pending.remove(3)
