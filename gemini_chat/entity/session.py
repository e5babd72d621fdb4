"""Per-session context shared by the request pipeline."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from gemini_chat.entity.attachments import PendingAttachments
from gemini_chat.entity.history import HistoryStore
from gemini_chat.models.content import Part, Turn

logger = logging.getLogger(__name__)

UNSAVED_SESSION_NAME = "[unsaved]"

# Location side-channel bits
LOCATION_NAME = 1
LOCATION_MAP = 2
LOCATION_DONE = 4


@dataclass
class LegacyStreamState:
    """Decoder memory for the key-free stream.

    ``last_fragment`` is the last full response text seen, used to print only
    new characters. ``code_buffer`` holds the latest embedded code block until
    the stream signals the end of the block.
    """

    last_fragment: str = ""
    code_buffer: Optional[str] = None
    location_bits: int = 0
    location_gathered: bool = False

    def reset_for_prompt(self) -> None:
        self.last_fragment = ""
        self.code_buffer = None
        self.location_gathered = False

    @property
    def location_pending(self) -> bool:
        return bool(self.location_bits & (LOCATION_NAME | LOCATION_MAP))


@dataclass
class ChatSession:
    """Mutable state of one conversation, owned by a single caller."""

    history: HistoryStore = field(default_factory=HistoryStore)
    attachments: PendingAttachments = field(default_factory=PendingAttachments)
    legacy_state: LegacyStreamState = field(default_factory=LegacyStreamState)
    system_prompt: Optional[str] = None
    last_model_response: Optional[str] = None
    name: str = UNSAVED_SESSION_NAME

    def append_user_turn(self, parts: Sequence[Part]) -> Turn:
        """Append a (speculative) user turn before a request is issued."""
        return self.history.append_parts("user", parts)

    def append_model_turn(self, text: str) -> Turn:
        return self.history.append_parts("model", [Part.text_part(text)])

    def rollback_last_turn(self) -> Turn:
        """Drop the most recent turn, typically a user turn whose request failed."""
        return self.history.rollback_last()

    def current_history_snapshot(self) -> List[Turn]:
        return self.history.snapshot()

    def clear(self) -> None:
        """Reset to a fresh, unsaved conversation."""
        self.history.clear()
        self.attachments.clear()
        self.legacy_state.reset_for_prompt()
        self.system_prompt = None
        self.last_model_response = None
        self.name = UNSAVED_SESSION_NAME
        logger.info("Session cleared")
