"""Session-owned state: history, pending attachments and decoder memory."""

from gemini_chat.entity.attachments import PendingAttachments
from gemini_chat.entity.history import HistoryStore
from gemini_chat.entity.session import ChatSession, LegacyStreamState

__all__ = ["ChatSession", "HistoryStore", "LegacyStreamState", "PendingAttachments"]
