"""Saving and restoring conversations."""

from gemini_chat.services.persistence.session_store import SessionStore

__all__ = ["SessionStore"]
