"""Conversation content models."""

from gemini_chat.models.content import Part, PartType, Role, Turn

__all__ = ["Part", "PartType", "Role", "Turn"]
