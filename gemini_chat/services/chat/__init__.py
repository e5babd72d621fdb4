"""Prompt pipeline and auxiliary API calls."""

from gemini_chat.services.chat.chat_service import ChatService
from gemini_chat.services.chat.models_service import ModelInfo, ModelsService

__all__ = ["ChatService", "ModelInfo", "ModelsService"]
