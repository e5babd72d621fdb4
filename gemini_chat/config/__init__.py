from gemini_chat.config.chat_config import ChatConfig

__all__ = ["ChatConfig"]
