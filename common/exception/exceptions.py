"""Custom exceptions for the chat client."""

from typing import Optional


class GeminiChatError(Exception):
    """Base class for all client errors."""


class AttachmentLimitError(GeminiChatError):
    """Raised when the pending attachment list is full."""

    def __init__(self, limit: int):
        super().__init__(f"Attachment limit of {limit} reached")
        self.limit = limit


class AttachmentError(GeminiChatError):
    """Raised when an attachment cannot be read or staged."""


class HistoryIndexError(GeminiChatError, IndexError):
    """Raised when a turn or part index does not address a valid item."""


class StreamBufferOverflowError(GeminiChatError):
    """Raised when the line buffer of a streaming attempt cannot grow further."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Stream buffer of {size} bytes exceeds limit of {limit} bytes")
        self.size = size
        self.limit = limit


class PayloadBuildError(GeminiChatError):
    """Raised when a request payload cannot be built."""


class ContextTooLargeError(GeminiChatError):
    """Raised when the key-free context exceeds the allowed size."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Context is too large for free mode (approx. {size // 1024} KB)"
        )
        self.size = size
        self.limit = limit


class SessionFileError(GeminiChatError):
    """Raised when a saved session cannot be read or written."""


class ApiRequestError(GeminiChatError):
    """Raised by non-streaming helpers when the API call ends in failure."""

    def __init__(self, status: int, message: Optional[str] = None):
        detail = f": {message}" if message else ""
        super().__init__(f"API request failed (HTTP {status}){detail}")
        self.status = status
        self.message = message
