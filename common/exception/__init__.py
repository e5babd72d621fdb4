"""Exception hierarchy shared by all packages."""

from common.exception.exceptions import (
    ApiRequestError,
    AttachmentError,
    AttachmentLimitError,
    ContextTooLargeError,
    GeminiChatError,
    HistoryIndexError,
    PayloadBuildError,
    SessionFileError,
    StreamBufferOverflowError,
)

__all__ = [
    "ApiRequestError",
    "AttachmentError",
    "AttachmentLimitError",
    "ContextTooLargeError",
    "GeminiChatError",
    "HistoryIndexError",
    "PayloadBuildError",
    "SessionFileError",
    "StreamBufferOverflowError",
]
