"""HTTP transport with a fixed-delay retry policy."""

from gemini_chat.services.transport.error_parser import parse_error_message
from gemini_chat.services.transport.outcomes import (
    PreparedRequest,
    TerminalOutcome,
    TransportFailure,
    TransportSuccess,
)
from gemini_chat.services.transport.retrying_transport import RetryingTransport

__all__ = [
    "PreparedRequest",
    "RetryingTransport",
    "TerminalOutcome",
    "TransportFailure",
    "TransportSuccess",
    "parse_error_message",
]
