"""Terminal outcomes of a logical request."""

from dataclasses import dataclass
from typing import Optional, Union

from common.constants import BUFFER_EXHAUSTED_STATUS, TRANSPORT_FAILURE_STATUS


@dataclass
class PreparedRequest:
    """A fully built request, reused verbatim across attempts."""

    url: str
    headers: dict
    content: Optional[bytes] = None
    method: str = "POST"


@dataclass
class TransportSuccess:
    """The exchange completed (or was deliberately cut short)."""

    full_text: str
    attempts: int
    http_status: int
    body: bytes = b""
    aborted: bool = False

    success = True


@dataclass
class TransportFailure:
    """The exchange failed for good; ``http_status`` may be a negative sentinel."""

    http_status: int
    attempts: int
    error_message: Optional[str] = None

    success = False

    @property
    def is_transport_error(self) -> bool:
        return self.http_status in (TRANSPORT_FAILURE_STATUS, BUFFER_EXHAUSTED_STATUS)

    def describe(self) -> str:
        """One-line diagnostic for the user."""
        if self.http_status == BUFFER_EXHAUSTED_STATUS:
            summary = "API call failed: response buffer exhausted"
        elif self.http_status == TRANSPORT_FAILURE_STATUS:
            summary = "API call failed: could not reach the server"
        else:
            summary = f"API call failed after retries (Last HTTP code: {self.http_status})"
        if self.error_message:
            return f"{summary}\nAPI Error Message: {self.error_message}"
        return summary


TerminalOutcome = Union[TransportSuccess, TransportFailure]
