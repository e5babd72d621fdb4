"""
Test fixtures for streaming tests.

Builders for wire lines of both protocols, sample histories and mock HTTP
clients.
"""

import json
from typing import Any, Callable, Iterable, List, Optional, Sequence

import httpx

from gemini_chat.models.content import Part, Turn


def sse_line(text: str) -> str:
    """Build one ``data:`` event line carrying a text increment."""
    event = {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}
    return f"data: {json.dumps(event)}\n"


def legacy_line(
    text: Optional[str] = None,
    code: Optional[str] = None,
    location: Optional[List[Any]] = None,
) -> str:
    """Build one key-free stream line with the given values at their positions.

    Example:
        >>> line = legacy_line(text="Hi")
        >>> assert line.startswith("[[")
    """
    candidate: List[Any] = [None] * 31
    candidate[0] = "rc_test"
    candidate[1] = [text] if text is not None else None
    if code is not None:
        candidate[30] = [[None, None, None, None, code]]
    inner: List[Any] = [None, ["c_test", "r_test"], None, None, [candidate]]
    if location is not None:
        inner.append(location)
    envelope = ["wrb.fr", None, json.dumps(inner)]
    return json.dumps([envelope]) + "\n"


def legacy_block_end_line() -> str:
    """A line whose envelope has no inner payload (end of a structured block)."""
    return json.dumps([["di", 42]]) + "\n"


def create_test_history() -> List[Turn]:
    """Three turns: text only, file only, mixed."""
    return [
        Turn(role="user", parts=[Part.text_part("Describe this project")]),
        Turn(
            role="model",
            parts=[Part.file_part("image/png", "iVBORw0KGgo=", filename="diagram.png")],
        ),
        Turn(
            role="user",
            parts=[
                Part.text_part("And this file?"),
                Part.file_part("application/pdf", "JVBERi0xLjQ="),
            ],
        ),
    ]


def mock_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[], httpx.AsyncClient]:
    """Factory producing clients backed by ``httpx.MockTransport``."""

    def factory() -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


def sequence_handler(
    responses: Sequence[httpx.Response],
    seen: Optional[List[httpx.Request]] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Handler returning the given responses in order, recording requests."""
    remaining = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return remaining.pop(0)

    return handler


def chunked(data: bytes, size: int) -> Iterable[bytes]:
    for start in range(0, len(data), size):
        yield data[start:start + size]


async def _aiter_chunks(chunks: List[bytes], error: Optional[Exception]):
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


def stream_response(
    status: int,
    chunks: Iterable[bytes],
    error: Optional[Exception] = None,
) -> httpx.Response:
    """Response whose body arrives in the given chunks, optionally failing afterwards."""
    return httpx.Response(status, content=_aiter_chunks(list(chunks), error))
