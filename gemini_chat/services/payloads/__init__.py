"""Wire payload builders for both endpoints."""

from gemini_chat.services.payloads.legacy_payload import (
    build_legacy_payload,
    build_legacy_request,
    build_transcript,
    system_language,
)
from gemini_chat.services.payloads.standard_payload import (
    COUNT_TOKENS_METHOD,
    STREAM_METHOD,
    build_request_body,
    build_standard_request,
    compress_body,
)

__all__ = [
    "COUNT_TOKENS_METHOD",
    "STREAM_METHOD",
    "build_legacy_payload",
    "build_legacy_request",
    "build_request_body",
    "build_standard_request",
    "build_transcript",
    "compress_body",
    "system_language",
]
