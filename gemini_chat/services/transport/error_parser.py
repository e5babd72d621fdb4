"""Extraction of human-readable messages from API error bodies."""

import json
from typing import Optional


def parse_error_message(body: bytes) -> Optional[str]:
    """Pull ``error.message`` out of an error response body.

    The JSON object may be preceded by other text, so parsing starts at the
    first ``{``. Bodies without any JSON object are returned as raw text;
    bodies with an unparsable or message-less object yield None.
    """
    if not body:
        return None
    text = body.decode("utf-8", errors="replace")
    start = text.find("{")
    if start < 0:
        stripped = text.strip()
        return stripped or None

    try:
        document = json.loads(text[start:])
    except json.JSONDecodeError:
        return None

    error = document.get("error") if isinstance(document, dict) else None
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str):
            return message
    return None
