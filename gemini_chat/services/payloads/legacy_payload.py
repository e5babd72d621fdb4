"""
Request payloads for the key-free web endpoint.

The endpoint takes the whole conversation as one transcript string placed
inside a long positional array. Apart from the transcript, the language and
the two model flags, the values below are placeholders the endpoint expects
at exactly these positions.
"""

import copy
import json
import locale
import logging
import re
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

from common.constants import DEFAULT_LANGUAGE, FREE_API_ORIGIN, FREE_API_URL
from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.models.content import Turn
from gemini_chat.services.transport.outcomes import PreparedRequest

logger = logging.getLogger(__name__)

INNER_PAYLOAD_LENGTH = 104

# Positions with a value; everything else is null
PROMPT_INDEX = 0
LANGUAGE_INDEX = 1
MODEL_FLAG_INDEX = 6
MODEL_VARIANT_INDEX = 41
EMPTY_LIST_INDEX = 103

_FIXED_VALUES = {
    2: ["", "", "", None, None, None, None, None, None, ""],
    3: "",
    4: "",
    7: 1,
    10: 1,
    11: 1,
    17: [[0]],
    18: 1,
    27: 1,
    30: [4],
}


def normalize_language(locale_name: Optional[str]) -> Optional[str]:
    """Turn a POSIX locale name like ``de_DE.UTF-8@euro`` into ``de-DE``.

    Returns None for unset and default ("C"/"POSIX") locales.
    """
    if not locale_name or locale_name in ("C", "POSIX") or locale_name.startswith("C."):
        return None
    language = re.split(r"[.@]", locale_name, maxsplit=1)[0]
    return language.replace("_", "-", 1) or None


def system_language() -> str:
    """Language of the process locale in ``ll-CC`` form."""
    try:
        locale_name = locale.getlocale()[0]
    except ValueError:
        locale_name = None
    return normalize_language(locale_name) or DEFAULT_LANGUAGE


def build_transcript(history: Sequence[Turn], prompt: str) -> str:
    """Render history as ``Role: text`` blocks followed by the new prompt.

    Only turns whose first part is text contribute, and only that first part.
    """
    lines = []
    for turn in history:
        text = turn.first_text
        if text is not None:
            lines.append(f"{turn.role.capitalize()}: {text}\n\n")
    lines.append(f"User: {prompt}")
    return "".join(lines)


def build_inner_payload(transcript: str, language: str, is_pro_model: bool) -> List[Any]:
    inner: List[Any] = [None] * INNER_PAYLOAD_LENGTH
    inner[PROMPT_INDEX] = [transcript, 0, None, None, None, None, None]
    inner[LANGUAGE_INDEX] = [language]
    for index, value in _FIXED_VALUES.items():
        inner[index] = copy.deepcopy(value)
    inner[MODEL_FLAG_INDEX] = [1 if is_pro_model else 0]
    inner[MODEL_VARIANT_INDEX] = [1 if is_pro_model else 2]
    inner[EMPTY_LIST_INDEX] = []
    return inner


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def build_legacy_payload(
    history: Sequence[Turn],
    prompt: str,
    is_pro_model: bool,
    language: Optional[str] = None,
) -> str:
    """Build the outer ``[null, "<inner json>"]`` document as a string."""
    transcript = build_transcript(history, prompt)
    inner = build_inner_payload(transcript, language or system_language(), is_pro_model)
    return _compact([None, _compact(inner)])


def encode_form_body(payload: str) -> bytes:
    return f"f.req={quote(payload, safe='')}".encode("ascii")


def build_legacy_request(
    config: ChatConfig,
    history: Sequence[Turn],
    prompt: str,
    language: Optional[str] = None,
) -> PreparedRequest:
    """Build the complete form-encoded request for the key-free endpoint.

    Args:
        config: Supplies the model name (pro vs. other variants)
        history: Turns preceding the prompt
        prompt: Text of the turn being sent
        language: Override for the locale-derived language

    Returns:
        Request ready for the transport
    """
    payload = build_legacy_payload(history, prompt, config.is_pro_model, language)
    logger.debug(f"Key-free payload: {len(payload)} chars, pro={config.is_pro_model}")
    return PreparedRequest(
        url=FREE_API_URL,
        headers={
            "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
            "Origin": FREE_API_ORIGIN,
            "Referer": f"{FREE_API_ORIGIN}/",
        },
        content=encode_form_body(payload),
    )
