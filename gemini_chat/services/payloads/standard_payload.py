"""
Request payloads for the official API.

The JSON document built here is also the on-disk session format, so
``build_request_body`` has to stay in sync with the session store.
"""

import gzip
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from common.constants import API_URL_FORMAT
from common.exception.exceptions import PayloadBuildError
from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.models.content import Turn
from gemini_chat.services.transport.outcomes import PreparedRequest

logger = logging.getLogger(__name__)

STREAM_METHOD = "streamGenerateContent"
COUNT_TOKENS_METHOD = "countTokens"


def build_tools(config: ChatConfig) -> List[Dict[str, Any]]:
    tools = []
    if config.url_context:
        tools.append({"urlContext": {}})
    if config.google_grounding:
        tools.append({"googleSearch": {}})
    return tools


def build_generation_config(config: ChatConfig) -> Dict[str, Any]:
    """Generation parameters; unset sampling values are left out."""
    generation: Dict[str, Any] = {
        "temperature": config.temperature,
        "maxOutputTokens": config.max_output_tokens,
        "seed": config.seed,
    }
    if config.top_k > 0:
        generation["topK"] = config.top_k
    if config.top_p > 0:
        generation["topP"] = config.top_p
    generation["thinkingConfig"] = {"thinkingBudget": config.thinking_budget}
    return generation


def build_request_body(
    config: ChatConfig,
    history: Sequence[Turn],
    system_prompt: Optional[str] = None,
    include_generation: bool = True,
) -> Dict[str, Any]:
    """Build the JSON request document.

    Args:
        config: Generation parameters and tool switches
        history: Full conversation, including the turn being sent
        system_prompt: Optional system instruction
        include_generation: False for token counting, which rejects
            ``tools`` and ``generationConfig``

    Returns:
        Request document as a plain dict
    """
    body: Dict[str, Any] = {}
    if system_prompt:
        body["systemInstruction"] = {"parts": [{"text": system_prompt}]}
    body["contents"] = [turn.to_wire() for turn in history]

    if include_generation:
        tools = build_tools(config)
        if tools:
            body["tools"] = tools
        body["generationConfig"] = build_generation_config(config)
    return body


def compress_body(body: Dict[str, Any]) -> bytes:
    """Serialize and gzip the request document."""
    try:
        raw = json.dumps(body, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise PayloadBuildError(f"Failed to serialize request: {e}") from e
    compressed = gzip.compress(raw)
    logger.debug(f"Request body: {len(raw)} bytes, {len(compressed)} bytes compressed")
    return compressed


def build_headers(config: ChatConfig) -> Dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Content-Encoding": "gzip",
        "x-goog-api-key": config.api_key,
    }
    if config.origin and config.origin != "default":
        headers["Origin"] = config.origin
    return headers


def build_api_url(model_name: str, method: str) -> str:
    url = API_URL_FORMAT.format(model=model_name, method=method)
    if method == STREAM_METHOD:
        url += "?alt=sse"
    return url


def build_standard_request(
    config: ChatConfig,
    body: Dict[str, Any],
    method: str = STREAM_METHOD,
) -> PreparedRequest:
    """Compress the document once and wrap it for the transport."""
    return PreparedRequest(
        url=build_api_url(config.model_name, method),
        headers=build_headers(config),
        content=compress_body(body),
    )
