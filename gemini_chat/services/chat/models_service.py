"""Non-streaming calls to the official API: model listing and token counting."""

import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from common.constants import MODELS_PAGE_SIZE, MODELS_URL
from common.exception.exceptions import ApiRequestError
from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.entity.session import ChatSession
from gemini_chat.services.payloads.standard_payload import (
    COUNT_TOKENS_METHOD,
    build_headers,
    build_request_body,
    build_standard_request,
)
from gemini_chat.services.transport.outcomes import PreparedRequest
from gemini_chat.services.transport.retrying_transport import RetryingTransport

logger = logging.getLogger(__name__)

MODEL_NAME_PREFIX = "models/"


@dataclass
class ModelInfo:
    name: str
    display_name: Optional[str] = None

    def describe(self) -> str:
        return f"- {self.name} ({self.display_name or 'N/A'})"


class ModelsService:
    """Model catalogue and token accounting."""

    def __init__(self, config: ChatConfig, transport: RetryingTransport):
        self.config = config
        self.transport = transport

    async def list_models(self) -> List[ModelInfo]:
        """Fetch every page of the model catalogue.

        Raises:
            ApiRequestError: If a page request fails or returns invalid JSON
        """
        models: List[ModelInfo] = []
        page_token: Optional[str] = None
        while True:
            url = f"{MODELS_URL}?pageSize={MODELS_PAGE_SIZE}"
            if page_token:
                url += f"&pageToken={page_token}"

            headers = build_headers(self.config)
            headers.pop("Content-Encoding", None)
            request = PreparedRequest(url=url, headers=headers, method="GET")
            outcome = await self.transport.send_once(request)
            if not outcome.success:
                raise ApiRequestError(outcome.http_status, outcome.error_message)

            try:
                document = json.loads(outcome.body)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ApiRequestError(
                    outcome.http_status, f"Invalid models response: {e}"
                ) from e

            if not isinstance(document, dict):
                raise ApiRequestError(outcome.http_status, "Invalid models response")

            for item in document.get("models") or []:
                name = item.get("name") if isinstance(item, dict) else None
                if not isinstance(name, str):
                    continue
                if name.startswith(MODEL_NAME_PREFIX):
                    name = name[len(MODEL_NAME_PREFIX):]
                display_name = item.get("displayName")
                models.append(
                    ModelInfo(name, display_name if isinstance(display_name, str) else None)
                )

            page_token = document.get("nextPageToken")
            if not isinstance(page_token, str) or not page_token:
                break

        logger.info(f"Found {len(models)} models")
        return models

    async def count_tokens(self, session: ChatSession) -> Optional[int]:
        """Count tokens of the history plus any pending attachments.

        Pending attachments are counted as a temporary user turn that is
        removed again before returning. Returns None on failure.
        """
        pending = list(session.attachments)
        if pending:
            session.append_user_turn(pending)
        try:
            body = build_request_body(
                self.config,
                session.current_history_snapshot(),
                session.system_prompt,
                include_generation=False,
            )
        finally:
            if pending:
                session.rollback_last_turn()

        request = build_standard_request(self.config, body, COUNT_TOKENS_METHOD)
        outcome = await self.transport.send_once(request)
        if not outcome.success:
            logger.error(f"Token count failed: {outcome.describe()}")
            return None

        try:
            document = json.loads(outcome.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.error("Token count response is not valid JSON")
            return None
        total = document.get("totalTokens") if isinstance(document, dict) else None
        return total if isinstance(total, int) else None

