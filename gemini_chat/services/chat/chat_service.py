"""
Chat Service

Runs one prompt through the request pipeline and keeps the session history
consistent with the outcome: the user turn is appended before the request
and rolled back if the request ends in failure.
"""

import logging
from typing import Any, Optional

from common.constants import LOCATION_QUERY_PROMPT, MAX_FREE_MODE_CONTEXT_SIZE
from common.exception.exceptions import ContextTooLargeError
from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.entity.session import LOCATION_MAP, LOCATION_NAME, ChatSession
from gemini_chat.models.content import Part
from gemini_chat.services.payloads.legacy_payload import build_legacy_request
from gemini_chat.services.payloads.standard_payload import (
    build_request_body,
    build_standard_request,
)
from gemini_chat.services.streaming.decoders import (
    LegacyDecoder,
    StandardDecoder,
    StreamDecoder,
)
from gemini_chat.services.transport.outcomes import TerminalOutcome
from gemini_chat.services.transport.retrying_transport import RetryingTransport

logger = logging.getLogger(__name__)


class ChatService:
    """Sends prompts for a session over the configured endpoint."""

    def __init__(self, config: ChatConfig, transport: RetryingTransport, sink: Any):
        """Initialize the chat service.

        Args:
            config: Model, generation and mode settings
            transport: Retrying transport shared by all requests
            sink: Output sink receiving streamed text
        """
        self.config = config
        self.transport = transport
        self.sink = sink

    def create_decoder(self, session: ChatSession) -> StreamDecoder:
        """Pick the decoder for the active endpoint, once per request."""
        if self.config.free_mode:
            return LegacyDecoder(self.sink, session.legacy_state)
        return StandardDecoder(self.sink)

    async def send_prompt(
        self, session: ChatSession, prompt: str
    ) -> Optional[TerminalOutcome]:
        """Send a prompt together with the pending attachments.

        Args:
            session: Session whose history and attachments are used
            prompt: User text, may be empty when attachments are pending

        Returns:
            The terminal outcome, or None if there was nothing to send

        Raises:
            ContextTooLargeError: Key-free mode only, when history plus the new
                turn exceeds the endpoint's context size. Pending attachments
                are discarded and no request is made.
        """
        if self.config.free_mode:
            return await self._send_free_prompt(session, prompt)
        return await self._send_api_prompt(session, prompt)

    async def _send_api_prompt(
        self, session: ChatSession, prompt: str
    ) -> Optional[TerminalOutcome]:
        parts = session.attachments.consume()
        if prompt:
            parts.append(Part.text_part(prompt))
        if not parts:
            return None

        session.append_user_turn(parts)
        body = build_request_body(
            self.config, session.current_history_snapshot(), session.system_prompt
        )
        request = build_standard_request(self.config, body)
        outcome = await self.transport.send_once(request, self.create_decoder(session))
        return self._commit(session, outcome)

    async def _send_free_prompt(
        self, session: ChatSession, prompt: str
    ) -> Optional[TerminalOutcome]:
        if not prompt and not len(session.attachments):
            return None

        text = session.attachments.combined_text() + prompt
        self.check_free_context(session, text)
        session.attachments.clear()
        session.legacy_state.reset_for_prompt()

        # The transcript carries the history; the new turn is passed separately
        request = build_legacy_request(
            self.config, session.current_history_snapshot(), text
        )
        session.append_user_turn([Part.text_part(text)])
        outcome = await self.transport.send_once(request, self.create_decoder(session))
        return self._commit(session, outcome)

    def check_free_context(self, session: ChatSession, text: str) -> None:
        """Reject turns that would push the key-free transcript over its limit."""
        history_size = sum(
            len(turn.first_text)
            for turn in session.history
            if turn.first_text is not None
        )
        size = history_size + len(text) + 1
        if size > MAX_FREE_MODE_CONTEXT_SIZE:
            session.attachments.clear()
            raise ContextTooLargeError(size, MAX_FREE_MODE_CONTEXT_SIZE)

    def _commit(self, session: ChatSession, outcome: TerminalOutcome) -> TerminalOutcome:
        if not outcome.success:
            session.rollback_last_turn()
            logger.warning(
                f"Request failed with status {outcome.http_status}, user turn rolled back"
            )
            return outcome

        session.append_model_turn(outcome.full_text)
        session.last_model_response = outcome.full_text
        logger.info(
            f"Response committed ({len(outcome.full_text)} chars, "
            f"{outcome.attempts} attempt(s))"
        )
        return outcome

    async def request_location(self, session: ChatSession) -> TerminalOutcome:
        """Ask the key-free endpoint for the caller's location.

        Uses a fixed minimal prompt; the history is neither read nor changed.
        """
        state = session.legacy_state
        state.reset_for_prompt()
        state.location_bits = self.config.location_mode & (LOCATION_NAME | LOCATION_MAP)
        request = build_legacy_request(self.config, [], LOCATION_QUERY_PROMPT)
        try:
            return await self.transport.send_once(
                request, LegacyDecoder(self.sink, state)
            )
        finally:
            state.location_bits = 0
