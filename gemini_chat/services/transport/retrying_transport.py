"""
Retrying HTTP transport for streamed exchanges.

One logical request = at most ``max_attempts`` attempts. Only the
"temporarily unavailable" status is retried, after a fixed delay; every
other non-success status and every network failure is final. The payload is
built once by the caller and sent verbatim on each attempt, while client,
response and line buffer are created fresh for every attempt.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from common.constants import (
    BUFFER_EXHAUSTED_STATUS,
    MAX_ATTEMPTS,
    RETRY_DELAY_SECONDS,
    RETRYABLE_STATUS,
    SUCCESS_STATUS,
    TRANSPORT_FAILURE_STATUS,
)
from common.exception.exceptions import StreamBufferOverflowError
from gemini_chat.services.streaming.decoders.base import StreamDecoder
from gemini_chat.services.transport.error_parser import parse_error_message
from gemini_chat.services.transport.outcomes import (
    PreparedRequest,
    TerminalOutcome,
    TransportFailure,
    TransportSuccess,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]
SleepFunc = Callable[[float], Awaitable[None]]


class RetryingTransport:
    """Sends a prepared request with a fixed-delay retry policy."""

    def __init__(
        self,
        proxy: str = "",
        timeout: float = 600.0,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        retryable_status: int = RETRYABLE_STATUS,
        client_factory: Optional[ClientFactory] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """Initialize the transport.

        Args:
            proxy: Proxy URL, empty for a direct connection
            timeout: Read timeout in seconds for each attempt
            max_attempts: Attempt cap per logical request
            retry_delay: Fixed pause between attempts in seconds
            retryable_status: The only HTTP status that is retried
            client_factory: Builds the per-attempt HTTP client (tests inject a
                mock transport here)
            sleep: Awaitable used for the inter-attempt pause
        """
        self.proxy = proxy
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.retryable_status = retryable_status
        self._client_factory = client_factory
        self._sleep = sleep

    def _create_client(self) -> httpx.AsyncClient:
        if self._client_factory is not None:
            return self._client_factory()
        timeout_config = httpx.Timeout(self.timeout, connect=60.0)
        return httpx.AsyncClient(
            timeout=timeout_config,
            proxy=self.proxy or None,
            trust_env=False,
        )

    async def send_once(
        self,
        request: PreparedRequest,
        decoder: Optional[StreamDecoder] = None,
    ) -> TerminalOutcome:
        """Run the retry loop until a terminal outcome.

        Args:
            request: Request to send on every attempt
            decoder: Streaming decoder; without one the body is buffered and
                returned in ``TransportSuccess.body``

        Returns:
            TransportSuccess or TransportFailure
        """
        outcome: TerminalOutcome = TransportFailure(TRANSPORT_FAILURE_STATUS, 0)
        for attempt in range(1, self.max_attempts + 1):
            outcome = await self._attempt(request, decoder, attempt)
            if outcome.success:
                return outcome

            if outcome.http_status == self.retryable_status and attempt < self.max_attempts:
                logger.warning(
                    f"API returned {outcome.http_status} (Service Unavailable), "
                    f"retrying... ({attempt}/{self.max_attempts})"
                )
                await self._sleep(self.retry_delay)
                continue
            break

        target = f"{request.method} {request.url.split('?')[0]}"
        if outcome.is_transport_error:
            logger.error(
                f"{target} failed after {outcome.attempts} attempt(s) without a "
                f"complete response: {outcome.error_message or 'no details'}"
            )
            return outcome

        logger.error(
            f"{target} failed after {outcome.attempts} attempt(s) "
            f"(Last HTTP code: {outcome.http_status})"
        )
        if outcome.error_message:
            logger.error(f"API Error Message: {outcome.error_message}")
        return outcome

    async def _attempt(
        self,
        request: PreparedRequest,
        decoder: Optional[StreamDecoder],
        attempt: int,
    ) -> TerminalOutcome:
        """Perform a single exchange with resources scoped to this attempt."""
        if decoder is not None:
            decoder.new_accumulator()

        status = TRANSPORT_FAILURE_STATUS
        body = b""
        aborted = False
        try:
            async with self._create_client() as client:
                async with client.stream(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.content,
                ) as response:
                    status = response.status_code
                    if status != SUCCESS_STATUS or decoder is None:
                        body = await response.aread()
                    else:
                        async for chunk in response.aiter_bytes():
                            decoder.feed(chunk)
                            if decoder.abort_requested:
                                aborted = True
                                break
                        else:
                            decoder.finish()
        except StreamBufferOverflowError as e:
            logger.error(f"Attempt {attempt}: {e}")
            return TransportFailure(BUFFER_EXHAUSTED_STATUS, attempt, str(e))
        except httpx.RequestError as e:
            # Only the decoder's own abort may end a side-channel request successfully
            logger.error(f"Attempt {attempt}: transport error: {e!r}")
            return TransportFailure(TRANSPORT_FAILURE_STATUS, attempt, str(e) or None)

        if aborted and decoder.side_channel_complete:
            logger.info("Transfer stopped early after side-channel data was collected")
            return TransportSuccess(decoder.full_text, attempt, status, aborted=True)

        if status == SUCCESS_STATUS:
            full_text = decoder.full_text if decoder is not None else ""
            return TransportSuccess(full_text, attempt, status, body=body)

        return TransportFailure(status, attempt, parse_error_message(body))
