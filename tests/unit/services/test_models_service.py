"""
Unit tests for ModelsService.
"""

import gzip
import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from common.exception.exceptions import ApiRequestError
from gemini_chat.models.content import Part
from gemini_chat.services.chat.models_service import ModelInfo, ModelsService
from gemini_chat.services.transport.retrying_transport import RetryingTransport
from tests.fixtures.stream_fixtures import mock_client_factory, sequence_handler


def make_service(config, responses, fake_sleep, seen=None):
    transport = RetryingTransport(
        client_factory=mock_client_factory(sequence_handler(responses, seen)),
        sleep=fake_sleep,
    )
    return ModelsService(config, transport)


class TestListModels:
    """Tests for the paginated model listing."""

    @pytest.mark.asyncio
    async def test_follows_page_tokens(self, api_config, fake_sleep):
        """Test that every page is fetched and names lose their prefix."""
        seen = []
        pages = [
            httpx.Response(
                200,
                json={
                    "models": [{"name": "models/gemini-2.5-pro", "displayName": "Gemini 2.5 Pro"}],
                    "nextPageToken": "page-2",
                },
            ),
            httpx.Response(200, json={"models": [{"name": "models/embedding-001"}]}),
        ]
        service = make_service(api_config, pages, fake_sleep, seen)

        models = await service.list_models()

        assert models == [
            ModelInfo("gemini-2.5-pro", "Gemini 2.5 Pro"),
            ModelInfo("embedding-001", None),
        ]
        assert [parse_qs(urlsplit(str(r.url)).query) for r in seen] == [
            {"pageSize": ["50"]},
            {"pageSize": ["50"], "pageToken": ["page-2"]},
        ]
        assert all(r.method == "GET" for r in seen)
        assert seen[0].headers["x-goog-api-key"] == "test-key"

    @pytest.mark.asyncio
    async def test_retries_unavailable(self, api_config, fake_sleep):
        pages = [httpx.Response(503), httpx.Response(200, json={"models": []})]
        service = make_service(api_config, pages, fake_sleep)

        assert await service.list_models() == []
        assert fake_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_failure_raises(self, api_config, fake_sleep):
        service = make_service(
            api_config,
            [httpx.Response(403, json={"error": {"message": "denied"}})],
            fake_sleep,
        )

        with pytest.raises(ApiRequestError) as exc_info:
            await service.list_models()

        assert exc_info.value.status == 403
        assert exc_info.value.message == "denied"

    def test_describe(self):
        assert ModelInfo("m", None).describe() == "- m (N/A)"


class TestCountTokens:
    """Tests for token counting."""

    @pytest.mark.asyncio
    async def test_counts_history_and_pending(self, api_config, session, fake_sleep):
        """Test that pending attachments are counted but not kept in history."""
        seen = []
        session.append_user_turn([Part.text_part("Hi")])
        session.attachments.add(Part.file_part("image/png", "AAAA"))
        service = make_service(
            api_config, [httpx.Response(200, json={"totalTokens": 321})], fake_sleep, seen
        )

        total = await service.count_tokens(session)

        assert total == 321
        assert len(session.history) == 1
        assert len(session.attachments) == 1
        body = json.loads(gzip.decompress(seen[0].content))
        assert set(body) == {"contents"}
        assert len(body["contents"]) == 2
        assert str(seen[0].url).endswith(":countTokens")

    @pytest.mark.asyncio
    async def test_failure_returns_none(self, api_config, session, fake_sleep):
        service = make_service(api_config, [httpx.Response(400, text="bad")], fake_sleep)

        assert await service.count_tokens(session) is None

    @pytest.mark.asyncio
    async def test_missing_total(self, api_config, session, fake_sleep):
        service = make_service(api_config, [httpx.Response(200, json={})], fake_sleep)

        assert await service.count_tokens(session) is None
