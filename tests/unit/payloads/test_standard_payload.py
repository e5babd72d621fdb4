"""
Unit tests for the official API payload builder.
"""

import gzip
import json

from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.models.content import Part, PartType, Turn
from gemini_chat.services.payloads.standard_payload import (
    COUNT_TOKENS_METHOD,
    build_api_url,
    build_request_body,
    build_standard_request,
)
from tests.fixtures.stream_fixtures import create_test_history


class TestBuildRequestBody:
    """Tests for the JSON request document."""

    def test_full_document(self, api_config):
        """Test system instruction, contents, tools and generation config."""
        history = [Turn(role="user", parts=[Part.text_part("Hello")])]

        body = build_request_body(api_config, history, system_prompt="Be brief")

        assert body["systemInstruction"] == {"parts": [{"text": "Be brief"}]}
        assert body["contents"] == [{"role": "user", "parts": [{"text": "Hello"}]}]
        assert body["tools"] == [{"urlContext": {}}, {"googleSearch": {}}]
        assert body["generationConfig"] == {
            "temperature": 0.75,
            "maxOutputTokens": 65536,
            "seed": 42,
            "thinkingConfig": {"thinkingBudget": -1},
        }

    def test_file_parts_as_inline_data(self, api_config):
        body = build_request_body(api_config, create_test_history())

        assert body["contents"][1]["parts"] == [
            {"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}}
        ]
        assert "systemInstruction" not in body

    def test_sampling_parameters_only_when_set(self):
        config = ChatConfig(api_key="k", free_mode=False, top_k=40, top_p=0.9)

        generation = build_request_body(config, [])["generationConfig"]

        assert generation["topK"] == 40
        assert generation["topP"] == 0.9

    def test_tools_omitted_when_disabled(self):
        config = ChatConfig(api_key="k", google_grounding=False, url_context=False)

        assert "tools" not in build_request_body(config, [])

    def test_single_tool(self):
        config = ChatConfig(api_key="k", url_context=False)

        assert build_request_body(config, [])["tools"] == [{"googleSearch": {}}]

    def test_token_count_document(self, api_config):
        """Test that counting drops tools and generation config."""
        body = build_request_body(api_config, create_test_history(), include_generation=False)

        assert set(body) == {"contents"}


class TestWireRoundTrip:
    """Tests for lossless re-parsing of the contents array."""

    def test_three_turns_round_trip(self, api_config):
        """Test text, file and mixed turns survive serialize and parse."""
        history = create_test_history()
        compressed = build_standard_request(api_config, build_request_body(api_config, history)).content
        document = json.loads(gzip.decompress(compressed))

        parsed = [Turn.from_wire(item) for item in document["contents"]]

        assert len(parsed) == 3
        for original, restored in zip(history, parsed):
            assert restored.role == original.role
            assert [p.type for p in restored.parts] == [p.type for p in original.parts]
            assert [p.text for p in restored.parts] == [p.text for p in original.parts]
            assert [p.mime_type for p in restored.parts] == [p.mime_type for p in original.parts]
            assert [p.base64_data for p in restored.parts] == [
                p.base64_data for p in original.parts
            ]
        assert parsed[2].parts[1].type == PartType.FILE


class TestBuildStandardRequest:
    """Tests for the prepared request."""

    def test_stream_url_and_headers(self, api_config):
        request = build_standard_request(api_config, {"contents": []})

        assert request.url == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-2.5-pro:streamGenerateContent?alt=sse"
        )
        assert request.method == "POST"
        assert request.headers["Content-Encoding"] == "gzip"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["x-goog-api-key"] == "test-key"
        assert "Origin" not in request.headers

    def test_origin_header_when_configured(self):
        config = ChatConfig(api_key="k", origin="https://example.com", free_mode=False)

        request = build_standard_request(config, {"contents": []})

        assert request.headers["Origin"] == "https://example.com"

    def test_body_is_gzip_json(self, api_config):
        body = {"contents": [{"role": "user", "parts": [{"text": "é"}]}]}

        request = build_standard_request(api_config, body)

        assert json.loads(gzip.decompress(request.content).decode("utf-8")) == body

    def test_count_tokens_url(self):
        assert build_api_url("gemini-2.5-flash", COUNT_TOKENS_METHOD) == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:countTokens"
        )
