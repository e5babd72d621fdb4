"""
Unit tests for the key-free payload builder.
"""

import json
from unittest.mock import patch
from urllib.parse import parse_qs

import pytest

from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.models.content import Part, Turn
from gemini_chat.services.payloads.legacy_payload import (
    INNER_PAYLOAD_LENGTH,
    build_inner_payload,
    build_legacy_payload,
    build_legacy_request,
    build_transcript,
    normalize_language,
    system_language,
)
from tests.fixtures.stream_fixtures import create_test_history


def decode_inner(payload: str):
    outer = json.loads(payload)
    assert outer[0] is None
    return json.loads(outer[1])


class TestTranscript:
    """Tests for the conversation transcript."""

    def test_roles_capitalized_and_separated(self):
        history = [
            Turn(role="user", parts=[Part.text_part("Hi")]),
            Turn(role="model", parts=[Part.text_part("Hello!")]),
        ]

        assert build_transcript(history, "How are you?") == (
            "User: Hi\n\nModel: Hello!\n\nUser: How are you?"
        )

    def test_turns_starting_with_file_skipped(self):
        """Test that only turns whose first part is text contribute."""
        transcript = build_transcript(create_test_history(), "next")

        assert transcript == "User: Describe this project\n\nUser: And this file?\n\nUser: next"

    def test_empty_history(self):
        assert build_transcript([], "first") == "User: first"


class TestInnerPayload:
    """Tests for the positional array."""

    def test_length_and_positions(self):
        inner = build_inner_payload("User: hi", "de-DE", is_pro_model=True)

        assert len(inner) == INNER_PAYLOAD_LENGTH == 104
        assert inner[0] == ["User: hi", 0, None, None, None, None, None]
        assert inner[1] == ["de-DE"]
        assert inner[2] == ["", "", "", None, None, None, None, None, None, ""]
        assert inner[3] == "" and inner[4] == ""
        assert inner[5] is None
        assert inner[6] == [1]
        assert inner[7] == 1
        assert inner[10] == 1 and inner[11] == 1
        assert inner[17] == [[0]]
        assert inner[18] == 1
        assert inner[27] == 1
        assert inner[30] == [4]
        assert inner[41] == [1]
        assert inner[103] == []

    def test_remaining_positions_null(self):
        inner = build_inner_payload("x", "en-US", is_pro_model=False)
        populated = {0, 1, 2, 3, 4, 6, 7, 10, 11, 17, 18, 27, 30, 41, 103}

        assert all(inner[i] is None for i in range(104) if i not in populated)

    @pytest.mark.parametrize("is_pro, flag, variant", [(True, [1], [1]), (False, [0], [2])])
    def test_model_variant_flags(self, is_pro, flag, variant):
        inner = build_inner_payload("x", "en-US", is_pro_model=is_pro)

        assert inner[6] == flag
        assert inner[41] == variant

    def test_fixed_values_not_shared(self):
        first = build_inner_payload("x", "en-US", True)
        first[17][0].append(99)

        assert build_inner_payload("x", "en-US", True)[17] == [[0]]


class TestLegacyPayload:
    """Tests for the serialized outer document."""

    def test_outer_wraps_stringified_inner(self):
        payload = build_legacy_payload([], "Hi", is_pro_model=False, language="fr-FR")

        assert payload.startswith('[null,"[[')
        inner = decode_inner(payload)
        assert inner[0][0] == "User: Hi"
        assert inner[1] == ["fr-FR"]

    def test_compact_serialization(self):
        payload = build_legacy_payload([], "Hi", is_pro_model=False, language="en-US")

        assert json.dumps(json.loads(payload), separators=(",", ":"), ensure_ascii=False) == payload


class TestLegacyRequest:
    """Tests for the form-encoded request."""

    def test_form_body_and_headers(self, free_config):
        request = build_legacy_request(free_config, [], "a&b=c", language="en-US")

        assert request.url.startswith("https://gemini.google.com/_/BardChatUi/")
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded;charset=UTF-8"
        assert request.headers["Origin"] == "https://gemini.google.com"
        assert request.headers["Referer"] == "https://gemini.google.com/"

        body = request.content.decode("ascii")
        assert body.startswith("f.req=")
        payload = parse_qs(body)["f.req"][0]
        assert decode_inner(payload)[0][0] == "User: a&b=c"

    def test_pro_detection_from_model_name(self):
        config = ChatConfig(model_name="gemini-2.5-pro", free_mode=True)

        request = build_legacy_request(config, [], "x", language="en-US")

        payload = parse_qs(request.content.decode("ascii"))["f.req"][0]
        assert decode_inner(payload)[41] == [1]


class TestSystemLanguage:
    """Tests for locale normalization."""

    @pytest.mark.parametrize(
        "locale_name, expected",
        [
            ("de_DE.UTF-8", "de-DE"),
            ("en_GB", "en-GB"),
            ("fr_FR@euro", "fr-FR"),
            ("C", None),
            ("C.UTF-8", None),
            ("POSIX", None),
            (None, None),
            ("", None),
        ],
    )
    def test_normalize_language(self, locale_name, expected):
        assert normalize_language(locale_name) == expected

    def test_fallback(self):
        with patch("gemini_chat.services.payloads.legacy_payload.locale.getlocale", return_value=(None, None)):
            assert system_language() == "en-US"

    def test_from_locale(self):
        with patch(
            "gemini_chat.services.payloads.legacy_payload.locale.getlocale",
            return_value=("pt_BR", "UTF-8"),
        ):
            assert system_language() == "pt-BR"
