"""Tests for the chat completions classifier client and its parsing.

Every request goes through httpx.MockTransport, so the tests see exactly
what would be sent on the wire and can answer with any payload.
"""

import json

import httpx
import pytest

from disfluency_analyzer.api.client import ClassifierAPIError, OpenAIClassifierClient
from disfluency_analyzer.api.models import (
    ChatCompletion,
    ClassifierResponseError,
    parse_classification,
    render_indexed_sentence,
)
from disfluency_analyzer.config import OPENAI_CHAT_MODEL
from disfluency_analyzer.core.segmentation import tokenize

TOKENS = tokenize("Um, I I was thinking.")

CLASSIFICATION = {
    "filler_words": {"Um,": [{"start": 0, "end": 0}]},
    "consecutive_word_repetitions": {"I I": [{"start": 1, "end": 2}]},
}


def _completion(content):
    return {
        "model": "gpt-4o",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


def _client_for(handler, **kwargs):
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenAIClassifierClient(
        api_key="sk-test",
        base_url="https://llm.test/v1/",
        http_client=http_client,
        **kwargs,
    )


class TestRenderIndexedSentence:

    def test_format(self):
        assert render_indexed_sentence(TOKENS) == "[0]Um, [1]I [2]I [3]was [4]thinking."

    def test_empty(self):
        assert render_indexed_sentence([]) == ""


class TestParsing:

    def test_completion_envelope(self):
        completion = ChatCompletion.from_dict(_completion('{"disfluencies": {}}'))
        assert completion.content == '{"disfluencies": {}}'
        assert completion.model == "gpt-4o"

    @pytest.mark.parametrize("payload", [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        ["not", "an", "object"],
    ])
    def test_malformed_envelope(self, payload):
        with pytest.raises(ClassifierResponseError):
            ChatCompletion.from_dict(payload)

    def test_classification_content(self):
        content = json.dumps({"disfluencies": CLASSIFICATION})
        assert parse_classification(content) == CLASSIFICATION

    def test_missing_disfluencies_means_none(self):
        assert parse_classification("{}") == {}

    @pytest.mark.parametrize("content", [
        "not json",
        '["a list"]',
        '{"disfluencies": ["um"]}',
    ])
    def test_malformed_content(self, content):
        with pytest.raises(ClassifierResponseError):
            parse_classification(content)


class TestOpenAIClassifierClient:

    def test_request_shape(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion(json.dumps({"disfluencies": {}})))

        _client_for(handler, model="test-model").classify(TOKENS)

        assert seen["url"] == "https://llm.test/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        body = seen["body"]
        assert body["model"] == "test-model"
        assert body["temperature"] == 0
        assert body["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert body["messages"][1]["content"] == "[0]Um, [1]I [2]I [3]was [4]thinking."

    def test_prompt_does_not_ask_for_pauses(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion("{}"))

        _client_for(handler).classify(TOKENS)
        assert "pause" not in seen["body"]["messages"][0]["content"].lower()

    def test_returns_disfluencies(self):
        def handler(request):
            return httpx.Response(
                200, json=_completion(json.dumps({"disfluencies": CLASSIFICATION}))
            )

        assert _client_for(handler).classify(TOKENS) == CLASSIFICATION

    def test_http_error_returns_empty(self, caplog):
        def handler(request):
            return httpx.Response(500, json={"error": {"message": "overloaded"}})

        assert _client_for(handler).classify(TOKENS) == {}
        assert "overloaded" in caplog.text

    def test_error_body_returns_empty(self):
        def handler(request):
            return httpx.Response(200, json={"error": {"message": "bad key"}})

        assert _client_for(handler).classify(TOKENS) == {}

    def test_non_json_content_returns_empty(self):
        def handler(request):
            return httpx.Response(200, json=_completion("Sorry, I can't help with that."))

        assert _client_for(handler).classify(TOKENS) == {}

    def test_non_json_body_returns_empty(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway</html>")

        assert _client_for(handler).classify(TOKENS) == {}

    def test_transport_error_returns_empty(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert _client_for(handler).classify(TOKENS) == {}

    def test_complete_raises_api_error(self):
        def handler(request):
            return httpx.Response(401, text="unauthorized")

        with pytest.raises(ClassifierAPIError) as exc_info:
            _client_for(handler).complete(TOKENS)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "unauthorized"

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError):
            OpenAIClassifierClient()

    def test_model_defaults_from_config(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert OpenAIClassifierClient().model == OPENAI_CHAT_MODEL

    def test_context_manager_owns_its_client(self):
        client = OpenAIClassifierClient(api_key="sk-test")
        with client as entered:
            assert entered is client
            assert client._client is not None
        assert client._client is None

    def test_injected_client_is_not_closed(self):
        http_client = httpx.Client(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json=_completion("{}"))
        ))
        with OpenAIClassifierClient(api_key="sk-test", http_client=http_client) as client:
            client.classify(TOKENS)
        assert not http_client.is_closed
        http_client.close()
