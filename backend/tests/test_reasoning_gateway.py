import json

import httpx
import openai
import pytest

from adaptwell.services.reasoning import factory
from adaptwell.services.reasoning.base import ReasoningError
from adaptwell.services.reasoning.openai_gateway import OpenAIReasoningGateway


class DummyChoices:
    def __init__(self, content):
        self.message = type("obj", (), {"content": content})


class DummyCompletion:
    def __init__(self, content):
        self.choices = [DummyChoices(content)]


def _client_returning(content=None, error=None, calls=None):
    class DummyClient:
        def __init__(self, *args, **kwargs):
            if calls is not None:
                calls.append(("init", kwargs))

        class chat:  # type: ignore[valid-type]
            class completions:  # type: ignore[valid-type]
                @staticmethod
                def create(*args, **kwargs):
                    if calls is not None:
                        calls.append(("create", kwargs))
                    if error is not None:
                        raise error
                    return DummyCompletion(content)

    return DummyClient


def _gateway():
    return OpenAIReasoningGateway(api_key="test-key", model="gpt-test", timeout_seconds=5)


def test_complete_requests_json_object_and_parses_reply(monkeypatch):
    calls = []
    reply = {"reasoning": "ok", "action": {"type": "continue"}, "confidence": 0.8}
    monkeypatch.setattr("openai.OpenAI", _client_returning(json.dumps(reply), calls=calls))

    result = _gateway().complete("system text", "user text", 0.3)

    assert result == reply
    init_kwargs = calls[0][1]
    assert init_kwargs["timeout"] == 5
    create_kwargs = calls[1][1]
    assert create_kwargs["model"] == "gpt-test"
    assert create_kwargs["response_format"] == {"type": "json_object"}
    assert create_kwargs["temperature"] == 0.3
    assert create_kwargs["messages"][0] == {"role": "system", "content": "system text"}
    assert create_kwargs["messages"][1] == {"role": "user", "content": "user text"}


def test_empty_reply_is_an_empty_object(monkeypatch):
    monkeypatch.setattr("openai.OpenAI", _client_returning(None))

    assert _gateway().complete("s", "u", 0.7) == {}


def test_malformed_json_raises(monkeypatch):
    monkeypatch.setattr("openai.OpenAI", _client_returning("not json at all"))

    with pytest.raises(ReasoningError, match="malformed JSON"):
        _gateway().complete("s", "u", 0.7)


def test_non_object_json_raises(monkeypatch):
    monkeypatch.setattr("openai.OpenAI", _client_returning("[1, 2, 3]"))

    with pytest.raises(ReasoningError, match="expected a JSON object"):
        _gateway().complete("s", "u", 0.7)


def test_timeout_is_reported(monkeypatch):
    timeout = openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    monkeypatch.setattr("openai.OpenAI", _client_returning(error=timeout))

    with pytest.raises(ReasoningError, match="timed out after 5s"):
        _gateway().complete("s", "u", 0.7)


def test_provider_error_is_wrapped(monkeypatch):
    monkeypatch.setattr("openai.OpenAI", _client_returning(error=openai.OpenAIError("quota exceeded")))

    with pytest.raises(ReasoningError, match="quota exceeded"):
        _gateway().complete("s", "u", 0.7)


@pytest.mark.parametrize("key", [None, "", "  ", "your-openai-api-key", "sk-your-openai-api-key-here"])
def test_placeholder_keys_are_not_credentials(monkeypatch, key):
    monkeypatch.setattr(factory.settings, "openai_api_key", key)

    assert factory.has_reasoning_credentials() is False
    with pytest.raises(ReasoningError):
        factory.get_reasoning_gateway()


def test_real_key_builds_openai_gateway(monkeypatch):
    monkeypatch.setattr(factory.settings, "openai_api_key", "sk-live-123")
    monkeypatch.setattr("openai.OpenAI", _client_returning("{}"))

    gateway = factory.get_reasoning_gateway()

    assert isinstance(gateway, OpenAIReasoningGateway)
    assert gateway.model == factory.settings.openai_model
