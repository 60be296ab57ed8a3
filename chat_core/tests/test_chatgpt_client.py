import httpx
import pytest

from chat_core.domain.exceptions import InvalidInputError, ProviderError, TransportError
from chat_core.domain.models import ChatMessage
from chat_core.providers.chatgpt_client import ChatGptClient, uses_max_completion_tokens


def _reply(text):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}]}


def test_chatgpt_client_basic(http_stub, settings_stub):
    http_stub.respond(payload=_reply("ok"))
    res = ChatGptClient(settings_stub).chat("sk-test", [ChatMessage(role="user", content="hi")], "gpt-4o")

    assert res.provider == "ChatGPT"
    assert res.content == "ok"
    assert res.error is None
    call = http_stub.calls[0]
    assert call["url"] == "https://api.openai.com/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["json"] == {
        "model": "gpt-4o",
        "messages": [{"role": "user", "content": "hi"}],
        "max_tokens": 16384,
    }


def test_reasoning_model_uses_max_completion_tokens(http_stub, settings_stub):
    http_stub.respond(payload=_reply("ok"))
    ChatGptClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}], "o3")

    body = http_stub.calls[0]["json"]
    assert body["max_completion_tokens"] == 16384
    assert "max_tokens" not in body


def test_uses_max_completion_tokens_is_case_insensitive():
    assert uses_max_completion_tokens("O1")
    assert uses_max_completion_tokens("o4-mini")
    assert not uses_max_completion_tokens("gpt-4o")
    assert not uses_max_completion_tokens("")


def test_unknown_model_falls_back_to_default(http_stub, settings_stub):
    http_stub.respond(payload=_reply("ok"))
    ChatGptClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}], "gpt-5-ultra")

    body = http_stub.calls[0]["json"]
    assert body["model"] == "gpt-4o-mini"
    assert body["max_tokens"] == 16384


def test_api_key_is_trimmed_in_bearer_header(http_stub, settings_stub):
    http_stub.respond(payload=_reply("ok"))
    ChatGptClient(settings_stub).chat("  k  ", [{"role": "user", "content": "hi"}])
    assert http_stub.calls[0]["headers"]["Authorization"] == "Bearer k"


@pytest.mark.parametrize("api_key", ["", "   "])
def test_empty_api_key_never_hits_network(http_stub, settings_stub, api_key):
    with pytest.raises(InvalidInputError, match="API key cannot be empty"):
        ChatGptClient(settings_stub).chat(api_key, [{"role": "user", "content": "hi"}])
    assert http_stub.calls == []


def test_empty_messages_never_hit_network(http_stub, settings_stub):
    with pytest.raises(InvalidInputError, match="Messages cannot be empty"):
        ChatGptClient(settings_stub).chat("k", [])
    assert http_stub.calls == []


def test_blank_message_content_is_rejected(http_stub, settings_stub):
    messages = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "  "}]
    with pytest.raises(InvalidInputError, match="role 'assistant'"):
        ChatGptClient(settings_stub).chat("k", messages)
    assert http_stub.calls == []


def test_missing_content_uses_placeholder(http_stub, settings_stub):
    http_stub.respond(payload={"choices": []})
    res = ChatGptClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}])
    assert res.content == "No content"


def test_http_error_raises_provider_error(http_stub, settings_stub):
    http_stub.respond(status_code=401, text='{"error": "bad key"}')
    with pytest.raises(ProviderError) as exc:
        ChatGptClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}])
    assert exc.value.status_code == 401
    assert exc.value.provider == "ChatGPT"
    assert exc.value.body == '{"error": "bad key"}'
    assert "ChatGPT API Error (401)" in exc.value.message


def test_transport_failure_raises_transport_error(http_stub, settings_stub):
    http_stub.error = httpx.ConnectError("connection refused")
    with pytest.raises(TransportError, match="ChatGPT API Request Failed"):
        ChatGptClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}])


def test_invalid_json_body_raises_provider_error(http_stub, settings_stub):
    http_stub.respond(status_code=200, payload=None, text="<html>")
    with pytest.raises(ProviderError, match="invalid JSON"):
        ChatGptClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}])
