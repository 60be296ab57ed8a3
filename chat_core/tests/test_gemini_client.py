import pytest

from chat_core.domain.exceptions import InvalidInputError, ProviderError
from chat_core.providers.gemini_client import GeminiClient


def _reply(text):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def test_gemini_client_basic(http_stub, settings_stub):
    http_stub.respond(payload=_reply("hola"))
    messages = [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "again"},
    ]
    res = GeminiClient(settings_stub).chat("g-key", messages, "gemini-2.5-flash")

    assert res.provider == "Gemini"
    assert res.content == "hola"
    call = http_stub.calls[0]
    assert call["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
    )
    assert call["params"] == {"key": "g-key"}
    assert "x-api-key" not in call["headers"]
    assert "Authorization" not in call["headers"]
    assert call["json"] == {
        "contents": [
            {"role": "user", "parts": [{"text": "hi"}]},
            {"role": "model", "parts": [{"text": "hello"}]},
            {"role": "user", "parts": [{"text": "again"}]},
        ],
        "generationConfig": {"maxOutputTokens": 16384},
    }


def test_default_model_is_kept_even_outside_allow_list(http_stub, settings_stub):
    http_stub.respond(payload=_reply("x"))
    GeminiClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}], "gemini-ultra")
    assert "/models/gemini-1.5-flash-latest:generateContent" in http_stub.calls[0]["url"]


def test_validation_happens_before_network(http_stub, settings_stub):
    client = GeminiClient(settings_stub)
    with pytest.raises(InvalidInputError):
        client.chat("", [{"role": "user", "content": "hi"}])
    with pytest.raises(InvalidInputError):
        client.chat("k", [])
    assert http_stub.calls == []


def test_missing_text_uses_placeholder(http_stub, settings_stub):
    http_stub.respond(payload={"candidates": [{"finishReason": "SAFETY"}]})
    res = GeminiClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}])
    assert res.content == "No content received from Gemini."


def test_http_error_raises_provider_error(http_stub, settings_stub):
    http_stub.respond(status_code=400, text="API key not valid")
    with pytest.raises(ProviderError, match=r"Gemini API Error \(400\): API key not valid"):
        GeminiClient(settings_stub).chat("k", [{"role": "user", "content": "hi"}])


def test_blank_message_content_is_not_checked(http_stub, settings_stub):
    # Gemini 同样不逐条校验消息内容
    http_stub.respond(payload=_reply("ok"))
    res = GeminiClient(settings_stub).chat("k", [{"role": "user", "content": "  "}])
    assert res.content == "ok"
    assert len(http_stub.calls) == 1
