from chat_core.domain.conversation import Chat, Message
from chat_core.domain.models import ChatMessage, LlmResponse, Tokens


def test_models_exist():
    cm = ChatMessage.from_any({"role": "user", "content": "hi"})
    assert cm == ChatMessage(role="user", content="hi")
    assert cm.to_payload() == {"role": "user", "content": "hi"}
    chat = Chat(id=1, uuid="u1", title="t", created_at=1700000000000)
    assert chat.to_dict()["created_at"] == 1700000000000
    msg = Message(id=1, uuid="m1", chat_id=1, sender_id=None, provider="user", role="user", content="x", created_at=1)
    assert msg.to_dict()["sender_id"] is None


def test_response_and_tokens_shape():
    assert LlmResponse(provider="Claude", content="x").to_dict() == {"provider": "Claude", "content": "x", "error": None}
    assert Tokens.from_mapping({"claude": "c"}).to_dict() == {"chatgpt": "", "claude": "c", "gemini": ""}
    assert Tokens.from_mapping(None) == Tokens()
