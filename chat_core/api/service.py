"""对外命令接口模块。

UI 层通过这些函数完成全部操作：会话/消息的增删查、三家 LLM 的调用、
以及凭据的读写。返回值均为可直接 JSON 序列化的 dict / list / str。
"""

import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from chat_core.config.settings import settings
from chat_core.domain.conversation import ConversationStore
from chat_core.domain.exceptions import BusinessError, InvalidInputError
from chat_core.domain.models import ChatMessage
from chat_core.infrastructure.logging.logger import logger
from chat_core.infrastructure.storage.sql_store import SqlConversationStore
from chat_core.infrastructure.storage.token_store import EnvTokenStore
from chat_core.providers import create_provider
from chat_core.providers.base import MessageInput
from chat_core.providers.registry import PROVIDER_REGISTRY, get_provider_config


_store: Optional[ConversationStore] = None
_token_store: Optional[EnvTokenStore] = None
_lock = threading.Lock()


def configure(
    store: Optional[ConversationStore] = None,
    token_store: Optional[EnvTokenStore] = None,
) -> None:
    """显式注入存储实例（测试或自定义路径时使用）。"""
    global _store, _token_store
    with _lock:
        if store is not None:
            _store = store
        if token_store is not None:
            _token_store = token_store


def reset() -> None:
    global _store, _token_store
    with _lock:
        _store = None
        _token_store = None


def get_store() -> ConversationStore:
    """获取会话存储（单例），首次使用时完成建库建表。"""
    global _store
    with _lock:
        if _store is None:
            store = SqlConversationStore(settings.database_path)
            store.initialize()
            _store = store
        return _store


def get_token_store() -> EnvTokenStore:
    global _token_store
    with _lock:
        if _token_store is None:
            _token_store = EnvTokenStore(settings.env_file_path)
        return _token_store


def _log_failure(command: str, error: Exception, **fields: Any) -> None:
    logger.error(
        f"{command} failed: {error}",
        extra={"extra": {"command": command, "code": getattr(error, "code", None), **fields}},
    )


# ---- 会话与消息 ----


def create_chat(title: str) -> Dict[str, Any]:
    try:
        return get_store().create_chat(title).to_dict()
    except BusinessError as e:
        _log_failure("create_chat", e)
        raise


def list_chats() -> List[Dict[str, Any]]:
    """列出所有会话，按创建时间倒序。"""
    try:
        return [c.to_dict() for c in get_store().list_chats()]
    except BusinessError as e:
        _log_failure("list_chats", e)
        raise


def delete_chat(chat_id: int) -> None:
    try:
        get_store().delete_chat(chat_id)
    except BusinessError as e:
        _log_failure("delete_chat", e, chat_id=chat_id)
        raise


def clear_chat(chat_id: int) -> None:
    try:
        get_store().clear_messages(chat_id)
    except BusinessError as e:
        _log_failure("clear_chat", e, chat_id=chat_id)
        raise


def create_message(
    chat_id: int,
    sender_id: Optional[str],
    provider: str,
    role: str,
    content: str,
) -> Dict[str, Any]:
    try:
        return get_store().create_message(chat_id, sender_id, provider, role, content).to_dict()
    except BusinessError as e:
        _log_failure("create_message", e, chat_id=chat_id)
        raise


def list_messages(chat_id: int) -> List[Dict[str, Any]]:
    """获取会话的所有消息，按创建时间正序。"""
    try:
        return [m.to_dict() for m in get_store().list_messages(chat_id)]
    except BusinessError as e:
        _log_failure("list_messages", e, chat_id=chat_id)
        raise


# ---- LLM 调用 ----


def _call_provider(
    provider: str,
    api_key: str,
    messages: Iterable[MessageInput],
    model: Optional[str],
) -> Dict[str, Any]:
    try:
        client = create_provider(provider, settings)
        return client.chat(api_key, messages, model).to_dict()
    except BusinessError as e:
        _log_failure(f"call_{provider}_api", e, model=model)
        raise


def call_chatgpt_api(api_key: str, messages: Iterable[MessageInput], model: Optional[str] = None) -> Dict[str, Any]:
    return _call_provider("chatgpt", api_key, messages, model)


def call_claude_api(api_key: str, messages: Iterable[MessageInput], model: Optional[str] = None) -> Dict[str, Any]:
    return _call_provider("claude", api_key, messages, model)


def call_gemini_api(api_key: str, messages: Iterable[MessageInput], model: Optional[str] = None) -> Dict[str, Any]:
    return _call_provider("gemini", api_key, messages, model)


def list_models() -> Dict[str, Dict[str, Any]]:
    """各 Provider 可选模型（白名单）与默认模型，供 UI 下拉框使用。"""
    return {
        name: {"default": cfg.default_model, "models": list(cfg.allowed_models)}
        for name, cfg in PROVIDER_REGISTRY.items()
    }


def send_message(
    chat_id: int,
    provider: str,
    content: str,
    model: Optional[str] = None,
    sender_id: Optional[str] = None,
) -> Dict[str, Any]:
    """发送一条用户消息并保存模型回复。

    流程：保存用户消息 -> 读取该 Provider 的 API Key -> 以整段会话历史调用
    Provider -> 保存助手回复。Provider 调用失败时用户消息仍然保留。

    Returns:
        包含 user_message、assistant_message 与 response 的字典
    """
    try:
        cfg = get_provider_config(provider or "")
    except KeyError:
        raise InvalidInputError(f"Unknown provider: {provider!r}", code="UNKNOWN_PROVIDER")
    text = (content or "").rstrip()
    if not text.strip():
        raise InvalidInputError("Message content cannot be empty.")

    try:
        store = get_store()
        user_msg = store.create_message(chat_id, sender_id, cfg.display_name, "user", text)
        api_key = getattr(get_token_store().get_tokens(), cfg.name)
        if not api_key:
            raise InvalidInputError(f"Missing API key for {cfg.name}", code="MISSING_API_KEY")
        history = [ChatMessage(role=m.role, content=m.content) for m in store.list_messages(chat_id)]
        response = create_provider(cfg.name, settings).chat(api_key, history, model)
        assistant_msg = store.create_message(chat_id, None, response.provider, "assistant", response.content)
    except BusinessError as e:
        _log_failure("send_message", e, chat_id=chat_id, provider=cfg.name)
        raise
    return {
        "user_message": user_msg.to_dict(),
        "assistant_message": assistant_msg.to_dict(),
        "response": response.to_dict(),
    }


# ---- 凭据 ----


def save_tokens(tokens: Mapping[str, Any]) -> str:
    try:
        return get_token_store().save_tokens(tokens)
    except BusinessError as e:
        _log_failure("save_tokens", e)
        raise


def get_tokens() -> Dict[str, str]:
    try:
        return get_token_store().get_tokens().to_dict()
    except BusinessError as e:
        _log_failure("get_tokens", e)
        raise


def clear_tokens() -> str:
    try:
        return get_token_store().clear_tokens()
    except BusinessError as e:
        _log_failure("clear_tokens", e)
        raise
