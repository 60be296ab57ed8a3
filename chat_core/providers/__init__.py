"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 公共流程 (base)。
- 维护 Provider 默认模型与模型白名单 (registry)。
- 提供各厂商的具体实现 (chatgpt_client、claude_client、gemini_client)。
"""

from typing import Dict, Type

from chat_core.config.settings import settings
from chat_core.domain.exceptions import InvalidInputError
from chat_core.providers.base import BaseProviderClient
from chat_core.providers.chatgpt_client import ChatGptClient
from chat_core.providers.claude_client import ClaudeClient
from chat_core.providers.gemini_client import GeminiClient


PROVIDER_CLIENTS: Dict[str, Type[BaseProviderClient]] = {
    "chatgpt": ChatGptClient,
    "claude": ClaudeClient,
    "gemini": GeminiClient,
}


def create_provider(name: str, cfg=None) -> BaseProviderClient:
    """根据名称（不区分大小写）创建 Provider 实例。"""

    client_cls = PROVIDER_CLIENTS.get((name or "").lower())
    if client_cls is None:
        raise InvalidInputError(f"Unknown provider: {name!r}", code="UNKNOWN_PROVIDER")
    return client_cls(cfg or settings)
