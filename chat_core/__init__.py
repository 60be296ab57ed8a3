"""Chat Core 顶层包。

该包提供桌面聊天应用的后端实现，包括配置加载、领域模型、
三家 LLM Provider（ChatGPT / Claude / Gemini）适配、SQLite 会话存储
以及 .env 凭据存储，统一通过 chat_core.api.service 对外提供命令接口。
"""

from chat_core.domain.models import ChatMessage, LlmResponse, Tokens
from chat_core.providers import create_provider

__all__ = ["ChatMessage", "LlmResponse", "Tokens", "create_provider"]
