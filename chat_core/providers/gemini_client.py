"""Gemini (Google Generative Language) Provider 适配器。

与另外两家差异较大：

- API Key 放在 URL query（?key=...），而不是 Header。
- 消息被转换为 contents 数组，每条消息一个 content block，内含单个 text part。
- Gemini 用 "model" 表示助手角色，assistant 需要改写。
- 输出上限放在 generationConfig.maxOutputTokens。
"""

from typing import Any, Dict, List

from chat_core.domain.models import ChatMessage
from chat_core.providers.base import BaseProviderClient, PreparedRequest, dig
from chat_core.providers.registry import GEMINI_CONFIG, MAX_OUTPUT_TOKENS


NO_CONTENT = "No content received from Gemini."


def to_gemini_content(message: ChatMessage) -> Dict[str, Any]:
    role = "model" if message.role == "assistant" else message.role
    return {"role": role, "parts": [{"text": message.content}]}


class GeminiClient(BaseProviderClient):
    """Gemini Provider 客户端实现。"""

    config = GEMINI_CONFIG

    def build_request(self, api_key: str, messages: List[ChatMessage], model: str) -> PreparedRequest:
        return PreparedRequest(
            url=f"{self.config.base_url}/models/{model}:generateContent",
            body={
                "contents": [to_gemini_content(m) for m in messages],
                "generationConfig": {"maxOutputTokens": MAX_OUTPUT_TOKENS},
            },
            headers={"Content-Type": "application/json"},
            params={"key": api_key},
        )

    def parse_response(self, data: Any) -> str:
        content = dig(data, "candidates", 0, "content", "parts", 0, "text")
        return content if isinstance(content, str) else NO_CONTENT
