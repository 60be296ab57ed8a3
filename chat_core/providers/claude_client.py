"""Claude (Anthropic) Provider 适配器。

- URL: {base_url}/messages
- 认证: x-api-key Header，另需固定的 anthropic-version Header
- 输出上限字段始终为 max_tokens
"""

from typing import Any, List

from chat_core.domain.models import ChatMessage
from chat_core.providers.base import BaseProviderClient, PreparedRequest, dig
from chat_core.providers.registry import CLAUDE_CONFIG, MAX_OUTPUT_TOKENS


ANTHROPIC_VERSION = "2023-06-01"
NO_CONTENT = "No content"


class ClaudeClient(BaseProviderClient):
    """Claude Provider 客户端实现。"""

    config = CLAUDE_CONFIG

    def build_request(self, api_key: str, messages: List[ChatMessage], model: str) -> PreparedRequest:
        return PreparedRequest(
            url=f"{self.config.base_url}/messages",
            body={
                "model": model,
                "max_tokens": MAX_OUTPUT_TOKENS,
                "messages": [m.to_payload() for m in messages],
            },
            headers={
                "x-api-key": api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
        )

    def parse_response(self, data: Any) -> str:
        content = dig(data, "content", 0, "text")
        return content if isinstance(content, str) else NO_CONTENT
