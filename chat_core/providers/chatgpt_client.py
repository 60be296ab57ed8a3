"""ChatGPT (OpenAI) Provider 适配器。

- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>
- 推理模型（o1/o3/o4 系列，模型名以 "o" 开头）使用 max_completion_tokens，
  其余模型使用 max_tokens。
"""

from typing import Any, List, Sequence

from chat_core.domain.exceptions import InvalidInputError
from chat_core.domain.models import ChatMessage
from chat_core.providers.base import BaseProviderClient, PreparedRequest, dig
from chat_core.providers.registry import CHATGPT_CONFIG, MAX_OUTPUT_TOKENS


NO_CONTENT = "No content"


def uses_max_completion_tokens(model: str) -> bool:
    """模型名首字母为 o（不区分大小写）即视为推理模型。"""

    return model[:1].lower() == "o"


class ChatGptClient(BaseProviderClient):
    """ChatGPT Provider 客户端实现。"""

    config = CHATGPT_CONFIG

    def validate(self, api_key: str, messages: Sequence[ChatMessage]) -> None:
        super().validate(api_key, messages)
        # 只有 ChatGPT 逐条检查消息内容，Claude / Gemini 不做此校验
        for message in messages:
            if not message.content.strip():
                raise InvalidInputError(
                    f"Message content for role '{message.role}' cannot be empty.",
                    provider=self.name,
                )

    def build_request(self, api_key: str, messages: List[ChatMessage], model: str) -> PreparedRequest:
        body = {
            "model": model,
            "messages": [m.to_payload() for m in messages],
        }
        if uses_max_completion_tokens(model):
            body["max_completion_tokens"] = MAX_OUTPUT_TOKENS
        else:
            body["max_tokens"] = MAX_OUTPUT_TOKENS
        return PreparedRequest(
            url=f"{self.config.base_url}/chat/completions",
            body=body,
            headers={
                "Authorization": f"Bearer {api_key.strip()}",
                "Content-Type": "application/json",
            },
        )

    def parse_response(self, data: Any) -> str:
        content = dig(data, "choices", 0, "message", "content")
        return content if isinstance(content, str) else NO_CONTENT
