"""统一的对话与结果数据模型。

本模块定义了三家 Provider 之间共享的标准数据结构：

- ChatMessage: 发给 LLM 的一条消息（仅 role + content）。
- LlmResponse: 从 Provider 解析后的统一响应结果。
- Tokens: 三个 Provider 的 API 密钥集合。

所有 Provider 适配器（如 ChatGptClient）都只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Union


# 消息角色类型（与 OpenAI / Anthropic 等厂商的 role 字段对应）
Role = Literal["user", "assistant", "system"]

VALID_ROLES = ("user", "assistant", "system")


@dataclass
class ChatMessage:
    """一条对话消息，按调用方给定的顺序原样发送。"""

    role: str
    content: str

    @classmethod
    def from_any(cls, value: Union["ChatMessage", Mapping[str, Any]]) -> "ChatMessage":
        """接受 ChatMessage 或 {role, content} 字典（UI 层传入的 JSON）。"""

        if isinstance(value, ChatMessage):
            return value
        return cls(role=str(value.get("role") or ""), content=str(value.get("content") or ""))

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LlmResponse:
    """一次对话调用的统一结果。

    - provider: Provider 展示名（"ChatGPT" / "Claude" / "Gemini"）。
    - content: 模型回复文本；缺失时为各 Provider 的占位文本。
    - error: 成功时恒为 None，失败通过异常抛出。
    """

    provider: str
    content: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Tokens:
    """三个 Provider 的 API 密钥，缺失的键为空字符串。"""

    chatgpt: str = ""
    claude: str = ""
    gemini: str = ""

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Tokens":
        data = data or {}
        return cls(
            chatgpt=str(data.get("chatgpt") or ""),
            claude=str(data.get("claude") or ""),
            gemini=str(data.get("gemini") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)
