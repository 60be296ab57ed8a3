"""Provider 适配层的公共实现。

三家厂商的调用流程完全一致，只在以下几点不同：

- 请求 URL、认证方式（Header 还是 URL query）与请求体结构；
- 响应 JSON 中回复文本所在的路径；
- 个别厂商额外的入参校验（如 ChatGPT 的逐条消息非空检查）。

BaseProviderClient 负责校验、模型选择、HTTP 调用与错误映射，
子类只需实现 build_request / parse_response，必要时覆盖 validate。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import httpx

from chat_core.config.settings import settings
from chat_core.domain.exceptions import InvalidInputError, ProviderError, TransportError
from chat_core.domain.models import ChatMessage, LlmResponse
from chat_core.infrastructure.logging.logger import logger
from chat_core.providers.registry import ProviderConfig


MessageInput = Union[ChatMessage, Mapping[str, Any]]


@dataclass
class PreparedRequest:
    """一次已构造好的 HTTP 请求（POST + JSON body）。"""

    url: str
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


def dig(data: Any, *path: Union[str, int]) -> Any:
    """按 key / 下标逐层取值，任一层缺失返回 None。"""

    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or step >= len(current):
                return None
        elif not isinstance(current, dict):
            return None
        current = current[step] if isinstance(step, int) else current.get(step)
        if current is None:
            return None
    return current


class BaseProviderClient:
    """Provider 客户端基类。

    - config: 对应的 ProviderConfig（名称、默认模型、白名单）。
    - chat: 对外统一调用入口，返回 LlmResponse。
    """

    config: ProviderConfig

    def __init__(self, cfg=settings):
        self._settings = cfg

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def display_name(self) -> str:
        return self.config.display_name

    def chat(
        self,
        api_key: str,
        messages: Iterable[MessageInput],
        model: Optional[str] = None,
    ) -> LlmResponse:
        """执行一次非流式对话调用。

        步骤：
        1. 校验 api_key 与消息列表（失败时不发起任何网络请求）。
        2. 在白名单内选择模型，否则回退默认模型。
        3. 构造厂商请求并发送，捕获网络错误与非 2xx 响应。
        4. 从响应 JSON 中取出回复文本。
        """

        msgs = [ChatMessage.from_any(m) for m in (messages or [])]
        self.validate(api_key, msgs)
        selected_model = self.config.select_model(model)
        request = self.build_request(api_key, msgs, selected_model)
        log_extra = {"provider": self.name, "model": selected_model, "messages": len(msgs)}
        logger.info("LLM request", extra={"extra": log_extra})
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    request.url,
                    json=request.body,
                    headers=request.headers,
                    params=request.params or None,
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            logger.error("LLM transport failure", extra={"extra": {**log_extra, "error": str(e)}})
            raise TransportError(self.display_name, str(e))
        if not 200 <= resp.status_code < 300:
            logger.error(
                "LLM API error",
                extra={"extra": {**log_extra, "status": resp.status_code}},
            )
            raise ProviderError(self.display_name, resp.status_code, resp.text)
        try:
            data = resp.json()
        except ValueError:
            raise ProviderError(
                self.display_name,
                resp.status_code,
                resp.text,
                message=f"{self.display_name} API returned invalid JSON: {resp.text}",
            )
        return LlmResponse(provider=self.display_name, content=self.parse_response(data))

    def validate(self, api_key: str, messages: Sequence[ChatMessage]) -> None:
        if not api_key or not api_key.strip():
            raise InvalidInputError("API key cannot be empty.", provider=self.name)
        if not messages:
            raise InvalidInputError("Messages cannot be empty.", provider=self.name)

    def build_request(self, api_key: str, messages: List[ChatMessage], model: str) -> PreparedRequest:
        raise NotImplementedError

    def parse_response(self, data: Any) -> str:
        raise NotImplementedError
