"""Provider 与模型配置。

每个 Provider 有一份固定的模型白名单（allowed_models）与默认模型：
调用方传入的模型名只有在白名单内才会被采用，否则静默回退到默认模型。
白名单随厂商版本更新需要手动维护，集中放在这里便于对照。
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


# 三家 Provider 统一的输出 token 上限，调用方不可覆盖
MAX_OUTPUT_TOKENS = 16384


@dataclass(frozen=True)
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    display_name: str
    base_url: str
    default_model: str
    allowed_models: Tuple[str, ...]

    def select_model(self, model: Optional[str]) -> str:
        """白名单内的模型原样返回，其余一律回退为默认模型。"""

        if model and model in self.allowed_models:
            return model
        return self.default_model


CHATGPT_CONFIG = ProviderConfig(
    name="chatgpt",
    display_name="ChatGPT",
    base_url="https://api.openai.com/v1",
    default_model="gpt-4o-mini",
    allowed_models=(
        # Flagship chat models
        "chatgpt-4o-latest",
        "gpt-4.1",
        "gpt-4o",
        # Cost-optimized models
        "gpt-4o-mini",
        "gpt-4.1-mini",
        "gpt-4.1-nano",
        # Reasoning models (o1, o3, o4 series)
        "o4-mini",
        "o3",
        "o3-mini",
        "o1-pro",
        "o1",
        "o1-preview",
        "o1-mini",
    ),
)

CLAUDE_CONFIG = ProviderConfig(
    name="claude",
    display_name="Claude",
    base_url="https://api.anthropic.com/v1",
    default_model="claude-3-5-haiku-20241022",
    allowed_models=(
        "claude-opus-4-20250514",
        "claude-sonnet-4-20250514",
        "claude-3-7-sonnet-20250219",
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-5-sonnet-20240620",
        "claude-3-haiku-20240307",
        "claude-3-opus-20240229",
    ),
)

# 默认模型不在白名单内，沿用历史行为
GEMINI_CONFIG = ProviderConfig(
    name="gemini",
    display_name="Gemini",
    base_url="https://generativelanguage.googleapis.com/v1beta",
    default_model="gemini-1.5-flash-latest",
    allowed_models=(
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-2.0-flash-lite",
    ),
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "chatgpt": CHATGPT_CONFIG,
    "claude": CLAUDE_CONFIG,
    "gemini": GEMINI_CONFIG,
}


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")
