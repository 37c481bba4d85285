"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体厂商模型名”解耦：

- 逻辑名（logical_name）：在代码里使用的统一名称，例如 "neuro-chat"。
- provider_model：厂商实际提供的模型 ID，例如 "gemini-2.5-flash"。

上层只关心逻辑名，具体用哪个底层模型由这里集中配置，便于后续升级或切换。
未在 registry 中登记的名称会被当作厂商模型 ID 直接使用。"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str
    default_temperature: Optional[float] = None
    enable_search: bool = True


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    models: Dict[str, ModelConfig]


# Gemini 配置（neuro-chat 默认走 gemini-2.5-flash + Google 搜索 grounding）
GEMINI_CONFIG = ProviderConfig(
    name="gemini",
    base_url="https://generativelanguage.googleapis.com/v1beta",
    models={
        "neuro-chat": ModelConfig(
            logical_name="neuro-chat",
            provider_model="gemini-2.5-flash",
        )
    },
)


def resolve_model(name: str) -> ModelConfig:
    """根据逻辑名获取 ModelConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in GEMINI_CONFIG.models.items():
        if k.lower() == key:
            return cfg
    return ModelConfig(logical_name=name, provider_model=name)
