"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


YAML_SECTION = "neurobuddy"


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 neurobuddy.yaml / config.yaml 加载配置（若存在）。

    文件可以直接是扁平的键值，也可以把配置放在顶层 ``neurobuddy:`` 段下，
    方便与其他工具共用同一个 config.yaml。
    """
    candidates = []
    explicit = os.getenv("NEUROBUDDY_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    for name in ("neurobuddy.yaml", "config.yaml"):
        candidates.append(Path.cwd() / name)
        candidates.append(Path(__file__).resolve().parents[2] / name)

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if not path.exists():
                continue
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
            continue
        if isinstance(data, dict) and isinstance(data.get(YAML_SECTION), dict):
            data = data[YAML_SECTION]
        if isinstance(data, dict):
            return data
        warnings.warn(f"Config file {path} is not a mapping, ignored")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- Gemini 相关配置 ----
    # 缺失时不报错，由 create_session 返回 None 交给 UI 降级处理
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY", "api_key"),
        description="Gemini API 密钥",
    )
    model: str = Field(
        default="neuro-chat",
        description="逻辑模型名，由 registry 映射为具体厂商模型",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini API 基础URL",
    )
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")
    temperature: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=2.0,
        description="生成温度，为空时使用模型默认值",
    )
    locale: str = Field(default="es", description="系统提示词语言")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=(),
    )

    @classmethod
    def _config_source(cls) -> Dict[str, Any]:
        """YAML 配置源：只保留已知字段，键名不区分大小写。"""
        known = set(cls.model_fields)
        picked: Dict[str, Any] = {}
        for key, value in _load_config_from_yaml().items():
            name = str(key).lower()
            if name in known:
                picked[name] = value
            else:
                warnings.warn(f"Unknown config key {key!r} ignored")
        return picked

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
