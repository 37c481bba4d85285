"""LLM Provider 集成层。

该包下的模块负责：
- 定义会话抽象接口 (base)。
- 维护逻辑模型与厂商模型的映射 (registry)。
- 提供 Gemini 的具体实现 (gemini_client)。
"""

from typing import Optional

from neurobuddy.config.settings import settings
from neurobuddy.infrastructure.logging.logger import logger
from neurobuddy.prompts import load_system_prompt
from neurobuddy.providers.base import ChatSession
from neurobuddy.providers.gemini_client import GeminiChatSession
from neurobuddy.providers.registry import resolve_model


def create_session(cfg=None) -> Optional[ChatSession]:
    """创建绑定 NeuroBuddy 系统提示词与 Google 搜索工具的会话。

    缺少 API 密钥或初始化失败时记录日志并返回 None，不向上抛出，
    由调用方渲染降级状态（禁用输入并显示错误横幅）。
    """

    cfg = cfg or settings
    api_key = getattr(cfg, "api_key", None)
    if not isinstance(api_key, str) or not api_key.strip():
        logger.error("API_KEY environment variable not set.")
        return None
    try:
        model_cfg = resolve_model(getattr(cfg, "model", "neuro-chat"))
        system_instruction = load_system_prompt(getattr(cfg, "locale", "es"))
        session = GeminiChatSession(cfg, system_instruction=system_instruction, model_cfg=model_cfg)
    except Exception as e:
        logger.error(f"Failed to initialize Gemini chat session: {e}", extra={"extra": {
            "error": str(e),
        }})
        return None
    logger.info("Created chat session", extra={"extra": {
        "provider": session.name,
        "model": session.model,
    }})
    return session


__all__ = ["ChatSession", "GeminiChatSession", "create_session"]
