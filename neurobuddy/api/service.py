"""对外 API 服务模块。

提供简化的函数接口供上层应用（GUI、脚本）调用。
"""

from dataclasses import asdict
from typing import Any, Dict, Optional

from neurobuddy.chat.coordinator import TurnCoordinator
from neurobuddy.domain.models import ConversationTurn
from neurobuddy.infrastructure.logging.logger import logger
from neurobuddy.providers import create_session


_coordinator: Optional[TurnCoordinator] = None


def get_default_coordinator() -> TurnCoordinator:
    """获取默认的 TurnCoordinator 实例（单例）。

    会话只在首次调用时创建；缺少 API 密钥时得到的是处于 ERROR 状态的协调器。
    """
    global _coordinator
    if _coordinator is None:
        _coordinator = TurnCoordinator(create_session())
        if not _coordinator.has_session:
            logger.warning("Chat session unavailable", extra={"extra": {
                "error": _coordinator.error,
            }})
    return _coordinator


def turn_as_dict(turn: ConversationTurn) -> Dict[str, Any]:
    return {
        "role": turn.role,
        "text": turn.text,
        "sources": [asdict(s) for s in turn.sources],
    }


def ask(question: str) -> Dict[str, Any]:
    """同步提问一次。

    Args:
        question: 用户输入内容

    Returns:
        包含 accepted（是否发起调用）、reply（最新的模型消息）与 error 的字典
    """
    coordinator = get_default_coordinator()
    accepted = coordinator.submit(question)
    snapshot = coordinator.snapshot()
    reply = None
    if accepted and snapshot.turns and snapshot.turns[-1].role == "model":
        reply = turn_as_dict(snapshot.turns[-1])
    return {
        "accepted": accepted,
        "reply": reply,
        "error": snapshot.error,
        "state": snapshot.state.value,
    }


def conversation_as_dicts() -> list[Dict[str, Any]]:
    """列出当前会话的所有消息。"""
    return [turn_as_dict(t) for t in get_default_coordinator().turns]
