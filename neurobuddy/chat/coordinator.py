"""会话协调核心模块。

TurnCoordinator 独占一段会话的消息列表，负责：
- 追加用户消息（乐观写入）并调用会话；
- 解析回复、过滤并去重引用后追加模型消息；
- 调用失败时追加固定的道歉消息，允许用户立即重试；
- 保证同一时刻最多只有一个请求在途，消息严格按调用顺序追加。
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from neurobuddy.chat.sources import extract_sources
from neurobuddy.domain.exceptions import ValidationError
from neurobuddy.domain.models import ChatState, ConversationSnapshot, ConversationTurn
from neurobuddy.infrastructure.logging.logger import logger
from neurobuddy.providers.base import ChatSession


APOLOGY_MESSAGE = "Lo siento, ocurrió un error al procesar tu solicitud. Por favor, inténtalo de nuevo."
SESSION_ERROR_MESSAGE = "Failed to initialize chat session. Please check your API key and configuration."

Listener = Callable[[ConversationSnapshot], None]


class TurnCoordinator:
    """单会话的状态机：IDLE / AWAITING_RESPONSE / ERROR。

    ERROR 仅表示没有可用会话（配置错误），在当前设计中需要重启进程才能恢复。
    调用失败不会进入 ERROR，而是回到 IDLE 并在 error 中记录提示文本。
    """

    def __init__(self, session: Optional[ChatSession]):
        self._session = session
        self._turns: List[ConversationTurn] = []
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        if session is None:
            self._state = ChatState.ERROR
            self._error: Optional[str] = SESSION_ERROR_MESSAGE
        else:
            self._state = ChatState.IDLE
            self._error = None

    # ---- 只读视图 ----

    @property
    def has_session(self) -> bool:
        return self._session is not None

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def turns(self) -> Tuple[ConversationTurn, ...]:
        with self._lock:
            return tuple(self._turns)

    def snapshot(self) -> ConversationSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def add_listener(self, listener: Listener) -> None:
        """注册状态变化回调，回调可能在工作线程中被调用。"""
        self._listeners.append(listener)

    # ---- 核心操作 ----

    def submit(self, user_input: str) -> bool:
        """提交一条用户输入并阻塞直到本轮结束。

        Returns:
            是否真正发起了调用；空输入、已有请求在途或没有会话时返回 False，
            且不会修改消息列表。
        """
        text = (user_input or "").strip()
        with self._lock:
            if not text or self._session is None or self._state is ChatState.AWAITING_RESPONSE:
                return False
            self._turns.append(ConversationTurn(role="user", text=text))
            self._state = ChatState.AWAITING_RESPONSE
            self._error = None
            snapshot = self._snapshot_locked()
        self._notify(snapshot)

        log_ctx = {"provider": getattr(self._session, "name", "unknown"), "turn_index": len(snapshot.turns) - 1}
        start_time = time.time()
        # 回复解析失败也按调用失败处理，任何异常都不能让状态停留在 AWAITING_RESPONSE
        model_turn = ConversationTurn(role="model", text=APOLOGY_MESSAGE)
        error: Optional[str] = APOLOGY_MESSAGE
        try:
            reply = self._session.send(text)
            if not isinstance(reply.text, str):
                raise ValidationError(code="BAD_REPLY", message="Reply text is not a string")
            sources = extract_sources(reply.citations)
            model_turn = ConversationTurn(role="model", text=reply.text, sources=tuple(sources))
            error = None
            self._log(
                logging.INFO,
                "Completed turn",
                log_ctx,
                elapsed_seconds=round(time.time() - start_time, 2),
                citations=len(reply.citations),
                sources=len(sources),
            )
        except Exception as e:
            logger.error(f"Error sending message: {e}", exc_info=True, extra={"extra": {
                **log_ctx,
                "error": str(e),
                "error_code": getattr(e, "code", type(e).__name__),
            }})
        finally:
            with self._lock:
                self._turns.append(model_turn)
                self._state = ChatState.IDLE
                self._error = error
                snapshot = self._snapshot_locked()
        self._notify(snapshot)
        return True

    # ---- 辅助方法 ----

    def _snapshot_locked(self) -> ConversationSnapshot:
        return ConversationSnapshot(turns=tuple(self._turns), state=self._state, error=self._error)

    def _notify(self, snapshot: ConversationSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                self._log(logging.WARNING, "Listener failed", {}, error=str(e))

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
