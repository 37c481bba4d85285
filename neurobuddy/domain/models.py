"""对话轮次与引用来源的数据模型。

本模块定义了 NeuroBuddy 内部共享的标准数据结构：

- Source: 一条经过校验的引用来源（uri + title）。
- ConversationTurn: 一次用户提问或一次模型回答，追加后不可变。
- CitationCandidate: 从 Provider 响应元数据中解析出的原始引用，字段可能缺失。
- ChatReply: 一次会话调用的统一返回结果。
- ConversationSnapshot: 提供给渲染层的只读会话快照。

Provider 适配器（如 GeminiChatSession）只负责产出 ChatReply，
CitationCandidate -> Source 的校验与去重在 chat.sources 中完成。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple


# 会话角色（与 Gemini contents 中的 role 字段对应）
Role = Literal["user", "model"]


@dataclass(frozen=True)
class Source:
    """一条引用来源，两条 Source 仅按 uri 判定是否相同。"""

    uri: str
    title: str = field(compare=False)


@dataclass(frozen=True)
class ConversationTurn:
    """会话中的一条消息。

    - role: "user" 或 "model"。
    - text: 原样保存的文本内容。
    - sources: 去重后的引用列表，用户消息与错误提示消息为空。
    """

    role: Role
    text: str
    sources: Tuple[Source, ...] = ()


@dataclass
class CitationCandidate:
    """grounding 元数据中的一条原始引用，uri/title 均可能为空。"""

    uri: Optional[str] = None
    title: Optional[str] = None


@dataclass
class ChatReply:
    """一次 send 调用的结果。

    - text: 模型回答文本。
    - citations: 未经过滤的引用候选，保持响应中的原始顺序。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    text: str
    citations: List[CitationCandidate] = field(default_factory=list)
    raw: Optional[Dict[str, Any]] = None


class ChatState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    ERROR = "error"


@dataclass(frozen=True)
class ConversationSnapshot:
    """TurnCoordinator 对外暴露的只读状态。"""

    turns: Tuple[ConversationTurn, ...]
    state: ChatState
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.state is ChatState.AWAITING_RESPONSE
