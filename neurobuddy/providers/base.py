"""会话抽象接口。

TurnCoordinator 不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个厂商实现一个 ChatSession（如 GeminiChatSession）。
- 会话是有状态的，自行维护历史；调用方每次只发送新的一条输入。
"""

from typing import Protocol
from neurobuddy.domain.models import ChatReply


class ChatSession(Protocol):
    """有状态的对话会话协议。

    实现者需要提供：
    - name: Provider 名称，用于日志。
    - send(text): 发送一条用户输入，返回统一的 ChatReply；失败时抛出异常。
    """

    name: str

    def send(self, text: str) -> ChatReply:
        ...
