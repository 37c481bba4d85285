"""领域层模型与异常。

包含：
- models: Source / ConversationTurn / ChatReply 等会话模型。
- exceptions: 业务异常类型定义。
"""
