"""NeuroBuddy 顶层包。

该包提供脑神经（12 对颅神经）问答助手的核心实现，
包括配置加载、领域模型、Gemini 会话适配、会话协调、
引用来源去重、消息渲染与桌面 GUI。
"""

__version__ = "0.1.0"
