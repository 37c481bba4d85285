"""会话协调层：TurnCoordinator 与引用来源去重。"""

from neurobuddy.chat.coordinator import APOLOGY_MESSAGE, SESSION_ERROR_MESSAGE, TurnCoordinator
from neurobuddy.chat.sources import extract_sources

__all__ = ["APOLOGY_MESSAGE", "SESSION_ERROR_MESSAGE", "TurnCoordinator", "extract_sources"]
