"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取 NeuroBuddy 的 system instruction，
在创建会话时作为 systemInstruction 发送给 Gemini。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(locale: str = "es") -> str:
    """根据语言加载系统提示词文本，末尾空白会被去掉。"""

    fname = PROMPTS_DIR / locale / "neurobuddy_system.md"
    return fname.read_text(encoding="utf-8").strip()
