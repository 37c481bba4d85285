"""渲染层：ConversationTurn -> HTML / tkinter 片段。"""

from neurobuddy.rendering.renderer import Segment, render_conversation_html, render_html, render_segments

__all__ = ["Segment", "render_conversation_html", "render_html", "render_segments"]
