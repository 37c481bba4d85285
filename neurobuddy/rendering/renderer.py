"""把 ConversationTurn 渲染为可展示内容。

所有函数都是纯函数：不修改输入、没有副作用，同一条消息渲染多次结果一致。

- render_html: 生成 HTML 片段（文本逐行加 <br />，可选的引用列表）。
- render_segments: 生成 (text, tags, uri) 片段列表，供 tkinter Text 组件插入。
- render_conversation_html: 把整段会话渲染为一个 HTML 片段，用于导出记录。

只做 **粗体** 替换，不是完整的 markdown 解析器。
"""

import html
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from neurobuddy.domain.models import ConversationTurn


BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
SOURCES_HEADING = "Fuentes:"


@dataclass(frozen=True)
class Segment:
    """一段带样式标签的文本；uri 不为空时表示可点击的引用链接。"""

    text: str
    tags: Tuple[str, ...] = ()
    uri: Optional[str] = None


def render_html(turn: ConversationTurn, emphasize_bold: bool = True) -> str:
    body = html.escape(turn.text, quote=False)
    if emphasize_bold:
        body = BOLD_RE.sub(r"<strong>\1</strong>", body)
    lines = "".join(f"{line}<br />" for line in body.split("\n"))
    parts = [f'<div class="message message-{turn.role}">', f'<div class="message-text">{lines}</div>']
    if turn.sources:
        parts.append('<div class="message-sources">')
        parts.append(f"<h4>{SOURCES_HEADING}</h4>")
        for index, source in enumerate(turn.sources):
            uri = html.escape(source.uri, quote=True)
            title = html.escape(source.title, quote=True)
            parts.append(
                f'<a href="{uri}" target="_blank" rel="noopener noreferrer" title="{title}">'
                f"<span>[{index + 1}]</span> {html.escape(source.title, quote=False)}</a>"
            )
        parts.append("</div>")
    parts.append("</div>")
    return "".join(parts)


def render_conversation_html(turns: Iterable[ConversationTurn], emphasize_bold: bool = True) -> str:
    return "\n".join(render_html(turn, emphasize_bold=emphasize_bold) for turn in turns)


def render_segments(turn: ConversationTurn, emphasize_bold: bool = True) -> List[Segment]:
    """按与 render_html 相同的规则生成纯文本片段。

    tags 中第一个总是 turn.role，粗体额外带 "bold"，
    引用部分使用 "sources_heading" / "source" 标签。
    """

    role_tag = turn.role
    segments: List[Segment] = []
    for line in turn.text.split("\n"):
        segments.extend(_split_bold(line, role_tag, emphasize_bold))
        segments.append(Segment("\n", (role_tag,)))
    if turn.sources:
        segments.append(Segment(SOURCES_HEADING + "\n", (role_tag, "sources_heading")))
        for index, source in enumerate(turn.sources):
            segments.append(Segment(f"[{index + 1}] {source.title}", (role_tag, "source"), uri=source.uri))
            segments.append(Segment("\n", (role_tag,)))
    return segments


def _split_bold(line: str, role_tag: str, emphasize_bold: bool) -> List[Segment]:
    if not emphasize_bold:
        return [Segment(line, (role_tag,))] if line else []
    out: List[Segment] = []
    pos = 0
    for match in BOLD_RE.finditer(line):
        if match.start() > pos:
            out.append(Segment(line[pos:match.start()], (role_tag,)))
        if match.group(1):
            out.append(Segment(match.group(1), (role_tag, "bold")))
        pos = match.end()
    if pos < len(line):
        out.append(Segment(line[pos:], (role_tag,)))
    return out
