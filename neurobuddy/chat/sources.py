"""引用来源的校验与去重。

grounding 元数据的结构比较松散（uri/title 都可能缺失），这里在边界处
把 CitationCandidate 收敛为严格的 Source，之后的代码只处理 Source。
"""

from typing import Dict, Iterable, List

from neurobuddy.domain.models import CitationCandidate, Source


def extract_sources(candidates: Iterable[CitationCandidate]) -> List[Source]:
    """过滤掉 uri 或 title 为空（或不是字符串）的候选，并按 uri 去重。

    去重保留首次出现的条目（后出现的同 uri 条目直接丢弃，不合并 title），
    输出顺序与输入中的首次出现顺序一致。
    """

    by_uri: Dict[str, Source] = {}
    for candidate in candidates:
        uri = candidate.uri
        title = candidate.title
        if not isinstance(uri, str) or not isinstance(title, str) or not uri or not title:
            continue
        if uri not in by_uri:
            by_uri[uri] = Source(uri=uri, title=title)
    return list(by_uri.values())
