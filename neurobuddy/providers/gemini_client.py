"""Gemini Provider 适配器。

本模块负责：

1. 维护一个有状态的对话会话（contents 历史保存在客户端）。
2. 将新的用户输入连同历史、system instruction 和 Google 搜索工具
   转换为 Gemini generateContent 的 HTTP 请求格式。
3. 调用 HTTP 接口并处理网络/限流/API 异常。
4. 将响应 JSON 解析为统一的 ChatReply（文本 + 原始引用候选）。

接口约定：
- URL: {base_url}/models/{model}:generateContent
- 认证: x-goog-api-key: <api_key>
"""

import copy
from typing import Any, Dict, List, Optional, Tuple

import httpx

from neurobuddy.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from neurobuddy.domain.models import ChatReply, CitationCandidate
from neurobuddy.providers.registry import GEMINI_CONFIG, ModelConfig, resolve_model


class GeminiChatSession:
    """Gemini 对话会话实现。

    - name: Provider 名称（供日志/调试使用）。
    - send: 对外统一调用入口，返回 ChatReply。
    - history: 已成功完成的轮次（Gemini contents 格式）。
    """

    name = "gemini"

    def __init__(self, settings, system_instruction: str, model_cfg: Optional[ModelConfig] = None):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = settings
        self._system_instruction = system_instruction
        self._model_cfg = model_cfg or resolve_model(getattr(settings, "model", "neuro-chat"))
        self._history: List[Dict[str, Any]] = []

    @property
    def model(self) -> str:
        return self._model_cfg.provider_model

    @property
    def system_instruction(self) -> str:
        return self._system_instruction

    @property
    def search_enabled(self) -> bool:
        return self._model_cfg.enable_search

    @property
    def history(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._history)

    def send(self, text: str) -> ChatReply:
        """发送一条用户输入。

        步骤：
        1. 构造包含完整历史的 payload。
        2. 发送请求并捕获网络错误/限流/服务端错误。
        3. 解析 ChatReply，成功后才把本轮写入历史，失败的请求不会污染历史。
        """

        api_key = getattr(self._settings, "api_key", None)
        if not api_key:
            raise ValidationError(code="MISSING_API_KEY", message="API_KEY not set")
        user_content = {"role": "user", "parts": [{"text": text}]}
        payload = self._build_payload(user_content)
        base = getattr(self._settings, "gemini_base_url", None) or GEMINI_CONFIG.base_url
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{base}/models/{self.model}:generateContent",
                    json=payload,
                    headers={
                        "x-goog-api-key": api_key,
                        "Content-Type": "application/json",
                    },
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="Gemini rate limit", http_status=429)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="BAD_RESPONSE", message=f"Invalid JSON from Gemini: {e}", http_status=502)
        reply, model_content = self._parse_response(data)
        self._history.append(user_content)
        self._history.append(model_content)
        return reply

    # ---- 辅助方法 ----

    def _build_payload(self, user_content: Dict[str, Any]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": self._system_instruction}]},
            "contents": [*self._history, user_content],
        }
        if self._model_cfg.enable_search:
            payload["tools"] = [{"google_search": {}}]
        temperature = getattr(self._settings, "temperature", None)
        if temperature is None:
            temperature = self._model_cfg.default_temperature
        if temperature is not None:
            payload["generationConfig"] = {"temperature": temperature}
        return payload

    def _parse_response(self, data: Any) -> Tuple[ChatReply, Dict[str, Any]]:
        """将原始响应 JSON 解析为 ChatReply 以及需要写回历史的 model content。"""

        if not isinstance(data, dict):
            raise ApiError(code="BAD_RESPONSE", message="Gemini response is not an object", http_status=502)
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            reason = feedback.get("blockReason") or "no candidates"
            raise ApiError(code="EMPTY_RESPONSE", message=f"Gemini returned no candidates: {reason}", http_status=502)
        first = candidates[0] if isinstance(candidates, list) else None
        if not isinstance(first, dict):
            raise ApiError(code="BAD_RESPONSE", message="Gemini candidate is not an object", http_status=502)
        content = first.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            parts = []
        text = "".join(
            _as_text(p.get("text")) or ""
            for p in parts
            if isinstance(p, dict) and not p.get("thought")
        )
        citations = self._parse_citations(first.get("groundingMetadata") or {})
        model_content = {"role": "model", "parts": parts or [{"text": text}]}
        return ChatReply(text=text, citations=citations, raw=data), model_content

    @staticmethod
    def _parse_citations(metadata: Dict[str, Any]) -> List[CitationCandidate]:
        """提取 groundingChunks 中的 web 引用，保持原始顺序且不做过滤。"""

        citations: List[CitationCandidate] = []
        if not isinstance(metadata, dict):
            return citations
        chunks = metadata.get("groundingChunks") or []
        if not isinstance(chunks, list):
            return citations
        for chunk in chunks:
            web = chunk.get("web") if isinstance(chunk, dict) else None
            if not isinstance(web, dict):
                web = {}
            citations.append(CitationCandidate(uri=_as_text(web.get("uri")), title=_as_text(web.get("title"))))
        return citations


def _as_text(value: Any) -> Optional[str]:
    # 非字符串字段视为缺失，由 extract_sources 统一过滤
    return value if isinstance(value, str) else None
