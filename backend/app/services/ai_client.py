"""AI Client 도메인 서비스 레이어입니다. OpenAI 호환 completion API를 직접 호출합니다."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.config import settings
from app.services.content_errors import UpstreamServiceError

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    name: str
    arguments: str

    def parsed_arguments(self) -> Dict[str, Any]:
        return json.loads(self.arguments or "{}")


@dataclass
class AICompletion:
    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    model: str = ""


class AIClient:
    """생성형 AI 모델 클라이언트 (OpenAI 호환 API 직접 호출)"""

    def __init__(self, model_name: Optional[str] = None, user_id: Optional[str] = None):
        self.model_name = model_name or settings.AI_CONTENT_HUB_MODEL
        self.user_id = user_id or "system"
        self._client = None

    def _build_headers(self) -> Dict[str, str]:
        return {"X-User-Id": self.user_id}

    def _get_client(self):
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError:
                raise RuntimeError("openai is not installed.")
            self._client = OpenAI(
                api_key=settings.AI_API_KEY,
                base_url=settings.AI_BASE_URL,
                default_headers=self._build_headers(),
            )
        return self._client

    def _normalize_content(self, content: Any) -> str:
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            chunks: List[str] = []
            for part in content:
                if isinstance(part, dict) and part.get("type") == "text":
                    chunks.append(str(part.get("text", "")))
            return "".join(chunks)
        return str(content or "")

    def _extract_tool_calls(self, message: Any) -> List[ToolCall]:
        calls: List[ToolCall] = []
        for tc in getattr(message, "tool_calls", None) or []:
            fn = getattr(tc, "function", None)
            if fn is None:
                continue
            calls.append(ToolCall(name=str(getattr(fn, "name", "") or ""), arguments=str(getattr(fn, "arguments", "") or "")))
        return calls

    def _is_missing_model(self, exc: Exception) -> bool:
        text = str(exc)
        return (
            getattr(exc, "status_code", None) == 404
            or "does not exist" in text
            or '"code":404' in text
        )

    def _to_upstream_error(self, exc: Exception, tried: List[str]) -> UpstreamServiceError:
        status = getattr(exc, "status_code", None)
        if status == 429:
            return UpstreamServiceError(
                UpstreamServiceError.RATE_LIMITED,
                "AI 서비스 요청 한도를 초과했습니다. 잠시 후 다시 시도해주세요.",
            )
        if status == 402:
            return UpstreamServiceError(
                UpstreamServiceError.PAYMENT_REQUIRED,
                "AI 서비스 크레딧이 부족합니다. 결제 정보를 확인해주세요.",
            )
        return UpstreamServiceError(
            UpstreamServiceError.UNAVAILABLE,
            f"AI 모델 호출 실패(시도 모델: {', '.join(tried)}): {exc}",
        )

    def complete(
        self,
        messages: List[Dict[str, Any]],
        system_prompt: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> AICompletion:
        if not settings.AI_FEATURES_ENABLED:
            raise UpstreamServiceError(UpstreamServiceError.UNAVAILABLE, "AI 기능이 비활성화되어 있습니다.")

        payload = []
        if system_prompt:
            payload.append({"role": "system", "content": system_prompt})
        payload.extend(messages)

        candidates = [self.model_name] + [
            m for m in settings.ai_model_candidates() if m and m != self.model_name
        ]
        tried: List[str] = []
        for candidate in candidates:
            tried.append(candidate)
            kwargs: Dict[str, Any] = {
                "model": candidate,
                "messages": payload,
                "temperature": settings.AI_TEMPERATURE,
                "max_tokens": settings.AI_MAX_TOKENS,
            }
            if tools:
                kwargs["tools"] = tools
            try:
                response = self._get_client().chat.completions.create(**kwargs)
            except Exception as exc:
                if self._is_missing_model(exc) and candidate != candidates[-1]:
                    logger.warning("[ai] model %s unavailable, trying next candidate", candidate)
                    continue
                logger.warning("[ai] completion failed model=%s: %s", candidate, exc)
                raise self._to_upstream_error(exc, tried) from exc

            if not response.choices:
                return AICompletion(model=candidate)
            message = response.choices[0].message
            return AICompletion(
                text=self._normalize_content(getattr(message, "content", None) if message else ""),
                tool_calls=self._extract_tool_calls(message) if message else [],
                model=candidate,
            )
        return AICompletion()

    def invoke(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        return self.complete([{"role": "user", "content": prompt}], system_prompt).text
