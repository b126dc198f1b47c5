from __future__ import annotations

import logging
import os
import time
from typing import Optional

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from app.ai.prompt import build_analysis_messages
from app.ai.types import as_payload
from app.core.errors import ProviderError
from app.schemas.analysis import Weights

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """Chat-completions provider for OpenAI and OpenAI-compatible backends."""

    name = "openai"
    default_model = "gpt-4o-mini"
    api_key_env = "OPENAI_API_KEY"

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
        max_retries: int = 0,
        temperature: float = 0.2,
        max_tokens: int = 2048,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = (model or self.default_model).strip()
        self._temperature = temperature
        self._max_tokens = max_tokens
        if client is not None:
            self._client = client
            return

        key = (api_key or os.getenv(self.api_key_env) or "").strip()
        if not key:
            raise RuntimeError(f"{self.api_key_env} is missing")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    async def request_analysis(
        self, job_description: str, resume_text: str, weights: Weights
    ) -> str:
        messages = build_analysis_messages(job_description, resume_text, weights)
        started = time.perf_counter()
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=as_payload(messages),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                response_format={"type": "json_object"},
            )
        except APIStatusError as exc:
            logger.warning(
                "%s_analysis_http_error model=%s status=%s body=%s",
                self.name,
                self.model,
                exc.status_code,
                exc.response.text if exc.response is not None else "",
            )
            raise ProviderError(f"{self.name} API error: {exc.status_code}") from exc
        except OpenAIError as exc:
            logger.warning("%s_analysis_failed model=%s: %s", self.name, self.model, exc)
            raise ProviderError(f"{self.name} API unreachable: {exc}") from exc

        content = response.choices[0].message.content if response.choices else ""
        content = (content or "").strip()
        latency_ms = int((time.perf_counter() - started) * 1000)
        if not content:
            logger.warning("%s_analysis_empty model=%s latency_ms=%s", self.name, self.model, latency_ms)
            raise ProviderError(f"Empty response from {self.name} API.", code="empty_response")

        logger.info(
            "%s_analysis_ok model=%s jd_len=%s resume_len=%s latency_ms=%s",
            self.name,
            self.model,
            len(job_description),
            len(resume_text),
            latency_ms,
        )
        return content
