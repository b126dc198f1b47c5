from __future__ import annotations

import logging
import os
import time
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from app.ai.prompt import SYSTEM_INSTRUCTION, build_analysis_prompt
from app.core.errors import ProviderError
from app.schemas.analysis import Weights

logger = logging.getLogger(__name__)

_SECTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "score": {"type": "NUMBER"},
        "details": {"type": "STRING"},
    },
    "required": ["score", "details"],
}

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "candidateName": {
            "type": "STRING",
            "description": "The full name of the candidate found in the resume.",
        },
        "overallScore": {
            "type": "NUMBER",
            "description": "A number from 0 to 100 representing the overall compatibility, considering the provided scoring weights.",
        },
        "summary": {
            "type": "STRING",
            "description": "A one-paragraph summary explaining the score and the candidate's fit for the role.",
        },
        "strengths": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A list of key strengths and matched skills.",
        },
        "weaknesses": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A list of potential weaknesses or areas where the resume doesn't align with the job description.",
        },
        "experienceAnalysis": {
            **_SECTION_SCHEMA,
            "description": "Brief analysis of the candidate's work experience and its score.",
        },
        "skillsAnalysis": {
            **_SECTION_SCHEMA,
            "description": "Brief analysis of the candidate's skills and its score.",
        },
        "educationAnalysis": {
            **_SECTION_SCHEMA,
            "description": "Brief analysis of the candidate's education and its score.",
        },
    },
    "required": [
        "candidateName",
        "overallScore",
        "summary",
        "strengths",
        "weaknesses",
        "experienceAnalysis",
        "skillsAnalysis",
        "educationAnalysis",
    ],
}


class GeminiProvider:
    name = "gemini"
    default_model = "gemini-2.5-flash"

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: float = 0.2,
        client: Optional[genai.Client] = None,
    ):
        self.model = (model or self.default_model).strip()
        self._temperature = temperature
        if client is not None:
            self._client = client
            return

        key = (api_key or os.getenv("GEMINI_API_KEY") or "").strip()
        if not key:
            raise RuntimeError("GEMINI_API_KEY is missing")
        self._client = genai.Client(api_key=key)

    async def request_analysis(
        self, job_description: str, resume_text: str, weights: Weights
    ) -> str:
        prompt = build_analysis_prompt(job_description, resume_text, weights)
        config = types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            temperature=self._temperature,
        )
        started = time.perf_counter()
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as exc:
            logger.warning(
                "gemini_analysis_http_error model=%s status=%s body=%s",
                self.model,
                exc.code,
                exc.message,
            )
            raise ProviderError(f"Gemini API error: {exc.code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("gemini_analysis_failed model=%s: %s", self.model, exc)
            raise ProviderError(f"Gemini API unreachable: {exc}") from exc

        text = (response.text or "").strip()
        latency_ms = int((time.perf_counter() - started) * 1000)
        if not text:
            logger.warning("gemini_analysis_empty model=%s latency_ms=%s", self.model, latency_ms)
            raise ProviderError("Empty response from Gemini API.", code="empty_response")

        logger.info(
            "gemini_analysis_ok model=%s jd_len=%s resume_len=%s latency_ms=%s",
            self.model,
            len(job_description),
            len(resume_text),
            latency_ms,
        )
        return text
