from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

from app.schemas.analysis import Weights


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


class AnalysisProvider(Protocol):
    """An AI backend that turns (job description, resume, weights) into raw JSON text.

    Implementations raise ``ProviderError`` on transport failures, non-success
    statuses and empty content. Parsing and validation of the returned text is
    left to ``app.ai.validator``.
    """

    name: str
    model: str

    async def request_analysis(
        self, job_description: str, resume_text: str, weights: Weights
    ) -> str: ...


def as_payload(messages: Sequence[ChatMessage]) -> list[dict[str, str]]:
    return [{"role": m.role, "content": m.content} for m in messages]
