from app.ai.types import AnalysisProvider
from app.ai.validator import validate_analysis
from app.schemas.analysis import AnalysisResult, Weights


async def analyze_resume(
    provider: AnalysisProvider, job_description: str, resume_text: str, weights: Weights
) -> AnalysisResult:
    raw = await provider.request_analysis(job_description, resume_text, weights)
    return validate_analysis(raw)


__all__ = ["AnalysisProvider", "analyze_resume", "validate_analysis"]
