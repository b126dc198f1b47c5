from app.ai.types import ChatMessage
from app.schemas.analysis import Weights


SYSTEM_INSTRUCTION = (
    "You are an expert HR recruitment assistant that analyzes resumes. "
    "You always respond with valid JSON only, no additional text."
)

JSON_SHAPE = """{
    "candidateName": "The full name of the candidate found in the resume",
    "overallScore": <A number from 0 to 100 representing the overall compatibility, considering the provided scoring weights>,
    "summary": "A one-paragraph summary explaining the score and the candidate's fit for the role",
    "strengths": ["List", "of", "key", "strengths", "and", "matched", "skills"],
    "weaknesses": ["List", "of", "potential", "weaknesses", "or", "missing", "requirements"],
    "experienceAnalysis": {
        "score": <number 0-100>,
        "details": "Brief analysis of the candidate's work experience"
    },
    "skillsAnalysis": {
        "score": <number 0-100>,
        "details": "Brief analysis of the candidate's skills"
    },
    "educationAnalysis": {
        "score": <number 0-100>,
        "details": "Brief analysis of the candidate's education"
    }
}"""

GUIDELINES = (
    "The 'overallScore' must be a weighted average of the individual scores for experience, "
    "skills, and education, based on the provided weights.\n"
    "The candidate's name should be extracted accurately from the resume text.\n"
    "Strengths should highlight direct matches with the job description.\n"
    "Weaknesses should identify missing key requirements."
)


def _format_weight(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def build_analysis_prompt(
    job_description: str,
    resume_text: str,
    weights: Weights,
    *,
    strict_json: bool = False,
) -> str:
    """Build the user prompt; ``strict_json`` spells out the exact JSON shape for
    backends without schema-constrained output."""
    sections = [
        "Analyze the following resume against the provided job description. "
        "Act as an expert HR recruitment assistant. Your task is to provide a detailed, unbiased analysis.",
        f"**Job Description:**\n---\n{job_description}\n---",
        f"**Resume Text:**\n---\n{resume_text}\n---",
        "**Scoring Weights:**\n"
        f"- Skills: {_format_weight(weights.skills)}%\n"
        f"- Experience: {_format_weight(weights.experience)}%\n"
        f"- Education: {_format_weight(weights.education)}%",
    ]
    if strict_json:
        sections.append(
            "Based on this information, provide your response in a STRICT JSON format "
            f"with the following structure:\n{JSON_SHAPE}"
        )
    else:
        sections.append("Based on this information, provide a response in the specified JSON format.")
    sections.append(GUIDELINES)
    if strict_json:
        sections.append(
            "IMPORTANT: Return ONLY valid JSON, no additional text or explanation before or after the JSON object."
        )
    return "\n\n".join(sections)


def build_analysis_messages(
    job_description: str, resume_text: str, weights: Weights
) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=SYSTEM_INSTRUCTION),
        ChatMessage(
            role="user",
            content=build_analysis_prompt(job_description, resume_text, weights, strict_json=True),
        ),
    ]
