from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base error for the analysis flow.

    ``str(exc)`` carries the internal diagnostic (logged only); ``user_message``
    is the fixed text shown to end users for this error kind.
    """

    code = "analysis_error"
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, *, code: str | None = None):
        super().__init__(message or self.user_message)
        if code:
            self.code = code


class InputError(AnalysisError):
    code = "missing_input"
    user_message = "Please provide both a job description and a resume."


class ProviderError(AnalysisError):
    code = "provider_unavailable"
    user_message = (
        "Failed to get analysis from the AI. The response may be blocked or the API key may be invalid."
    )


class ValidationError(AnalysisError):
    code = "invalid_analysis"
    user_message = "The AI returned an analysis in an unexpected format. Please try again."


class StoreError(AnalysisError):
    code = "store_unavailable"
    user_message = "Your analysis history could not be saved or loaded."
