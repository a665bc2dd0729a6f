from typing import Optional


class AnalysisError(Exception):
    """Terminal failure of a resume analysis, mapped 1:1 onto an HTTP response."""

    status_code = 500

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict:
        return {"error": self.detail}


class Unauthorized(AnalysisError):
    status_code = 401


class BadRequest(AnalysisError):
    status_code = 400


class Misconfigured(AnalysisError):
    status_code = 500


class RateLimited(AnalysisError):
    status_code = 429


class QuotaExceeded(AnalysisError):
    status_code = 402


class UpstreamFailure(AnalysisError):
    status_code = 500


class ParseFailure(AnalysisError):
    status_code = 500

    def __init__(self, detail: str, raw_text: str):
        super().__init__(detail)
        self.raw_text = raw_text

    def to_body(self) -> dict:
        # Raw model output goes back to the caller for diagnosis
        return {"error": self.detail, "rawAnalysis": self.raw_text}
