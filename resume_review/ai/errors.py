from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base error for everything that can go wrong while talking to an AI provider."""

    code = "analysis_error"
    status_code = 500

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class ConfigurationError(AnalysisError):
    code = "configuration"
    status_code = 503


class InvalidInputError(AnalysisError):
    code = "invalid_input"
    status_code = 422


class TransportError(AnalysisError):
    code = "transport"
    status_code = 502

    def __init__(self, message: str, *, status: int | None = None, code: str | None = None):
        super().__init__(message, code=code)
        self.status = status


class FrameDecodeError(AnalysisError):
    code = "frame_decode"


class ContentValidationError(AnalysisError):
    code = "content_validation"


class EmptyStreamError(AnalysisError):
    code = "empty_stream"
    status_code = 502
