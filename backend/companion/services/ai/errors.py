"""Exception hierarchy for the AI response pipeline."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class AIPipelineError(Exception):
    """Base class for every failure raised by the AI pipeline."""


class EmptyResponse(AIPipelineError):
    """The remote model returned no text at all."""

    def __init__(self, message: str = "Model returned an empty response") -> None:
        super().__init__(message)


class MalformedResponse(AIPipelineError):
    """Text was returned but could not be decoded into the expected shape."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class RateLimited(AIPipelineError):
    """The remote service kept throttling after every retry."""


class AuthExpired(AIPipelineError):
    """The credential was rejected and could not be refreshed."""


class FailureKind(str, Enum):
    QUOTA = "QUOTA"
    AUTH = "AUTH"
    DATA_FORMAT = "DATA_FORMAT"
    UNKNOWN = "UNKNOWN"


USER_MESSAGES = {
    FailureKind.QUOTA: "The AI service is busy or out of quota right now. Please wait a moment and try again.",
    FailureKind.AUTH: "The AI credential is invalid or expired. Please select a valid API key and retry.",
    FailureKind.DATA_FORMAT: "Data parsing failed, please retry.",
    FailureKind.UNKNOWN: "Something went wrong while talking to the AI service. Please try again.",
}


class PipelineFailure(AIPipelineError):
    """Umbrella error surfaced to callers when a gateway operation cannot complete."""

    def __init__(self, kind: FailureKind, operation: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(USER_MESSAGES[kind])
        self.kind = kind
        self.operation = operation
        self.cause = cause

    @property
    def message(self) -> str:
        return USER_MESSAGES[self.kind]

    @classmethod
    def from_exception(cls, operation: str, exc: BaseException) -> "PipelineFailure":
        if isinstance(exc, PipelineFailure):
            return exc
        if isinstance(exc, RateLimited):
            kind = FailureKind.QUOTA
        elif isinstance(exc, AuthExpired):
            kind = FailureKind.AUTH
        elif isinstance(exc, (EmptyResponse, MalformedResponse)):
            kind = FailureKind.DATA_FORMAT
        else:
            kind = FailureKind.UNKNOWN
        return cls(kind, operation, exc)
