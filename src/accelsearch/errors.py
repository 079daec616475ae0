"""Local error taxonomy for accelsearch.

The search core raises a small set of exceptions; callers (the CLI, batch
drivers) translate them into exit codes or JSON payloads through the
frozen error envelope below.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    INVALID_CONFIG = "INVALID_CONFIG"
    PLANE_MISMATCH = "PLANE_MISMATCH"
    INVALID_DATA = "INVALID_DATA"
    SEARCH_FAILED = "SEARCH_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ErrorType
    message: str
    context: dict[str, Any] = Field(default_factory=dict)


def make_error(error_type: ErrorType, message: str, **context: Any) -> ErrorEnvelope:
    return ErrorEnvelope(type=error_type, message=message, context=dict(context))


class AccelSearchError(Exception):
    """Base class for failures raised by the search core.

    Attributes:
        error_type: Category used when the error is serialized.
        context: Extra key/value details needed to reproduce the failure.
    """

    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context)

    def to_envelope(self) -> ErrorEnvelope:
        return make_error(self.error_type, self.message, **self.context)


class ConfigurationError(AccelSearchError, ValueError):
    """Invalid search parameters (ranges, harmonic counts, grid sizes)."""

    error_type = ErrorType.INVALID_CONFIG


class PlaneMismatchError(ConfigurationError):
    """Two power planes cannot be combined (different window or grid)."""

    error_type = ErrorType.PLANE_MISMATCH


class FourierDataError(AccelSearchError):
    """Fourier amplitudes or their metadata could not be loaded."""

    error_type = ErrorType.INVALID_DATA


class SearchWindowError(AccelSearchError):
    """A fatal error raised while processing one search window.

    The window bounds and the harmonic stage being processed are kept in
    ``context`` so the failing step can be rerun in isolation.
    """

    error_type = ErrorType.SEARCH_FAILED

    def __init__(
        self,
        message: str,
        *,
        startr: float,
        lastr: float,
        stage: int,
        harmnum: int | None = None,
    ) -> None:
        super().__init__(message, startr=startr, lastr=lastr, stage=stage, harmnum=harmnum)
        self.startr = startr
        self.lastr = lastr
        self.stage = stage
        self.harmnum = harmnum


__all__ = [
    "AccelSearchError",
    "ConfigurationError",
    "ErrorEnvelope",
    "ErrorType",
    "FourierDataError",
    "PlaneMismatchError",
    "SearchWindowError",
    "make_error",
]
