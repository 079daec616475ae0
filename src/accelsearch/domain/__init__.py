"""Domain models for the acceleration search."""

from accelsearch.domain.candidate import (
    FOURIERPROPS_DTYPE,
    Candidate,
    FourierProperties,
    RankedCandidate,
    RDerivs,
)
from accelsearch.domain.config import SearchConfig
from accelsearch.domain.fourier import FourierData
from accelsearch.domain.plane import PowerPlane

__all__ = [
    "FOURIERPROPS_DTYPE",
    "Candidate",
    "FourierData",
    "FourierProperties",
    "PowerPlane",
    "RDerivs",
    "RankedCandidate",
    "SearchConfig",
]
