"""Fourier-domain acceleration search for binary pulsars.

Typical use::

    from accelsearch import SearchConfig, run_accelsearch
    from accelsearch.io import read_fourier_data

    fourier, inf = read_fourier_data(Path("obs.fft"))
    config = SearchConfig.for_observation(numbins=fourier.numbins, T=fourier.T, rlo=1.0, zmax=100)
    result = run_accelsearch(fourier, config)
"""

from __future__ import annotations

__version__ = "0.1.0"

from accelsearch.domain import (  # noqa: E402
    Candidate,
    FourierData,
    FourierProperties,
    PowerPlane,
    RankedCandidate,
    SearchConfig,
)
from accelsearch.errors import (  # noqa: E402
    AccelSearchError,
    ConfigurationError,
    FourierDataError,
    PlaneMismatchError,
    SearchWindowError,
)
from accelsearch.pipeline import AccelSearchResult, run_accelsearch  # noqa: E402

__all__ = [
    "AccelSearchError",
    "AccelSearchResult",
    "Candidate",
    "ConfigurationError",
    "FourierData",
    "FourierDataError",
    "FourierProperties",
    "PlaneMismatchError",
    "PowerPlane",
    "RankedCandidate",
    "SearchConfig",
    "SearchWindowError",
    "__version__",
    "run_accelsearch",
]
