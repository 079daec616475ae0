"""Candidate and derived-property models.

This module provides:
- RDerivs: Power/phase and their r-derivatives at an optimized position
- Candidate: A detection from the ffdot search, refined in place later
- FourierProperties: Physical description of a refined fundamental
- FOURIERPROPS_DTYPE: Fixed-size binary record layout for FourierProperties
- RankedCandidate: (properties, candidate) pair in final rank order
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from pydantic import BaseModel, ConfigDict


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


@dataclass(frozen=True)
class RDerivs:
    """Fourier power and phase with first/second derivatives in r.

    ``pow`` is the raw (un-normalized) power and ``locpow`` the local noise
    power it should be divided by.
    """

    pow: float
    phs: float
    dpow: float
    dphs: float
    d2pow: float
    d2phs: float
    locpow: float

    @property
    def normalized_pow(self) -> float:
        return self.pow / self.locpow if self.locpow > 0 else 0.0


@dataclass
class Candidate:
    """A grid-resolution detection, mutated in place by refinement.

    ``r`` and ``z`` are in the fundamental's frame: the grid position of the
    summed plane divided by the number of harmonics summed.
    """

    power: float
    sigma: float
    numharm: int
    r: float
    z: float
    seed_sigma: float = field(init=False)
    hirs: list[float] = field(default_factory=list)
    hizs: list[float] = field(default_factory=list)
    pows: list[float] = field(default_factory=list)
    derivs: list[RDerivs] = field(default_factory=list)
    optimized: bool = False

    def __post_init__(self) -> None:
        self.seed_sigma = self.sigma

    @property
    def is_refined(self) -> bool:
        return len(self.derivs) == self.numharm


class FourierProperties(FrozenModel):
    """Derived properties of an optimized Fourier peak.

    r/z/w are in Fourier bins; ``pow`` is normalized by ``locpow``;
    ``phs`` is in radians and ``cen`` is the signal centroid as a fraction
    of the observation.
    """

    r: float
    rerr: float
    z: float
    zerr: float
    w: float = 0.0
    werr: float = 0.0
    pow: float
    powerr: float
    sig: float
    rawpow: float
    phs: float
    phserr: float
    cen: float
    cenerr: float
    pur: float
    purerr: float
    locpow: float

    def to_record(self) -> np.ndarray:
        rec = np.zeros(1, dtype=FOURIERPROPS_DTYPE)
        for name in FOURIERPROPS_DTYPE.names or ():
            rec[name] = getattr(self, name)
        return rec

    @classmethod
    def from_record(cls, rec: np.void) -> FourierProperties:
        return cls(**{name: float(rec[name]) for name in FOURIERPROPS_DTYPE.names or ()})


# C-aligned layout: doubles for the positions, floats for everything else
FOURIERPROPS_DTYPE = np.dtype(
    [
        ("r", "<f8"),
        ("rerr", "<f4"),
        ("z", "<f8"),
        ("zerr", "<f4"),
        ("w", "<f8"),
        ("werr", "<f4"),
        ("pow", "<f4"),
        ("powerr", "<f4"),
        ("sig", "<f4"),
        ("rawpow", "<f4"),
        ("phs", "<f4"),
        ("phserr", "<f4"),
        ("cen", "<f4"),
        ("cenerr", "<f4"),
        ("pur", "<f4"),
        ("purerr", "<f4"),
        ("locpow", "<f4"),
    ],
    align=True,
)


@dataclass(frozen=True)
class RankedCandidate:
    properties: FourierProperties
    candidate: Candidate


__all__ = [
    "FOURIERPROPS_DTYPE",
    "Candidate",
    "FourierProperties",
    "RDerivs",
    "RankedCandidate",
]
