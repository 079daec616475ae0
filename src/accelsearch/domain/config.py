"""Search configuration and Fourier-grid arithmetic.

This module provides:
- Grid constants shared by every stage of the search (r/z spacing, window length)
- Exact floor-based mapping between physical (r, z) values and grid indices
- SearchConfig: immutable parameters for a single acceleration search run
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from accelsearch.errors import ConfigurationError

# Useful length of a fundamental plane, in grid cells, per search window
ACCEL_USELEN = 7470
# Number of interpolated points per Fourier bin
ACCEL_NUMBETWEEN = 2
ACCEL_DR = 1.0 / ACCEL_NUMBETWEEN
ACCEL_RDR = ACCEL_NUMBETWEEN
ACCEL_DZ = 2.0
ACCEL_RDZ = 1.0 / ACCEL_DZ
# Candidates closer than this (in bins) are treated as the same signal when merging
ACCEL_CLOSEST_R = 15.0
# Minimum half-width (bins) of a response kernel
NUMFINTBINS = 16
DBLCORRECT = 1e-14


def calc_required_r(harm_fract: float, rfull: float) -> float:
    """Nearest half-bin of ``rfull`` scaled to a harmonic fraction."""
    return math.floor(ACCEL_RDR * rfull * harm_fract + 0.5) * ACCEL_DR


def calc_required_z(harm_fract: float, zfull: float) -> float:
    """Nearest z grid value of ``zfull`` scaled to a harmonic fraction."""
    return math.floor(ACCEL_RDZ * zfull * harm_fract + 0.5) * ACCEL_DZ


def index_from_r(r: float, rlo: float) -> int:
    return math.floor((r - rlo) * ACCEL_RDR + DBLCORRECT)


def index_from_z(z: float, zlo: float) -> int:
    return math.floor((z - zlo) * ACCEL_RDZ + DBLCORRECT)


def harmonic_stage(numharm: int) -> int:
    """Stage index for a summed-harmonic count (1 -> 0, 2 -> 1, 4 -> 2, ...)."""
    if numharm < 1 or numharm & (numharm - 1):
        raise ConfigurationError(
            f"Number of summed harmonics must be a power of two, got {numharm}",
            numharm=numharm,
        )
    return numharm.bit_length() - 1


def num_independent_trials(
    rlo: float,
    rhi: float,
    zlo: float,
    zhi: float,
    numharm: int,
) -> float:
    """Approximate number of independent (r, z) cells searched at a harmonic order."""
    numz = (zhi - zlo) / ACCEL_DZ + 1.0
    return max(1.0, (rhi - rlo) * numz * (ACCEL_DZ / 6.95) / numharm)


class SearchConfig(BaseModel):
    """Immutable parameters for one acceleration search.

    ``numindep[s]`` is the number of independent trials searched when
    ``2**s`` harmonics are summed; it normalizes significance so that every
    stage has the same false-alarm rate.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rlo: float = Field(ge=0, description="Lowest Fourier frequency to search, in bins")
    rhi: float = Field(ge=0, description="Highest Fourier frequency to search, in bins")
    zlo: float = Field(description="Lowest frequency derivative, in bins drifted")
    zhi: float = Field(description="Highest frequency derivative, in bins drifted")
    T: float = Field(gt=0, description="Observation duration, in seconds")
    numharmstages: int = Field(ge=1, description="Stages of harmonic summing (up to 2**(n-1) harmonics)")
    sigma: float = Field(description="Gaussian significance threshold for candidates")
    highestbin: float = Field(description="Windows may not extend beyond this bin")
    numindep: tuple[float, ...] = Field(description="Independent trials per harmonic stage")
    uselen: int = Field(default=ACCEL_USELEN, ge=2, description="Fundamental plane length per window")
    z_harmonic_power: Literal[1, 2] = 2
    max_optimize_iter: int = Field(default=200, ge=1)
    merge_radius_r: float = Field(default=0.0, ge=0)
    n_workers: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_ranges(self) -> SearchConfig:
        if self.rlo > self.rhi:
            raise ValueError(f"rlo ({self.rlo}) must not exceed rhi ({self.rhi})")
        if self.zlo > self.zhi:
            raise ValueError(f"zlo ({self.zlo}) must not exceed zhi ({self.zhi})")
        if len(self.numindep) != self.numharmstages:
            raise ValueError(
                f"numindep needs one entry per harmonic stage ({self.numharmstages}), got {len(self.numindep)}"
            )
        if any(n < 1 for n in self.numindep):
            raise ValueError("numindep entries must be >= 1")
        return self

    @property
    def window_width(self) -> float:
        """Width of one search window, in Fourier bins."""
        return self.uselen * ACCEL_DR

    @property
    def max_numharm(self) -> int:
        return 1 << (self.numharmstages - 1)

    @property
    def zmax(self) -> float:
        return max(abs(self.zlo), abs(self.zhi))

    @classmethod
    def for_observation(
        cls,
        *,
        numbins: int,
        T: float,
        rlo: float,
        rhi: float | None = None,
        zmax: float = 200.0,
        numharmstages: int = 4,
        sigma: float = 2.0,
        uselen: int = ACCEL_USELEN,
        **options: object,
    ) -> SearchConfig:
        """Build a configuration for a Fourier transform of ``numbins`` bins.

        Args:
            numbins: Number of complex Fourier amplitudes available.
            T: Observation duration, in seconds.
            rlo: Lowest Fourier frequency to search (clamped to >= 1).
            rhi: Highest Fourier frequency (defaults to, and is clamped to, numbins - 1).
            zmax: Maximum |z|; rounded up to a multiple of the z step.
            numharmstages: Harmonic stages (sums up to 2**(n-1) harmonics).
            sigma: Significance threshold.
            uselen: Fundamental plane length per window.
            **options: Remaining SearchConfig fields.

        Raises:
            ConfigurationError: If the requested range is empty or invalid.
        """
        if numharmstages < 1:
            raise ConfigurationError(
                f"numharmstages must be >= 1, got {numharmstages}", numharmstages=numharmstages
            )
        if numbins < 2:
            raise ConfigurationError(f"Need at least 2 Fourier bins, got {numbins}", numbins=numbins)

        rlo = max(float(rlo), 1.0)
        rhi = float(numbins - 1) if rhi is None else min(float(rhi), float(numbins - 1))
        if rlo >= numbins - 1:
            raise ConfigurationError(
                f"rlo ({rlo}) is beyond the last Fourier bin ({numbins - 1})", rlo=rlo, numbins=numbins
            )
        if rlo > rhi:
            raise ConfigurationError(f"rlo ({rlo}) must not exceed rhi ({rhi})", rlo=rlo, rhi=rhi)

        zmax = abs(float(zmax))
        zmax = math.ceil(zmax / ACCEL_DZ) * ACCEL_DZ
        zlo, zhi = -zmax, zmax

        highestbin = min(float(numbins - 1), rhi + uselen * ACCEL_DR)
        numindep = tuple(
            num_independent_trials(rlo, rhi, zlo, zhi, 1 << stage) for stage in range(numharmstages)
        )
        return cls(
            rlo=rlo,
            rhi=rhi,
            zlo=zlo,
            zhi=zhi,
            T=float(T),
            numharmstages=int(numharmstages),
            sigma=float(sigma),
            highestbin=highestbin,
            numindep=numindep,
            uselen=int(uselen),
            **options,
        )


__all__ = [
    "ACCEL_CLOSEST_R",
    "ACCEL_DR",
    "ACCEL_DZ",
    "ACCEL_NUMBETWEEN",
    "ACCEL_RDR",
    "ACCEL_RDZ",
    "ACCEL_USELEN",
    "DBLCORRECT",
    "NUMFINTBINS",
    "SearchConfig",
    "calc_required_r",
    "calc_required_z",
    "harmonic_stage",
    "index_from_r",
    "index_from_z",
    "num_independent_trials",
]
