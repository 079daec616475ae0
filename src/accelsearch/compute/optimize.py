"""Local optimization of candidates in continuous (r, z).

Each harmonic of a candidate is refined independently with a bounded
Nelder-Mead search seeded at the grid position. A harmonic that fails to
converge, wanders away from its seed, or loses power keeps its seed
values; a candidate whose refined significance would drop below its
detection significance keeps all of its seed values.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy import optimize

from accelsearch.compute.interp import local_power, rz_derivs, rz_power
from accelsearch.compute.significance import candidate_sigma
from accelsearch.domain.config import ACCEL_DR, ACCEL_DZ, SearchConfig, harmonic_stage

if TYPE_CHECKING:
    from accelsearch.domain.candidate import Candidate, RDerivs
    from accelsearch.domain.fourier import FourierData

logger = logging.getLogger(__name__)

# Largest move from the seed still considered the same signal
MAX_DR = 1.0
MAX_DZ = 2.0 * ACCEL_DZ


@dataclass(frozen=True)
class RZMaximum:
    r: float
    z: float
    power: float
    derivs: RDerivs
    converged: bool


def max_rz(
    fourier: FourierData,
    rseed: float,
    zseed: float,
    *,
    locpow: float | None = None,
    maxiter: int = 200,
) -> RZMaximum:
    """Maximize interpolated power near (rseed, zseed).

    ``power`` in the result is normalized by the local power.
    """
    if locpow is None:
        locpow = local_power(fourier, rseed, zseed)
    seed_power = max(rz_power(fourier, rseed, zseed), 1e-30)

    def _neg_power(x: np.ndarray) -> float:
        return -rz_power(fourier, float(x[0]), float(x[1])) / seed_power

    simplex = np.array(
        [
            [rseed, zseed],
            [rseed + 0.6 * ACCEL_DR, zseed],
            [rseed, zseed + 0.6 * ACCEL_DZ],
        ]
    )
    res = optimize.minimize(
        _neg_power,
        x0=np.array([rseed, zseed]),
        method="Nelder-Mead",
        options={"maxiter": int(maxiter), "xatol": 1e-3, "fatol": 1e-5, "initial_simplex": simplex},
    )
    r, z = float(res.x[0]), float(res.x[1])
    converged = bool(res.success) and math.isfinite(r) and math.isfinite(z)
    if not converged:
        return RZMaximum(r=r, z=z, power=float("nan"), derivs=rz_derivs(fourier, rseed, zseed, locpow), converged=False)
    derivs = rz_derivs(fourier, r, z, locpow)
    return RZMaximum(r=r, z=z, power=derivs.normalized_pow, derivs=derivs, converged=True)


class CandidateOptimizer:
    """Refines candidates in place against the full Fourier transform."""

    def __init__(
        self,
        fourier: FourierData,
        config: SearchConfig,
        *,
        max_dr: float = MAX_DR,
        max_dz: float = MAX_DZ,
    ) -> None:
        self.fourier = fourier
        self.config = config
        self.max_dr = max_dr
        self.max_dz = max_dz

    def __call__(self, cand: Candidate) -> Candidate:
        return self.optimize(cand)

    def _accept(self, best: RZMaximum, rseed: float, zseed: float, seed_power: float) -> bool:
        if not best.converged or not math.isfinite(best.power):
            return False
        if abs(best.r - rseed) > self.max_dr or abs(best.z - zseed) > self.max_dz:
            return False
        return best.power >= seed_power

    def optimize(self, cand: Candidate) -> Candidate:
        seeds: list[tuple[float, float, RDerivs]] = []
        refined: list[tuple[float, float, RDerivs]] = []
        for ii in range(1, cand.numharm + 1):
            rseed, zseed = cand.r * ii, cand.z * ii**self.config.z_harmonic_power
            locpow = local_power(self.fourier, rseed, zseed)
            seed_derivs = rz_derivs(self.fourier, rseed, zseed, locpow)
            best = max_rz(
                self.fourier, rseed, zseed, locpow=locpow, maxiter=self.config.max_optimize_iter
            )
            seeds.append((rseed, zseed, seed_derivs))
            if self._accept(best, rseed, zseed, seed_derivs.normalized_pow):
                refined.append((best.r, best.z, best.derivs))
            else:
                logger.debug(
                    "Harmonic %d of candidate at r=%.3f z=%.3f kept at its seed (converged=%s)",
                    ii,
                    cand.r,
                    cand.z,
                    best.converged,
                )
                refined.append((rseed, zseed, seed_derivs))

        numindep = self.config.numindep[harmonic_stage(cand.numharm)]
        total = sum(d.normalized_pow for _, _, d in refined)
        sigma = candidate_sigma(total, cand.numharm, numindep)
        if sigma >= cand.seed_sigma:
            chosen = refined
            cand.sigma = sigma
            cand.optimized = True
        else:
            logger.debug(
                "Refined sigma %.2f below detection sigma %.2f at r=%.3f; keeping seed values",
                sigma,
                cand.seed_sigma,
                cand.r,
            )
            chosen = seeds
            cand.sigma = cand.seed_sigma
            cand.optimized = False

        cand.hirs = [r for r, _, _ in chosen]
        cand.hizs = [z for _, z, _ in chosen]
        cand.derivs = [d for _, _, d in chosen]
        cand.pows = [d.normalized_pow for d in cand.derivs]
        cand.power = float(sum(cand.pows))
        return cand


__all__ = ["MAX_DR", "MAX_DZ", "CandidateOptimizer", "RZMaximum", "max_rz"]
