"""Threshold search of a (summed) power plane."""

from __future__ import annotations

import logging

import numpy as np

from accelsearch.compute.significance import candidate_sigma, power_for_sigma
from accelsearch.domain.candidate import Candidate
from accelsearch.domain.config import ACCEL_DR, ACCEL_DZ, SearchConfig, harmonic_stage
from accelsearch.domain.plane import PowerPlane

logger = logging.getLogger(__name__)


def search_ffdot_powers(plane: PowerPlane, config: SearchConfig) -> list[Candidate]:
    """Return a Candidate for every cell of ``plane`` more significant than ``config.sigma``.

    Significance is normalized by the number of independent trials of the
    plane's harmonic order. Positions are converted to the fundamental's
    frame: r is divided by the number of harmonics summed and z by that
    number raised to ``config.z_harmonic_power``. Cells are visited row by
    row (z, then r); nearby detections are not merged here.
    """
    numharm = plane.numharm
    stage = harmonic_stage(numharm)
    numindep = config.numindep[stage]
    powcut = power_for_sigma(config.sigma, numharm, numindep)

    zis, ris = np.nonzero(plane.powers > powcut)
    candidates: list[Candidate] = []
    for zi, ri in zip(zis.tolist(), ris.tolist()):
        power = float(plane.powers[zi, ri])
        sig = candidate_sigma(power, numharm, numindep)
        if sig <= config.sigma:
            continue
        rr = plane.rlo + ri * ACCEL_DR
        zz = plane.zlo + zi * ACCEL_DZ
        candidates.append(
            Candidate(
                power=power,
                sigma=sig,
                numharm=numharm,
                r=rr / numharm,
                z=zz / numharm**config.z_harmonic_power,
            )
        )

    if candidates:
        logger.debug(
            "%d candidates above sigma=%.2f (power > %.2f) with %d harmonics near r=%.1f",
            len(candidates),
            config.sigma,
            powcut,
            numharm,
            plane.rlo,
        )
    return candidates


__all__ = ["search_ffdot_powers"]
