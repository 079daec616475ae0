"""Deterministic stand-ins for the plane engine and the optimizer."""

from __future__ import annotations

import math

import numpy as np

from accelsearch.compute.plane import plane_geometry
from accelsearch.domain.candidate import Candidate, RDerivs
from accelsearch.domain.config import ACCEL_DR, ACCEL_DZ
from accelsearch.domain.plane import PowerPlane


class HotCellEngine:
    """Zero planes, except for hot cells placed in the fundamental plane.

    ``hot`` holds ``(r, z, power)`` in the fundamental frame.
    """

    def __init__(self, hot: list[tuple[float, float, float]] | None = None) -> None:
        self.hot = list(hot or [])
        self.calls: list[tuple[int, int, float]] = []
        self.planes: list[PowerPlane] = []
        self.max_alive = 0

    def compute_plane(self, numharm, harmnum, startr, lastr, kernel, config) -> PowerPlane:
        self.calls.append((numharm, harmnum, startr))
        rlo, numrs = plane_geometry(numharm, harmnum, startr, lastr, config.uselen)
        powers = np.zeros((kernel.numzs, numrs), dtype=np.float32)
        if numharm == 1:
            for r, z, power in self.hot:
                ri = int(round((r - rlo) / ACCEL_DR))
                zi = int(round((z - kernel.zlo) / ACCEL_DZ))
                if 0 <= ri < numrs and 0 <= zi < kernel.numzs:
                    powers[zi, ri] = power
        plane = PowerPlane(
            powers=powers,
            rlo=rlo,
            zlo=kernel.zlo,
            harm_fract=harmnum / numharm,
            startr=startr,
            lastr=lastr,
        )
        self.planes.append(plane)
        self.max_alive = max(self.max_alive, sum(not p.released for p in self.planes))
        return plane


class FailingEngine(HotCellEngine):
    """Raises ``exc`` when asked for a given harmonic."""

    def __init__(self, numharm: int, harmnum: int, exc: BaseException) -> None:
        super().__init__()
        self.fail_at = (numharm, harmnum)
        self.exc = exc

    def compute_plane(self, numharm, harmnum, startr, lastr, kernel, config) -> PowerPlane:
        if (numharm, harmnum) == self.fail_at:
            raise self.exc
        return super().compute_plane(numharm, harmnum, startr, lastr, kernel, config)


class RecordingOptimizer:
    """Fills harmonic positions and derivatives from the seed without moving it."""

    def __init__(self) -> None:
        self.seen: list[Candidate] = []

    def __call__(self, cand: Candidate) -> Candidate:
        self.seen.append(cand)
        per_harm = cand.power / cand.numharm
        cand.hirs = [cand.r * h for h in range(1, cand.numharm + 1)]
        cand.hizs = [cand.z * h**2 for h in range(1, cand.numharm + 1)]
        cand.derivs = [
            RDerivs(
                pow=per_harm,
                phs=0.0,
                dpow=0.0,
                dphs=-math.pi,
                d2pow=-2.0 * math.pi**2 / 3.0 * per_harm,
                d2phs=0.0,
                locpow=1.0,
            )
            for _ in range(cand.numharm)
        ]
        cand.pows = [per_harm] * cand.numharm
        cand.optimized = True
        return cand
