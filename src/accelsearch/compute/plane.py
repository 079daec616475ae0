"""Power-plane construction for one harmonic over one search window.

The Fourier amplitudes around the window are normalized by their median
power, interbinned, and correlated with every z row of the harmonic's
kernel set. The result is a (numzs, numrs) grid of normalized powers in
that harmonic's own frame.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Protocol

import numpy as np
from scipy import signal

from accelsearch.domain.config import (
    ACCEL_DR,
    ACCEL_NUMBETWEEN,
    ACCEL_RDR,
    SearchConfig,
    calc_required_r,
)
from accelsearch.domain.plane import PowerPlane
from accelsearch.errors import ConfigurationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from accelsearch.compute.kernels import SubharmonicKernel
    from accelsearch.domain.fourier import FourierData

logger = logging.getLogger(__name__)


class PlaneEngine(Protocol):
    """Anything that can produce the power plane of one harmonic for a window."""

    def compute_plane(
        self,
        numharm: int,
        harmnum: int,
        startr: float,
        lastr: float,
        kernel: SubharmonicKernel,
        config: SearchConfig,
    ) -> PowerPlane: ...


def plane_geometry(
    numharm: int,
    harmnum: int,
    startr: float,
    lastr: float,
    uselen: int,
) -> tuple[float, int]:
    """Lowest r and number of r cells of a harmonic's plane for a window.

    The fundamental always has ``uselen`` cells; other harmonics get enough
    cells to cover the scaled window, rounded up to whole bins.
    """
    harm_fract = harmnum / numharm
    drlo = calc_required_r(harm_fract, startr)
    drhi = calc_required_r(harm_fract, lastr)
    if numharm == 1 and harmnum == 1:
        return drlo, uselen
    numrs = int(round((drhi - drlo) * ACCEL_RDR)) + 1
    if numrs % ACCEL_RDR:
        numrs = (numrs // ACCEL_RDR + 1) * ACCEL_RDR
    return drlo, numrs


def median_normalization(powers: NDArray[np.float64]) -> float:
    """Amplitude scale that gives unit-mean noise powers (median/ln2 estimator)."""
    valid = powers[powers > 0.0]
    if valid.size == 0:
        return 1.0
    med = float(np.median(valid))
    return 1.0 / math.sqrt(med / math.log(2.0))


class CorrelationPlaneEngine:
    """Builds power planes from Fourier amplitudes by FFT correlation."""

    def __init__(self, fourier: FourierData) -> None:
        self.fourier = fourier

    def compute_plane(
        self,
        numharm: int,
        harmnum: int,
        startr: float,
        lastr: float,
        kernel: SubharmonicKernel,
        config: SearchConfig,
    ) -> PowerPlane:
        if kernel.numharm != numharm or kernel.harmnum != harmnum:
            raise ConfigurationError(
                f"Kernel for harmonic {kernel.harmnum}/{kernel.numharm} used for {harmnum}/{numharm}",
                numharm=numharm,
                harmnum=harmnum,
            )
        rlo, numrs = plane_geometry(numharm, harmnum, startr, lastr, config.uselen)
        rhi = rlo + (numrs - 1) * ACCEL_DR
        halfwidth = kernel.halfwidth
        lobin = math.floor(rlo) - halfwidth
        hibin = math.ceil(rhi) + halfwidth
        numdata = hibin - lobin + 1

        # Only bins that exist in the transform set the normalization
        data_lo = max(lobin, 1)
        data_hi = min(hibin, self.fourier.numbins - 1)
        if data_hi > data_lo:
            norm = median_normalization(self.fourier.powers(data_lo, data_hi - data_lo + 1))
        else:
            logger.debug("Window [%.1f, %.1f] lies beyond the data; plane is empty", rlo, rhi)
            norm = 1.0

        data = self.fourier.get_amplitudes(lobin, numdata).astype(np.complex128) * norm
        pdata = np.zeros(numdata * ACCEL_NUMBETWEEN, dtype=np.complex128)
        pdata[::ACCEL_NUMBETWEEN] = data

        full = signal.fftconvolve(pdata[np.newaxis, :], kernel.responses, mode="full", axes=1)
        center = halfwidth * ACCEL_NUMBETWEEN
        first = int(round((rlo - lobin) * ACCEL_NUMBETWEEN)) + center
        seg = full[:, first : first + numrs]
        powers = (seg.real**2 + seg.imag**2).astype(np.float32)

        return PowerPlane(
            powers=powers,
            rlo=rlo,
            zlo=kernel.zlo,
            numharm=1,
            harm_fract=harmnum / numharm,
            startr=startr,
            lastr=lastr,
        )


__all__ = [
    "CorrelationPlaneEngine",
    "PlaneEngine",
    "median_normalization",
    "plane_geometry",
]
