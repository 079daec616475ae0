"""Fourier interpolation at arbitrary (r, z) and its local derivatives."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from accelsearch.compute.response import z_response, z_response_halfwidth
from accelsearch.domain.candidate import RDerivs

if TYPE_CHECKING:
    from accelsearch.domain.fourier import FourierData

# Bins on each side of a peak used for the local power estimate
NUMLOCPOWAVG = 50
# Bins skipped between the peak and the local power windows
DELTAAVGBINS = 5
# Step in r used for finite-difference derivatives
DERIV_DR = 0.005


def rz_interp(fourier: FourierData, r: float, z: float) -> complex:
    """Matched-filter amplitude of a drifting sinusoid at mean frequency r, drift z."""
    halfwidth = z_response_halfwidth(z)
    lobin = math.floor(r) - halfwidth
    numbins = 2 * halfwidth + 2
    bins = lobin + np.arange(numbins, dtype=np.float64)
    data = fourier.get_amplitudes(lobin, numbins).astype(np.complex128)
    resp = z_response(r - bins, z)
    return complex(np.sum(data * np.conj(resp)))


def rz_power(fourier: FourierData, r: float, z: float) -> float:
    amp = rz_interp(fourier, r, z)
    return amp.real * amp.real + amp.imag * amp.imag


def local_power(fourier: FourierData, r: float, z: float) -> float:
    """Mean noise power around r, estimated from the median of nearby bins.

    Bins within the signal's drift range (plus a small guard) are excluded.
    Returns 1.0 when no usable bins exist.
    """
    core = DELTAAVGBINS + int(math.ceil(abs(z) / 2.0)) + 1
    center = int(round(r))
    lo_bins = np.arange(center - core - NUMLOCPOWAVG, center - core)
    hi_bins = np.arange(center + core + 1, center + core + 1 + NUMLOCPOWAVG)
    bins = np.concatenate([lo_bins, hi_bins])
    bins = bins[(bins >= 1) & (bins < fourier.numbins)]
    if bins.size == 0:
        return 1.0
    amps = fourier.amplitudes[bins].astype(np.complex128)
    med = float(np.median(amps.real**2 + amps.imag**2))
    if med <= 0.0:
        return 1.0
    return med / math.log(2.0)


def rz_derivs(fourier: FourierData, r: float, z: float, locpow: float | None = None) -> RDerivs:
    """Power and phase at (r, z) with central-difference derivatives in r."""
    if locpow is None:
        locpow = local_power(fourier, r, z)
    amps = np.array([rz_interp(fourier, r + k * DERIV_DR, z) for k in (-1, 0, 1)])
    pows = amps.real**2 + amps.imag**2
    phases = np.unwrap(np.angle(amps))
    return RDerivs(
        pow=float(pows[1]),
        phs=float(phases[1]),
        dpow=float((pows[2] - pows[0]) / (2.0 * DERIV_DR)),
        dphs=float((phases[2] - phases[0]) / (2.0 * DERIV_DR)),
        d2pow=float((pows[2] - 2.0 * pows[1] + pows[0]) / DERIV_DR**2),
        d2phs=float((phases[2] - 2.0 * phases[1] + phases[0]) / DERIV_DR**2),
        locpow=float(locpow),
    )


__all__ = ["local_power", "rz_derivs", "rz_interp", "rz_power"]
