"""Fourier response of a sinusoid with a linearly drifting frequency.

A unit-amplitude signal with mean Fourier frequency r and drift z (the
frequency changes by z bins over the observation) has the complex Fourier
amplitude

    R(q, z) = integral_0^1 exp(2*pi*i*((q - z/2)*u + z*u**2/2)) du

at the bin r - q. For z != 0 the integral reduces to Fresnel integrals;
for z -> 0 it is exp(i*pi*q) * sinc(q).
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
from scipy import special

from accelsearch.domain.config import NUMFINTBINS

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

# Below this |z| the drift is treated as zero
SMALL_Z = 1e-4


def z_response_halfwidth(z: float) -> int:
    """Number of bins on each side of r needed to capture the response."""
    return NUMFINTBINS + int(math.ceil(0.55 * abs(z)))


def _positive_z_response(b: NDArray[np.float64], z: float) -> NDArray[np.complex128]:
    # integral_0^1 exp(i*pi*(z*u**2 + 2*b*u)) du for z > 0
    scale = math.sqrt(2.0 / z)
    s1, c1 = special.fresnel(b * scale)
    s2, c2 = special.fresnel((b + z) * scale)
    phase = np.exp(-1j * np.pi * b * b / z)
    return phase * ((c2 - c1) + 1j * (s2 - s1)) / math.sqrt(2.0 * z)


def z_response(offsets: ArrayLike, z: float) -> NDArray[np.complex128]:
    """Complex response at the given offsets ``q`` (signal r minus bin k)."""
    q = np.asarray(offsets, dtype=np.float64)
    b = q - 0.5 * z
    if abs(z) < SMALL_Z:
        return np.exp(1j * np.pi * q) * np.sinc(q)
    if z > 0:
        return _positive_z_response(b, z)
    return np.conj(_positive_z_response(-b, -z))


def z_response_kernel(z: float, halfwidth: int, numbetween: int) -> NDArray[np.complex128]:
    """Matched-filter kernel sampled every ``1/numbetween`` bins.

    Element ``p`` (centered at index ``halfwidth*numbetween``) is the
    conjugated response at offset ``(p - center)/numbetween``, so a
    convolution with interbinned amplitudes yields the interpolated
    amplitude at each r.
    """
    center = halfwidth * numbetween
    offsets = (np.arange(2 * center + 1, dtype=np.float64) - center) / numbetween
    return np.conj(z_response(offsets, z))


__all__ = ["SMALL_Z", "z_response", "z_response_halfwidth", "z_response_kernel"]
