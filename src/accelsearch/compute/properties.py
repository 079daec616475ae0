"""Derived properties of an optimized Fourier peak.

Uncertainties follow the first-order expressions for a sinusoid of
normalized power P (Ransom, Eikenberry & Middleditch 2002). The purity
measures how the signal power is spread in time: 1 for a constant
amplitude over the whole observation, derived from the curvature of the
power with respect to r.
"""

from __future__ import annotations

import cmath
import math
from collections.abc import Sequence

from accelsearch.compute.significance import candidate_sigma
from accelsearch.domain.candidate import FourierProperties, RDerivs

TWOPI = 2.0 * math.pi


def calc_props(derivs: RDerivs, r: float, z: float, w: float = 0.0) -> FourierProperties:
    """Compute FourierProperties for the peak described by ``derivs`` at (r, z, w)."""
    pownorm = derivs.normalized_pow
    if pownorm <= 0.0 or derivs.pow <= 0.0:
        return FourierProperties(
            r=r,
            rerr=0.0,
            z=z,
            zerr=0.0,
            w=w,
            werr=0.0,
            pow=0.0,
            powerr=0.0,
            sig=0.0,
            rawpow=derivs.pow,
            phs=derivs.phs,
            phserr=0.0,
            cen=0.0,
            cenerr=0.0,
            pur=0.0,
            purerr=0.0,
            locpow=derivs.locpow,
        )

    pur = math.sqrt(max(-1.5 * derivs.d2pow / (math.pi**2 * derivs.pow), 0.0))
    phserr = 1.0 / math.sqrt(2.0 * pownorm)
    if pur > 0.0:
        rerr = 3.0 / (math.pi * pur * math.sqrt(6.0 * pownorm))
        zerr = 3.0 * math.sqrt(10.0) / (math.pi * pur * pur * math.sqrt(pownorm))
    else:
        rerr = zerr = math.inf

    return FourierProperties(
        r=r,
        rerr=rerr,
        z=z,
        zerr=zerr,
        w=w,
        werr=0.0,
        pow=pownorm,
        powerr=math.sqrt(2.0 * pownorm),
        sig=candidate_sigma(pownorm, 1, 1.0),
        rawpow=derivs.pow,
        phs=derivs.phs,
        phserr=phserr,
        cen=-derivs.dphs / TWOPI,
        cenerr=phserr / math.pi,
        pur=pur,
        purerr=pur / math.sqrt(2.0 * pownorm),
        locpow=derivs.locpow,
    )


def incoherent_power(derivs: Sequence[RDerivs]) -> float:
    """Sum of the normalized harmonic powers."""
    return float(sum(d.normalized_pow for d in derivs))


def coherent_power(derivs: Sequence[RDerivs]) -> float:
    """Power of the phase-aware sum of the normalized harmonic amplitudes."""
    total = 0j
    for d in derivs:
        total += cmath.rect(math.sqrt(d.normalized_pow), d.phs)
    return abs(total) ** 2


__all__ = ["calc_props", "coherent_power", "incoherent_power"]
