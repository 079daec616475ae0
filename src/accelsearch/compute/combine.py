"""Harmonic summing of power planes.

A cell (rr, zz) of the accumulated plane corresponds to the cell
(calc_required_r(f, rr), calc_required_z(f**p, zz)) of the plane computed
for harmonic fraction f = harmnum/numharm. With the default p = 2 a
fundamental cell (r, z) reads harmonic cell (h*r, h**2*z). Powers are added
at those exact indices, never interpolated.
"""

from __future__ import annotations

import numpy as np

from accelsearch.domain.config import (
    ACCEL_DR,
    ACCEL_DZ,
    ACCEL_RDR,
    ACCEL_RDZ,
    DBLCORRECT,
)
from accelsearch.domain.plane import PowerPlane
from accelsearch.errors import PlaneMismatchError


def harmonic_r_indices(accumulated: PowerPlane, component: PowerPlane, harm_fract: float) -> np.ndarray:
    rr = accumulated.rlo + np.arange(accumulated.numrs, dtype=np.float64) * ACCEL_DR
    subr = np.floor(ACCEL_RDR * rr * harm_fract + 0.5) * ACCEL_DR
    return np.floor((subr - component.rlo) * ACCEL_RDR + DBLCORRECT).astype(np.intp)


def harmonic_z_indices(accumulated: PowerPlane, component: PowerPlane, z_fract: float) -> np.ndarray:
    zz = accumulated.zlo + np.arange(accumulated.numzs, dtype=np.float64) * ACCEL_DZ
    subz = np.floor(ACCEL_RDZ * zz * z_fract + 0.5) * ACCEL_DZ
    return np.floor((subz - component.zlo) * ACCEL_RDZ + DBLCORRECT).astype(np.intp)


def add_ffdot_powers(
    accumulated: PowerPlane,
    component: PowerPlane,
    numharm: int,
    harmnum: int,
    *,
    z_harmonic_power: int = 2,
) -> PowerPlane:
    """Add the powers of harmonic ``harmnum`` of ``numharm`` into ``accumulated``.

    Component cells whose z lies outside the component plane contribute
    nothing. The accumulated plane is modified in place and returned with
    its ``numharm`` incremented.

    Raises:
        PlaneMismatchError: If the planes were built for different windows,
            a plane was already released, or the component does not cover
            the r range the accumulated plane maps onto.
    """
    if accumulated.released or component.released:
        raise PlaneMismatchError("Cannot combine a released power plane")
    if not accumulated.same_window(component):
        raise PlaneMismatchError(
            "Planes belong to different search windows",
            accumulated_window=(accumulated.startr, accumulated.lastr),
            component_window=(component.startr, component.lastr),
        )

    harm_fract = harmnum / numharm
    rind = harmonic_r_indices(accumulated, component, harm_fract)
    if rind.size and (rind[0] < 0 or rind[-1] >= component.numrs):
        raise PlaneMismatchError(
            f"Harmonic {harmnum}/{numharm} plane covers r cells [0, {component.numrs}) "
            f"but the accumulated plane needs [{int(rind[0])}, {int(rind[-1])}]",
            numharm=numharm,
            harmnum=harmnum,
            component_rlo=component.rlo,
            accumulated_rlo=accumulated.rlo,
        )

    zind = harmonic_z_indices(accumulated, component, harm_fract**z_harmonic_power)
    zvalid = (zind >= 0) & (zind < component.numzs)
    if np.any(zvalid):
        accumulated.powers[zvalid] += component.powers[np.ix_(zind[zvalid], rind)]

    accumulated.numharm += 1
    return accumulated


__all__ = ["add_ffdot_powers", "harmonic_r_indices", "harmonic_z_indices"]
