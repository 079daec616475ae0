"""Subharmonic correlation-kernel table.

One kernel set exists per (stage, harmonic) pair: stage 0 holds the
fundamental (0, 1); stage s >= 1 holds every odd harmonic number in
[1, 2**s). Each set covers that harmonic's own z range, scaled from the
fundamental's range by its harmonic fraction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from accelsearch.compute.response import z_response_halfwidth, z_response_kernel
from accelsearch.domain.config import ACCEL_DZ, ACCEL_NUMBETWEEN, calc_required_z

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubharmonicKernel:
    """Correlation kernels for every z row of one harmonic's plane."""

    numharm: int
    harmnum: int
    zlo: float
    zhi: float
    halfwidth: int
    responses: NDArray[np.complex64]

    @property
    def harm_fract(self) -> float:
        return self.harmnum / self.numharm

    @property
    def numzs(self) -> int:
        return int(self.responses.shape[0])

    def z_values(self) -> NDArray[np.float64]:
        return self.zlo + np.arange(self.numzs, dtype=np.float64) * ACCEL_DZ


def stage_harmonics(stage: int) -> list[int]:
    """Harmonic numbers computed at a stage (the odd ones not summed before)."""
    if stage == 0:
        return [1]
    return list(range(1, 1 << stage, 2))


def build_subharmonic_kernel(
    numharm: int,
    harmnum: int,
    zlo: float,
    zhi: float,
    *,
    z_harmonic_power: int = 2,
) -> SubharmonicKernel:
    z_fract = (harmnum / numharm) ** z_harmonic_power
    sub_zlo = calc_required_z(z_fract, zlo)
    sub_zhi = calc_required_z(z_fract, zhi)
    numzs = int(round((sub_zhi - sub_zlo) / ACCEL_DZ)) + 1
    zs = sub_zlo + np.arange(numzs, dtype=np.float64) * ACCEL_DZ
    halfwidth = z_response_halfwidth(max(abs(sub_zlo), abs(sub_zhi)))
    responses = np.vstack(
        [z_response_kernel(float(z), halfwidth, ACCEL_NUMBETWEEN) for z in zs]
    ).astype(np.complex64)
    return SubharmonicKernel(
        numharm=numharm,
        harmnum=harmnum,
        zlo=sub_zlo,
        zhi=sub_zhi,
        halfwidth=halfwidth,
        responses=responses,
    )


class KernelTable(Mapping[tuple[int, int], SubharmonicKernel]):
    """Read-only mapping from (stage, harmnum) to its kernel set."""

    def __init__(self, kernels: dict[tuple[int, int], SubharmonicKernel], numharmstages: int) -> None:
        self._kernels = kernels
        self.numharmstages = numharmstages

    def __getitem__(self, key: tuple[int, int]) -> SubharmonicKernel:
        try:
            return self._kernels[key]
        except KeyError:
            raise KeyError(f"No kernel for stage/harmonic {key}; table has {self.numharmstages} stages") from None

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self._kernels)

    def __len__(self) -> int:
        return len(self._kernels)

    @property
    def released(self) -> bool:
        return not self._kernels

    def clear(self) -> None:
        self._kernels = {}


def build_kernel_table(
    numharmstages: int,
    zmax: float,
    *,
    zlo: float | None = None,
    z_harmonic_power: int = 2,
) -> KernelTable:
    """Generate the kernels for every harmonic stage.

    Args:
        numharmstages: Number of harmonic-summing stages.
        zmax: Highest z searched at the fundamental.
        zlo: Lowest z (defaults to -zmax).
        z_harmonic_power: Exponent applied to the harmonic fraction when scaling z.
    """
    zhi = float(zmax)
    zlo = -zhi if zlo is None else float(zlo)
    kernels: dict[tuple[int, int], SubharmonicKernel] = {}
    for stage in range(numharmstages):
        numharm = 1 << stage
        for harmnum in stage_harmonics(stage):
            kernels[(stage, harmnum)] = build_subharmonic_kernel(
                numharm, harmnum, zlo, zhi, z_harmonic_power=z_harmonic_power
            )
    logger.info("Generated %d correlation kernel sets for %d stages", len(kernels), numharmstages)
    return KernelTable(kernels, numharmstages)


def release_kernel_table(table: KernelTable) -> None:
    table.clear()


@contextmanager
def kernel_table(
    numharmstages: int,
    zmax: float,
    *,
    zlo: float | None = None,
    z_harmonic_power: int = 2,
) -> Iterator[KernelTable]:
    """Build a kernel table and release it when the scope ends."""
    table = build_kernel_table(numharmstages, zmax, zlo=zlo, z_harmonic_power=z_harmonic_power)
    try:
        yield table
    finally:
        release_kernel_table(table)


__all__ = [
    "KernelTable",
    "SubharmonicKernel",
    "build_kernel_table",
    "build_subharmonic_kernel",
    "kernel_table",
    "release_kernel_table",
    "stage_harmonics",
]
