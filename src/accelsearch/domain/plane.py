"""Power plane ("ffdot plane") container."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from accelsearch.domain.config import ACCEL_DR, ACCEL_DZ

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass
class PowerPlane:
    """Dense grid of normalized powers over (z, r) for one search window.

    Rows are z values ``zlo + i*ACCEL_DZ`` and columns r values
    ``rlo + j*ACCEL_DR``, both in the plane's own harmonic frame.
    ``numharm`` is the number of harmonics summed into ``powers`` so far.
    """

    powers: NDArray[np.float32]
    rlo: float
    zlo: float
    numharm: int = 1
    harm_fract: float = 1.0
    startr: float = 0.0
    lastr: float = 0.0
    released: bool = field(default=False, repr=False)

    @property
    def numzs(self) -> int:
        return int(self.powers.shape[0])

    @property
    def numrs(self) -> int:
        return int(self.powers.shape[1])

    @property
    def rhi(self) -> float:
        return self.rlo + (self.numrs - 1) * ACCEL_DR

    @property
    def zhi(self) -> float:
        return self.zlo + (self.numzs - 1) * ACCEL_DZ

    def r_values(self) -> NDArray[np.float64]:
        return self.rlo + np.arange(self.numrs, dtype=np.float64) * ACCEL_DR

    def z_values(self) -> NDArray[np.float64]:
        return self.zlo + np.arange(self.numzs, dtype=np.float64) * ACCEL_DZ

    def same_window(self, other: PowerPlane) -> bool:
        return self.startr == other.startr and self.lastr == other.lastr

    def release(self) -> None:
        """Drop the power grid; the plane must not be used afterwards."""
        self.powers = np.empty((0, 0), dtype=np.float32)
        self.released = True

    def __enter__(self) -> PowerPlane:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
