"""Fourier amplitude domain model.

This module provides:
- FourierData: Complex Fourier amplitudes of an evenly sampled time series
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass
class FourierData:
    """Complex amplitudes of a real-valued FFT plus the sampling it came from.

    Attributes:
        amplitudes: Complex Fourier amplitudes, bin k at index k (complex64)
        N: Number of points in the original time series
        dt: Sampling interval, in seconds
        basename: Root name used for output files
    """

    amplitudes: NDArray[np.complex64]
    N: int
    dt: float
    basename: str = "fourier"

    def __post_init__(self) -> None:
        """Validate dtype/shape and make the amplitudes immutable."""
        if not isinstance(self.amplitudes, np.ndarray):
            raise TypeError(f"amplitudes must be a numpy array, got {type(self.amplitudes).__name__}")
        if self.amplitudes.ndim != 1:
            raise ValueError(f"amplitudes must be 1-D, got shape {self.amplitudes.shape}")
        if self.amplitudes.dtype != np.complex64:
            raise ValueError(f"amplitudes must be complex64, got {self.amplitudes.dtype}")
        if self.N <= 0:
            raise ValueError(f"N must be positive, got {self.N}")
        if self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")

        # Shared read-only across search windows and optimizer threads
        self.amplitudes.flags.writeable = False

    @property
    def numbins(self) -> int:
        return int(self.amplitudes.size)

    @property
    def T(self) -> float:
        """Observation duration, in seconds."""
        return self.N * self.dt

    def get_amplitudes(self, lobin: int, numbins: int) -> NDArray[np.complex64]:
        """Return ``numbins`` amplitudes starting at ``lobin``, zero padded off the ends."""
        out = np.zeros(numbins, dtype=np.complex64)
        lo = max(lobin, 0)
        hi = min(lobin + numbins, self.numbins)
        if hi > lo:
            out[lo - lobin : hi - lobin] = self.amplitudes[lo:hi]
        return out

    def powers(self, lobin: int, numbins: int) -> NDArray[np.float64]:
        amps = self.get_amplitudes(lobin, numbins).astype(np.complex128)
        return amps.real**2 + amps.imag**2


__all__ = ["FourierData"]
