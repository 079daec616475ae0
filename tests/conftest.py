"""Shared fixtures: synthetic Fourier transforms with injected drifting signals."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import numpy as np
import pytest

from accelsearch.compute.response import z_response
from accelsearch.domain.fourier import FourierData

FourierFactory = Callable[..., FourierData]


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator for reproducibility."""
    return np.random.default_rng(42)


def inject_signal(amps: np.ndarray, r: float, z: float, amplitude: float, halfwidth: int = 64) -> None:
    """Add the response of a drifting sinusoid (unit-mean-noise power ``amplitude**2``)."""
    lo = max(int(np.floor(r - abs(z) / 2)) - halfwidth, 0)
    hi = min(int(np.ceil(r + abs(z) / 2)) + halfwidth, amps.size - 1)
    bins = np.arange(lo, hi + 1, dtype=np.float64)
    amps[lo : hi + 1] += amplitude * z_response(r - bins, z)


@pytest.fixture
def make_fourier(rng: np.random.Generator) -> FourierFactory:
    """Factory for FourierData holding unit-mean-power noise plus injected signals.

    Signals are ``(r, z, amplitude)`` tuples.
    """

    def _make(
        numbins: int = 4096,
        signals: Sequence[tuple[float, float, float]] = (),
        *,
        dt: float = 1e-3,
        noise: bool = True,
    ) -> FourierData:
        amps = np.zeros(numbins, dtype=np.complex128)
        if noise:
            amps += (rng.normal(size=numbins) + 1j * rng.normal(size=numbins)) * np.sqrt(0.5)
        for r, z, amplitude in signals:
            inject_signal(amps, r, z, amplitude)
        amps[0] = 0.0
        return FourierData(amplitudes=amps.astype(np.complex64), N=2 * numbins, dt=dt, basename="synthetic")

    return _make
