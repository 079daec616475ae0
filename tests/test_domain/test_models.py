"""Tests for the plane, candidate and Fourier data containers."""

from __future__ import annotations

import numpy as np
import pytest

from accelsearch.domain.candidate import Candidate, RDerivs
from accelsearch.domain.fourier import FourierData
from accelsearch.domain.plane import PowerPlane


class TestPowerPlane:
    def _plane(self) -> PowerPlane:
        return PowerPlane(
            powers=np.ones((5, 8), dtype=np.float32),
            rlo=100.0,
            zlo=-4.0,
            startr=100.0,
            lastr=103.5,
        )

    def test_axes(self) -> None:
        plane = self._plane()
        assert (plane.numzs, plane.numrs) == (5, 8)
        assert plane.rhi == 103.5
        assert plane.zhi == 4.0
        np.testing.assert_allclose(plane.r_values(), np.arange(100.0, 104.0, 0.5))
        np.testing.assert_allclose(plane.z_values(), [-4.0, -2.0, 0.0, 2.0, 4.0])

    def test_scope_releases_powers(self) -> None:
        with self._plane() as plane:
            assert not plane.released
        assert plane.released
        assert plane.powers.size == 0

    def test_same_window(self) -> None:
        a, b = self._plane(), self._plane()
        assert a.same_window(b)
        b.startr = 99.5
        assert not a.same_window(b)


class TestCandidate:
    def test_seed_sigma_recorded_at_detection(self) -> None:
        cand = Candidate(power=50.0, sigma=6.5, numharm=2, r=100.0, z=2.0)
        cand.sigma = 7.0
        assert cand.seed_sigma == 6.5
        assert not cand.optimized
        assert not cand.is_refined

    def test_refined_when_every_harmonic_has_derivs(self) -> None:
        derivs = RDerivs(pow=4.0, phs=0.0, dpow=0.0, dphs=0.0, d2pow=0.0, d2phs=0.0, locpow=2.0)
        cand = Candidate(power=50.0, sigma=6.5, numharm=2, r=100.0, z=2.0)
        cand.derivs = [derivs, derivs]
        assert cand.is_refined
        assert derivs.normalized_pow == 2.0

    def test_zero_local_power(self) -> None:
        derivs = RDerivs(pow=4.0, phs=0.0, dpow=0.0, dphs=0.0, d2pow=0.0, d2phs=0.0, locpow=0.0)
        assert derivs.normalized_pow == 0.0


class TestFourierData:
    def test_basic_properties(self) -> None:
        amps = np.arange(8, dtype=np.complex64)
        fourier = FourierData(amplitudes=amps, N=16, dt=0.5)
        assert fourier.numbins == 8
        assert fourier.T == 8.0

    def test_amplitudes_are_read_only(self) -> None:
        fourier = FourierData(amplitudes=np.ones(8, dtype=np.complex64), N=16, dt=0.5)
        with pytest.raises(ValueError):
            fourier.amplitudes[0] = 2.0

    def test_slices_are_zero_padded(self) -> None:
        fourier = FourierData(amplitudes=np.arange(1, 9, dtype=np.complex64), N=16, dt=0.5)
        np.testing.assert_array_equal(fourier.get_amplitudes(-2, 4), [0, 0, 1, 2])
        np.testing.assert_array_equal(fourier.get_amplitudes(6, 4), [7, 8, 0, 0])
        np.testing.assert_array_equal(fourier.get_amplitudes(20, 2), [0, 0])
        np.testing.assert_allclose(fourier.powers(0, 2), [1.0, 4.0])

    @pytest.mark.parametrize(
        ("amps", "N", "dt", "error"),
        [
            ([1, 2], 4, 1.0, TypeError),
            (np.ones((2, 2), dtype=np.complex64), 4, 1.0, ValueError),
            (np.ones(4, dtype=np.complex128), 8, 1.0, ValueError),
            (np.ones(4, dtype=np.complex64), 0, 1.0, ValueError),
            (np.ones(4, dtype=np.complex64), 8, -1.0, ValueError),
        ],
    )
    def test_validation(self, amps, N: int, dt: float, error: type[Exception]) -> None:
        with pytest.raises(error):
            FourierData(amplitudes=amps, N=N, dt=dt)
