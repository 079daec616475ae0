"""Unit tests for drifting-sinusoid Fourier responses and kernels."""

from __future__ import annotations

import numpy as np
import pytest

from accelsearch.compute.response import z_response, z_response_halfwidth, z_response_kernel
from accelsearch.domain.config import NUMFINTBINS


def _direct_response(q: float, z: float, n: int = 20000) -> complex:
    u = (np.arange(n) + 0.5) / n
    return complex(np.mean(np.exp(2j * np.pi * ((q - z / 2.0) * u + z * u * u / 2.0))))


# =============================================================================
# z_response
# =============================================================================


class TestZResponse:
    def test_zero_z_is_phased_sinc(self) -> None:
        q = np.array([-2.5, -1.0, 0.0, 0.25, 3.0])
        expected = np.exp(1j * np.pi * q) * np.sinc(q)
        np.testing.assert_allclose(z_response(q, 0.0), expected, atol=1e-12)

    def test_peak_has_unit_amplitude(self) -> None:
        assert abs(z_response(np.array([0.0]), 0.0)[0]) == pytest.approx(1.0)

    @pytest.mark.parametrize("z", [0.5, 3.0, 10.0, -7.0, -40.0])
    @pytest.mark.parametrize("q", [-6.3, -1.0, 0.0, 0.4, 2.0, 15.5])
    def test_matches_direct_integration(self, q: float, z: float) -> None:
        got = complex(z_response(np.array([q]), z)[0])
        assert got == pytest.approx(_direct_response(q, z), abs=1e-4)

    def test_continuous_through_small_z(self) -> None:
        q = np.linspace(-5.0, 5.0, 41)
        np.testing.assert_allclose(z_response(q, 1e-3), z_response(q, 0.0), atol=5e-3)

    def test_negative_z_symmetry(self) -> None:
        q = np.linspace(-8.0, 8.0, 33)
        np.testing.assert_allclose(z_response(q, -12.0), np.conj(z_response(-q, 12.0)), atol=1e-12)

    def test_total_power_is_conserved(self) -> None:
        # Parseval: the response spread over integer bins keeps unit power
        z = 20.0
        k = np.arange(-200, 201, dtype=np.float64)
        total = np.sum(np.abs(z_response(0.3 - k, z)) ** 2)
        assert total == pytest.approx(1.0, abs=0.01)


# =============================================================================
# Kernels
# =============================================================================


class TestZResponseKernel:
    def test_halfwidth_grows_with_drift(self) -> None:
        assert z_response_halfwidth(0.0) == NUMFINTBINS
        assert z_response_halfwidth(10.0) == NUMFINTBINS + 6
        assert z_response_halfwidth(-10.0) == z_response_halfwidth(10.0)

    def test_kernel_length_and_center(self) -> None:
        kern = z_response_kernel(4.0, 20, 2)
        assert kern.shape == (2 * 20 * 2 + 1,)
        center = 20 * 2
        assert kern[center] == pytest.approx(np.conj(z_response(np.array([0.0]), 4.0)[0]))

    def test_kernel_samples_half_bins(self) -> None:
        kern = z_response_kernel(0.0, NUMFINTBINS, 2)
        center = NUMFINTBINS * 2
        assert kern[center + 1] == pytest.approx(np.conj(z_response(np.array([0.5]), 0.0)[0]))
        assert abs(kern[center + 2]) == pytest.approx(0.0, abs=1e-12)
