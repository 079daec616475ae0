"""Unit tests for summed-power significance."""

from __future__ import annotations

import math

import numpy as np
import pytest
from scipy import stats

from accelsearch.compute.significance import (
    candidate_sigma,
    equivalent_gaussian_sigma,
    log_gamma_sf,
    log_prob_trials,
    power_for_sigma,
)


class TestLogGammaSf:
    def test_matches_scipy_gamma(self) -> None:
        for numsum, power in [(1, 3.0), (2, 10.0), (8, 20.0)]:
            expected = stats.gamma(numsum).logsf(power)
            assert log_gamma_sf(numsum, power) == pytest.approx(expected, rel=1e-9)

    def test_single_harmonic_is_exponential(self) -> None:
        assert log_gamma_sf(1, 42.0) == pytest.approx(-42.0)

    def test_no_underflow_for_huge_power(self) -> None:
        value = log_gamma_sf(4, 5000.0)
        assert math.isfinite(value)
        assert value < -4900.0


class TestTrialsAndSigma:
    def test_single_trial_is_identity(self) -> None:
        assert log_prob_trials(-5.0, 1.0) == -5.0

    def test_more_trials_raise_false_alarm_probability(self) -> None:
        assert log_prob_trials(-10.0, 100.0) > log_prob_trials(-10.0, 10.0) > -10.0

    def test_gaussian_sigma_reference_values(self) -> None:
        assert equivalent_gaussian_sigma(math.log(0.5)) == pytest.approx(0.0, abs=1e-12)
        assert equivalent_gaussian_sigma(float(stats.norm.logsf(3.0))) == pytest.approx(3.0)
        assert equivalent_gaussian_sigma(0.0) == 0.0


class TestCandidateSigma:
    @pytest.mark.parametrize("numsum", [1, 2, 4, 8, 16])
    def test_monotonic_in_power(self, numsum: int) -> None:
        powers = np.linspace(0.0, 400.0, 801)
        sigmas = [candidate_sigma(float(p), numsum, 1e6) for p in powers]
        assert all(b >= a for a, b in zip(sigmas, sigmas[1:]))

    def test_zero_power_has_zero_sigma(self) -> None:
        assert candidate_sigma(0.0, 4, 10.0) == 0.0

    def test_more_trials_lower_sigma(self) -> None:
        assert candidate_sigma(60.0, 2, 1e8) < candidate_sigma(60.0, 2, 1e2)

    def test_very_strong_signal_is_finite(self) -> None:
        strong = candidate_sigma(1e4, 1, 1e7)
        assert math.isfinite(strong)
        assert strong > candidate_sigma(1e3, 1, 1e7)


class TestPowerForSigma:
    @pytest.mark.parametrize("sigma", [1.0, 2.0, 5.0, 10.0, 40.0])
    @pytest.mark.parametrize("numsum", [1, 4, 16])
    @pytest.mark.parametrize("numtrials", [1.0, 1e3, 1e8])
    def test_inverts_candidate_sigma(self, sigma: float, numsum: int, numtrials: float) -> None:
        power = power_for_sigma(sigma, numsum, numtrials)
        assert candidate_sigma(power, numsum, numtrials) == pytest.approx(sigma, rel=1e-6, abs=1e-6)

    def test_threshold_increases_with_sigma(self) -> None:
        assert power_for_sigma(3.0, 2, 1e4) < power_for_sigma(6.0, 2, 1e4)

    def test_threshold_increases_with_harmonics(self) -> None:
        assert power_for_sigma(3.0, 1, 1e4) < power_for_sigma(3.0, 8, 1e4)
