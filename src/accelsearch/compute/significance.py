"""Significance of summed Fourier powers.

A normalized noise power is exponentially distributed with unit mean, so
the sum of ``numsum`` harmonics is Gamma(numsum, 1) distributed. The chance
probability of a summed power is corrected for the number of independent
trials searched and expressed as an equivalent one-sided Gaussian sigma.
All probabilities are handled in log space so that very strong signals do
not underflow.
"""

from __future__ import annotations

import math

from scipy import optimize, special

# Below this log-probability exp() underflows; stay in log space
_MIN_DIRECT_LOGP = -700.0
# Below this log-probability the power threshold is found by root finding
_MIN_INVERSE_LOGP = -300.0


def log_gamma_sf(numsum: float, power: float) -> float:
    """Natural log of Q(numsum, power), the upper regularized gamma function."""
    if power <= 0.0:
        return 0.0
    q = float(special.gammaincc(numsum, power))
    if q > 0.0:
        return math.log(q)
    # Q(a, x) ~ x**(a-1) * exp(-x) / Gamma(a) * (1 + (a-1)/x + (a-1)(a-2)/x**2 ...)
    a = float(numsum)
    series = 1.0 + (a - 1.0) / power + (a - 1.0) * (a - 2.0) / (power * power)
    return (a - 1.0) * math.log(power) - power - special.gammaln(a) + math.log(max(series, 1e-300))


def log_prob_trials(logp: float, numtrials: float) -> float:
    """log of 1 - (1 - p)**numtrials, the chance of at least one false alarm."""
    if numtrials <= 1.0:
        return min(logp, 0.0)
    if logp < _MIN_DIRECT_LOGP:
        return min(logp + math.log(numtrials), 0.0)
    p = math.exp(logp)
    total = -math.expm1(numtrials * math.log1p(-p)) if p < 1.0 else 1.0
    return math.log(total) if total > 0.0 else logp + math.log(numtrials)


def equivalent_gaussian_sigma(logp: float) -> float:
    """One-sided Gaussian sigma with tail probability ``exp(logp)``."""
    if logp >= 0.0:
        return 0.0
    return float(-special.ndtri_exp(logp))


def candidate_sigma(power: float, numsum: int, numtrials: float) -> float:
    """Gaussian significance of a power summed over ``numsum`` harmonics.

    Monotonic (non-decreasing) in ``power``; zero for non-positive powers.
    """
    if power <= 0.0:
        return 0.0
    logp = log_gamma_sf(numsum, power)
    return equivalent_gaussian_sigma(log_prob_trials(logp, numtrials))


def _single_trial_logp(sigma: float, numtrials: float) -> float:
    logp = float(special.log_ndtr(-sigma))
    if numtrials <= 1.0:
        return logp
    if logp > _MIN_DIRECT_LOGP:
        single = -math.expm1(math.log1p(-math.exp(logp)) / numtrials)
        if single > 0.0:
            return math.log(single)
    return logp - math.log(numtrials)


def power_for_sigma(sigma: float, numsum: int, numtrials: float) -> float:
    """Summed power whose significance equals ``sigma`` (inverse of candidate_sigma)."""
    logp = _single_trial_logp(sigma, numtrials)
    if logp > _MIN_INVERSE_LOGP:
        return float(special.gammainccinv(numsum, math.exp(logp)))

    def _excess(power: float) -> float:
        return log_gamma_sf(numsum, power) - logp

    lo = float(numsum)
    hi = max(2.0 * lo, -2.0 * logp + 10.0 * lo)
    while _excess(hi) > 0.0:
        hi *= 2.0
    return float(optimize.brentq(_excess, lo, hi, xtol=1e-10))


__all__ = [
    "candidate_sigma",
    "equivalent_gaussian_sigma",
    "log_gamma_sf",
    "log_prob_trials",
    "power_for_sigma",
]
