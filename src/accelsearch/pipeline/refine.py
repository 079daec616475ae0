"""Candidate refinement: optimize, rank, derive properties."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from accelsearch.compute.properties import calc_props
from accelsearch.domain.candidate import Candidate, RankedCandidate
from accelsearch.domain.config import SearchConfig

logger = logging.getLogger(__name__)

Optimizer = Callable[[Candidate], Candidate]


def rank_candidates(candidates: Sequence[Candidate]) -> list[Candidate]:
    """Sort by significance, highest first; equal sigmas keep their pool order."""
    return sorted(candidates, key=lambda c: c.sigma, reverse=True)


def merge_near_duplicates(candidates: Sequence[Candidate], radius_r: float) -> list[Candidate]:
    """Keep the most significant candidate among those closer than ``radius_r`` bins.

    Candidates are compared by their fundamental r regardless of harmonic
    order, so the same signal found at several stages or on both sides of a
    window edge collapses to one entry. The survivors keep pool order.
    """
    if radius_r <= 0.0 or len(candidates) < 2:
        return list(candidates)

    kept: list[tuple[int, Candidate]] = []
    for idx, cand in sorted(enumerate(candidates), key=lambda item: item[1].sigma, reverse=True):
        if any(abs(cand.r - other.r) < radius_r for _, other in kept):
            continue
        kept.append((idx, cand))
    kept.sort(key=lambda item: item[0])
    return [cand for _, cand in kept]


def optimize_candidates(
    candidates: Sequence[Candidate],
    optimizer: Optimizer,
    *,
    n_workers: int = 1,
) -> list[Candidate]:
    """Apply ``optimizer`` to every candidate; each one is touched by a single task."""
    if n_workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            return list(executor.map(optimizer, candidates))
    return [optimizer(cand) for cand in candidates]


def refine_candidates(
    candidates: Sequence[Candidate],
    optimizer: Optimizer,
    config: SearchConfig,
) -> list[RankedCandidate]:
    """Optimize, rank and derive FourierProperties for the pooled candidates.

    Properties come from the refined fundamental (harmonic 1) only. An
    empty pool yields an empty list without calling the optimizer.
    """
    if not candidates:
        logger.info("No candidates above sigma=%.2f; skipping refinement", config.sigma)
        return []

    pool = merge_near_duplicates(candidates, config.merge_radius_r)
    if len(pool) != len(candidates):
        logger.info("Merged %d near-duplicate candidates", len(candidates) - len(pool))

    logger.info("Optimizing %d candidates", len(pool))
    optimized = optimize_candidates(pool, optimizer, n_workers=config.n_workers)
    ranked = rank_candidates(optimized)

    results: list[RankedCandidate] = []
    for cand in ranked:
        props = calc_props(cand.derivs[0], cand.hirs[0], cand.hizs[0], 0.0)
        results.append(RankedCandidate(properties=props, candidate=cand))
    return results


__all__ = [
    "Optimizer",
    "merge_near_duplicates",
    "optimize_candidates",
    "rank_candidates",
    "refine_candidates",
]
