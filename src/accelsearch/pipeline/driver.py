"""End-to-end acceleration search driver."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from accelsearch.compute.kernels import kernel_table
from accelsearch.compute.optimize import CandidateOptimizer
from accelsearch.compute.plane import CorrelationPlaneEngine, PlaneEngine
from accelsearch.domain.candidate import RankedCandidate
from accelsearch.domain.config import SearchConfig
from accelsearch.domain.fourier import FourierData
from accelsearch.pipeline.refine import Optimizer, refine_candidates
from accelsearch.pipeline.search import SearchResult, run_search

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccelSearchResult:
    ranked: list[RankedCandidate]
    search: SearchResult
    numindep: tuple[float, ...]
    runtime_seconds: float

    @property
    def n_candidates(self) -> int:
        return len(self.ranked)


def run_accelsearch(
    fourier: FourierData | None,
    config: SearchConfig,
    *,
    engine: PlaneEngine | None = None,
    optimizer: Optimizer | None = None,
) -> AccelSearchResult:
    """Search, refine and rank candidates.

    Args:
        fourier: Fourier amplitudes; used to build the default plane engine and optimizer.
        config: Search parameters.
        engine: Plane engine override (defaults to FFT correlation on ``fourier``).
        optimizer: Candidate optimizer override (defaults to CandidateOptimizer).

    Returns:
        AccelSearchResult with candidates in final rank order.
    """
    if fourier is None and (engine is None or optimizer is None):
        raise ValueError("fourier is required unless both engine and optimizer are given")

    start = time.perf_counter()
    if engine is None:
        engine = CorrelationPlaneEngine(fourier)
    if optimizer is None:
        optimizer = CandidateOptimizer(fourier, config)

    with kernel_table(
        config.numharmstages,
        config.zhi,
        zlo=config.zlo,
        z_harmonic_power=config.z_harmonic_power,
    ) as kernels:
        search = run_search(config, engine, kernels)

    ranked = refine_candidates(search.candidates, optimizer, config)
    end = time.perf_counter()
    logger.info("Acceleration search finished with %d candidates in %.2f s", len(ranked), end - start)
    return AccelSearchResult(
        ranked=ranked,
        search=search,
        numindep=config.numindep,
        runtime_seconds=float(end - start),
    )


__all__ = ["AccelSearchResult", "run_accelsearch"]
