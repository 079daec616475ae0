"""Sliding-window scan with harmonic summing.

The Fourier axis is scanned left to right in non-overlapping windows of
``config.uselen`` grid cells. For every window the fundamental plane is
searched, then each harmonic stage adds the planes of its new odd
harmonics into the accumulated plane and searches it again. At most one
accumulated plane and one harmonic plane are alive per window.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from accelsearch.compute.combine import add_ffdot_powers
from accelsearch.compute.detect import search_ffdot_powers
from accelsearch.compute.kernels import KernelTable, stage_harmonics
from accelsearch.compute.plane import PlaneEngine
from accelsearch.domain.candidate import Candidate
from accelsearch.domain.config import ACCEL_DR, SearchConfig
from accelsearch.errors import AccelSearchError, SearchWindowError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchWindow:
    startr: float
    lastr: float

    @property
    def nextr(self) -> float:
        return self.lastr + ACCEL_DR


@dataclass(frozen=True)
class SearchResult:
    candidates: list[Candidate]
    windows: list[SearchWindow]
    runtime_seconds: float
    notes: dict[str, Any] = field(default_factory=dict)


def iter_search_windows(rlo: float, highestbin: float, uselen: int) -> Iterator[SearchWindow]:
    """Yield consecutive windows starting at ``rlo`` that end before ``highestbin``.

    A trailing stretch shorter than a full window is not searched.
    """
    width = uselen * ACCEL_DR
    startr = rlo
    while startr + width < highestbin:
        nextr = startr + width
        yield SearchWindow(startr=startr, lastr=nextr - ACCEL_DR)
        startr = nextr


def search_window(
    window: SearchWindow,
    config: SearchConfig,
    engine: PlaneEngine,
    kernels: KernelTable,
) -> list[Candidate]:
    """Search one window at every harmonic stage.

    Raises:
        SearchWindowError: If building, combining or searching a plane fails.
    """
    stage, harmnum = 0, 1
    found: list[Candidate] = []
    try:
        with engine.compute_plane(1, 1, window.startr, window.lastr, kernels[(0, 1)], config) as fundamental:
            found.extend(search_ffdot_powers(fundamental, config))

            for stage in range(1, config.numharmstages):
                harmtosum = 1 << stage
                for harmnum in stage_harmonics(stage):
                    with engine.compute_plane(
                        harmtosum,
                        harmnum,
                        window.startr,
                        window.lastr,
                        kernels[(stage, harmnum)],
                        config,
                    ) as subharmonic:
                        add_ffdot_powers(
                            fundamental,
                            subharmonic,
                            harmtosum,
                            harmnum,
                            z_harmonic_power=config.z_harmonic_power,
                        )
                harmnum = harmtosum
                found.extend(search_ffdot_powers(fundamental, config))
    except (AccelSearchError, MemoryError, KeyError, ValueError) as exc:
        raise SearchWindowError(
            f"Search failed in window r=[{window.startr}, {window.lastr}] "
            f"at stage {stage} (harmonic {harmnum}): {exc}",
            startr=window.startr,
            lastr=window.lastr,
            stage=stage,
            harmnum=harmnum,
        ) from exc
    return found


def run_search(
    config: SearchConfig,
    engine: PlaneEngine,
    kernels: KernelTable,
) -> SearchResult:
    """Scan every window and return the pooled (unranked) candidates.

    With ``config.n_workers > 1`` windows are searched on a thread pool; the
    per-window candidate lists are concatenated in window order either way.
    """
    start = time.perf_counter()
    windows = list(iter_search_windows(config.rlo, config.highestbin, config.uselen))
    logger.info(
        "Searching %d windows over r=%.1f-%.1f with up to %d harmonics summed",
        len(windows),
        config.rlo,
        config.highestbin,
        config.max_numharm,
    )

    def _one(window: SearchWindow) -> list[Candidate]:
        logger.debug("Searching window r=[%.1f, %.1f]", window.startr, window.lastr)
        return search_window(window, config, engine, kernels)

    pool: list[Candidate] = []
    if config.n_workers > 1 and len(windows) > 1:
        with ThreadPoolExecutor(max_workers=config.n_workers) as executor:
            for found in executor.map(_one, windows):
                pool.extend(found)
    else:
        for window in windows:
            pool.extend(_one(window))

    end = time.perf_counter()
    logger.info("Search found %d raw candidates in %.2f s", len(pool), end - start)
    return SearchResult(
        candidates=pool,
        windows=windows,
        runtime_seconds=float(end - start),
        notes={
            "n_windows": len(windows),
            "uselen": int(config.uselen),
            "numharmstages": int(config.numharmstages),
            "n_workers": int(config.n_workers),
        },
    )


__all__ = [
    "SearchResult",
    "SearchWindow",
    "iter_search_windows",
    "run_search",
    "search_window",
]
