"""Tests for the sliding-window scan with harmonic summing."""

from __future__ import annotations

import pytest
from fakes import FailingEngine, HotCellEngine

from accelsearch.compute.kernels import build_kernel_table
from accelsearch.domain.config import ACCEL_DR, SearchConfig
from accelsearch.errors import SearchWindowError
from accelsearch.pipeline.search import SearchWindow, iter_search_windows, run_search, search_window

USELEN = 400


def _config(numharmstages: int = 1, **options) -> SearchConfig:
    return SearchConfig.for_observation(
        numbins=20000,
        T=10.0,
        rlo=1000.0,
        rhi=3000.0,
        zmax=100.0,
        numharmstages=numharmstages,
        sigma=5.0,
        uselen=USELEN,
        **options,
    )


# =============================================================================
# Windows
# =============================================================================


class TestSearchWindows:
    def test_windows_are_contiguous(self) -> None:
        config = _config()
        windows = list(iter_search_windows(config.rlo, config.highestbin, config.uselen))
        assert windows[0].startr == config.rlo
        for prev, nxt in zip(windows, windows[1:]):
            assert nxt.startr == prev.nextr
            assert prev.lastr - prev.startr == (USELEN - 1) * ACCEL_DR

    def test_windows_stay_below_highest_bin(self) -> None:
        config = _config()
        windows = list(iter_search_windows(config.rlo, config.highestbin, config.uselen))
        assert all(w.lastr < config.highestbin for w in windows)
        assert windows[-1].nextr + config.window_width >= config.highestbin

    def test_windows_cover_requested_range(self) -> None:
        config = _config()
        windows = list(iter_search_windows(config.rlo, config.highestbin, config.uselen))
        assert windows[-1].nextr >= config.rhi

    def test_data_limits_the_scan(self) -> None:
        windows = list(iter_search_windows(10.0, 500.0, 400))
        assert [w.startr for w in windows] == [10.0, 210.0]
        assert windows[-1].lastr == 409.5

    def test_short_range_has_no_windows(self) -> None:
        assert list(iter_search_windows(10.0, 100.0, 400)) == []

    def test_next_window_start(self) -> None:
        assert SearchWindow(startr=10.0, lastr=209.5).nextr == 210.0


# =============================================================================
# search_window
# =============================================================================


class TestSearchWindow:
    def test_hot_cell_becomes_one_candidate(self) -> None:
        config = _config()
        kernels = build_kernel_table(1, config.zhi, zlo=config.zlo)
        engine = HotCellEngine(hot=[(1050.0, 0.0, 400.0)])
        window = SearchWindow(startr=1000.0, lastr=1000.0 + (USELEN - 1) * ACCEL_DR)

        (cand,) = search_window(window, config, engine, kernels)

        assert (cand.r, cand.z, cand.numharm) == (1050.0, 0.0, 1)
        assert cand.sigma > config.sigma

    def test_harmonic_stages_are_visited_in_order(self) -> None:
        config = _config(numharmstages=3)
        kernels = build_kernel_table(3, config.zhi, zlo=config.zlo)
        engine = HotCellEngine()
        window = SearchWindow(startr=2000.0, lastr=2000.0 + (USELEN - 1) * ACCEL_DR)

        search_window(window, config, engine, kernels)

        assert [(n, h) for n, h, _ in engine.calls] == [(1, 1), (2, 1), (4, 1), (4, 3)]

    def test_planes_are_released(self) -> None:
        config = _config(numharmstages=4)
        kernels = build_kernel_table(4, config.zhi, zlo=config.zlo)
        engine = HotCellEngine()
        window = SearchWindow(startr=2000.0, lastr=2000.0 + (USELEN - 1) * ACCEL_DR)

        search_window(window, config, engine, kernels)

        assert engine.planes
        assert all(p.released for p in engine.planes)
        assert engine.max_alive <= 2

    def test_summed_stage_reports_summed_order(self) -> None:
        # A hot fundamental cell is still above threshold once zero harmonics are added
        config = _config(numharmstages=2)
        kernels = build_kernel_table(2, config.zhi, zlo=config.zlo)
        engine = HotCellEngine(hot=[(2100.0, 10.0, 400.0)])
        window = SearchWindow(startr=2000.0, lastr=2000.0 + (USELEN - 1) * ACCEL_DR)

        cands = search_window(window, config, engine, kernels)

        assert sorted((c.numharm, c.r, c.z) for c in cands) == [(1, 2100.0, 10.0), (2, 1050.0, 2.5)]

    @pytest.mark.parametrize(
        ("fail_at", "stage", "harmnum"),
        [((1, 1), 0, 1), ((2, 1), 1, 1), ((4, 3), 2, 3)],
    )
    def test_failure_carries_window_and_stage(self, fail_at, stage: int, harmnum: int) -> None:
        config = _config(numharmstages=3)
        kernels = build_kernel_table(3, config.zhi, zlo=config.zlo)
        engine = FailingEngine(*fail_at, exc=ValueError("bad plane"))
        window = SearchWindow(startr=2000.0, lastr=2000.0 + (USELEN - 1) * ACCEL_DR)

        with pytest.raises(SearchWindowError) as exc_info:
            search_window(window, config, engine, kernels)

        err = exc_info.value
        assert (err.startr, err.lastr) == (window.startr, window.lastr)
        assert (err.stage, err.harmnum) == (stage, harmnum)
        assert isinstance(err.__cause__, ValueError)
        assert all(p.released for p in engine.planes)

    def test_memory_error_is_wrapped(self) -> None:
        config = _config(numharmstages=2)
        kernels = build_kernel_table(2, config.zhi, zlo=config.zlo)
        engine = FailingEngine(2, 1, exc=MemoryError())
        window = SearchWindow(startr=2000.0, lastr=2000.0 + (USELEN - 1) * ACCEL_DR)
        with pytest.raises(SearchWindowError):
            search_window(window, config, engine, kernels)

    def test_missing_kernel_is_wrapped(self) -> None:
        config = _config(numharmstages=2)
        kernels = build_kernel_table(1, config.zhi, zlo=config.zlo)
        window = SearchWindow(startr=2000.0, lastr=2000.0 + (USELEN - 1) * ACCEL_DR)
        with pytest.raises(SearchWindowError) as exc_info:
            search_window(window, config, HotCellEngine(), kernels)
        assert exc_info.value.stage == 1


# =============================================================================
# run_search
# =============================================================================


class TestRunSearch:
    def test_pools_candidates_across_windows(self) -> None:
        config = _config()
        kernels = build_kernel_table(1, config.zhi, zlo=config.zlo)
        engine = HotCellEngine(hot=[(1050.0, 0.0, 400.0), (2500.5, -20.0, 300.0)])

        result = run_search(config, engine, kernels)

        assert [(c.r, c.z) for c in result.candidates] == [(1050.0, 0.0), (2500.5, -20.0)]
        assert result.notes["n_windows"] == len(result.windows) == 10
        assert result.runtime_seconds >= 0.0

    def test_zero_candidates(self) -> None:
        config = _config()
        kernels = build_kernel_table(1, config.zhi, zlo=config.zlo)
        result = run_search(config, HotCellEngine(), kernels)
        assert result.candidates == []
        assert len(result.windows) == 10

    def test_threaded_scan_matches_serial(self) -> None:
        hot = [(1050.0, 0.0, 400.0), (1890.0, 4.0, 350.0), (2500.5, -20.0, 300.0)]
        serial_config = _config()
        threaded_config = _config(n_workers=4)
        kernels = build_kernel_table(1, serial_config.zhi, zlo=serial_config.zlo)

        serial = run_search(serial_config, HotCellEngine(hot=hot), kernels)
        threaded = run_search(threaded_config, HotCellEngine(hot=hot), kernels)

        assert [(c.r, c.z, c.sigma) for c in threaded.candidates] == [
            (c.r, c.z, c.sigma) for c in serial.candidates
        ]
