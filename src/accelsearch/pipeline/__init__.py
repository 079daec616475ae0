"""Search orchestration: window scan, refinement and the end-to-end driver."""

from accelsearch.pipeline.driver import AccelSearchResult, run_accelsearch
from accelsearch.pipeline.refine import (
    merge_near_duplicates,
    optimize_candidates,
    rank_candidates,
    refine_candidates,
)
from accelsearch.pipeline.search import (
    SearchResult,
    SearchWindow,
    iter_search_windows,
    run_search,
    search_window,
)

__all__ = [
    "AccelSearchResult",
    "SearchResult",
    "SearchWindow",
    "iter_search_windows",
    "merge_near_duplicates",
    "optimize_candidates",
    "rank_candidates",
    "refine_candidates",
    "run_accelsearch",
    "run_search",
    "search_window",
]
