"""Compute operations for the Fourier-domain acceleration search.

This module provides:
- Drifting-sinusoid responses and the subharmonic kernel table
- Power-plane construction and harmonic summing
- Threshold detection and significance
- Fourier interpolation, local optimization and derived properties
"""

from __future__ import annotations

from accelsearch.compute.combine import add_ffdot_powers
from accelsearch.compute.detect import search_ffdot_powers
from accelsearch.compute.kernels import (
    KernelTable,
    SubharmonicKernel,
    build_kernel_table,
    kernel_table,
    release_kernel_table,
)
from accelsearch.compute.optimize import CandidateOptimizer, max_rz
from accelsearch.compute.plane import CorrelationPlaneEngine, PlaneEngine
from accelsearch.compute.properties import calc_props
from accelsearch.compute.significance import candidate_sigma, power_for_sigma

__all__ = [
    "CandidateOptimizer",
    "CorrelationPlaneEngine",
    "KernelTable",
    "PlaneEngine",
    "SubharmonicKernel",
    "add_ffdot_powers",
    "build_kernel_table",
    "calc_props",
    "candidate_sigma",
    "kernel_table",
    "max_rz",
    "power_for_sigma",
    "release_kernel_table",
    "search_ffdot_powers",
]
