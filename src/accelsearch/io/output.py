"""Result emission: binary candidate records and the text ACCEL report."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import astropy.units as u
import numpy as np
from astropy.constants import c

from accelsearch.compute.properties import calc_props, coherent_power, incoherent_power
from accelsearch.domain.candidate import FOURIERPROPS_DTYPE, Candidate, FourierProperties, RankedCandidate
from accelsearch.domain.config import SearchConfig

logger = logging.getLogger(__name__)

FUNDAMENTAL_COLUMNS = (
    "Cand",
    "Sigma",
    "Summed-Power",
    "Coherent-Power",
    "NumHarm",
    "Period(ms)",
    "Frequency(Hz)",
    "FFT'r'",
    "FFT'z'",
    "Accel(m/s^2)",
)
HARMONIC_COLUMNS = (
    "Cand.Harm",
    "Sigma",
    "Power",
    "Raw-Power",
    "FFT'r'",
    "r-err",
    "FFT'z'",
    "z-err",
    "Phase(deg)",
    "Centroid",
    "Purity",
)


def output_paths(fft_path: Path, zmax: float) -> tuple[Path, Path]:
    """Return ``(<root>_ACCEL_<zmax>, <root>_ACCEL_<zmax>.cand)`` next to ``fft_path``."""
    fft_path = Path(fft_path)
    root = fft_path.with_suffix("")
    report = root.with_name(f"{root.name}_ACCEL_{int(round(zmax))}")
    return report, report.with_name(report.name + ".cand")


def acceleration(r: float, z: float, T: float) -> float:
    """Line-of-sight acceleration in m/s^2 for a drift of ``z`` bins at bin ``r``."""
    if r == 0.0:
        return 0.0
    accel = z * c / (r * T * u.s)
    return float(accel.to_value(u.m / u.s**2))


def write_fourierprops(path: Path, props: Sequence[FourierProperties]) -> Path:
    """Write one fixed-size record per candidate, in the given (rank) order."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = np.zeros(len(props), dtype=FOURIERPROPS_DTYPE)
    for idx, prop in enumerate(props):
        records[idx] = prop.to_record()[0]
    records.tofile(path)
    logger.debug("Wrote %d candidate records to %s", len(props), path)
    return path


def read_fourierprops(path: Path) -> list[FourierProperties]:
    records = np.fromfile(Path(path), dtype=FOURIERPROPS_DTYPE)
    return [FourierProperties.from_record(rec) for rec in records]


def _format_row(values: Sequence[str], widths: Sequence[int]) -> str:
    return "  ".join(v.rjust(w) for v, w in zip(values, widths)).rstrip()


def format_accel_report(ranked: Sequence[RankedCandidate], config: SearchConfig) -> str:
    """Render the fundamentals and harmonics tables.

    Each fundamental row is whitespace separated with numeric columns only,
    so ``split()`` recovers them in header order.
    """
    T = config.T
    fwidths = [max(len(name), 6) for name in FUNDAMENTAL_COLUMNS]
    fwidths[5] = fwidths[6] = 16
    lines = [
        "# Fourier-domain acceleration search",
        f"# T = {T:.6f} s  r = {config.rlo:.1f}-{config.rhi:.1f}  z = {config.zlo:.1f}-{config.zhi:.1f}",
        f"# sigma >= {config.sigma:.2f}  harmonics summed <= {config.max_numharm}",
        _format_row(FUNDAMENTAL_COLUMNS, fwidths),
    ]
    for idx, entry in enumerate(ranked, start=1):
        cand = entry.candidate
        props = entry.properties
        freq = props.r / T
        period_ms = 1000.0 / freq if freq > 0 else 0.0
        row = [
            str(idx),
            f"{cand.sigma:.2f}",
            f"{cand.power:.2f}",
            f"{coherent_power(cand.derivs):.2f}",
            str(cand.numharm),
            f"{period_ms:.9f}",
            f"{freq:.9f}",
            f"{props.r:.2f}",
            f"{props.z:.2f}",
            f"{acceleration(props.r, props.z, T):.3f}",
        ]
        lines.append(_format_row(row, fwidths))

    lines.append("")
    hwidths = [max(len(name), 9) for name in HARMONIC_COLUMNS]
    lines.append(_format_row(HARMONIC_COLUMNS, hwidths))
    for idx, entry in enumerate(ranked, start=1):
        cand = entry.candidate
        for hidx, derivs in enumerate(cand.derivs):
            props = entry.properties if hidx == 0 else _harmonic_props(cand, hidx)
            row = [
                f"{idx}.{hidx + 1}",
                f"{props.sig:.2f}",
                f"{props.pow:.2f}",
                f"{derivs.pow:.4g}",
                f"{props.r:.3f}",
                f"{props.rerr:.3f}",
                f"{props.z:.2f}",
                f"{props.zerr:.2f}",
                f"{np.degrees(props.phs) % 360.0:.1f}",
                f"{props.cen:.3f}",
                f"{props.pur:.3f}",
            ]
            lines.append(_format_row(row, hwidths))
    return "\n".join(lines) + "\n"


def _harmonic_props(cand: Candidate, hidx: int) -> FourierProperties:
    return calc_props(cand.derivs[hidx], cand.hirs[hidx], cand.hizs[hidx], 0.0)


def write_accel_report(path: Path, ranked: Sequence[RankedCandidate], config: SearchConfig) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_accel_report(ranked, config), encoding="utf-8")
    return path


def summary_payload(ranked: Sequence[RankedCandidate], config: SearchConfig) -> dict:
    """JSON-friendly digest of a finished search."""
    T = config.T
    return {
        "n_candidates": len(ranked),
        "config": config.model_dump(mode="json"),
        "candidates": [
            {
                "rank": idx,
                "sigma": float(entry.candidate.sigma),
                "numharm": int(entry.candidate.numharm),
                "summed_power": float(entry.candidate.power),
                "incoherent_power": incoherent_power(entry.candidate.derivs),
                "r": float(entry.properties.r),
                "z": float(entry.properties.z),
                "frequency_hz": float(entry.properties.r / T),
                "accel_m_s2": acceleration(entry.properties.r, entry.properties.z, T),
                "optimized": bool(entry.candidate.optimized),
            }
            for idx, entry in enumerate(ranked, start=1)
        ],
    }


__all__ = [
    "FUNDAMENTAL_COLUMNS",
    "HARMONIC_COLUMNS",
    "acceleration",
    "format_accel_report",
    "output_paths",
    "read_fourierprops",
    "summary_payload",
    "write_accel_report",
    "write_fourierprops",
]
