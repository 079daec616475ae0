"""`accelsearch` command: search one Fourier transform for accelerated pulsars."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from accelsearch import __version__
from accelsearch.cli.common_cli import (
    AccelCliError,
    configure_logging,
    dump_json_output,
    error_envelope_for,
    exit_code_for,
    resolve_optional_output_path,
)
from accelsearch.domain.config import ACCEL_CLOSEST_R, ACCEL_USELEN, SearchConfig, harmonic_stage
from accelsearch.errors import AccelSearchError, ConfigurationError
from accelsearch.io.fourier import read_fourier_data
from accelsearch.io.output import output_paths, summary_payload, write_accel_report, write_fourierprops
from accelsearch.pipeline.driver import run_accelsearch

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "cli.accelsearch.v1"


def _search_range(
    *,
    rlo: float | None,
    rhi: float | None,
    flo: float | None,
    fhi: float | None,
    T: float,
) -> tuple[float, float | None]:
    if rlo is not None and flo is not None:
        raise ConfigurationError("Give either --rlo or --flo, not both", rlo=rlo, flo=flo)
    if rhi is not None and fhi is not None:
        raise ConfigurationError("Give either --rhi or --fhi, not both", rhi=rhi, fhi=fhi)
    lo = flo * T if flo is not None else (rlo if rlo is not None else 1.0)
    hi = fhi * T if fhi is not None else rhi
    return float(lo), hi if hi is None else float(hi)


def _fail(exc: BaseException, fftfile: Path, summary_out_arg: str | None) -> AccelCliError:
    """Build the click error for ``exc``, writing its envelope to the JSON summary if one was requested."""
    if summary_out_arg is not None:
        payload = {
            "schema_version": SCHEMA_VERSION,
            "input": str(fftfile),
            "error": error_envelope_for(exc).model_dump(mode="json"),
        }
        dump_json_output(payload, resolve_optional_output_path(summary_out_arg))
    return AccelCliError(str(exc), exit_code=exit_code_for(exc))


@click.command("accelsearch")
@click.version_option(version=__version__, prog_name="accelsearch")
@click.argument("fftfile", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--rlo", type=float, default=None, help="Lowest Fourier bin to search.")
@click.option("--rhi", type=float, default=None, help="Highest Fourier bin to search.")
@click.option("--flo", type=float, default=None, help="Lowest frequency to search (Hz).")
@click.option("--fhi", type=float, default=None, help="Highest frequency to search (Hz).")
@click.option("--zmax", type=float, default=200.0, show_default=True, help="Maximum |z| in bins drifted.")
@click.option("--sigma", type=float, default=2.0, show_default=True, help="Candidate significance threshold.")
@click.option(
    "--numharm",
    type=int,
    default=8,
    show_default=True,
    help="Maximum number of harmonics to sum (power of two).",
)
@click.option("--uselen", type=int, default=ACCEL_USELEN, show_default=True, help="Grid cells per window.")
@click.option(
    "--merge/--no-merge",
    default=False,
    show_default=True,
    help="Merge near-duplicate candidates.",
)
@click.option(
    "--merge-radius",
    type=float,
    default=ACCEL_CLOSEST_R,
    show_default=True,
    help="Candidates closer than this many bins are merged when --merge is given.",
)
@click.option("--workers", type=int, default=1, show_default=True, help="Worker threads.")
@click.option(
    "--summary-out",
    "summary_out_arg",
    type=str,
    default=None,
    help="Write a JSON summary to this path; '-' writes to stdout.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def accelsearch_command(
    fftfile: Path,
    rlo: float | None,
    rhi: float | None,
    flo: float | None,
    fhi: float | None,
    zmax: float,
    sigma: float,
    numharm: int,
    uselen: int,
    merge: bool,
    merge_radius: float,
    workers: int,
    summary_out_arg: str | None,
    verbose: int,
) -> None:
    """Search FFTFILE (with its sibling .inf) for drifting periodic signals."""
    configure_logging(verbose)

    try:
        numharmstages = harmonic_stage(numharm) + 1
        fourier, inf = read_fourier_data(fftfile)
        lo, hi = _search_range(rlo=rlo, rhi=rhi, flo=flo, fhi=fhi, T=fourier.T)
        config = SearchConfig.for_observation(
            numbins=fourier.numbins,
            T=fourier.T,
            rlo=lo,
            rhi=hi,
            zmax=zmax,
            numharmstages=numharmstages,
            sigma=sigma,
            uselen=uselen,
            merge_radius_r=merge_radius if merge else 0.0,
            n_workers=workers,
        )
    except (AccelSearchError, ValidationError, ValueError) as exc:
        raise _fail(exc, fftfile, summary_out_arg) from exc

    report_path, cand_path = output_paths(fftfile, config.zmax)
    try:
        result = run_accelsearch(fourier, config)
        if result.ranked:
            write_fourierprops(cand_path, [entry.properties for entry in result.ranked])
            write_accel_report(report_path, result.ranked, config)
    except Exception as exc:
        logger.debug("Search failed", exc_info=True)
        raise _fail(exc, fftfile, summary_out_arg) from exc

    click.echo(f"Searched {len(result.search.windows)} windows of {inf.basename or fftfile.name}")
    if not result.ranked:
        click.echo(f"No candidates above sigma={config.sigma:.2f} ({result.runtime_seconds:.1f}s)")
    else:
        click.echo(f"Found {result.n_candidates} candidates in {result.runtime_seconds:.1f}s")
        for idx, entry in enumerate(result.ranked[:10], start=1):
            props = entry.properties
            click.echo(
                f"  {idx:3d}  sigma={entry.candidate.sigma:7.2f}  numharm={entry.candidate.numharm:2d}"
                f"  r={props.r:.2f}  z={props.z:.2f}"
            )
        click.echo(f"Candidates written to {report_path} and {cand_path}")

    if summary_out_arg is not None:
        outputs = {"report": str(report_path), "candidates": str(cand_path)} if result.ranked else {}
        payload = {
            "schema_version": SCHEMA_VERSION,
            "input": str(fftfile),
            "outputs": outputs,
            "runtime_seconds": float(result.runtime_seconds),
            "n_windows": len(result.search.windows),
            "n_raw_candidates": len(result.search.candidates),
            **summary_payload(result.ranked, config),
        }
        dump_json_output(payload, resolve_optional_output_path(summary_out_arg))


def main() -> int:
    """Entry point for the console script and ``python -m accelsearch``."""
    return accelsearch_command.main(standalone_mode=True)


__all__ = ["accelsearch_command", "main"]


if __name__ == "__main__":
    sys.exit(main())
