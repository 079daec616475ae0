"""Reading Fourier transforms and their ``.inf`` metadata.

A transform is stored as raw little-endian complex64 amplitudes (``.fft``)
next to a text ``.inf`` file of ``key = value`` lines describing the time
series it came from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from accelsearch.domain.fourier import FourierData
from accelsearch.errors import FourierDataError

logger = logging.getLogger(__name__)

_INF_KEYS = {
    "data file name without suffix": "basename",
    "number of bins in the time series": "N",
    "width of each time series bin (sec)": "dt",
}


@dataclass(frozen=True)
class InfData:
    basename: str
    N: int
    dt: float
    extra: dict[str, str] = field(default_factory=dict)

    @property
    def T(self) -> float:
        return self.N * self.dt


def parse_inf(text: str) -> InfData:
    """Parse the contents of an ``.inf`` file.

    Raises:
        FourierDataError: If the number of bins or the bin width is missing or invalid.
    """
    known: dict[str, str] = {}
    extra: dict[str, str] = {}
    for line in text.splitlines():
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        name = _INF_KEYS.get(key.lower())
        if name is not None:
            known[name] = value
        elif key:
            extra[key] = value

    try:
        n = int(float(known["N"]))
        dt = float(known["dt"])
    except KeyError as exc:
        raise FourierDataError(f"Missing required .inf entry: {exc.args[0]}") from exc
    except ValueError as exc:
        raise FourierDataError(f"Malformed .inf entry: {exc}") from exc
    if n <= 0 or dt <= 0:
        raise FourierDataError(f"Invalid time series sampling N={n}, dt={dt}", N=n, dt=dt)
    return InfData(basename=known.get("basename", ""), N=n, dt=dt, extra=extra)


def read_inf(path: Path) -> InfData:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FourierDataError(f".inf file not found: {path}", path=str(path)) from exc
    except OSError as exc:
        raise FourierDataError(f"Cannot read {path}: {exc}", path=str(path)) from exc
    return parse_inf(text)


def read_fourier_data(fft_path: Path, inf_path: Path | None = None) -> tuple[FourierData, InfData]:
    """Load a ``.fft`` file and its ``.inf`` (defaults to the sibling file).

    Raises:
        FourierDataError: If either file is missing or unreadable.
    """
    fft_path = Path(fft_path)
    inf_path = fft_path.with_suffix(".inf") if inf_path is None else Path(inf_path)
    inf = read_inf(inf_path)

    try:
        amps = np.fromfile(fft_path, dtype="<c8")
    except FileNotFoundError as exc:
        raise FourierDataError(f"FFT file not found: {fft_path}", path=str(fft_path)) from exc
    except OSError as exc:
        raise FourierDataError(f"Cannot read {fft_path}: {exc}", path=str(fft_path)) from exc
    if amps.size < 2:
        raise FourierDataError(f"FFT file {fft_path} holds {amps.size} amplitudes", path=str(fft_path))

    amps = amps.astype(np.complex64)
    expected = inf.N // 2
    if amps.size != expected:
        logger.warning("%s has %d amplitudes, expected %d from N=%d", fft_path, amps.size, expected, inf.N)

    basename = inf.basename or fft_path.with_suffix("").name
    fourier = FourierData(amplitudes=amps, N=inf.N, dt=inf.dt, basename=basename)
    return fourier, inf


def write_fourier_data(fft_path: Path, fourier: FourierData) -> Path:
    """Write amplitudes and a minimal ``.inf`` (used to stage synthetic inputs)."""
    fft_path = Path(fft_path)
    fft_path.parent.mkdir(parents=True, exist_ok=True)
    fourier.amplitudes.astype("<c8").tofile(fft_path)
    inf_text = "\n".join(
        [
            f" Data file name without suffix          =  {fourier.basename}",
            f" Number of bins in the time series      =  {fourier.N}",
            f" Width of each time series bin (sec)    =  {fourier.dt!r}",
            "",
        ]
    )
    fft_path.with_suffix(".inf").write_text(inf_text, encoding="utf-8")
    return fft_path


__all__ = ["InfData", "parse_inf", "read_fourier_data", "read_inf", "write_fourier_data"]
