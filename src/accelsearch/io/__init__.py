"""Input and output formats: ``.fft``/``.inf`` readers and candidate writers."""

from accelsearch.io.fourier import InfData, parse_inf, read_fourier_data, read_inf, write_fourier_data
from accelsearch.io.output import (
    acceleration,
    format_accel_report,
    output_paths,
    read_fourierprops,
    summary_payload,
    write_accel_report,
    write_fourierprops,
)

__all__ = [
    "InfData",
    "acceleration",
    "format_accel_report",
    "output_paths",
    "parse_inf",
    "read_fourier_data",
    "read_fourierprops",
    "read_inf",
    "summary_payload",
    "write_accel_report",
    "write_fourier_data",
    "write_fourierprops",
]
