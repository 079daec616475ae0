"""Shared helpers for the click-based ``accelsearch`` command."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click

from accelsearch.errors import (
    AccelSearchError,
    ConfigurationError,
    ErrorEnvelope,
    ErrorType,
    FourierDataError,
    make_error,
)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_RUNTIME_ERROR = 2


class AccelCliError(click.ClickException):
    """Click exception with explicit exit-code control."""

    def __init__(self, message: str, *, exit_code: int = EXIT_INPUT_ERROR) -> None:
        super().__init__(message)
        self.exit_code = int(exit_code)


def exit_code_for(exc: BaseException) -> int:
    """Input and configuration problems exit with 1; everything else with 2."""
    if isinstance(exc, (ConfigurationError, FourierDataError)):
        return EXIT_INPUT_ERROR
    if isinstance(exc, AccelSearchError):
        return EXIT_RUNTIME_ERROR
    if isinstance(exc, ValueError):
        return EXIT_INPUT_ERROR
    return EXIT_RUNTIME_ERROR


def error_envelope_for(exc: BaseException) -> ErrorEnvelope:
    """Serializable description of a failure for JSON output."""
    if isinstance(exc, AccelSearchError):
        return exc.to_envelope()
    if isinstance(exc, ValueError):
        return make_error(ErrorType.INVALID_CONFIG, str(exc))
    return make_error(ErrorType.INTERNAL_ERROR, str(exc), exception=type(exc).__name__)


def configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def dump_json_output(payload: dict[str, Any], out_path: Path | None) -> None:
    """Write JSON payload to file or stdout."""
    text = json.dumps(payload, sort_keys=True, indent=2)
    if out_path is None:
        click.echo(text)
        return
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text + "\n", encoding="utf-8")


def resolve_optional_output_path(output_arg: str | None) -> Path | None:
    """Map '-', empty, or None to stdout; otherwise return filesystem path."""
    if output_arg is None:
        return None
    value = str(output_arg).strip()
    if value in {"", "-"}:
        return None
    return Path(value)
