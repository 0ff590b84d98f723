from __future__ import annotations

"""Command line interface for wavebase using Typer."""

from pathlib import Path
from typing import Dict, List, Optional

import json
import logging

import numpy as np
import typer
from pydantic import ValidationError

from .config import Settings, load_settings
from .core import ExponentialSmoother, FFTPlanCache, OffsetFitter, SampledSequence, forward
from .io import load_sequence, save_array
from .utils.logging import get_logger

app = typer.Typer(help="Utilities for processing uniformly sampled waveforms")
logger = logging.getLogger(__name__)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"invalid JSON override value: {raw}") from None
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys[:-1]:
        if not hasattr(current, key):
            raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)
    if not hasattr(current, keys[-1]):
        raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


def _load(
    settings: Settings,
    path: Path,
    frequency: Optional[float],
    offset: Optional[float],
) -> SampledSequence:
    try:
        return load_sequence(path, settings=settings, sampling_frequency=frequency, time_offset=offset)
    except ValueError as exc:
        raise typer.BadParameter(f"failed to load {path}: {exc}") from exc


def _emit(data: np.ndarray, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(" ".join(map(str, data)))
        return
    try:
        save_array(output, data)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--output") from exc
    typer.echo(f"wrote {len(data)} samples to {output}")


FREQUENCY_OPTION = typer.Option(None, "--frequency", "-f", help="Sampling frequency of the input buffer.")
OFFSET_OPTION = typer.Option(None, "--offset", help="Time of the first input sample.")
OUTPUT_OPTION = typer.Option(None, "--output", "-o", help="Write the result to a .npy or .csv file.")


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. smoother.alpha=0.2",
    ),
) -> None:
    """Initialise the Typer context with validated settings."""

    if config is not None and not config.exists():
        raise typer.BadParameter(f"configuration file not found: {config}")

    try:
        settings = load_settings(config) if config else Settings()
    except (RuntimeError, TypeError, ValidationError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"failed to load configuration: {exc}") from exc

    if set_overrides:
        data = settings.model_dump()
        for override in set_overrides:
            if "=" not in override:
                raise typer.BadParameter(
                    "overrides must be of the form --set section.key=value"
                )
            key, raw_value = override.split("=", 1)
            if not key:
                raise typer.BadParameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            value = _parse_override_value(raw_value)
            _apply_override(data, keys, value)
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration override: {exc}") from exc

    get_logger("wavebase", level=settings.logging.level, fmt=settings.logging.format)
    ctx.obj = settings


@app.command()
def info(
    ctx: typer.Context,
    input: Path = typer.Argument(..., exists=True, dir_okay=False),
    frequency: Optional[float] = FREQUENCY_OPTION,
    offset: Optional[float] = OFFSET_OPTION,
) -> None:
    """Print length, time span and summary statistics of a buffer."""

    cfg: Settings = ctx.obj
    seq = _load(cfg, input, frequency, offset)
    span = seq.span
    mean = float(seq.sum()) / len(seq) if len(seq) else 0.0
    typer.echo(
        f"length={len(seq)} sampling_frequency={seq.sampling_frequency} "
        f"time_offset={seq.time_offset}"
    )
    typer.echo(f"span=[{span.start}, {span.end}) duration={span.duration}")
    typer.echo(
        f"min={seq.min_value()} max={seq.max_value()} "
        f"mean={mean} variance={seq.variance()}"
    )


@app.command()
def smooth(
    ctx: typer.Context,
    input: Path = typer.Argument(..., exists=True, dir_okay=False),
    alpha: Optional[float] = typer.Option(None, "--alpha", "-a", help="Smoothing factor in (0, 1]."),
    frequency: Optional[float] = FREQUENCY_OPTION,
    offset: Optional[float] = OFFSET_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
) -> None:
    """Apply the exponential envelope smoother to a buffer."""

    cfg: Settings = ctx.obj
    seq = _load(cfg, input, frequency, offset)
    try:
        smoother = ExponentialSmoother(alpha, settings=cfg)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--alpha") from exc
    smoother.transform(seq)
    _emit(seq.data, output)


@app.command()
def refine(
    ctx: typer.Context,
    input: Path = typer.Argument(..., exists=True, dir_okay=False),
    to: float = typer.Option(..., "--to", help="New sampling frequency."),
    frequency: Optional[float] = FREQUENCY_OPTION,
    offset: Optional[float] = OFFSET_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
) -> None:
    """Resample a buffer onto a new sampling frequency."""

    cfg: Settings = ctx.obj
    seq = _load(cfg, input, frequency, offset)
    try:
        refined = seq.refine(to)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--to") from exc
    _emit(refined.data, output)


@app.command()
def spectrum(
    ctx: typer.Context,
    input: Path = typer.Argument(..., exists=True, dir_okay=False),
    frequency: Optional[float] = FREQUENCY_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
) -> None:
    """Compute the half spectrum of a real buffer.

    With ``--output`` the complex bins are written to a ``.npy`` file,
    otherwise their magnitudes are printed.
    """

    cfg: Settings = ctx.obj
    seq = _load(cfg, input, frequency, None)
    if len(seq) == 0:
        raise typer.BadParameter(f"{input} contains no samples")
    half = forward(seq, FFTPlanCache())
    if output is None:
        typer.echo(" ".join(map(str, np.abs(half.data))))
        return
    _emit(half.data, output)


@app.command()
def fit(
    ctx: typer.Context,
    input: Path = typer.Argument(..., exists=True, dir_okay=False),
    reference: Path = typer.Argument(..., exists=True, dir_okay=False),
    sigma: Optional[float] = typer.Option(None, "--sigma", help="Per-sample uncertainty."),
    initial_offset: Optional[float] = typer.Option(None, "--initial-offset", help="Starting shift."),
    frequency: Optional[float] = FREQUENCY_OPTION,
    offset: Optional[float] = OFFSET_OPTION,
    ref_offset: Optional[float] = typer.Option(None, "--ref-offset", help="Time of the first reference sample."),
) -> None:
    """Fit the time shift aligning REFERENCE onto INPUT."""

    cfg: Settings = ctx.obj
    seq = _load(cfg, input, frequency, offset)
    ref = _load(cfg, reference, frequency, ref_offset)
    try:
        result = OffsetFitter(ref, sigma, initial_offset, settings=cfg).fit(seq)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"offset={result.offset:.6g} error={result.error:.3g}")


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
