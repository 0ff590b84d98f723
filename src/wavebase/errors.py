"""Error taxonomy for waveform processing.

Most of these conditions are *reported* rather than raised: numeric hot paths
log the problem, leave their operands untouched and carry on.  The helper
:func:`report` performs that logging and hands the error object back so that
callers at an API boundary can surface it as a value.  Only
:class:`ContractViolation` (and :class:`OutOfRange` for the checked accessor
:meth:`~wavebase.core.sequence.SampledSequence.at`) is ever raised.
"""

from __future__ import annotations

import logging
from typing import TypeVar


class WaveformError(Exception):
    """Base class for all waveform processing errors."""


class ConfigurationMismatch(WaveformError, ValueError):
    """Operands differ in length, sampling frequency or time offset."""


class OutOfRange(WaveformError, IndexError):
    """A time or index query falls outside the span of a sequence."""


class LengthMismatch(WaveformError, ValueError):
    """An FFT engine was handed a buffer of the wrong length."""

    def __init__(self, message: str, *, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"{message} (expected {expected}, got {actual})")


class ContractViolation(WaveformError, AssertionError):
    """A transformer hook was invoked against its declared capability.

    This signals a wiring defect, not bad data, and is never caught by the
    library itself.
    """


E = TypeVar("E", bound=WaveformError)


def report(error: E, logger: logging.Logger) -> E:
    """Log ``error`` as a warning on ``logger`` and return it."""

    logger.warning("%s: %s", type(error).__name__, error)
    return error


__all__ = [
    "WaveformError",
    "ConfigurationMismatch",
    "OutOfRange",
    "LengthMismatch",
    "ContractViolation",
    "report",
]
