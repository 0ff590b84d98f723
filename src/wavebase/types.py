"""Common type helpers for wavebase.

This module defines the small immutable value objects exchanged between the
sequence container, the transformers and the command line interface.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TimeInterval:
    """Simple interval of time expressed in the sequence's time unit."""

    start: float
    end: float

    @property
    def duration(self) -> float:
        """Return the interval length."""

        return self.end - self.start


@dataclass(frozen=True)
class Window:
    """Index based half-open window ``[start, end)`` over a sequence."""

    start: int
    end: int

    @property
    def width(self) -> int:
        """Return the number of elements covered by the window."""

        return self.end - self.start


@dataclass(frozen=True)
class FitResult:
    """Outcome of a time-offset fit.

    Attributes
    ----------
    offset:
        Best-fit shift applied to the reference sequence.
    error:
        Estimated standard error of ``offset``.  ``inf`` when the objective
        is flat around the optimum.
    """

    offset: float
    error: float
