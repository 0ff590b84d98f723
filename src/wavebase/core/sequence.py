"""Generic container for uniformly time-sampled data.

:class:`SampledSequence` stores a one-dimensional :class:`numpy.ndarray`
together with the two scalars that place it on a time axis: the sampling
frequency :math:`f_s` and the time offset :math:`t_0`.  Sample ``i`` sits at

.. math::

   t_i = t_0 + i / f_s

Any numpy element type can be stored.  Complex sequences (for example the
output of :class:`~wavebase.core.fft.FFTEngine`) are *not orderable*:
:meth:`SampledSequence.max_value`, :meth:`SampledSequence.min_value` and
:meth:`SampledSequence.variance` return the zero value for them instead of
computing an ill-defined ordering.

Errors that can occur inside numeric loops (operands that are not similar,
time queries outside the sequence) are logged through
:func:`wavebase.errors.report` and leave the sequence untouched.  Division by
zero is deliberately unchecked and produces ``inf``/``nan`` silently.
"""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable, Iterator, Optional

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

from ..errors import ConfigurationMismatch, OutOfRange, report
from ..types import TimeInterval
from ..utils.windows import clamp_window

logger = logging.getLogger(__name__)


def is_orderable_dtype(dtype: DTypeLike) -> bool:
    """Return ``True`` when values of ``dtype`` have a natural ordering."""

    return not np.issubdtype(np.dtype(dtype), np.complexfloating)


class SampledSequence:
    """Ordered samples of one numpy dtype plus sampling metadata.

    Parameters
    ----------
    data:
        Initial samples.  The values are copied and flattened.  ``None``
        creates an empty sequence.
    sampling_frequency:
        Samples per unit time.  Must be positive.
    time_offset:
        Time of the first sample.
    dtype:
        Element type.  Inferred from ``data`` when omitted (``float64`` for
        an empty sequence).
    """

    # Disable numpy's ufunc dispatch so ``array + seq`` defers to us.
    __array_ufunc__ = None

    def __init__(
        self,
        data: Optional[ArrayLike] = None,
        sampling_frequency: float = 1.0,
        time_offset: float = 0.0,
        dtype: Optional[DTypeLike] = None,
    ) -> None:
        if data is None:
            self._data = np.zeros(0, dtype=float if dtype is None else dtype)
        else:
            self._data = np.array(data, dtype=dtype).reshape(-1)
        self.sampling_frequency = sampling_frequency
        self.time_offset = time_offset

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """The underlying sample buffer (no copy)."""

        return self._data

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def is_orderable(self) -> bool:
        return is_orderable_dtype(self._data.dtype)

    @property
    def sampling_frequency(self) -> float:
        return self._sampling_frequency

    @sampling_frequency.setter
    def sampling_frequency(self, value: float) -> None:
        value = float(value)
        if not value > 0:
            raise ValueError("sampling_frequency must be positive")
        self._sampling_frequency = value

    @property
    def sampling_period(self) -> float:
        return 1.0 / self._sampling_frequency

    @sampling_period.setter
    def sampling_period(self, value: float) -> None:
        self.sampling_frequency = 1.0 / value

    @property
    def time_offset(self) -> float:
        return self._time_offset

    @time_offset.setter
    def time_offset(self, value: float) -> None:
        self._time_offset = float(value)

    @property
    def min_time(self) -> float:
        """Time of the first sample."""

        return self._time_offset

    @property
    def max_time(self) -> float:
        """Time just past the last sample."""

        return self.get_time_at_index(len(self._data))

    @property
    def span(self) -> TimeInterval:
        return TimeInterval(self.min_time, self.max_time)

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    def set_data(
        self,
        values: ArrayLike,
        conversion: Optional[Callable[[Any], Any]] = None,
        *,
        dtype: Optional[DTypeLike] = None,
    ) -> None:
        """Replace the samples with ``values``.

        Each raw value is passed through ``conversion`` (when given) before
        being cast to the sequence's dtype.  Passing ``dtype`` changes the
        element type of the sequence.
        """

        raw = np.asarray(values).reshape(-1)
        if conversion is not None:
            raw = np.array([conversion(value) for value in raw])
        target = self._data.dtype if dtype is None else np.dtype(dtype)
        self._data = np.array(raw, dtype=target).reshape(-1)

    def set_length(self, length: int) -> None:
        """Resize to ``length`` samples, zero filling any new tail."""

        if length < 0:
            raise ValueError("length must not be negative")
        current = len(self._data)
        if length <= current:
            self._data = self._data[:length].copy()
            return
        grown = np.zeros(length, dtype=self._data.dtype)
        grown[:current] = self._data
        self._data = grown

    def zero(self, begin: int = 0, end: Optional[int] = None) -> None:
        """Zero the samples in ``[begin, end)``; ``end`` is clamped to the length."""

        n = len(self._data)
        stop = n if end is None or end > n else end
        if begin >= stop:
            return
        self._data[begin:stop] = 0

    def apply_to_each(self, func: Callable[[Any], Any]) -> None:
        """Replace every sample ``x`` by ``func(x)``.

        For example ``seq.apply_to_each(math.sqrt)``.
        """

        for i, value in enumerate(self._data):
            self._data[i] = func(value)

    def copy(self) -> "SampledSequence":
        return SampledSequence(self._data, self._sampling_frequency, self._time_offset, dtype=self._data.dtype)

    def convert(self, dtype: DTypeLike) -> "SampledSequence":
        """Return a copy whose samples are cast to ``dtype``."""

        return SampledSequence(self._data, self._sampling_frequency, self._time_offset, dtype=dtype)

    def assign(self, other: "SampledSequence") -> None:
        """Copy samples and metadata from ``other``, keeping this dtype."""

        self._data = np.array(other.data, dtype=self._data.dtype)
        self._sampling_frequency = other.sampling_frequency
        self._time_offset = other.time_offset

    def is_similar_to(self, other: "SampledSequence") -> bool:
        """Return ``True`` when length, frequency and offset all agree."""

        return (
            len(self._data) == len(other)
            and self._sampling_frequency == other.sampling_frequency
            and self._time_offset == other.time_offset
        )

    def make_similar_to(self, other: "SampledSequence") -> None:
        """Adopt the length, frequency and offset of ``other``."""

        self.set_length(len(other))
        self._sampling_frequency = other.sampling_frequency
        self._time_offset = other.time_offset

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __getitem__(self, index: Any) -> Any:
        return self._data[index]

    def __setitem__(self, index: Any, value: Any) -> None:
        self._data[index] = value

    def __array__(self, dtype: Optional[DTypeLike] = None, copy: Optional[bool] = None) -> np.ndarray:
        if copy:
            return np.array(self._data, dtype=dtype)
        return self._data if dtype is None else self._data.astype(dtype)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SampledSequence):
            return NotImplemented
        return self.is_similar_to(other) and bool(np.array_equal(self._data, other.data))

    def __repr__(self) -> str:
        return (
            f"SampledSequence(length={len(self._data)}, dtype={self._data.dtype}, "
            f"sampling_frequency={self._sampling_frequency!r}, time_offset={self._time_offset!r})"
        )

    def at(self, index: int) -> Any:
        """Bounds-checked element access.

        Raises
        ------
        OutOfRange
            If ``index`` is negative or not smaller than the length.
        """

        index = operator.index(index)
        if not 0 <= index < len(self._data):
            raise OutOfRange(f"index {index} outside [0, {len(self._data)})")
        return self._data[index]

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def _zero(self) -> Any:
        return self._data.dtype.type(0)

    def _clamp_range(self, start: int, stop: Optional[int]) -> tuple[int, int]:
        n = len(self._data)
        if stop is None or stop > n:
            stop = n
        return start, stop

    def sum(self, start: int = 0, stop: Optional[int] = None) -> Any:
        """Sum of the samples in ``[start, stop)``; ``stop`` is clamped to the length."""

        start, stop = self._clamp_range(start, stop)
        if start >= stop:
            return self._zero()
        return self._data.dtype.type(self._data[start:stop].sum())

    def variance(self, start: int = 0, stop: Optional[int] = None) -> Any:
        """Population variance of the samples in ``[start, stop)``.

        Returns zero for an empty range and for non-orderable sequences.
        """

        if not self.is_orderable:
            return self._zero()
        start, stop = self._clamp_range(start, stop)
        if start >= stop:
            return 0.0
        segment = self._data[start:stop].astype(float)
        return float(np.var(segment))

    def max_value(self) -> Any:
        """Largest sample; zero for empty or non-orderable sequences."""

        if not self.is_orderable or len(self._data) == 0:
            return self._zero()
        return self._data.max()

    def min_value(self) -> Any:
        """Smallest sample; zero for empty or non-orderable sequences."""

        if not self.is_orderable or len(self._data) == 0:
            return self._zero()
        return self._data.min()

    # ------------------------------------------------------------------
    # Time axis
    # ------------------------------------------------------------------

    def get_index_at_time(self, time: float) -> int:
        """Return the index of the sample at or just before ``time``.

        If ``time`` lies outside ``[t_0, t_0 + N/f_s)`` an
        :class:`~wavebase.errors.OutOfRange` is logged and the length is
        returned.
        """

        n = len(self._data)
        if np.isnan(time):
            report(OutOfRange(f"time {time} is not a number; returning length {n}"), logger)
            return n
        if time < self._time_offset:
            report(OutOfRange(f"time {time} precedes the sequence; returning length {n}"), logger)
            return n
        if time >= n / self._sampling_frequency + self._time_offset:
            report(OutOfRange(f"time {time} follows the sequence; returning length {n}"), logger)
            return n
        return int((time - self._time_offset) * self._sampling_frequency)

    def get_time_at_index(self, index: int) -> float:
        """Return the time of sample ``index``.

        Indices past the length are logged and clamped to the time that
        follows the last sample.
        """

        n = len(self._data)
        if index > n:
            report(OutOfRange(f"index {index} follows the sequence; returning time past the end"), logger)
            index = n
        return index / self._sampling_frequency + self._time_offset

    def interpolate_at_point(self, time: float) -> Any:
        """Linearly interpolate the sequence at ``time``.

        Times before the offset yield the first sample and times at or
        beyond the last sample yield the last one.  An empty sequence
        yields zero, as does a NaN ``time`` (which is also logged as
        :class:`~wavebase.errors.OutOfRange`).
        """

        n = len(self._data)
        if n == 0:
            return self._zero()
        frac = (time - self._time_offset) * self._sampling_frequency
        if np.isnan(frac):
            report(OutOfRange(f"time {time} is not a number; returning zero"), logger)
            return self._zero()
        if frac < 0:
            return self._data[0]
        if frac >= n - 1:
            return self._data[n - 1]
        entry = int(frac)
        frac -= entry
        return self._data.dtype.type((1.0 - frac) * self._data[entry] + frac * self._data[entry + 1])

    def interpolate_at_points(self, times: ArrayLike) -> np.ndarray:
        """Vectorised :meth:`interpolate_at_point` over an array of ``times``."""

        times = np.asarray(times, dtype=float)
        n = len(self._data)
        if n == 0:
            return np.zeros(times.shape, dtype=self._data.dtype)
        frac = (times - self._time_offset) * self._sampling_frequency
        values = np.interp(frac, np.arange(n), self._data)
        return values.astype(self._data.dtype, copy=False)

    # ------------------------------------------------------------------
    # Derived sequences
    # ------------------------------------------------------------------

    def sub_sequence(self, begin: int = 0, end: Optional[int] = None) -> "SampledSequence":
        """Return a copy of the samples in ``[begin, end)``.

        The window is clamped onto the sequence (see
        :func:`~wavebase.utils.windows.clamp_window`) and the result keeps
        the frequency and offset of this sequence.
        """

        window = clamp_window(begin, end, len(self._data))
        return SampledSequence(
            self._data[window.start : window.end],
            self._sampling_frequency,
            self._time_offset,
            dtype=self._data.dtype,
        )

    def append(self, other: "SampledSequence") -> bool:
        """Concatenate the samples of ``other`` onto this sequence.

        Returns ``False`` (and logs a
        :class:`~wavebase.errors.ConfigurationMismatch`) without changing
        anything when the sampling frequencies differ.
        """

        if other.sampling_frequency != self._sampling_frequency:
            report(
                ConfigurationMismatch(
                    "cannot append sequences with different sampling frequencies "
                    f"({self._sampling_frequency} != {other.sampling_frequency})"
                ),
                logger,
            )
            return False
        self._data = np.concatenate([self._data, np.asarray(other.data, dtype=self._data.dtype)])
        return True

    def refine(self, new_frequency: float) -> "SampledSequence":
        """Resample onto a grid of ``new_frequency`` by linear interpolation.

        The result has ``floor(new_frequency * N / f_s)`` samples and the same
        offset; a partial trailing sample is truncated.  ``new_frequency``
        may be above or below the current frequency.
        """

        if not new_frequency > 0:
            raise ValueError("new_frequency must be positive")
        length = int(new_frequency * len(self._data) / self._sampling_frequency)
        times = self._time_offset + np.arange(length) / new_frequency
        return SampledSequence(
            self.interpolate_at_points(times),
            new_frequency,
            self._time_offset,
            dtype=self._data.dtype,
        )

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _apply(self, other: Any, ufunc: np.ufunc, symbol: str) -> "SampledSequence":
        if isinstance(other, SampledSequence):
            if not self.is_similar_to(other):
                report(
                    ConfigurationMismatch(f"cannot apply '{symbol}=' to sequences that are not similar"),
                    logger,
                )
                return self
            operand = other.data
        else:
            operand = other
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            ufunc(self._data, operand, out=self._data, casting="unsafe")
        return self

    def __iadd__(self, other: Any) -> "SampledSequence":
        return self._apply(other, np.add, "+")

    def __isub__(self, other: Any) -> "SampledSequence":
        return self._apply(other, np.subtract, "-")

    def __imul__(self, other: Any) -> "SampledSequence":
        return self._apply(other, np.multiply, "*")

    def __itruediv__(self, other: Any) -> "SampledSequence":
        return self._apply(other, np.true_divide, "/")

    def __add__(self, other: Any) -> "SampledSequence":
        result = self.copy()
        result += other
        return result

    def __sub__(self, other: Any) -> "SampledSequence":
        result = self.copy()
        result -= other
        return result

    def __mul__(self, other: Any) -> "SampledSequence":
        result = self.copy()
        result *= other
        return result

    def __truediv__(self, other: Any) -> "SampledSequence":
        result = self.copy()
        result /= other
        return result

    __radd__ = __add__
    __rmul__ = __mul__

    def _reflect(self, other: Any, ufunc: np.ufunc) -> "SampledSequence":
        result = self.copy()
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            ufunc(other, result.data, out=result.data, casting="unsafe")
        return result

    def __rsub__(self, other: Any) -> "SampledSequence":
        return self._reflect(other, np.subtract)

    def __rtruediv__(self, other: Any) -> "SampledSequence":
        return self._reflect(other, np.true_divide)

    def __neg__(self) -> "SampledSequence":
        return self * -1
