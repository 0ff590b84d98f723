"""Real-to-complex FFTs with per-length plan caching.

Since the discrete Fourier transform of real data is Hermitian, only the
non-redundant half of the spectrum (``N//2 + 1`` bins, DC to Nyquist) is
stored.  An :class:`FFTEngine` is bound to one logical length ``N`` and owns
the scratch buffers and plans for that length; an :class:`FFTPlanCache`
hands out one engine per length::

    cache = FFTPlanCache()
    spectrum = SampledSequence(dtype=complex)
    cache.get_engine(len(wf)).perform_forward(wf, spectrum)

Plans wrap :func:`numpy.fft.rfft` / :func:`numpy.fft.irfft` bound to ``N``
and use numpy's default ("backward") normalisation, so an inverse transform
of a forward transform reproduces the input.
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Callable, Dict, List, Optional

import numpy as np

from ..errors import LengthMismatch, report
from .sequence import SampledSequence

logger = logging.getLogger(__name__)

PlanListener = Callable[[int, str], None]


class FFTEngine:
    """Forward and inverse real FFT for sequences of one fixed ``length``.

    Plans and scratch buffers are built lazily, on the first transform in
    each direction.  ``plan_builds`` counts how many plans were constructed.
    """

    def __init__(self, length: int, *, on_plan_built: Optional[PlanListener] = None) -> None:
        if length <= 0:
            raise ValueError("FFT length must be positive")
        self.length = int(length)
        self.plan_builds = 0
        self._on_plan_built = on_plan_built
        self._forward_plan: Optional[Callable[[np.ndarray], np.ndarray]] = None
        self._inverse_plan: Optional[Callable[[np.ndarray], np.ndarray]] = None
        self._time_buffer: Optional[np.ndarray] = None
        self._freq_buffer: Optional[np.ndarray] = None
        self._lock = threading.Lock()

    @property
    def spectrum_length(self) -> int:
        """Number of complex bins in the Hermitian half spectrum."""

        return self.length // 2 + 1

    def _ensure_buffers(self) -> None:
        if self._time_buffer is None:
            self._time_buffer = np.zeros(self.length, dtype=float)
            self._freq_buffer = np.zeros(self.spectrum_length, dtype=complex)

    def _plan_built(self, direction: str) -> None:
        self.plan_builds += 1
        logger.debug("built %s FFT plan for length %d", direction, self.length)
        if self._on_plan_built is not None:
            self._on_plan_built(self.length, direction)

    def perform_forward(self, sequence: SampledSequence, spectrum: SampledSequence) -> bool:
        """Transform real ``sequence`` into complex ``spectrum``.

        ``spectrum`` receives ``length//2 + 1`` complex bins and the sampling
        frequency of ``sequence``.  If ``sequence`` does not have the
        engine's length a :class:`~wavebase.errors.LengthMismatch` is logged,
        ``spectrum`` is left untouched and ``False`` is returned.
        """

        if len(sequence) != self.length:
            report(LengthMismatch("forward FFT called with wrong length", expected=self.length, actual=len(sequence)), logger)
            return False
        with self._lock:
            if self._forward_plan is None:
                self._ensure_buffers()
                self._forward_plan = functools.partial(np.fft.rfft, n=self.length)
                self._plan_built("forward")
            self._time_buffer[:] = np.real(sequence.data)
            self._freq_buffer[:] = self._forward_plan(self._time_buffer)
            spectrum.set_data(self._freq_buffer, dtype=self._freq_buffer.dtype)
        spectrum.sampling_frequency = sequence.sampling_frequency
        spectrum.time_offset = 0.0
        return True

    def perform_inverse(self, spectrum: SampledSequence, sequence: SampledSequence) -> bool:
        """Transform the half spectrum ``spectrum`` back into real ``sequence``.

        ``spectrum`` must hold exactly ``length//2 + 1`` bins (DC to Nyquist);
        otherwise a :class:`~wavebase.errors.LengthMismatch` is logged,
        ``sequence`` is left untouched and ``False`` is returned.
        """

        if len(spectrum) != self.spectrum_length:
            report(
                LengthMismatch("inverse FFT called with wrong length", expected=self.spectrum_length, actual=len(spectrum)),
                logger,
            )
            return False
        with self._lock:
            if self._inverse_plan is None:
                self._ensure_buffers()
                self._inverse_plan = functools.partial(np.fft.irfft, n=self.length)
                self._plan_built("inverse")
            self._freq_buffer[:] = spectrum.data
            self._time_buffer[:] = self._inverse_plan(self._freq_buffer)
            sequence.set_data(self._time_buffer, dtype=float)
        sequence.sampling_frequency = spectrum.sampling_frequency
        sequence.time_offset = 0.0
        return True


class FFTPlanCache:
    """Length-keyed store of :class:`FFTEngine` objects.

    Entries are created on first request and never evicted.  Creation is
    guarded by a lock so concurrent first requests for the same length share
    one engine.

    Parameters
    ----------
    on_plan_built:
        Optional callback ``(length, direction)`` invoked whenever an engine
        from this cache constructs a plan.
    """

    def __init__(self, *, on_plan_built: Optional[PlanListener] = None) -> None:
        self._engines: Dict[int, FFTEngine] = {}
        self._lock = threading.Lock()
        self._on_plan_built = on_plan_built

    def get_engine(self, length: int) -> FFTEngine:
        """Return the engine for ``length``, creating it if needed."""

        with self._lock:
            engine = self._engines.get(length)
            if engine is None:
                engine = FFTEngine(length, on_plan_built=self._on_plan_built)
                self._engines[length] = engine
                logger.debug("created FFT engine for length %d", length)
            return engine

    def lengths(self) -> List[int]:
        """Return the lengths with a cached engine, in ascending order."""

        return sorted(self._engines)

    def __contains__(self, length: object) -> bool:
        return length in self._engines

    def __len__(self) -> int:
        return len(self._engines)


def forward(sequence: SampledSequence, cache: FFTPlanCache) -> SampledSequence:
    """Return the half spectrum of ``sequence`` using an engine from ``cache``."""

    spectrum = SampledSequence(dtype=complex)
    cache.get_engine(len(sequence)).perform_forward(sequence, spectrum)
    return spectrum


def inverse(spectrum: SampledSequence, length: int, cache: FFTPlanCache) -> SampledSequence:
    """Return the real sequence of ``length`` samples whose half spectrum is ``spectrum``."""

    sequence = SampledSequence()
    cache.get_engine(length).perform_inverse(spectrum, sequence)
    return sequence
