"""Exponential envelope smoothing.

The smoother centres a sequence on its mean and runs a causal one-pole
filter over the absolute deviations:

.. math::

   y_0 = \\alpha |x_0 - \\bar{x}|, \\qquad
   y_i = \\alpha |x_i - \\bar{x}| + (1 - \\alpha) y_{i-1}

The result tracks the magnitude of the deviation from the mean with a time
constant set by :math:`\\alpha`.  The mean is taken over the whole sequence
before filtering, so this is a batch operation rather than a streaming
filter.
"""

from __future__ import annotations

import numpy as np
from scipy.signal import lfilter

from ..config import Settings
from .sequence import SampledSequence
from .transformer import TransformCapability, WaveformTransformer


class ExponentialSmoother(WaveformTransformer):
    """In-place exponential window average of the absolute centred signal.

    Parameters
    ----------
    alpha:
        Smoothing factor in ``(0, 1]``.  ``1`` disables the memory term.
    settings:
        Optional :class:`~wavebase.config.Settings` providing the default
        ``alpha``.
    """

    name = "ExponentialSmoother"
    capability = TransformCapability.IN_PLACE

    def __init__(self, alpha: float | None = None, *, settings: Settings | None = None) -> None:
        if settings is None:
            settings = Settings()
        self.alpha = settings.smoother.alpha if alpha is None else alpha

    @property
    def alpha(self) -> float:
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        if not 0.0 < value <= 1.0:
            raise ValueError("alpha must lie in (0, 1]")
        self._alpha = float(value)

    def _transform_in_place(self, sequence: SampledSequence) -> None:
        if len(sequence) == 0:
            return
        values = np.asarray(sequence.data, dtype=float)
        centred = np.abs(values - values.sum() / len(values))
        smoothed = lfilter([self._alpha], [1.0, self._alpha - 1.0], centred)
        sequence.data[:] = smoothed.astype(sequence.dtype, copy=False)
