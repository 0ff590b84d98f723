from __future__ import annotations

"""Least-squares fitting of a time offset between two sequences.

Given a reference sequence :math:`r` and an input :math:`x` sampled at times
:math:`t_i`, :class:`OffsetFitter` finds the shift :math:`\\delta` minimising

.. math::

   \\chi^2(\\delta) = \\sum_i \\left( \\frac{x(t_i) - r(t_i - \\delta)}{\\sigma} \\right)^2

where :math:`r(t)` is evaluated by linear interpolation.  The search is
bounded to :math:`[-T, T]` with :math:`T` the time of the input's last sample
and delegated to :func:`scipy.optimize.least_squares`.
"""

import logging
from typing import Optional

import numpy as np
from scipy.optimize import least_squares

from ..config import Settings
from ..types import FitResult
from .sequence import SampledSequence
from .transformer import TransformCapability, WaveformTransformer

logger = logging.getLogger(__name__)


def chi_square(one: SampledSequence, two: SampledSequence, sigma: float = 1.0) -> float:
    """Return the chi-square between ``one`` and ``two`` at the times of ``one``.

    ``two`` is interpolated at every sample time of ``one``; both sequences
    are used with their current offsets.
    """

    times = one.time_offset + np.arange(len(one)) / one.sampling_frequency
    residual = np.asarray(one.data, dtype=float) - two.interpolate_at_points(times)
    return float(np.sum(residual * residual) / (sigma * sigma))


class OffsetFitter(WaveformTransformer):
    """Fit the time offset that best aligns ``reference`` onto an input.

    The reference is evaluated at ``t - offset`` on its own time axis, so
    the fitted offset is the shift relative to ``reference.time_offset``
    rather than an absolute start time.  A reference starting at ``t = 5``
    fitted against an identical input gives an offset of ``0``.

    The fitter never modifies the sequence it is applied to.  :meth:`fit`
    (and :meth:`transform`, which dispatches to it) returns a
    :class:`~wavebase.types.FitResult`.

    Parameters
    ----------
    reference:
        Sequence shifted in time to match the input.
    sigma:
        Per-sample uncertainty normalising the residuals.
    initial_offset:
        Starting value of the shift.
    settings:
        Optional :class:`~wavebase.config.Settings` supplying defaults for
        ``sigma``, ``initial_offset`` and the solver tolerances.
    """

    name = "OffsetFitter"
    capability = TransformCapability.IN_PLACE

    def __init__(
        self,
        reference: SampledSequence,
        sigma: Optional[float] = None,
        initial_offset: Optional[float] = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        if settings is None:
            settings = Settings()
        fit_cfg = settings.fit

        self.reference = reference
        self.sigma = fit_cfg.sigma if sigma is None else sigma
        self.initial_offset = fit_cfg.initial_offset if initial_offset is None else initial_offset
        self.xtol = fit_cfg.xtol
        self.ftol = fit_cfg.ftol
        self.max_nfev = fit_cfg.max_nfev

    @property
    def sigma(self) -> float:
        return self._sigma

    @sigma.setter
    def sigma(self, value: float) -> None:
        if not value > 0:
            raise ValueError("sigma must be positive")
        self._sigma = float(value)

    def residuals(self, sequence: SampledSequence, offset: float) -> np.ndarray:
        """Return the normalised residuals of ``sequence`` against the shifted reference."""

        times = sequence.time_offset + np.arange(len(sequence)) / sequence.sampling_frequency
        shifted = self.reference.interpolate_at_points(times - offset)
        return (np.asarray(sequence.data, dtype=float) - shifted) / self._sigma

    def fit(self, sequence: SampledSequence) -> FitResult:
        """Fit the offset of the reference onto ``sequence``.

        Raises
        ------
        ValueError
            If ``sequence`` is empty or spans no time, leaving no room for a
            bounded search.
        """

        if len(sequence) == 0:
            raise ValueError("cannot fit an offset to an empty sequence")
        bound = abs(sequence.get_time_at_index(len(sequence) - 1))
        if bound == 0:
            raise ValueError("sequence spans no time; offset search interval is empty")

        x0 = float(np.clip(self.initial_offset, -bound, bound))
        solution = least_squares(
            lambda x: self.residuals(sequence, x[0]),
            x0=[x0],
            bounds=([-bound], [bound]),
            method="trf",
            xtol=self.xtol,
            ftol=self.ftol,
            max_nfev=self.max_nfev,
        )
        if not solution.success:
            logger.warning("%s: minimiser did not converge: %s", self.name, solution.message)

        jtj = float(solution.jac[:, 0] @ solution.jac[:, 0])
        error = float(np.sqrt(1.0 / jtj)) if jtj > 0 else float("inf")
        offset = float(solution.x[0])
        logger.debug("%s: offset=%g error=%g after %d evaluations", self.name, offset, error, solution.nfev)
        return FitResult(offset=offset, error=error)

    def _transform_in_place(self, sequence: SampledSequence) -> FitResult:
        return self.fit(sequence)
