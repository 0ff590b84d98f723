"""Uniformly sampled waveform containers, transforms and FFT plan caching."""

from .core import (
    ExponentialSmoother,
    FFTEngine,
    FFTPlanCache,
    OffsetFitter,
    SampledSequence,
    TransformCapability,
    WaveformTransformer,
)
from .errors import ConfigurationMismatch, ContractViolation, LengthMismatch, OutOfRange
from .types import FitResult

__version__ = "0.1.0"

__all__ = [
    "SampledSequence",
    "TransformCapability",
    "WaveformTransformer",
    "ExponentialSmoother",
    "OffsetFitter",
    "FFTEngine",
    "FFTPlanCache",
    "FitResult",
    "ConfigurationMismatch",
    "ContractViolation",
    "LengthMismatch",
    "OutOfRange",
]
