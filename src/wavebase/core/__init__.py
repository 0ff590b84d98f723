"""Core algorithms and data structures for wavebase."""

from .sequence import SampledSequence, is_orderable_dtype
from .transformer import TransformCapability, WaveformTransformer
from .smoothing import ExponentialSmoother
from .fitting import OffsetFitter, chi_square
from .fft import FFTEngine, FFTPlanCache, forward, inverse

__all__ = [
    "SampledSequence",
    "is_orderable_dtype",
    "TransformCapability",
    "WaveformTransformer",
    "ExponentialSmoother",
    "OffsetFitter",
    "chi_square",
    "FFTEngine",
    "FFTPlanCache",
    "forward",
    "inverse",
]
