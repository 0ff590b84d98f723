from __future__ import annotations

"""Base class and dispatch rules for waveform transformers.

A transformer declares which processing mode it implements natively through
its :attr:`WaveformTransformer.capability`:

``IN_PLACE``
    overwrite the input sequence.
``OUT_OF_PLACE``
    read the input and write a distinct output sequence.
``BOTH``
    efficient versions of both exist.

Callers always go through :meth:`WaveformTransformer.transform`; passing an
``output`` requests an out-of-place transform, omitting it requests an
in-place one.  The dispatcher adapts whichever mode was requested to the mode
the transformer implements, copying through a scratch sequence when needed.
"""

import enum
import logging
from typing import Any, Optional

from ..errors import ContractViolation
from .sequence import SampledSequence

logger = logging.getLogger(__name__)


class TransformCapability(enum.Enum):
    """Processing modes a transformer implements natively."""

    IN_PLACE = "in_place"
    OUT_OF_PLACE = "out_of_place"
    BOTH = "both"

    @property
    def in_place(self) -> bool:
        return self is not TransformCapability.OUT_OF_PLACE

    @property
    def out_of_place(self) -> bool:
        return self is not TransformCapability.IN_PLACE


class WaveformTransformer:
    """Abstract transformer of :class:`SampledSequence` objects.

    Subclasses set :attr:`name` and :attr:`capability` and override
    :meth:`_transform_in_place`, :meth:`_transform_out_of_place` or both,
    matching the declared capability.
    """

    name: str = "WaveformTransformer"
    capability: TransformCapability

    def transform(self, sequence: SampledSequence, output: Optional[SampledSequence] = None) -> Any:
        """Transform ``sequence`` in place, or into ``output`` when given.

        ``output`` is first made similar to ``sequence`` (length, frequency
        and offset).  The return value is whatever the native hook returns,
        ``None`` for ordinary transformers.
        """

        if sequence is None:
            raise ValueError(f"{self.name}: input sequence is None")

        if output is None:
            if self.capability.in_place:
                return self.transform_in_place(sequence)
            scratch = SampledSequence(dtype=sequence.dtype)
            scratch.make_similar_to(sequence)
            result = self.transform_out_of_place(sequence, scratch)
            sequence.assign(scratch)
            return result

        output.make_similar_to(sequence)
        if self.capability.out_of_place:
            return self.transform_out_of_place(sequence, output)
        logger.debug("%s: copying input for out-of-place request", self.name)
        output.assign(sequence)
        return self.transform_in_place(output)

    def transform_in_place(self, sequence: SampledSequence) -> Any:
        """Run the native in-place hook.

        Raises :class:`~wavebase.errors.ContractViolation` if the declared
        capability does not include in-place processing.
        """

        if not self.capability.in_place:
            raise ContractViolation(f"{self.name} does not transform in place")
        return self._transform_in_place(sequence)

    def transform_out_of_place(self, sequence: SampledSequence, output: SampledSequence) -> Any:
        """Run the native out-of-place hook.

        Raises :class:`~wavebase.errors.ContractViolation` if the declared
        capability does not include out-of-place processing.
        """

        if not self.capability.out_of_place:
            raise ContractViolation(f"{self.name} does not transform out of place")
        return self._transform_out_of_place(sequence, output)

    def _transform_in_place(self, sequence: SampledSequence) -> Any:
        raise ContractViolation(f"{self.name} declares in-place support but does not implement it")

    def _transform_out_of_place(self, sequence: SampledSequence, output: SampledSequence) -> Any:
        raise ContractViolation(f"{self.name} declares out-of-place support but does not implement it")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, capability={self.capability.name})"
