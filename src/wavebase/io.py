from __future__ import annotations

"""Reading raw sample buffers in and writing transformed buffers out.

Only bare numeric arrays are exchanged; sampling metadata is supplied by the
caller (usually from :class:`~wavebase.config.Settings`).
"""

from pathlib import Path

import numpy as np

from .config import Settings
from .core.sequence import SampledSequence


def load_array(path: str | Path) -> np.ndarray:
    """Load a 1D numeric array from ``path``.

    ``.npy`` files are loaded with :func:`numpy.load` while any other extension
    is treated as a text file with comma separated values.
    """

    p = Path(path)
    if p.suffix == ".npy":
        data = np.load(p)
    else:
        data = np.loadtxt(p, delimiter=",", dtype=float)
    return np.asarray(data).reshape(-1)


def save_array(path: str | Path, data: np.ndarray) -> None:
    """Write ``data`` to ``path`` as ``.npy`` or comma separated text.

    Complex data can only be stored in ``.npy`` files.
    """

    p = Path(path)
    data = np.asarray(data)
    if p.suffix == ".npy":
        np.save(p, data)
        return
    if np.iscomplexobj(data):
        raise ValueError("complex data must be saved to a .npy file")
    np.savetxt(p, data, delimiter=",")


def load_sequence(
    path: str | Path,
    *,
    settings: Settings | None = None,
    sampling_frequency: float | None = None,
    time_offset: float | None = None,
) -> SampledSequence:
    """Load a raw buffer from ``path`` as a :class:`SampledSequence`.

    ``sampling_frequency`` and ``time_offset`` override the defaults from
    ``settings.sequence``.
    """

    if settings is None:
        settings = Settings()
    freq = settings.sequence.sampling_frequency if sampling_frequency is None else sampling_frequency
    offset = settings.sequence.time_offset if time_offset is None else time_offset
    return SampledSequence(load_array(path), sampling_frequency=freq, time_offset=offset)
