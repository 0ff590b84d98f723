"""Helpers for clamping index windows onto sequences."""

from __future__ import annotations

from ..types import Window


def clamp_window(begin: int, end: int | None, length: int) -> Window:
    """Return the ``Window`` obtained by clamping ``[begin, end)`` to ``length``.

    ``begin`` is pulled back to the last valid index when it lies past the
    end, ``end`` is limited to ``length`` (``None`` means ``length``) and
    ``begin`` never exceeds ``end``.  An empty sequence always yields
    ``Window(0, 0)``.
    """

    if end is None or end > length:
        end = length
    if begin >= length:
        begin = length - 1
    if begin > end:
        begin = end
    return Window(max(begin, 0), max(end, 0))
