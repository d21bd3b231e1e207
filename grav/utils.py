#!/usr/bin/env python3
"""
General utilities for the gravity sandbox UI layer.
"""
import math
from typing import Optional, Sequence, Tuple


def try_float(val) -> Optional[float]:
    """Parse user input as a finite float, or None."""
    try:
        f = float(val)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def color_to_rgb255(color: Sequence[float]) -> Tuple[int, int, int]:
    """RGBA floats in [0, 1] to the RGB byte tuple pygame draws with."""
    return tuple(max(0, min(255, int(round(c * 255)))) for c in color[:3])


def color_from_rgba255(rgba: Sequence[float]) -> Tuple[float, float, float, float]:
    """Dear PyGui color-edit values (0..255, alpha optional) to RGBA floats."""
    channels = [float(c) / 255.0 for c in rgba[:4]]
    while len(channels) < 4:
        channels.append(1.0)
    return tuple(max(0.0, min(1.0, c)) for c in channels)


def color_to_rgba255(color: Sequence[float]) -> Tuple[int, int, int, int]:
    return tuple(max(0, min(255, int(round(c * 255)))) for c in color[:4])


class FieldSync:
    """
    Remembers the last value pushed into an input widget.

    The periodic UI sync rewrites a field only when the core value moved away
    from what the field was last given, so text the user is typing survives.
    """

    def __init__(self):
        self.last = None

    def mark(self, value) -> None:
        self.last = value

    def needs_update(self, value) -> bool:
        if value == self.last:
            return False
        self.last = value
        return True
