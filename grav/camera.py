#!/usr/bin/env python3
"""
Camera utilities for 2D world-to-view transforms.

The camera keeps the world coordinates of the viewport center (origin) and a
scale in world meters per pixel. Larger scale means further zoomed out.
"""
import logging
import math
from typing import Iterable, Optional, Tuple

from .constants import (
    DEFAULT_SCALE,
    MIN_SCALE,
    MAX_SCALE,
    VIEW_WIDTH,
    VIEW_HEIGHT,
)
from .vector_utils import Vec2, clamp

logger = logging.getLogger(__name__)


class Camera2D:
    """
    Maps world coordinates (meters) to view pixels and back.

        view_to_world(p) = origin + (p - viewport_size / 2) * scale
        world_to_view(p) = viewport_size / 2 + (p - origin) / scale

    Results are floats so the two transforms invert each other exactly up to
    rounding; callers round to ints when drawing.
    """

    def __init__(self, origin=(0.0, 0.0), scale: float = DEFAULT_SCALE,
                 viewport_size: Tuple[float, float] = (VIEW_WIDTH, VIEW_HEIGHT),
                 min_scale: float = MIN_SCALE, max_scale: float = MAX_SCALE):
        if not 0 < min_scale <= max_scale:
            raise ValueError(f"invalid scale bounds [{min_scale}, {max_scale}]")
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.origin = [float(origin[0]), float(origin[1])]
        self.scale = min_scale
        self.set_scale(scale)
        self.viewport_size = (float(viewport_size[0]), float(viewport_size[1]))

    @property
    def viewport_center(self) -> Vec2:
        return (self.viewport_size[0] / 2, self.viewport_size[1] / 2)

    def resize(self, new_size: Tuple[float, float]) -> None:
        """Replace the viewport size; origin and scale are left alone."""
        w, h = new_size
        self.viewport_size = (float(w), float(h))

    def view_to_world(self, p: Tuple[float, float]) -> Vec2:
        cx, cy = self.viewport_center
        wx = self.origin[0] + (p[0] - cx) * self.scale
        wy = self.origin[1] + (p[1] - cy) * self.scale
        return (wx, wy)

    def world_to_view(self, p: Tuple[float, float]) -> Vec2:
        cx, cy = self.viewport_center
        vx = cx + (p[0] - self.origin[0]) / self.scale
        vy = cy + (p[1] - self.origin[1]) / self.scale
        return (vx, vy)

    def pan(self, delta_pixels: Tuple[float, float]) -> None:
        """Move the origin by a pixel offset converted to world units."""
        dx, dy = delta_pixels
        self.origin[0] += dx * self.scale
        self.origin[1] += dy * self.scale

    def set_scale(self, scale: float) -> float:
        scale = float(scale)
        if not math.isfinite(scale) or scale <= 0:
            raise ValueError(f"scale must be a positive number of meters per pixel, got {scale!r}")
        self.scale = clamp(scale, self.min_scale, self.max_scale)
        return self.scale

    def zoom(self, factor: float, pivot: Optional[Tuple[float, float]] = None) -> float:
        """
        Multiply scale by factor (> 1 zooms out), clamped to the scale bounds.

        With a pivot pixel, the origin shifts so the world point under the pivot
        stays under it.
        """
        factor = float(factor)
        if not math.isfinite(factor) or factor <= 0:
            raise ValueError(f"zoom factor must be positive, got {factor!r}")
        before = None
        if pivot is not None:
            before = self.view_to_world(pivot)
        wanted = self.scale * factor
        self.scale = clamp(wanted, self.min_scale, self.max_scale)
        if self.scale != wanted:
            logger.debug("scale %.3e clamped to %.3e", wanted, self.scale)
        if pivot is not None and before is not None:
            after = self.view_to_world(pivot)
            self.origin[0] += (before[0] - after[0])
            self.origin[1] += (before[1] - after[1])
        return self.scale

    def fit(self, points: Iterable[Tuple[float, float]], margin: float = 1.3) -> None:
        """
        Center on the bounding box of points and pick a scale that shows all of
        them with some margin. Non-finite points are ignored; no points resets
        to the default view.
        """
        pts = [p for p in points if math.isfinite(p[0]) and math.isfinite(p[1])]
        if not pts:
            self.origin = [0.0, 0.0]
            self.set_scale(DEFAULT_SCALE)
            return
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        minx, maxx = min(xs), max(xs)
        miny, maxy = min(ys), max(ys)
        width_m = (maxx - minx) * margin
        height_m = (maxy - miny) * margin
        self.origin = [(minx + maxx) / 2, (miny + maxy) / 2]
        if width_m == 0 and height_m == 0:
            # a single point: keep the current zoom
            return
        scale_x = width_m / max(self.viewport_size[0], 1)
        scale_y = height_m / max(self.viewport_size[1], 1)
        self.set_scale(min(max(scale_x, scale_y), self.max_scale))
