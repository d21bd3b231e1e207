#!/usr/bin/env python3
"""
Simulation controller: owns the bodies and the stepping settings.

Threading
- The viewport thread steps and draws while the controls thread edits bodies.
  Every public method takes a re-entrant lock, so one step always finishes
  before an add/remove/edit runs and readers never see a half-integrated state.
- Readers that need a consistent view across several bodies should use
  snapshot(), which returns copies.

Identity
- Each body gets a body_id at creation. The id never changes and is never
  reused, so callers hold on to ids and resolve them with index_of() when they
  actually need a position in the list.
"""
import copy
import logging
import math
import threading
from typing import Iterable, List, Optional, Tuple

from . import physics
from .constants import (
    DEFAULT_BODY_COLOR,
    DEFAULT_TIME_STEP,
    MIN_TIME_STEP,
    MAX_TIME_STEP,
)
from .data_models import Body, BodySpec, Color
from .vector_utils import Vec2, ZERO, as_vec, clamp, vec_len, vec_sub

logger = logging.getLogger(__name__)

FORWARD = 1
BACKWARD = -1


def _check_mass(mass) -> float:
    m = float(mass)
    if not math.isfinite(m) or m < 0:
        raise ValueError(f"mass must be a finite, non-negative number, got {mass!r}")
    return m


def _check_color(color) -> Color:
    if len(color) != 4:
        raise ValueError(f"color must have 4 channels (RGBA), got {len(color)}")
    channels = [float(c) for c in color]
    if not all(math.isfinite(c) for c in channels):
        raise ValueError(f"color channels must be finite, got {tuple(color)!r}")
    return tuple(clamp(c, 0.0, 1.0) for c in channels)


class Simulation:
    """
    Collection of bodies plus the global time step, time direction and pause flag.

    time_step is always a positive magnitude kept inside [min_dt, max_dt];
    direction (+1 or -1) carries the sign, and signed_time_step combines them.
    """

    def __init__(self, time_step: float = DEFAULT_TIME_STEP,
                 min_dt: float = MIN_TIME_STEP, max_dt: float = MAX_TIME_STEP):
        if not 0 < min_dt <= max_dt:
            raise ValueError(f"invalid time step bounds [{min_dt}, {max_dt}]")
        self.lock = threading.RLock()
        self.bodies: List[Body] = []
        self.min_dt = min_dt
        self.max_dt = max_dt
        self.time_step = min_dt
        self.set_time_step(time_step)
        self.direction = FORWARD
        self.paused = False
        self.steps_taken = 0
        self.elapsed = 0.0  # signed simulated seconds
        self._next_id = 1

    # -----------------------
    # Stepping
    # -----------------------

    @property
    def reversed(self) -> bool:
        return self.direction == BACKWARD

    @property
    def signed_time_step(self) -> float:
        return self.direction * self.time_step

    def step(self) -> bool:
        """
        Advance one tick unless paused. Returns True if a step was taken.
        """
        with self.lock:
            if self.paused:
                return False
            self._advance()
            return True

    def step_once(self) -> None:
        """Advance one tick regardless of the pause flag (frame-by-frame stepping)."""
        with self.lock:
            self._advance()

    def _advance(self) -> None:
        dt = self.signed_time_step
        physics.advance(self.bodies, dt)
        self.steps_taken += 1
        self.elapsed += dt

    def pause(self) -> None:
        with self.lock:
            self.paused = True

    def resume(self) -> None:
        with self.lock:
            self.paused = False

    def toggle_pause(self) -> bool:
        with self.lock:
            self.paused = not self.paused
            return self.paused

    def set_reversed(self, value: bool) -> None:
        with self.lock:
            self.direction = BACKWARD if value else FORWARD
            logger.info("time runs %s", "backward" if value else "forward")

    def reverse(self) -> bool:
        """Flip the direction of time; returns True if now running backward."""
        with self.lock:
            self.set_reversed(not self.reversed)
            return self.reversed

    def set_time_step(self, dt: float) -> float:
        """Store dt clamped to [min_dt, max_dt] and return the stored value."""
        dt = float(dt)
        if not math.isfinite(dt) or dt <= 0:
            raise ValueError(f"time step must be a positive number of seconds, got {dt!r}")
        with self.lock:
            self.time_step = clamp(dt, self.min_dt, self.max_dt)
            if self.time_step != dt:
                logger.debug("time step %.3e clamped to %.3e", dt, self.time_step)
            return self.time_step

    def halve_time_step(self) -> float:
        with self.lock:
            return self.set_time_step(self.time_step / 2)

    def double_time_step(self) -> float:
        with self.lock:
            return self.set_time_step(self.time_step * 2)

    # -----------------------
    # Body collection
    # -----------------------

    def add_body(self, mass: float, position, velocity=ZERO,
                 color: Optional[Color] = None, name: Optional[str] = None) -> int:
        """
        Append a new body with zero acceleration and return its id.

        Raises ValueError for negative or non-finite mass and for non-finite
        position or velocity. A zero mass is accepted as an inert tracer.
        """
        m = _check_mass(mass)
        pos = as_vec(position)
        vel = as_vec(velocity)
        col = _check_color(color if color is not None else DEFAULT_BODY_COLOR)
        with self.lock:
            body_id = self._next_id
            self._next_id += 1
            body = Body(
                body_id=body_id,
                name=name or f"Body {body_id}",
                mass=m,
                position=pos,
                velocity=vel,
                color=col,
            )
            self.bodies.append(body)
            logger.debug("added %s (mass %.3e kg) at %s", body.name, m, pos)
            return body_id

    def add_spec(self, spec: BodySpec) -> int:
        return self.add_body(spec.mass, spec.position, spec.velocity, spec.color, spec.name)

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.bodies):
            raise IndexError(
                f"body index {index!r} out of range for {len(self.bodies)} bodies"
            )

    def remove_body(self, index: int) -> Body:
        """
        Remove the body at index. Later bodies shift down by one; their ids do
        not change. Raises IndexError for an invalid index.
        """
        with self.lock:
            self._check_index(index)
            body = self.bodies.pop(index)
            logger.debug("removed %s", body.name)
            return body

    def remove_by_id(self, body_id: int) -> Body:
        with self.lock:
            idx = self.index_of(body_id)
            if idx is None:
                raise KeyError(body_id)
            return self.remove_body(idx)

    def edit_body(self, index: int, mass: Optional[float] = None, position=None,
                  velocity=None, color: Optional[Color] = None,
                  name: Optional[str] = None) -> Body:
        """Replace the given fields of the body at index; omitted fields are kept."""
        # validate everything before touching the body
        m = _check_mass(mass) if mass is not None else None
        pos = as_vec(position) if position is not None else None
        vel = as_vec(velocity) if velocity is not None else None
        col = _check_color(color) if color is not None else None
        with self.lock:
            self._check_index(index)
            body = self.bodies[index]
            if m is not None:
                body.mass = m
            if pos is not None:
                body.position = pos
            if vel is not None:
                body.velocity = vel
            if col is not None:
                body.color = col
            if name:
                body.name = name
            return body

    def index_of(self, body_id: Optional[int]) -> Optional[int]:
        """Current list position of body_id, or None if it is gone."""
        if body_id is None:
            return None
        with self.lock:
            for i, b in enumerate(self.bodies):
                if b.body_id == body_id:
                    return i
            return None

    def get_body(self, body_id: Optional[int]) -> Optional[Body]:
        with self.lock:
            idx = self.index_of(body_id)
            return None if idx is None else self.bodies[idx]

    def body_near(self, world_pos: Tuple[float, float], pick_radius: float) -> Optional[int]:
        """
        Id of the body closest to world_pos within pick_radius (meters), or None.
        Equal distances go to the body added first.
        """
        with self.lock:
            best_id = None
            min_d = float("inf")
            for b in self.bodies:
                d = vec_len(vec_sub(b.position, world_pos))
                if d < pick_radius and d < min_d:
                    min_d = d
                    best_id = b.body_id
            return best_id

    def clear(self) -> None:
        with self.lock:
            self.bodies = []
            self.steps_taken = 0
            self.elapsed = 0.0

    def replace_bodies(self, specs: Iterable[BodySpec]) -> List[int]:
        """Drop every body and add the given ones; returns the new ids."""
        specs = list(specs)
        with self.lock:
            self.clear()
            return [self.add_spec(s) for s in specs]

    # -----------------------
    # Read access
    # -----------------------

    def snapshot(self) -> List[Body]:
        """Copies of all bodies, safe to read outside the lock."""
        with self.lock:
            return [copy.copy(b) for b in self.bodies]

    def positions(self) -> List[Vec2]:
        with self.lock:
            return [b.position for b in self.bodies]

    def total_energy(self) -> float:
        with self.lock:
            return physics.total_energy(self.bodies)

    def __len__(self) -> int:
        return len(self.bodies)
