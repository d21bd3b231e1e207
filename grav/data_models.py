#!/usr/bin/env python3
"""
Data models for the gravity sandbox.

This module defines the Body dataclass shared between physics, rendering, and UI,
plus BodySpec, the unowned description of a body used by presets and dialogs.

Units and usage
- position is in meters [m], velocity in meters per second [m/s], mass in kg.
- acceleration holds the net pull computed by the most recent force pass. It is
  published for display only; integration always uses freshly computed values.
- color is RGBA with float channels in [0, 1]; it plays no role in physics.
- Bodies are owned by a Simulation, which hands out body_id values that stay
  valid across removals of other bodies.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import DEFAULT_BODY_COLOR, G
from .vector_utils import Vec2, ZERO

Color = Tuple[float, float, float, float]


@dataclass
class Body:
    """
    A point mass in the simulation.

    Fields:
    - body_id: Stable identifier issued by the owning Simulation
    - name: Display label
    - mass: Mass in kilograms (zero makes an inert tracer)
    - position: 2D position (x, y) in meters
    - velocity: 2D velocity (vx, vy) in meters/second
    - acceleration: Net acceleration (ax, ay) from the last force pass, m/s^2
    - color: RGBA float tuple used for rendering
    """
    body_id: int
    name: str
    mass: float
    position: Vec2
    velocity: Vec2 = ZERO
    acceleration: Vec2 = ZERO
    color: Color = DEFAULT_BODY_COLOR

    def acceleration_toward(self, other: "Body") -> Vec2:
        """
        Acceleration this body feels from `other` alone: G * m_other / r^2 along
        the line from self to other. Coincident bodies yield the zero vector.
        """
        dx = other.position[0] - self.position[0]
        dy = other.position[1] - self.position[1]
        r_squared = dx * dx + dy * dy
        if r_squared == 0.0:
            return ZERO

        a = G * other.mass / r_squared
        r = math.sqrt(r_squared)
        return (a * dx / r, a * dy / r)


@dataclass
class BodySpec:
    """Everything needed to create a Body, minus the id the simulation assigns."""
    mass: float
    position: Vec2
    velocity: Vec2 = ZERO
    color: Color = DEFAULT_BODY_COLOR
    name: Optional[str] = None
