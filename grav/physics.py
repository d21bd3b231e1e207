#!/usr/bin/env python3
"""
Core Physics Engine for the gravity sandbox

Responsibilities
- Compute net pairwise gravitational accelerations (direct summation, no softening).
- Advance body states with a first-order explicit Euler step that runs either
  forward or backward in time depending on the sign of dt.
- Provide small helpers for common orbital computations and conservation diagnostics.

Units and conventions
- World space positions are in meters [m].
- Velocities are in meters per second [m/s].
- Masses are in kilograms [kg].
- Time steps are in seconds [s]; a negative dt runs time backwards.
- The gravitational constant G is expressed in SI: m^3 kg^-1 s^-2.

Two-phase protocol
- compute_accelerations() reads positions and masses only and returns a fresh list.
- integrate() consumes that list. Nothing is carried over between steps, so there
  is no scratch field to reset.

Numerical notes
- Coincident bodies (r == 0) contribute nothing to each other instead of dividing by zero.
- Complexity: O(N^2) per step. Each unordered pair is visited once and its
  geometry feeds both bodies.
- Reversal with a negative dt is the mirror image of the forward update. For a
  first-order scheme this is close to, but not exactly, time-reversible.
"""

import math
from typing import List, Sequence

from .constants import G
from .data_models import Body
from .vector_utils import Vec2, ZERO


def compute_accelerations(bodies: Sequence[Body]) -> List[Vec2]:
    """
    Compute the net gravitational acceleration on every body.

        a_i = sum_j G * m_j * r_ij / |r_ij|^3

    where r_ij = (x_j - x_i, y_j - y_i). Pair (i, j) is evaluated once; body i
    receives +m_j times the shared factor and body j receives -m_i times it.

    Args:
        bodies: Bodies to evaluate (only .mass and .position are read).

    Returns:
        List of (ax, ay) accelerations (m/s^2), same order as the input.
    """
    n = len(bodies)
    ax = [0.0] * n
    ay = [0.0] * n

    for i in range(n):
        xi, yi = bodies[i].position
        mi = bodies[i].mass
        for j in range(i + 1, n):
            xj, yj = bodies[j].position

            dx = xj - xi
            dy = yj - yi
            r_squared = dx * dx + dy * dy
            if r_squared == 0.0:
                continue

            # G / r^3, shared by both directions of the pair
            factor = G / (r_squared * math.sqrt(r_squared))
            mj = bodies[j].mass

            ax[i] += dx * factor * mj
            ay[i] += dy * factor * mj
            ax[j] -= dx * factor * mi
            ay[j] -= dy * factor * mi

    return list(zip(ax, ay))


def integrate(bodies: Sequence[Body], accelerations: Sequence[Vec2], dt: float) -> None:
    """
    Advance every body by dt using the accelerations just computed for it.

    Position moves with the pre-update velocity, then velocity takes the
    acceleration: x += v * dt; v += a * dt. A negative dt gives the reversed
    update x -= v * |dt|; v -= a * |dt|. Each body's published acceleration is
    set to the value it was integrated with.
    """
    if len(accelerations) != len(bodies):
        raise ValueError(
            f"expected {len(bodies)} accelerations, got {len(accelerations)}"
        )

    for body, acc in zip(bodies, accelerations):
        vx, vy = body.velocity
        body.position = (body.position[0] + vx * dt, body.position[1] + vy * dt)
        body.velocity = (vx + acc[0] * dt, vy + acc[1] * dt)
        body.acceleration = acc


def advance(bodies: Sequence[Body], dt: float) -> List[Vec2]:
    """Run one full force pass and integration pass; return the accelerations used."""
    accelerations = compute_accelerations(bodies)
    integrate(bodies, accelerations, dt)
    return accelerations


# ------------------------------------------------------------
# Diagnostics
# ------------------------------------------------------------

def kinetic_energy(bodies: Sequence[Body]) -> float:
    return sum(0.5 * b.mass * (b.velocity[0] ** 2 + b.velocity[1] ** 2) for b in bodies)


def potential_energy(bodies: Sequence[Body]) -> float:
    """Sum of -G m_i m_j / r over unordered pairs; coincident pairs are skipped."""
    total = 0.0
    n = len(bodies)
    for i in range(n):
        for j in range(i + 1, n):
            r = math.hypot(
                bodies[j].position[0] - bodies[i].position[0],
                bodies[j].position[1] - bodies[i].position[1],
            )
            if r > 0.0:
                total -= G * bodies[i].mass * bodies[j].mass / r
    return total


def total_energy(bodies: Sequence[Body]) -> float:
    return kinetic_energy(bodies) + potential_energy(bodies)


def total_momentum(bodies: Sequence[Body]) -> Vec2:
    px = sum(b.mass * b.velocity[0] for b in bodies)
    py = sum(b.mass * b.velocity[1] for b in bodies)
    return (px, py)


def center_of_mass(bodies: Sequence[Body]) -> Vec2:
    """Mass-weighted mean position; the origin if there is no mass at all."""
    m_total = sum(b.mass for b in bodies)
    if m_total <= 0:
        return ZERO
    cx = sum(b.mass * b.position[0] for b in bodies) / m_total
    cy = sum(b.mass * b.position[1] for b in bodies) / m_total
    return (cx, cy)


def circular_orbit_velocity(central_mass: float, orbital_radius: float) -> float:
    """
    Speed of a circular orbit of the given radius around central_mass.

    Gravity supplies the centripetal force: G * M / r^2 = v^2 / r, so
    v = sqrt(G * M / r). Non-positive radius gives 0.
    """
    if orbital_radius <= 0:
        return 0.0

    return math.sqrt(G * central_mass / orbital_radius)


def escape_velocity(total_mass: float, separation: float) -> float:
    """
    Minimum speed to escape total_mass from the given separation:
    v_escape = sqrt(2 * G * M / r).
    """
    if separation <= 0 or total_mass <= 0:
        return 0.0

    return math.sqrt(2.0 * G * total_mass / separation)
