#!/usr/bin/env python3
"""
Built-in starting scenes.

Each builder returns a list of BodySpec; Simulation.replace_bodies() turns them
into bodies. Distances are SI; orbital speeds are computed for circular orbits
where that makes sense. The viewport fits the camera after loading.
"""
import math
from typing import Callable, Dict, List, NamedTuple

from .constants import AU, EARTH_MASS, G, SOLAR_MASS
from .data_models import BodySpec
from .physics import circular_orbit_velocity
from .vector_utils import vec_norm


def template_empty() -> List[BodySpec]:
    return []


def template_sun_earth() -> List[BodySpec]:
    """Sun at the origin and an Earth-mass body 1 AU out on a circular orbit."""
    v_earth = circular_orbit_velocity(SOLAR_MASS, AU)
    return [
        BodySpec(SOLAR_MASS, (0.0, 0.0), (0.0, 0.0), (1.0, 0.8, 0.0, 1.0), "Sun"),
        BodySpec(EARTH_MASS, (AU, 0.0), (0.0, v_earth), (0.39, 0.58, 0.93, 1.0), "Earth"),
    ]


def template_inner_solar_system() -> List[BodySpec]:
    """
    Sun + Mercury, Venus, Earth, Mars on circular orbits.
    Planets start spread around the Sun rather than in a line.
    """
    bodies = [BodySpec(SOLAR_MASS, (0.0, 0.0), (0.0, 0.0), (1.0, 0.8, 0.0, 1.0), "Sun")]
    planets = [
        # name, mass kg, orbit radius m, start angle rad, color
        ("Mercury", 3.301e23, 5.79e10, 0.0, (0.7, 0.7, 0.7, 1.0)),
        ("Venus", 4.867e24, 1.082e11, math.pi / 2, (0.9, 0.75, 0.5, 1.0)),
        ("Earth", EARTH_MASS, AU, math.pi, (0.39, 0.58, 0.93, 1.0)),
        ("Mars", 6.417e23, 2.279e11, 3 * math.pi / 2, (0.74, 0.15, 0.2, 1.0)),
    ]
    for name, mass, r, angle, color in planets:
        v = circular_orbit_velocity(SOLAR_MASS, r)
        pos = (r * math.cos(angle), r * math.sin(angle))
        # counter-clockwise tangent
        vel = (-v * math.sin(angle), v * math.cos(angle))
        bodies.append(BodySpec(mass, pos, vel, color, name))
    return bodies


def template_three_body_figure_eight() -> List[BodySpec]:
    """Classic equal-mass figure-eight periodic solution (Chenciner-Montgomery), scaled to SI.
    Dimensionless initial conditions (G=1, m=1):
    r1=(-0.97000436, 0.24308753), r2=(0.97000436,-0.24308753), r3=(0,0)
    v1=(0.4662036850, 0.4323657300), v2=(0.4662036850, 0.4323657300), v3=(-0.93240737,-0.86473146)
    With mass m and length L the velocity unit is V = sqrt(G*m/L).
    """
    m = SOLAR_MASS
    L = AU
    V = math.sqrt(G * m / L)

    r = [(-0.97000436, 0.24308753), (0.97000436, -0.24308753), (0.0, 0.0)]
    v = [(0.4662036850, 0.4323657300), (0.4662036850, 0.4323657300), (-0.93240737, -0.86473146)]
    colors = [(1.0, 0.47, 0.47, 1.0), (0.47, 1.0, 0.47, 1.0), (0.47, 0.47, 1.0, 1.0)]

    return [
        BodySpec(m, (ri[0] * L, ri[1] * L), (vi[0] * V, vi[1] * V), c, name)
        for ri, vi, c, name in zip(r, v, colors, "ABC")
    ]


def template_three_body_lagrange() -> List[BodySpec]:
    """
    Equal masses on an equilateral triangle of circumradius R, rotating rigidly
    about the center. Each body's net pull is G*m*sqrt(3)/(3 R^2) toward the
    center, which gives v = sqrt(G*m / (sqrt(3) * R)).
    """
    m = SOLAR_MASS
    R = AU
    v = math.sqrt(G * m / (math.sqrt(3) * R))

    points = [
        (R, 0.0),
        (-R / 2, R * math.sqrt(3) / 2),
        (-R / 2, -R * math.sqrt(3) / 2),
    ]
    colors = [(1.0, 0.47, 0.47, 1.0), (0.47, 1.0, 0.47, 1.0), (0.47, 0.47, 1.0, 1.0)]

    def tangent_velocity(pos):
        t = vec_norm((-pos[1], pos[0]))
        return (t[0] * v, t[1] * v)

    return [
        BodySpec(m, p, tangent_velocity(p), c, name)
        for p, c, name in zip(points, colors, "ABC")
    ]


class Preset(NamedTuple):
    build: Callable[[], List[BodySpec]]
    time_step: float  # suggested seconds per step


PRESETS: Dict[str, Preset] = {
    "Empty": Preset(template_empty, 8192.0),
    "Sun and Earth": Preset(template_sun_earth, 8192.0),
    "Inner solar system": Preset(template_inner_solar_system, 4096.0),
    "Three-body figure-eight": Preset(template_three_body_figure_eight, 8192.0),
    "Three-body Lagrange triangle": Preset(template_three_body_lagrange, 8192.0),
}

DEFAULT_PRESET = "Empty"
