import math

import pytest

from grav import physics
from grav.constants import AU, G, SOLAR_MASS
from grav.presets import DEFAULT_PRESET, PRESETS, template_three_body_lagrange
from grav.simulation import Simulation


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_presets_load_into_a_simulation(name):
    preset = PRESETS[name]
    sim = Simulation()
    ids = sim.replace_bodies(preset.build())
    assert len(ids) == len(sim.bodies)
    assert sim.set_time_step(preset.time_step) == preset.time_step
    for b in sim.bodies:
        assert b.mass >= 0
        assert all(0.0 <= c <= 1.0 for c in b.color)
    sim.step()
    assert all(math.isfinite(b.position[0]) and math.isfinite(b.position[1]) for b in sim.bodies)


def test_default_preset_exists():
    assert DEFAULT_PRESET in PRESETS
    assert PRESETS[DEFAULT_PRESET].build() == []


def test_lagrange_triangle_net_pull_is_centripetal():
    sim = Simulation()
    sim.replace_bodies(template_three_body_lagrange())
    accs = physics.compute_accelerations(sim.bodies)
    for b, a in zip(sim.bodies, accs):
        speed_sq = b.velocity[0] ** 2 + b.velocity[1] ** 2
        assert math.hypot(*a) == pytest.approx(speed_sq / AU)
        # points at the center
        assert a[0] * b.position[0] + a[1] * b.position[1] < 0


def test_sun_earth_matches_circular_orbit():
    sun, earth = PRESETS["Sun and Earth"].build()
    assert sun.mass == SOLAR_MASS
    assert earth.position == (AU, 0.0)
    assert earth.velocity[1] == pytest.approx(math.sqrt(G * SOLAR_MASS / AU))
