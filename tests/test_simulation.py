import math

import pytest

from grav.constants import (
    DEFAULT_TIME_STEP,
    EARTH_MASS,
    G,
    MAX_TIME_STEP,
    MIN_TIME_STEP,
    SOLAR_MASS,
)
from grav.simulation import Simulation


@pytest.fixture
def sim():
    return Simulation()


def state(sim):
    return [(b.position, b.velocity, b.acceleration) for b in sim.bodies]


def test_defaults(sim):
    assert sim.time_step == DEFAULT_TIME_STEP
    assert sim.paused is False
    assert sim.reversed is False
    assert sim.signed_time_step == DEFAULT_TIME_STEP
    assert len(sim) == 0


def test_add_body_starts_with_zero_acceleration(sim):
    body_id = sim.add_body(5.0, (1.0, 2.0), (3.0, 4.0))
    body = sim.get_body(body_id)
    assert body.mass == 5.0
    assert body.position == (1.0, 2.0)
    assert body.velocity == (3.0, 4.0)
    assert body.acceleration == (0.0, 0.0)
    assert body.color == (1.0, 1.0, 1.0, 1.0)
    assert body.name == f"Body {body_id}"


@pytest.mark.parametrize("mass", [-1.0, float("nan"), float("inf")])
def test_add_body_rejects_bad_mass(sim, mass):
    with pytest.raises(ValueError):
        sim.add_body(mass, (0.0, 0.0))
    assert len(sim) == 0


def test_add_body_rejects_non_finite_vectors(sim):
    with pytest.raises(ValueError):
        sim.add_body(1.0, (float("nan"), 0.0))
    with pytest.raises(ValueError):
        sim.add_body(1.0, (0.0, 0.0), (0.0, float("inf")))


def test_zero_mass_tracer_is_accepted(sim):
    sim.add_body(0.0, (0.0, 0.0))
    assert len(sim) == 1


@pytest.mark.parametrize("count", [0, 1])
def test_step_with_fewer_than_two_bodies(sim, count):
    for i in range(count):
        sim.add_body(SOLAR_MASS, (0.0, 0.0), (1.0, 0.0))
    assert sim.step() is True
    for b in sim.bodies:
        assert b.acceleration == (0.0, 0.0)
        assert b.position == (DEFAULT_TIME_STEP, 0.0)


def test_paused_steps_change_nothing(sim):
    sim.add_body(SOLAR_MASS, (0.0, 0.0))
    sim.add_body(EARTH_MASS, (1.5e11, 0.0), (0.0, 3.0e4))
    sim.step()
    before = state(sim)
    sim.pause()
    for _ in range(5):
        assert sim.step() is False
    assert state(sim) == before
    assert sim.steps_taken == 1


def test_step_once_ignores_pause(sim):
    sim.add_body(SOLAR_MASS, (0.0, 0.0))
    sim.add_body(EARTH_MASS, (1.5e11, 0.0))
    sim.pause()
    sim.step_once()
    assert sim.steps_taken == 1
    assert sim.bodies[1].velocity[0] < 0


def test_pause_resume_toggle(sim):
    assert sim.toggle_pause() is True
    assert sim.paused
    sim.resume()
    assert not sim.paused
    sim.pause()
    assert sim.toggle_pause() is False


def test_two_equal_masses_single_step(sim):
    m, d = 1.0e29, 1.0e10
    sim.set_time_step(500.0)
    sim.add_body(m, (0.0, 0.0))
    sim.add_body(m, (d, 0.0))
    sim.step()
    expected = G * m / d ** 2 * 500.0
    left, right = sim.bodies
    assert math.hypot(*left.velocity) == pytest.approx(expected)
    assert math.hypot(*right.velocity) == pytest.approx(expected)
    assert left.velocity[0] > 0 and right.velocity[0] < 0


def test_earth_sun_scenario(sim):
    sim.set_time_step(8192.0)
    earth_id = sim.add_body(5.97e24, (1.5e11, 0.0))
    sim.add_body(1.989e30, (0.0, 0.0))
    sim.step()

    earth = sim.get_body(earth_id)
    a = math.hypot(*earth.acceleration)
    assert a == pytest.approx(G * 1.989e30 / (1.5e11) ** 2)
    assert a == pytest.approx(5.9e-3, rel=0.01)
    assert earth.velocity[0] == pytest.approx(-a * 8192.0)
    assert earth.velocity[1] == 0.0
    # position advanced with the velocity from before the step
    assert earth.position == (1.5e11, 0.0)


def test_reverse_retraces_steps(sim):
    sim.set_time_step(3600.0)
    sim.add_body(SOLAR_MASS, (0.0, 0.0))
    sim.add_body(EARTH_MASS, (1.5e11, 0.0), (0.0, 2.97e4))
    start = [b.position for b in sim.bodies]

    for _ in range(50):
        sim.step()
    assert sim.reverse() is True
    assert sim.signed_time_step == -3600.0
    for _ in range(50):
        sim.step()

    assert sim.elapsed == pytest.approx(0.0, abs=1e-6)
    for b, p in zip(sim.bodies, start):
        # first-order scheme: close, not exact
        assert math.hypot(b.position[0] - p[0], b.position[1] - p[1]) < 1.5e11 * 1e-3

    sim.set_reversed(False)
    assert sim.direction == 1


def test_set_time_step_clamps(sim):
    assert sim.set_time_step(1e20) == MAX_TIME_STEP
    assert sim.set_time_step(1e-5) == MIN_TIME_STEP
    assert sim.set_time_step(42.0) == 42.0


@pytest.mark.parametrize("dt", [0.0, -5.0, float("nan")])
def test_set_time_step_rejects_non_positive(sim, dt):
    with pytest.raises(ValueError):
        sim.set_time_step(dt)
    assert sim.time_step == DEFAULT_TIME_STEP


def test_repeated_doubling_and_halving_pins_at_bounds(sim):
    for _ in range(200):
        sim.double_time_step()
        assert sim.time_step <= MAX_TIME_STEP
    assert sim.time_step == MAX_TIME_STEP
    for _ in range(200):
        sim.halve_time_step()
        assert sim.time_step >= MIN_TIME_STEP
    assert sim.time_step == MIN_TIME_STEP


def test_custom_time_step_bounds():
    sim = Simulation(time_step=100.0, min_dt=10.0, max_dt=50.0)
    assert sim.time_step == 50.0
    with pytest.raises(ValueError):
        Simulation(min_dt=5.0, max_dt=1.0)


@pytest.mark.parametrize("dt", [0.0, -5.0, float("nan"), float("inf")])
def test_constructor_rejects_bad_time_step(dt):
    with pytest.raises(ValueError):
        Simulation(time_step=dt)


def test_remove_body_reindexes(sim):
    ids = [sim.add_body(1.0, (float(i), 0.0)) for i in range(5)]
    removed = sim.remove_body(2)
    assert removed.body_id == ids[2]
    assert [b.body_id for b in sim.bodies] == [ids[0], ids[1], ids[3], ids[4]]
    assert sim.index_of(ids[3]) == 2
    assert sim.index_of(ids[4]) == 3
    assert sim.index_of(ids[2]) is None
    assert sim.get_body(ids[2]) is None


@pytest.mark.parametrize("index", [3, -1, 100])
def test_remove_body_out_of_range(sim, index):
    for i in range(3):
        sim.add_body(1.0, (float(i), 0.0))
    with pytest.raises(IndexError):
        sim.remove_body(index)
    assert len(sim) == 3


@pytest.mark.parametrize("index", [True, False, 1.0])
def test_non_integer_index_is_rejected(sim, index):
    for i in range(3):
        sim.add_body(1.0, (float(i), 0.0))
    with pytest.raises(IndexError):
        sim.remove_body(index)
    with pytest.raises(IndexError):
        sim.edit_body(index, mass=2.0)
    assert len(sim) == 3
    assert all(b.mass == 1.0 for b in sim.bodies)


def test_ids_are_never_reused(sim):
    first = sim.add_body(1.0, (0.0, 0.0))
    sim.remove_by_id(first)
    second = sim.add_body(1.0, (0.0, 0.0))
    assert second != first
    with pytest.raises(KeyError):
        sim.remove_by_id(first)


def test_edit_body(sim):
    sim.add_body(1.0, (0.0, 0.0))
    body = sim.edit_body(0, mass=2.0, velocity=(5.0, 5.0), color=(0.5, 0.5, 0.5, 1.0), name="tracer")
    assert body.mass == 2.0
    assert body.position == (0.0, 0.0)
    assert body.velocity == (5.0, 5.0)
    assert body.color == (0.5, 0.5, 0.5, 1.0)
    assert body.name == "tracer"


def test_edit_body_errors(sim):
    sim.add_body(1.0, (0.0, 0.0))
    with pytest.raises(IndexError):
        sim.edit_body(1, mass=2.0)
    with pytest.raises(ValueError):
        sim.edit_body(0, mass=-2.0)
    with pytest.raises(ValueError):
        sim.edit_body(0, color=(1.0, 1.0, 1.0))
    with pytest.raises(ValueError):
        sim.edit_body(0, color=(float("nan"), 1.0, 1.0, 1.0))
    assert sim.bodies[0].mass == 1.0


def test_body_near_picks_closest_within_radius(sim):
    a = sim.add_body(1.0, (0.0, 0.0))
    b = sim.add_body(1.0, (10.0, 0.0))
    assert sim.body_near((7.0, 0.0), 5.0) == b
    assert sim.body_near((2.0, 0.0), 5.0) == a
    assert sim.body_near((5.0, 0.0), 5.0) is None
    assert sim.body_near((5.0, 0.0), 5.1) == a


def test_replace_bodies_and_snapshot(sim):
    from grav.presets import template_sun_earth

    sim.add_body(1.0, (0.0, 0.0))
    ids = sim.replace_bodies(template_sun_earth())
    assert len(ids) == 2
    snap = sim.snapshot()
    assert [b.name for b in snap] == ["Sun", "Earth"]
    snap[0].position = (1.0, 1.0)
    assert sim.bodies[0].position == (0.0, 0.0)
    assert sim.positions() == [b.position for b in sim.bodies]


def test_total_energy_is_roughly_conserved_on_circular_orbit(sim):
    from grav.presets import template_sun_earth

    sim.replace_bodies(template_sun_earth())
    sim.set_time_step(3600.0)
    e0 = sim.total_energy()
    for _ in range(24 * 30):
        sim.step()
    assert sim.total_energy() == pytest.approx(e0, rel=1e-2)
