"""Selftests for the per-tick force integrator.

Run:
  python -m selftest.test_integrator
"""

import numpy as np

import constants
from sim_config import SimulationConfig
from integrator import audio_force, pointer_force, repulsion_push, tick
from value_noise import NoiseField
from particle_system import ParticleSystem
from sampler import build
from selftest.util import assert_close, quadrant_image, run_tests


def _single_particle(x=100.0, y=100.0, vx=0.0, vy=0.0):
    return ParticleSystem(
        rest_positions=[[100.0, 100.0]],
        positions=[[x, y]],
        velocities=[[vx, vy]],
        colors=[[255, 0, 255]],
        alphas=[1.0],
        base_sizes=[10.0],
        seeds=[123.0],
    )


def _noise():
    return NoiseField(np.random.default_rng(0))


def test_audio_force_maps_bass_to_bounded_range():
    assert_close(audio_force(0, 1.5), 0.0)
    assert_close(audio_force(255, 1.5), constants.AUDIO_FORCE_MAX)
    assert_close(audio_force(127.5, 2.0), constants.AUDIO_FORCE_MAX / 2)


def test_audio_force_clamps_out_of_range_input():
    assert_close(audio_force(10_000, 5.0), constants.AUDIO_FORCE_MAX)
    assert_close(audio_force(-40, 1.0), 0.0)
    assert_close(audio_force(None, 1.5), 0.0)
    assert_close(audio_force(float("nan"), 1.5), 0.0)


def test_pointer_at_radius_contributes_nothing():
    assert repulsion_push(constants.MOUSE_RADIUS, 0.0) == 0.0
    assert repulsion_push(constants.MOUSE_RADIUS + 5.0, 2.2) == 0.0
    fx, fy = pointer_force(constants.MOUSE_RADIUS, 0.0, 1.0)
    assert fx == 0.0 and fy == 0.0


def test_pointer_at_zero_distance_is_finite_and_maximal():
    push = repulsion_push(0.0, 0.0)
    assert_close(push, constants.MOUSE_FORCE, 1e-5)
    for distance in (1.0, 30.0, 60.0, 119.0):
        assert repulsion_push(distance, 0.0) < push

    fx, fy = pointer_force(0.0, 0.0, 2.2)
    assert np.isfinite(fx) and np.isfinite(fy)


def test_push_scales_linearly_and_with_audio():
    half = repulsion_push(constants.MOUSE_RADIUS / 2, 0.0)
    assert_close(half, constants.MOUSE_FORCE * 0.5, 1e-5)
    assert_close(repulsion_push(constants.MOUSE_RADIUS / 2, 1.0), 2 * half, 1e-9)


def test_pointer_pushes_particle_away():
    system = _single_particle()
    config = SimulationConfig(chaos_strength=0.0)
    tick(system, 0.0, (110.0, 100.0), 0, config, _noise())

    expected_push = (1.0 - (10.0 + constants.DISTANCE_EPSILON) / constants.MOUSE_RADIUS) * constants.MOUSE_FORCE
    vx, vy = system[0].velocity
    assert vx < 0.0
    assert_close(vx, -expected_push * constants.DAMPING * 10.0 / (10.0 + constants.DISTANCE_EPSILON), 1e-6)
    assert_close(vy, 0.0, 1e-12)
    assert_close(system[0].position[0], 100.0 + vx, 1e-9)


def test_spring_and_damping_single_step():
    system = _single_particle(x=110.0, y=95.0, vx=1.0, vy=0.0)
    config = SimulationConfig(chaos_strength=0.0)
    tick(system, 0.0, None, 0, config, _noise())

    k = constants.SPRING_STIFFNESS
    vx = (1.0 + (100.0 - 110.0) * k) * constants.DAMPING
    vy = (0.0 + (100.0 - 95.0) * k) * constants.DAMPING
    assert_close(system.velocities[0, 0], vx)
    assert_close(system.velocities[0, 1], vy)
    assert_close(system.positions[0, 0], 110.0 + vx)
    assert_close(system.positions[0, 1], 95.0 + vy)


def test_stiffness_grows_with_audio():
    quiet = _single_particle(x=120.0)
    loud = _single_particle(x=120.0)
    config = SimulationConfig(chaos_strength=0.0, bass_multiplier=1.0)
    tick(quiet, 0.0, None, 0, config, _noise())
    tick(loud, 255.0, None, 0, config, _noise())
    assert loud.velocities[0, 0] < quiet.velocities[0, 0] < 0.0


def test_settles_to_rest_without_forcing():
    system, _ = build(quadrant_image(), 200, 200, 20, rng=np.random.default_rng(11))
    config = SimulationConfig(chaos_strength=0.0)
    noise = _noise()
    assert system.get_mean_displacement() > 0.0

    for tick_count in range(300):
        tick(system, 0.0, None, tick_count, config, noise)

    displacement = np.linalg.norm(system.positions - system.rest_positions, axis=1)
    assert displacement.max() < 1e-3
    assert np.abs(system.velocities).max() < 1e-3


def test_noise_keeps_particles_moving_but_bounded():
    system, _ = build(quadrant_image(), 200, 200, 20, rng=np.random.default_rng(12))
    config = SimulationConfig(chaos_strength=10.0)
    noise = _noise()
    for tick_count in range(500):
        tick(system, 0.0, None, tick_count, config, noise)

    displacement = np.linalg.norm(system.positions - system.rest_positions, axis=1)
    assert displacement.max() > 0.01
    # Noise force is at most chaos * gain / 2 per axis; the spring holds each axis near F / k.
    max_force = 0.5 * 10.0 * constants.NOISE_GAIN
    assert displacement.max() < 2.0 * np.sqrt(2.0) * max_force / constants.SPRING_STIFFNESS


def test_rest_positions_never_move():
    system, _ = build(quadrant_image(), 150, 100, 10, rng=np.random.default_rng(3))
    before = system.rest_positions.copy()
    config = SimulationConfig()
    noise = _noise()
    for tick_count in range(20):
        tick(system, 200.0, (75.0, 50.0), tick_count, config, noise)
    assert np.array_equal(before, system.rest_positions)


def test_ticks_are_deterministic():
    a, _ = build(quadrant_image(), 150, 100, 10, rng=np.random.default_rng(4))
    b, _ = build(quadrant_image(), 150, 100, 10, rng=np.random.default_rng(4))
    config = SimulationConfig()
    for tick_count in range(30):
        tick(a, 180.0, (40.0, 40.0), tick_count, config, _noise())
        tick(b, 180.0, (40.0, 40.0), tick_count, config, _noise())
    assert np.array_equal(a.positions, b.positions)


def test_missing_audio_and_pointer_are_not_errors():
    system = _single_particle(x=105.0)
    config = SimulationConfig()
    assert tick(system, None, None, 0, config, _noise()) == 0.0
    assert tick(system, 0.0, (float("nan"), 3.0), 1, config, _noise()) == 0.0
    assert np.all(np.isfinite(system.positions))


def test_empty_system_ticks():
    force = tick(ParticleSystem.empty(), 255.0, (0.0, 0.0), 0, SimulationConfig(bass_multiplier=1.0), _noise())
    assert_close(force, constants.AUDIO_FORCE_MAX)


def test_render_size_follows_audio_force():
    system = _single_particle()
    assert_close(system[0].render_size(0.0), 5.0)
    assert_close(system[0].render_size(1.0), 10.0 * 3.3)
    assert np.allclose(system.render_sizes(2.2), 10.0 * (0.5 + 2.8 * 2.2))


def main():
    run_tests(globals())
    print("OK: integrator selftests passed")


if __name__ == "__main__":
    main()
