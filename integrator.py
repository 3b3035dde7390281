# integrator.py

import math
import numpy as np
import numba
import logging

from constants import (
    AUDIO_INPUT_MAX, AUDIO_FORCE_MAX, NOISE_TIME_SCALE, NOISE_Y_OFFSET, NOISE_GAIN,
    SPRING_STIFFNESS, MOUSE_RADIUS, MOUSE_FORCE, DISTANCE_EPSILON, DAMPING,
)
from value_noise import noise2d

logger = logging.getLogger("dotwave")

# --- JIT-Compiled Force Functions ---
# Kept outside any class and restricted to arrays and scalars so Numba can
# compile them in nopython mode. Particles never read each other's state, so
# the per-particle loop has no ordering dependency.

@numba.jit(nopython=True, fastmath=True)
def repulsion_push(distance, audio_force):
    """
    Magnitude of the pointer push at `distance` from the pointer.

    Falls linearly from MOUSE_FORCE * (1 + audio_force) next to the pointer to
    zero at MOUSE_RADIUS. The epsilon keeps the later division finite when the
    pointer sits exactly on a particle.
    """
    d = distance + DISTANCE_EPSILON
    if d >= MOUSE_RADIUS:
        return 0.0
    return (1.0 - d / MOUSE_RADIUS) * MOUSE_FORCE * (1.0 + audio_force)


@numba.jit(nopython=True, fastmath=True)
def pointer_force(dx, dy, audio_force):
    """Repulsion (fx, fy) on a particle offset (dx, dy) from the pointer."""
    distance = np.sqrt(dx * dx + dy * dy)
    push = repulsion_push(distance, audio_force)
    if push == 0.0:
        return 0.0, 0.0
    d = distance + DISTANCE_EPSILON
    return (dx / d) * push, (dy / d) * push


@numba.jit(nopython=True, fastmath=True)
def _tick_jit(rest_positions, positions, velocities, seeds, noise_table, t,
              audio_force, chaos_strength, has_pointer, pointer_x, pointer_y):
    """
    Advances every particle by one tick, in place.
    Semi-implicit Euler: v = (v + F) * damping, then p += v.
    """
    noise_gain = chaos_strength * NOISE_GAIN
    k = SPRING_STIFFNESS * (1.0 + audio_force)

    for i in range(positions.shape[0]):
        x = positions[i, 0]
        y = positions[i, 1]
        seed = seeds[i]

        fx = (rest_positions[i, 0] - x) * k + (noise2d(seed + t, 0.0, noise_table) - 0.5) * noise_gain
        fy = (rest_positions[i, 1] - y) * k + (noise2d(seed + NOISE_Y_OFFSET + t, 0.0, noise_table) - 0.5) * noise_gain

        if has_pointer:
            px, py = pointer_force(x - pointer_x, y - pointer_y, audio_force)
            fx += px
            fy += py

        vx = (velocities[i, 0] + fx) * DAMPING
        vy = (velocities[i, 1] + fy) * DAMPING
        velocities[i, 0] = vx
        velocities[i, 1] = vy
        positions[i, 0] = x + vx
        positions[i, 1] = y + vy


def audio_force(audio_amplitude, bass_multiplier) -> float:
    """
    Maps a bass energy sample onto the bounded audio force.

    amplitude * multiplier is clamped to [0, 255 * multiplier] and mapped
    linearly onto [0, AUDIO_FORCE_MAX]. A missing or non-finite sample counts
    as silence.
    """
    if audio_amplitude is None or not math.isfinite(audio_amplitude):
        return 0.0
    span = AUDIO_INPUT_MAX * bass_multiplier
    if span <= 0:
        return 0.0
    driven = min(max(audio_amplitude * bass_multiplier, 0.0), span)
    return driven / span * AUDIO_FORCE_MAX


def noise_time(tick_count) -> float:
    return tick_count * NOISE_TIME_SCALE


def tick(particle_system, audio_amplitude, pointer, tick_count, config, noise) -> float:
    """
    Runs one simulation step over the whole particle set.

    Data Contract:
    - Inputs:
        - particle_system (ParticleSystem): mutated in place (positions, velocities).
        - audio_amplitude (float or None): bass energy, nominally 0-255. None = no audio.
        - pointer ((x, y) or None): pointer in canvas space, None when absent.
        - tick_count (int): monotonic frame counter, drives the noise time.
        - config (SimulationConfig): bass_multiplier and chaos_strength are read.
        - noise (NoiseField): lattice shared by all particles.
    - Outputs: the audio force used this tick, so renderers can size particles.
    - Invariants: rest positions are never written. Never raises for validated inputs.
    """
    force = audio_force(audio_amplitude, config.bass_multiplier)
    if particle_system.is_empty:
        return force

    has_pointer = False
    pointer_x = pointer_y = 0.0
    if pointer is not None:
        pointer_x, pointer_y = float(pointer[0]), float(pointer[1])
        has_pointer = math.isfinite(pointer_x) and math.isfinite(pointer_y)

    _tick_jit(
        particle_system.rest_positions,
        particle_system.positions,
        particle_system.velocities,
        particle_system.seeds,
        noise.table,
        noise_time(tick_count),
        force,
        config.chaos_strength,
        has_pointer,
        pointer_x,
        pointer_y,
    )
    return force
