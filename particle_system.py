# particle_system.py

import numpy as np
import pygame
import logging

from constants import SIZE_BASE, SIZE_AUDIO_GAIN, RECT_CORNER_RADIUS
from particle import Particle

logger = logging.getLogger("dotwave")


class ParticleSystem:
    """
    Stores every particle of one build as parallel NumPy arrays (Structure of Arrays).

    Data Contract:
    - Inputs (all of length N):
        - rest_positions (N, 2): anchors the spring pulls toward.
        - positions (N, 2), velocities (N, 2): mutable per-tick state.
        - colors (N, 3) floats in [0, 255], alphas (N,) in [0.3, 1.0], base_sizes (N,), seeds (N,).
    - Outputs: None. The integrator mutates positions/velocities in place.
    - Invariants: the particle count is fixed for the lifetime of a system; a
      structural change produces a new system instead of patching this one.
      rest_positions, colors, alphas, base_sizes and seeds are frozen
      (non-writeable arrays) after construction.
    """
    def __init__(self, rest_positions, positions, velocities, colors, alphas, base_sizes, seeds):
        self.rest_positions = np.array(rest_positions, dtype=np.float64).reshape(-1, 2)
        self.num_particles = self.rest_positions.shape[0]

        self.positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
        self.velocities = np.array(velocities, dtype=np.float64).reshape(-1, 2)
        self.colors = np.array(colors, dtype=np.float64).reshape(-1, 3)
        self.alphas = np.array(alphas, dtype=np.float64).reshape(-1)
        self.base_sizes = np.array(base_sizes, dtype=np.float64).reshape(-1)
        self.seeds = np.array(seeds, dtype=np.float64).reshape(-1)

        for name in ("positions", "velocities", "colors", "alphas", "base_sizes", "seeds"):
            if getattr(self, name).shape[0] != self.num_particles:
                raise ValueError(
                    f"'{name}' has {getattr(self, name).shape[0]} entries, expected {self.num_particles}"
                )

        for frozen in (self.rest_positions, self.colors, self.alphas, self.base_sizes, self.seeds):
            frozen.flags.writeable = False

    @classmethod
    def empty(cls) -> "ParticleSystem":
        """The "nothing to render" system returned when no image is available."""
        return cls(
            np.empty((0, 2)), np.empty((0, 2)), np.empty((0, 2)),
            np.empty((0, 3)), np.empty(0), np.empty(0), np.empty(0)
        )

    @property
    def is_empty(self) -> bool:
        return self.num_particles == 0

    def __len__(self):
        return self.num_particles

    def __getitem__(self, index: int) -> Particle:
        if index < 0:
            index += self.num_particles
        if not 0 <= index < self.num_particles:
            raise IndexError(f"Particle index {index} out of range for {self.num_particles} particles")
        return Particle(self, index)

    def __iter__(self):
        for i in range(self.num_particles):
            yield Particle(self, i)

    def render_sizes(self, audio_force: float) -> np.ndarray:
        """Per-particle draw size for the current audio force."""
        return self.base_sizes * (SIZE_BASE + SIZE_AUDIO_GAIN * audio_force)

    def get_mean_displacement(self) -> float:
        """Average distance of particles from their rest positions."""
        if self.is_empty:
            return 0.0
        return float(np.mean(np.linalg.norm(self.positions - self.rest_positions, axis=1)))

    def get_total_kinetic_energy(self) -> float:
        """
        Unit-mass kinetic energy of the set, KE = sum(0.5 * v^2).
        Used as a settle diagnostic; the visualization has no notion of mass.
        """
        return float(0.5 * np.sum(self.velocities**2))

    def draw(self, screen: pygame.Surface, audio_force: float, is_glow_pass: bool):
        """
        Draws every particle as a rounded square centred on its current position.

        The glow pass uses full opacity so the bloom picks up every particle; the
        main pass uses each particle's own alpha. `screen` must be an SRCALPHA
        surface for the alpha to survive.
        """
        sizes = self.render_sizes(audio_force)
        for i in range(self.num_particles):
            size = max(1, int(round(sizes[i])))
            r, g, b = (int(round(c)) for c in self.colors[i])
            alpha = 255 if is_glow_pass else int(self.alphas[i] * 255)
            rect = pygame.Rect(0, 0, size, size)
            rect.center = (int(self.positions[i, 0]), int(self.positions[i, 1]))
            pygame.draw.rect(screen, (r, g, b, alpha), rect, border_radius=RECT_CORNER_RADIUS)
