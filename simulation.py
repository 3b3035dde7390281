# simulation.py

import numpy as np
import logging

import constants
import sampler
import integrator
from sim_config import InvalidConfigError, SimulationConfig
from value_noise import NoiseField
from particle_system import ParticleSystem

logger = logging.getLogger("dotwave")


class Visualizer:
    """
    Owns everything one running visualization needs between frames.

    Data Contract:
    - Inputs:
        - image (SourceImage or None): the source raster. None means "nothing to render".
        - canvas_size (tuple): the (width, height) of the drawing area.
        - config (SimulationConfig): live-tunable values, edited through the setters below.
        - rng (np.random.Generator): the master seeded RNG; builds and the noise lattice draw from it.
    - Side Effects: replaces `particles` and `layout` on every structural change.
    - Invariants: `particles` and `layout` always come from the same build; they are
      assigned together only after a build has fully completed, so a reader never
      sees a partially built set.
    """
    def __init__(self, image, canvas_size: tuple, config: SimulationConfig, rng: np.random.Generator,
                 max_particles: int = constants.MAX_PARTICLES):
        self.image = image
        self.canvas_width, self.canvas_height = self._validate_canvas(canvas_size)
        self.config = config
        self.rng = rng
        self.max_particles = max_particles
        self.noise = NoiseField(rng)

        self.tick_count = 0
        self.audio_force = 0.0
        self.particles = ParticleSystem.empty()
        self.layout = sampler.EMPTY_LAYOUT
        self.rebuild()

    @staticmethod
    def _validate_canvas(canvas_size):
        width, height = canvas_size
        if width <= 0 or height <= 0:
            raise InvalidConfigError(f"Canvas size must be positive, got {width}x{height}")
        return width, height

    @property
    def has_content(self) -> bool:
        return not self.particles.is_empty

    def rebuild(self):
        """Discards the current particle set and samples a new one from the image."""
        particles, layout = sampler.build(
            self.image, self.canvas_width, self.canvas_height, self.config.dot_size,
            rng=self.rng, max_particles=self.max_particles
        )
        self.particles, self.layout = particles, layout

    def resize(self, canvas_size: tuple):
        self.canvas_width, self.canvas_height = self._validate_canvas(canvas_size)
        logger.info(f"Canvas resized to {self.canvas_width}x{self.canvas_height}.")
        self.rebuild()

    def set_image(self, image):
        self.image = image
        self.rebuild()

    def set_dot_size(self, dot_size):
        if dot_size == self.config.dot_size:
            return
        self.config.dot_size = dot_size
        logger.info(f"Dot size set to {dot_size}.")
        self.rebuild()

    def set_bass_multiplier(self, bass_multiplier):
        # Read on the next tick; no rebuild.
        self.config.bass_multiplier = bass_multiplier
        logger.info(f"Bass multiplier set to {self.config.bass_multiplier:.2f}.")

    def set_chaos_strength(self, chaos_strength):
        self.config.chaos_strength = chaos_strength
        logger.info(f"Chaos strength set to {self.config.chaos_strength:.2f}.")

    def step(self, audio_amplitude=None, pointer=None) -> float:
        """
        Advances the particle set by one tick and returns the audio force used,
        which the renderer needs for particle sizes. With no particles the
        integration is skipped but the tick counter still advances.
        """
        self.audio_force = integrator.tick(
            self.particles, audio_amplitude, pointer, self.tick_count, self.config, self.noise
        )
        self.tick_count += 1
        return self.audio_force
