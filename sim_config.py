# sim_config.py

import json
import math
import numbers
import logging

logger = logging.getLogger("dotwave")


class InvalidConfigError(ValueError):
    """Raised when a configuration value violates its contract (a caller bug, not a runtime condition)."""


def _finite_real(value) -> bool:
    return not isinstance(value, bool) and isinstance(value, numbers.Real) and math.isfinite(value)


def validate_dot_size(dot_size):
    if not _finite_real(dot_size) or dot_size <= 0:
        raise InvalidConfigError(f"dot_size must be a positive number of pixels, got {dot_size!r}")
    return dot_size


class SimulationConfig:
    """
    The three live-tunable values read by the sampler and the integrator.

    Data Contract:
    - dot_size (positive number): sampling density hint in pixels. Changing it
      requires a rebuild of the particle set.
    - bass_multiplier (positive float): gain on the audio force.
    - chaos_strength (non-negative float): gain on the noise force.
    - Invariants: every assignment is validated; an invalid value raises
      InvalidConfigError and leaves the previous value in place.
    """
    def __init__(self, dot_size: float = 16, bass_multiplier: float = 1.5, chaos_strength: float = 2.5):
        self.dot_size = dot_size
        self.bass_multiplier = bass_multiplier
        self.chaos_strength = chaos_strength

    @classmethod
    def from_dict(cls, section: dict) -> "SimulationConfig":
        """Builds a config from the 'simulation' section of config.json."""
        return cls(
            dot_size=section['dot_size'],
            bass_multiplier=section['bass_multiplier'],
            chaos_strength=section['chaos_strength'],
        )

    @property
    def dot_size(self):
        return self._dot_size

    @dot_size.setter
    def dot_size(self, value):
        self._dot_size = validate_dot_size(value)

    @property
    def bass_multiplier(self):
        return self._bass_multiplier

    @bass_multiplier.setter
    def bass_multiplier(self, value):
        if not _finite_real(value) or value <= 0:
            raise InvalidConfigError(f"bass_multiplier must be a positive finite number, got {value!r}")
        self._bass_multiplier = float(value)

    @property
    def chaos_strength(self):
        return self._chaos_strength

    @chaos_strength.setter
    def chaos_strength(self, value):
        if not _finite_real(value) or value < 0:
            raise InvalidConfigError(f"chaos_strength must be a non-negative finite number, got {value!r}")
        self._chaos_strength = float(value)

    def to_dict(self) -> dict:
        return {
            'dot_size': self.dot_size,
            'bass_multiplier': self.bass_multiplier,
            'chaos_strength': self.chaos_strength,
        }

    def __repr__(self):
        return (f"SimulationConfig(dot_size={self.dot_size}, "
                f"bass_multiplier={self.bass_multiplier}, chaos_strength={self.chaos_strength})")


def load_config(config_path='config.json') -> dict:
    """
    Reads the full application configuration.

    Returns the raw dictionary; callers pick the sections they own.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)
    logger.info(f"Loaded configuration from {config_path}: {config}")
    return config
