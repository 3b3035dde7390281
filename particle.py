# particle.py

from constants import SIZE_BASE, SIZE_AUDIO_GAIN


class Particle:
    """
    Read-only view of one slot in a ParticleSystem.

    The system stores particles as parallel arrays; a Particle is a lightweight
    handle onto index `index` of those arrays, used by renderers and tests
    that want per-particle access. It copies nothing, so it always reflects
    the latest tick.
    """
    __slots__ = ("_system", "index")

    def __init__(self, system, index: int):
        self._system = system
        self.index = index

    @property
    def rest_position(self):
        x0, y0 = self._system.rest_positions[self.index]
        return float(x0), float(y0)

    @property
    def position(self):
        x, y = self._system.positions[self.index]
        return float(x), float(y)

    @property
    def velocity(self):
        vx, vy = self._system.velocities[self.index]
        return float(vx), float(vy)

    @property
    def color(self):
        r, g, b = self._system.colors[self.index]
        return float(r), float(g), float(b)

    @property
    def alpha(self) -> float:
        return float(self._system.alphas[self.index])

    @property
    def base_size(self) -> float:
        return float(self._system.base_sizes[self.index])

    def render_size(self, audio_force: float) -> float:
        """Size to draw at for the given audio force; derived, never stored."""
        return self.base_size * (SIZE_BASE + SIZE_AUDIO_GAIN * audio_force)

    def __repr__(self):
        x, y = self.position
        return f"Particle(index={self.index}, x={x:.2f}, y={y:.2f}, color={self.color}, alpha={self.alpha:.2f})"
