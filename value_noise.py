# value_noise.py

import numpy as np
import numba
import logging

from constants import NOISE_TABLE_SIZE, NOISE_OCTAVES, NOISE_FALLOFF

logger = logging.getLogger("dotwave")

# Row stride of the lattice; the y coordinate is folded into the table index.
_ROW_STRIDE_BITS = 4
_ROW_STRIDE = 1 << _ROW_STRIDE_BITS


@numba.jit(nopython=True, fastmath=True)
def _scaled_cosine(t):
    """Cosine ease used between lattice points; 0 -> 0, 1 -> 1, zero slope at both ends."""
    return 0.5 * (1.0 - np.cos(t * np.pi))


@numba.jit(nopython=True, fastmath=True)
def noise2d(x, y, table):
    """
    Smooth fractal value noise in [0, 1).

    Sums NOISE_OCTAVES octaves of cosine-interpolated lattice noise, each octave
    at double the frequency and NOISE_FALLOFF times the amplitude of the last.
    Pure: the same (x, y, table) always yields the same value. Negative
    coordinates are mirrored.
    """
    if x < 0.0:
        x = -x
    if y < 0.0:
        y = -y
    mask = table.shape[0] - 1

    xi = int(np.floor(x))
    yi = int(np.floor(y))
    xf = x - xi
    yf = y - yi

    total = 0.0
    amplitude = 0.5
    for _ in range(NOISE_OCTAVES):
        offset = xi + (yi << _ROW_STRIDE_BITS)
        sx = _scaled_cosine(xf)
        sy = _scaled_cosine(yf)

        top = table[offset & mask]
        top += sx * (table[(offset + 1) & mask] - top)
        bottom = table[(offset + _ROW_STRIDE) & mask]
        bottom += sx * (table[(offset + _ROW_STRIDE + 1) & mask] - bottom)
        total += (top + sy * (bottom - top)) * amplitude

        amplitude *= NOISE_FALLOFF
        xi <<= 1
        xf *= 2.0
        yi <<= 1
        yf *= 2.0
        if xf >= 1.0:
            xi += 1
            xf -= 1.0
        if yf >= 1.0:
            yi += 1
            yf -= 1.0
    return total


@numba.jit(nopython=True, fastmath=True)
def _sample_many_jit(xs, ys, table, out):
    for i in range(xs.shape[0]):
        out[i] = noise2d(xs[i], ys[i], table)


class NoiseField:
    """
    Seeded lattice for noise2d.

    Data Contract:
    - Inputs: rng (np.random.Generator) - drawn from once at construction.
    - Invariants: the table is never modified after construction, so sampling
      is deterministic for the lifetime of the field.
    """
    def __init__(self, rng: np.random.Generator, size: int = NOISE_TABLE_SIZE):
        if size <= 0 or size & (size - 1):
            raise ValueError(f"Noise table size must be a power of two, got {size}")
        self.table = rng.random(size)
        logger.debug(f"NoiseField created with {size} lattice values.")

    def __call__(self, x: float, y: float = 0.0) -> float:
        return noise2d(float(x), float(y), self.table)

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Vectorized sampling over matching coordinate arrays."""
        xs = np.ascontiguousarray(xs, dtype=np.float64)
        ys = np.ascontiguousarray(ys, dtype=np.float64)
        out = np.empty(xs.shape[0], dtype=np.float64)
        _sample_many_jit(xs, ys, self.table, out)
        return out
