# sampler.py

import math
import numpy as np
import logging
from collections import namedtuple

import constants
from sim_config import InvalidConfigError, validate_dot_size
from particle_system import ParticleSystem

logger = logging.getLogger("dotwave")

# Rectangle the image occupies on the canvas after fit-to-cover scaling.
# x/y may be negative: the overflow is split evenly on both sides.
Layout = namedtuple('Layout', ['x', 'y', 'width', 'height'])

EMPTY_LAYOUT = Layout(0.0, 0.0, 0.0, 0.0)


def fit_to_cover(image_width, image_height, canvas_width, canvas_height) -> Layout:
    """
    Scales the image to cover the whole canvas while preserving its aspect ratio,
    centred. One axis matches the canvas exactly; the other overflows equally
    on both sides.
    """
    image_ratio = image_width / image_height
    canvas_ratio = canvas_width / canvas_height

    if image_ratio > canvas_ratio:
        height = float(canvas_height)
        width = height * image_ratio
    else:
        width = float(canvas_width)
        height = width / image_ratio

    return Layout(
        x=(canvas_width - width) / 2,
        y=(canvas_height - height) / 2,
        width=width,
        height=height,
    )


def grid_axis(extent, step) -> np.ndarray:
    """Offsets 0, step, 2*step, ... strictly below `extent`."""
    count = max(0, math.ceil(extent / step))
    return np.arange(count, dtype=np.float64) * step


def grid_count(fit_width, fit_height, step) -> int:
    """Number of cells the grid walk visits for the given step."""
    return max(0, math.ceil(fit_width / step)) * max(0, math.ceil(fit_height / step))


def compute_step(fit_width, fit_height, dot_size, max_particles=constants.MAX_PARTICLES):
    """
    Chooses the sampling step for a fitted rectangle.

    Starts at `dot_size`. When the naive grid would exceed `max_particles`, the
    step grows by the square root of the overflow ratio, thinning both axes
    uniformly so the whole image stays evenly covered. The naive estimate
    ignores the trailing partial cell on each axis, so the step is then nudged
    up a pixel at a time until the walked grid fits under the ceiling.
    """
    if max_particles < 1:
        raise InvalidConfigError(f"max_particles must be at least 1, got {max_particles}")

    approx_cols = max(1, math.floor(fit_width / dot_size))
    approx_rows = max(1, math.floor(fit_height / dot_size))
    approx_total = approx_cols * approx_rows

    step = dot_size
    if approx_total > max_particles:
        step = math.ceil(dot_size * math.sqrt(approx_total / max_particles))

    while grid_count(fit_width, fit_height, step) > max_particles:
        step = math.floor(step) + 1

    return step


def tone_map(rgb: np.ndarray):
    """
    Applies the Y2K colour grade to an (N, 3) array of source pixels.

    Returns (colors, alphas): green is scaled by 0.6 and capped at 180, red and
    blue pass through. Channels stay unrounded floats; only drawing rounds them.
    Alpha is the mean channel value in [0, 1], clamped to [0.3, 1.0].
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    colors = np.empty((rgb.shape[0], 3), dtype=np.float64)
    colors[:, 0] = np.clip(rgb[:, 0], 0, 255)
    colors[:, 1] = np.clip(rgb[:, 1] * constants.GREEN_SCALE, 0, constants.GREEN_CAP)
    colors[:, 2] = np.clip(rgb[:, 2], 0, 255)

    alphas = np.clip(rgb.sum(axis=1) / (3 * 255), constants.ALPHA_MIN, constants.ALPHA_MAX)
    return colors, alphas


def build(image, canvas_width, canvas_height, dot_size, rng: np.random.Generator = None,
          max_particles=constants.MAX_PARTICLES):
    """
    Samples an image into a fresh particle set.

    Data Contract:
    - Inputs:
        - image (SourceImage or None): the decoded source raster.
        - canvas_width, canvas_height (positive numbers): target canvas size.
        - dot_size (positive number): requested sampling step in pixels.
        - rng (np.random.Generator): source of the initial jitter and noise seeds.
          Passing a generator seeded identically reproduces the set exactly.
        - max_particles (int): ceiling on the particle count.
    - Outputs: (ParticleSystem, Layout).
    - Side Effects: None beyond drawing from `rng`.
    - Invariants: len(result) <= max_particles. A missing or zero-sized image
      yields an empty system and EMPTY_LAYOUT.
    - Raises: InvalidConfigError for a non-positive dot size or canvas size.
    """
    validate_dot_size(dot_size)
    if canvas_width <= 0 or canvas_height <= 0:
        raise InvalidConfigError(f"Canvas size must be positive, got {canvas_width}x{canvas_height}")
    if rng is None:
        rng = np.random.default_rng()

    if image is None or image.is_empty:
        logger.warning("No source image available; returning an empty particle set.")
        return ParticleSystem.empty(), EMPTY_LAYOUT

    layout = fit_to_cover(image.width, image.height, canvas_width, canvas_height)
    step = compute_step(layout.width, layout.height, dot_size, max_particles)

    xs = grid_axis(layout.width, step)
    ys = grid_axis(layout.height, step)
    grid_y, grid_x = np.meshgrid(ys, xs, indexing='ij')
    grid_x = grid_x.ravel()
    grid_y = grid_y.ravel()
    count = grid_x.shape[0]

    source_x = np.minimum(np.floor(grid_x * image.width / layout.width).astype(np.int64), image.width - 1)
    source_y = np.minimum(np.floor(grid_y * image.height / layout.height).astype(np.int64), image.height - 1)
    colors, alphas = tone_map(image.rgb_at(source_x, source_y))

    rest_positions = np.column_stack((layout.x + grid_x, layout.y + grid_y))
    positions = rest_positions + rng.uniform(-constants.POSITION_JITTER, constants.POSITION_JITTER, (count, 2))
    velocities = rng.uniform(-constants.VELOCITY_JITTER, constants.VELOCITY_JITTER, (count, 2))
    seeds = rng.uniform(0.0, constants.NOISE_SEED_RANGE, count)
    base_sizes = np.full(count, dot_size * constants.BASE_SIZE_FACTOR, dtype=np.float64)

    system = ParticleSystem(rest_positions, positions, velocities, colors, alphas, base_sizes, seeds)

    logger.info(
        f"Built {count} particles (dot size {dot_size}, step {step}) "
        f"for a {image.width}x{image.height} image on a {canvas_width}x{canvas_height} canvas. "
        f"Layout: {layout}"
    )
    return system, layout
