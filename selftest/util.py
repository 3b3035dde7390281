"""Shared helpers for the selftests."""

import numpy as np

from image_source import SourceImage


def assert_close(a: float, b: float, eps: float = 1e-9):
    if abs(a - b) > eps:
        raise AssertionError(f"{a} != {b} (eps={eps})")


def quadrant_image() -> SourceImage:
    """2x2 RGB image with a distinct colour in each quadrant."""
    pixels = np.array(
        [
            [(200, 100, 50), (10, 20, 30)],
            [(0, 255, 0), (255, 255, 255)],
        ],
        dtype=np.uint8,
    )
    return SourceImage.from_array(pixels)


def solid_image(width: int, height: int, rgb=(120, 60, 240)) -> SourceImage:
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:, :] = rgb
    return SourceImage.from_array(pixels)


def run_tests(namespace: dict):
    """Calls every test_* function in a module namespace, in definition order."""
    for name, fn in list(namespace.items()):
        if name.startswith("test_") and callable(fn):
            fn()
