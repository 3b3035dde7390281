# image_source.py

import numpy as np
import pygame
import logging

logger = logging.getLogger("dotwave")


class SourceImage:
    """
    A decoded raster image, exposed as a flat pixel buffer.

    Data Contract:
    - width, height (int): image dimensions in pixels. Either may be 0.
    - channels (int): 3 (RGB) or 4 (RGBA).
    - pixels (np.ndarray, uint8): flat buffer of width * height * channels values;
      pixel (x, y) starts at index (x + y * width) * channels.
    """
    def __init__(self, width: int, height: int, pixels: np.ndarray, channels: int = 4):
        if channels not in (3, 4):
            raise ValueError(f"Unsupported channel count: {channels}")
        pixels = np.asarray(pixels, dtype=np.uint8).ravel()
        if pixels.shape[0] != width * height * channels:
            raise ValueError(
                f"Pixel buffer has {pixels.shape[0]} values, expected {width}x{height}x{channels}"
            )
        self.width = int(width)
        self.height = int(height)
        self.channels = channels
        self.pixels = pixels

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @classmethod
    def from_array(cls, array: np.ndarray) -> "SourceImage":
        """Wraps a (height, width, channels) array, row-major like the source raster."""
        array = np.asarray(array, dtype=np.uint8)
        if array.ndim != 3:
            raise ValueError(f"Expected a (height, width, channels) array, got shape {array.shape}")
        height, width, channels = array.shape
        return cls(width, height, array.reshape(-1), channels)

    @classmethod
    def from_surface(cls, surface: pygame.Surface) -> "SourceImage":
        width, height = surface.get_size()
        raw = pygame.image.tobytes(surface, "RGBA")
        return cls(width, height, np.frombuffer(raw, dtype=np.uint8), 4)

    @classmethod
    def load(cls, path: str):
        """
        Decodes an image file. Returns None when the file cannot be read, so the
        caller can fall back to the "nothing to render" state.
        """
        try:
            surface = pygame.image.load(path)
        except (pygame.error, FileNotFoundError) as e:
            logger.warning(f"Failed to load image '{path}': {e}")
            return None
        image = cls.from_surface(surface)
        logger.info(f"Image '{path}' loaded OK ({image.width}x{image.height}).")
        return image

    def rgb_at(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Returns an (N, 3) int array of the RGB values at the given pixel coordinates."""
        index = (np.asarray(xs, dtype=np.int64) + np.asarray(ys, dtype=np.int64) * self.width) * self.channels
        return np.stack(
            [self.pixels[index], self.pixels[index + 1], self.pixels[index + 2]], axis=1
        ).astype(np.int64)
