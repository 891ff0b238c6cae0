"""Gaussian grayscale noise generation & PNG encoding."""
from __future__ import annotations
import math
import os
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

# Big enough that the tiled pattern does not visibly repeat, small enough to stay cheap
CANVAS_SIZE = 256


def _open_uniform(rng, count: int) -> np.ndarray:
    """Draw ``count`` uniform samples in the open interval (0, 1)."""
    samples = np.asarray(rng.random(count), dtype=np.float64)
    zeros = samples == 0.0
    while zeros.any():
        samples[zeros] = rng.random(int(zeros.sum()))
        zeros = samples == 0.0
    return samples


def standard_normal(rng, count: int) -> np.ndarray:
    """Box-Muller transform: ``count`` samples from N(0, 1)."""
    u = _open_uniform(rng, count)
    v = _open_uniform(rng, count)
    return np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * math.pi * v)


def generate_pixels(
    width: int,
    height: int,
    mean: float,
    std_dev: float,
    opacity: int = 100,
    rng=None,
) -> np.ndarray:
    """Return a ``(height, width, 4)`` uint8 grayscale-as-RGBA noise buffer.

    Every pixel gets one Gaussian sample ``floor(Z * std_dev + mean)`` clamped
    to [0, 255] on R, G and B. Alpha is ``255 * opacity / 100``.

    ``rng`` is any object exposing ``random(n)`` (e.g. ``numpy.random.Generator``);
    an unseeded generator is used when omitted.
    """
    if rng is None:
        rng = np.random.default_rng()
    z = standard_normal(rng, width * height)
    gray = np.clip(np.floor(z * std_dev + mean), 0, 255).astype(np.uint8)
    gray = gray.reshape(height, width)
    alpha = np.full((height, width), int(round(255 * opacity / 100)), dtype=np.uint8)
    return np.stack([gray, gray, gray, alpha], axis=2)


def noise_pattern(mean: float, std_dev: float, opacity: int = 100, rng=None) -> np.ndarray:
    return generate_pixels(CANVAS_SIZE, CANVAS_SIZE, mean, std_dev, opacity=opacity, rng=rng)


def to_image(pixels: np.ndarray) -> Image.Image:
    return Image.fromarray(pixels)


def encode_png(pixels: np.ndarray, path: Union[str, os.PathLike]) -> Path:
    """Write ``pixels`` as a grayscale-with-alpha PNG at ``path``."""
    path = Path(path)
    to_image(pixels).convert("LA").save(path, format="PNG")
    return path


def load_pixels(path: Union[str, os.PathLike]) -> np.ndarray:
    """Read a PNG back as a ``(h, w, 4)`` RGBA buffer."""
    with Image.open(path) as im:
        return np.asarray(im.convert("RGBA"), dtype=np.uint8).copy()
