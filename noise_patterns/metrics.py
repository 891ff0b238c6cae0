"""Intensity statistics for generated noise buffers."""
from __future__ import annotations
from typing import Dict

import numpy as np


def intensity_stats(pixels: np.ndarray) -> Dict[str, float]:
    """Summarize the grayscale intensity of a noise buffer.

    Accepts either a 2D intensity array or an RGBA/LA buffer (the first channel
    is used, since noise pixels carry the same value on every color channel).
    Returns:
      {
        'mean': float,
        'std_dev': float,
        'clipped': float,  # fraction of pixels sitting at 0 or 255
        'count': int,
      }
    Raises:
      ValueError for an empty buffer.
    """
    arr = np.asarray(pixels)
    if arr.ndim == 3:
        arr = arr[..., 0]
    if arr.size == 0:
        raise ValueError("Cannot compute statistics of an empty buffer")
    values = arr.astype(np.float64)
    clipped = np.count_nonzero((arr == 0) | (arr == 255))
    return {
        "mean": float(values.mean()),
        "std_dev": float(values.std()),
        "clipped": clipped / arr.size,
        "count": int(arr.size),
    }


def is_grayscale(pixels: np.ndarray) -> bool:
    """True when R, G and B carry identical values for every pixel."""
    arr = np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] < 3:
        return True
    return bool((arr[..., 0] == arr[..., 1]).all() and (arr[..., 1] == arr[..., 2]).all())


__all__ = ["intensity_stats", "is_grayscale"]
