"""
Resource policy: bound image size before detection and before encoding.
"""

from typing import Tuple

import cv2
import numpy as np

from .errors import ResourceError


def downscale_to_max_dimension(image: np.ndarray, max_dimension: int) -> Tuple[np.ndarray, float]:
    """
    Shrink the image so its longest side is at most max_dimension.

    Never upscales.

    Returns:
        Tuple (image, scale) where scale maps original coordinates to the
        returned image (1.0 when the input was returned unchanged)
    """
    h, w = image.shape[:2]
    longest = max(h, w)
    if longest <= max_dimension:
        return image, 1.0

    scale = max_dimension / float(longest)
    new_size = (max(1, int(round(w * scale))), max(1, int(round(h * scale))))
    try:
        resized = cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)
    except cv2.error as e:
        raise ResourceError(f"Failed to downscale {w}x{h} image: {e}") from e

    return resized, scale


def ensure_within_limits(image: np.ndarray, max_pixels: int) -> None:
    """Reject images whose pixel count exceeds max_pixels."""
    h, w = image.shape[:2]
    if h * w > max_pixels:
        raise ResourceError(f"Image of {w}x{h} px exceeds the limit of {max_pixels} pixels")
