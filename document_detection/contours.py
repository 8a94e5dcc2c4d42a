"""
Contour candidate extraction.

Two segmentation strategies turn a grayscale image into closed outer
contours: an edge strategy (Canny on an edge-preserving blur) and a
threshold strategy (Otsu binarization in both polarities).
"""

import logging
from typing import List, Optional

import cv2
import numpy as np

from .config import DEFAULT_CONFIG, ScannerConfig

logger = logging.getLogger(__name__)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Return a single-channel uint8 copy of a gray, BGR or BGRA image."""
    if image.ndim == 2:
        gray = image.copy()
    elif image.ndim == 3 and image.shape[2] == 1:
        gray = image[:, :, 0].copy()
    elif image.ndim == 3 and image.shape[2] == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    elif image.ndim == 3 and image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    else:
        raise ValueError(f"Unsupported image shape: {image.shape}")

    if gray.dtype != np.uint8:
        gray = cv2.normalize(gray, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

    return gray


def is_degenerate(gray: Optional[np.ndarray], config: ScannerConfig = DEFAULT_CONFIG) -> bool:
    """True for empty or near-uniform images that cannot contain a boundary."""
    if gray is None or gray.size == 0:
        return True
    return float(np.std(gray)) < config.uniform_std_threshold


def edge_contours(gray: np.ndarray, config: ScannerConfig = DEFAULT_CONFIG) -> List[np.ndarray]:
    """
    Extract outer contours of an edge map.

    Args:
        gray: Grayscale image (not modified)
        config: Scanner configuration (Canny thresholds, dilation)

    Returns:
        List of contours (N x 1 x 2 int32 arrays) in OpenCV order
    """
    if is_degenerate(gray, config):
        return []

    # Bilateral filter removes texture noise but keeps the paper border sharp
    filtered = cv2.bilateralFilter(gray, 9, 75, 75)
    edges = cv2.Canny(filtered, config.canny_low, config.canny_high)

    # Bridge small gaps in a broken boundary
    kernel = np.ones((3, 3), np.uint8)
    dilated = cv2.dilate(edges, kernel, iterations=config.dilate_iterations)

    contours, _ = cv2.findContours(dilated, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    logger.debug("Edge strategy found %d contours", len(contours))

    return list(contours)


def threshold_contours(gray: np.ndarray, config: ScannerConfig = DEFAULT_CONFIG) -> List[np.ndarray]:
    """
    Extract outer contours of Otsu-binarized images in both polarities.

    Normal polarity finds documents lighter than the background, inverted
    polarity finds darker ones. Contours of the normal mask come first.
    """
    if is_degenerate(gray, config):
        return []

    blurred = cv2.GaussianBlur(gray, (5, 5), 0)
    kernel = np.ones((5, 5), np.uint8)

    contours: List[np.ndarray] = []
    for mode in (cv2.THRESH_BINARY, cv2.THRESH_BINARY_INV):
        _, binary = cv2.threshold(blurred, 0, 255, mode + cv2.THRESH_OTSU)
        binary = cv2.morphologyEx(binary, cv2.MORPH_CLOSE, kernel, iterations=config.close_iterations)

        found, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        contours.extend(found)

    logger.debug("Threshold strategy found %d contours", len(contours))

    return contours
