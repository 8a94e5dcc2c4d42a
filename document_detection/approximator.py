"""
Reduce a closed contour to exactly four corner points.
"""

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

DEFAULT_TOLERANCES = (0.02, 0.04, 0.06, 0.08, 0.10)

METHOD_POLYGON = 'polygon'
METHOD_HULL = 'hull'
METHOD_MIN_AREA_RECT = 'min_area_rect'


def _sweep(contour: np.ndarray, tolerances: Sequence[float]) -> Optional[np.ndarray]:
    peri = cv2.arcLength(contour, True)
    if peri <= 0:
        return None

    for tolerance in tolerances:
        approx = cv2.approxPolyDP(contour, tolerance * peri, True)
        if len(approx) == 4:
            return approx.reshape(4, 2).astype(np.float32)

    return None


def approximate_quad_with_method(
    contour: np.ndarray,
    tolerances: Sequence[float] = DEFAULT_TOLERANCES
) -> Tuple[Optional[np.ndarray], Optional[str]]:
    """
    Approximate a contour by a quadrilateral.

    Tries polygon simplification at increasing tolerances, then the same
    sweep on the convex hull (recovers shadows and folds), then falls back
    to the minimum-area rotated rectangle, which always has four corners.

    Args:
        contour: Closed contour (N x 1 x 2 or N x 2)
        tolerances: Simplification tolerances as fractions of the perimeter

    Returns:
        Tuple (quad, method): quad is a 4x2 float32 array, method one of
        'polygon', 'hull', 'min_area_rect'; (None, None) for empty contours
    """
    if contour is None or len(contour) == 0:
        return None, None

    contour = np.asarray(contour).reshape(-1, 1, 2)
    if contour.dtype not in (np.int32, np.float32):
        contour = contour.astype(np.float32)

    quad = _sweep(contour, tolerances)
    if quad is not None:
        return quad, METHOD_POLYGON

    hull = cv2.convexHull(contour)
    quad = _sweep(hull, tolerances)
    if quad is not None:
        return quad, METHOD_HULL

    rect = cv2.minAreaRect(contour.astype(np.float32))
    box = cv2.boxPoints(rect).astype(np.float32)
    return box, METHOD_MIN_AREA_RECT


def approximate_quad(contour: np.ndarray, tolerances: Sequence[float] = DEFAULT_TOLERANCES) -> Optional[np.ndarray]:
    quad, _ = approximate_quad_with_method(contour, tolerances)
    return quad


def _cross(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def inset_quad(quad: np.ndarray, distance: float) -> np.ndarray:
    """
    Move every edge of a quadrilateral inward by `distance` px.

    Each corner becomes the intersection of its two shifted neighbouring
    edges, so straight borders stay straight. Vertex order is preserved.
    The input is returned unchanged when the inset would collapse or flip
    the quadrilateral.

    Args:
        quad: 4x2 array of corner points in contour order
        distance: Inset in pixels

    Returns:
        4x2 float32 array
    """
    points = np.asarray(quad, dtype=np.float64).reshape(4, 2)
    if distance <= 0:
        return points.astype(np.float32)

    signed_area = sum(_cross(points[i], points[(i + 1) % 4]) for i in range(4)) / 2.0
    if signed_area == 0:
        return points.astype(np.float32)

    # Shifted edge i: origin + t * direction
    origins = []
    directions = []
    for i in range(4):
        direction = points[(i + 1) % 4] - points[i]
        length = np.hypot(direction[0], direction[1])
        if length == 0:
            return points.astype(np.float32)
        normal = np.array([-direction[1], direction[0]]) / length
        if signed_area < 0:
            normal = -normal
        origins.append(points[i] + normal * distance)
        directions.append(direction)

    inset = np.empty_like(points)
    for i in range(4):
        prev = (i - 1) % 4
        denominator = _cross(directions[prev], directions[i])
        if abs(denominator) < 1e-9:
            return points.astype(np.float32)
        t = _cross(origins[i] - origins[prev], directions[i]) / denominator
        inset[i] = origins[prev] + t * directions[prev]

    inset_area = sum(_cross(inset[i], inset[(i + 1) % 4]) for i in range(4)) / 2.0
    if inset_area * signed_area <= 0 or abs(inset_area) >= abs(signed_area):
        return points.astype(np.float32)

    return inset.astype(np.float32)
