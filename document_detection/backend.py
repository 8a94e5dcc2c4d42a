"""
Image backend readiness check.

The pipeline assumes OpenCV is importable and exposes the primitives it
uses; entry points call require_backend() to fail fast otherwise.
"""

import cv2

from .errors import ConfigurationError

REQUIRED_PRIMITIVES = (
    'cvtColor',
    'bilateralFilter',
    'GaussianBlur',
    'Canny',
    'dilate',
    'threshold',
    'morphologyEx',
    'findContours',
    'contourArea',
    'arcLength',
    'approxPolyDP',
    'convexHull',
    'minAreaRect',
    'boxPoints',
    'getPerspectiveTransform',
    'warpPerspective',
    'adaptiveThreshold',
    'imencode',
    'imdecode',
)

_ready = False


def require_backend() -> None:
    global _ready
    if _ready:
        return

    missing = [name for name in REQUIRED_PRIMITIVES if not hasattr(cv2, name)]
    if missing:
        raise ConfigurationError(f"OpenCV backend is missing primitives: {', '.join(missing)}")

    major = int(cv2.__version__.split('.')[0])
    if major < 4:
        raise ConfigurationError(f"OpenCV >= 4 is required, found {cv2.__version__}")

    _ready = True
