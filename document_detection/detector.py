"""
Document boundary detector.

Runs an ordered list of detection stages and returns the quadrilateral of
the first stage that produces a valid candidate:

1. edge stage: Canny contours scored with strict thresholds
2. threshold stage: Otsu contours (both polarities) scored with relaxed
   thresholds, used only when the edge stage finds nothing
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import cv2
import numpy as np

from common.geometry import Quadrilateral
from .approximator import approximate_quad_with_method, inset_quad
from .backend import require_backend
from .config import DEFAULT_CONFIG, ScannerConfig, ScoringThresholds
from .contours import edge_contours, is_degenerate, threshold_contours, to_grayscale
from .resize import downscale_to_max_dimension, ensure_within_limits
from .scoring import Candidate, is_better, score_candidate

logger = logging.getLogger(__name__)

StageFunction = Callable[[np.ndarray, ScannerConfig], Optional[Candidate]]


@dataclass(frozen=True)
class DetectionResult:
    quad: Quadrilateral
    stage: str
    candidate: Candidate


def _best_candidate(
    contours: List[np.ndarray],
    frame_shape: Tuple[int, int],
    thresholds: ScoringThresholds,
    config: ScannerConfig,
    min_contour_ratio: float = 0.0,
    inset: float = 0.0
) -> Optional[Candidate]:
    frame_h, frame_w = frame_shape
    frame_area = float(frame_w * frame_h)
    best = None

    for contour in contours:
        if min_contour_ratio > 0 and cv2.contourArea(contour) / frame_area < min_contour_ratio:
            continue

        quad, method = approximate_quad_with_method(contour, config.approx_tolerances)
        if quad is None:
            continue
        if inset > 0:
            quad = inset_quad(quad, inset)

        area = abs(cv2.contourArea(quad))
        candidate = score_candidate(quad, area, frame_w, frame_h, thresholds)
        if is_better(candidate, best):
            logger.debug(
                "New best candidate via %s: area_ratio=%.3f aspect=%.3f score=%.3f",
                method, candidate.area_ratio, candidate.aspect_ratio, candidate.score
            )
            best = candidate

    return best


def detect_edge_stage(gray: np.ndarray, config: ScannerConfig = DEFAULT_CONFIG) -> Optional[Candidate]:
    """Stage 1: edge contours, strict thresholds."""
    contours = edge_contours(gray, config)
    # Each 3x3 dilation grows the outline by one pixel on every side
    return _best_candidate(
        contours,
        gray.shape[:2],
        config.strict_thresholds(),
        config,
        inset=float(config.dilate_iterations)
    )


def detect_threshold_stage(gray: np.ndarray, config: ScannerConfig = DEFAULT_CONFIG) -> Optional[Candidate]:
    """Stage 2: Otsu contours in both polarities, relaxed thresholds."""
    contours = threshold_contours(gray, config)
    return _best_candidate(
        contours,
        gray.shape[:2],
        config.relaxed_thresholds(),
        config,
        min_contour_ratio=config.stage2_min_area_ratio
    )


DETECTION_STAGES: List[Tuple[str, StageFunction]] = [
    ('edge', detect_edge_stage),
    ('threshold', detect_threshold_stage),
]


class BoundaryDetector:
    """
    Finds the quadrilateral outlining a photographed document.

    Stateless apart from its configuration; a single instance can be
    shared between threads.
    """

    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        stages: Optional[List[Tuple[str, StageFunction]]] = None
    ):
        """
        Initialize the detector.

        Args:
            config: Scanner configuration (defaults to DEFAULT_CONFIG)
            stages: Ordered (name, stage function) pairs to try
        """
        self.config = config or DEFAULT_CONFIG
        self.stages = list(stages) if stages is not None else list(DETECTION_STAGES)

    def detect_with_details(self, image: Optional[np.ndarray]) -> Optional[DetectionResult]:
        """
        Detect the document and report which stage found it.

        Args:
            image: Input image (BGR, BGRA or grayscale); not modified

        Returns:
            DetectionResult with corners in the input image's coordinate
            space, or None if no document was found
        """
        require_backend()

        if image is None or image.size == 0:
            return None

        ensure_within_limits(image, self.config.max_input_pixels)
        working, scale = downscale_to_max_dimension(image, self.config.detection_max_dimension)
        gray = to_grayscale(working)

        if is_degenerate(gray, self.config):
            logger.debug("Skipping detection on uniform image")
            return None

        for name, stage in self.stages:
            candidate = stage(gray, self.config)
            if candidate is None:
                logger.debug("Stage '%s' found no valid candidate", name)
                continue

            quad = candidate.quad.ordered()
            if scale != 1.0:
                quad = quad.scaled(1.0 / scale)
            return DetectionResult(quad=quad, stage=name, candidate=candidate)

        return None

    def detect(self, image: Optional[np.ndarray]) -> Optional[Quadrilateral]:
        result = self.detect_with_details(image)
        return result.quad if result is not None else None


def detect_boundary(image: Optional[np.ndarray], config: Optional[ScannerConfig] = None) -> Optional[Quadrilateral]:
    """
    Locate the document in the image.

    Returns None when nothing plausible is found; callers are expected to
    fall back to the unmodified image or to manual corner placement.
    """
    return BoundaryDetector(config).detect(image)
