"""
Candidate validation and scoring.

A candidate is accepted when its area ratio and bounding-box aspect ratio
fall inside the thresholds; accepted candidates are scored by area ratio
with a bonus for the preferred (moderate) band.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from common.geometry import Quadrilateral
from .config import RELAXED_THRESHOLDS, STRICT_THRESHOLDS, ScoringThresholds

__all__ = [
    'Candidate',
    'ScoringThresholds',
    'STRICT_THRESHOLDS',
    'RELAXED_THRESHOLDS',
    'score_candidate',
    'is_better',
]


@dataclass(frozen=True)
class Candidate:
    quad: Quadrilateral
    area_ratio: float
    aspect_ratio: float
    score: float
    valid: bool


def score_candidate(
    quad: np.ndarray,
    area: float,
    frame_width: int,
    frame_height: int,
    thresholds: ScoringThresholds = STRICT_THRESHOLDS
) -> Candidate:
    """
    Validate and score a 4-point candidate.

    Args:
        quad: 4x2 array of corner points
        area: Area enclosed by the candidate
        frame_width: Width of the frame the candidate was found in
        frame_height: Height of the frame
        thresholds: Strict or relaxed acceptance bounds

    Returns:
        Candidate; invalid candidates carry score 0.0
    """
    quadrilateral = Quadrilateral.from_array(quad)
    frame_area = float(frame_width) * float(frame_height)
    area_ratio = float(area) / frame_area if frame_area > 0 else 0.0

    bounds = quadrilateral.bounds()
    aspect_ratio = bounds.aspect_ratio()

    valid = (
        frame_area > 0
        and bounds.height > 0
        and thresholds.min_area <= area_ratio <= thresholds.max_area
        and thresholds.min_aspect <= aspect_ratio <= thresholds.max_aspect
    )

    if not valid:
        return Candidate(quadrilateral, area_ratio, aspect_ratio, 0.0, False)

    score = area_ratio
    band_low, band_high = thresholds.preferred_band
    if band_low <= area_ratio <= band_high:
        score += thresholds.preferred_bonus

    return Candidate(quadrilateral, area_ratio, aspect_ratio, score, True)


def is_better(candidate: Candidate, best: Optional[Candidate]) -> bool:
    """Strictly greater score wins; ties keep the earlier candidate."""
    if not candidate.valid:
        return False
    return best is None or candidate.score > best.score
