"""
Framing guidance for live preview: is the document centered and sized
well enough to auto-capture?
"""

from dataclasses import dataclass

from common.geometry import Bounds, Quadrilateral, order_corners

DEFAULT_MARGIN = 30
DEFAULT_MIN_RATIO = 0.3
DEFAULT_MAX_RATIO = 0.8


@dataclass(frozen=True)
class FramingReport:
    within_margins: bool
    area_ratio: float
    well_framed: bool


def framing_report(
    corners: Quadrilateral,
    frame_width: int,
    frame_height: int,
    margin: float = DEFAULT_MARGIN,
    min_ratio: float = DEFAULT_MIN_RATIO,
    max_ratio: float = DEFAULT_MAX_RATIO
) -> FramingReport:
    ordered = order_corners(corners.points())

    safe_area = Bounds(margin, margin, frame_width - 2 * margin, frame_height - 2 * margin)
    within_margins = corners.bounds().is_inside(safe_area)

    # Cheap area estimate from the top edge width and left edge height
    top_left, top_right, _, bottom_left = ordered
    width = abs(top_right.x - top_left.x)
    height = abs(bottom_left.y - top_left.y)
    frame_area = float(frame_width) * float(frame_height)
    area_ratio = (width * height) / frame_area if frame_area > 0 else 0.0

    well_framed = within_margins and min_ratio <= area_ratio <= max_ratio

    return FramingReport(within_margins=within_margins, area_ratio=area_ratio, well_framed=well_framed)


def evaluate_framing(
    corners: Quadrilateral,
    frame_width: int,
    frame_height: int,
    margin: float = DEFAULT_MARGIN,
    min_ratio: float = DEFAULT_MIN_RATIO,
    max_ratio: float = DEFAULT_MAX_RATIO
) -> bool:
    """True when no corner is within `margin` px of the frame edge and the area ratio is in range."""
    return framing_report(corners, frame_width, frame_height, margin, min_ratio, max_ratio).well_framed
