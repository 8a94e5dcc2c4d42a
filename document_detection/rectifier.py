"""
Perspective rectification of a detected document.

Maps the document quadrilateral onto a fixed A-series canvas, optionally
binarizes it to look like a flatbed scan and encodes it as image bytes.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from common.geometry import Point, Quadrilateral, order_corners, polygon_area
from .backend import require_backend
from .config import DEFAULT_CONFIG, ScannerConfig
from .contours import to_grayscale
from .errors import EncodingError, GeometryError, ResourceError

logger = logging.getLogger(__name__)

# Height / width of ISO A-series paper
A_SERIES_ASPECT = 1.414

# Fraction of the source image area below which a quad is degenerate
MIN_AREA_FRACTION = 1e-3

# Sine of the smallest angle three corners may span without counting as collinear
COLLINEAR_SINE = 0.02

Corners = Union[Quadrilateral, Sequence[Sequence[float]], np.ndarray]


@dataclass(frozen=True)
class RectifyOptions:
    target_width: int = DEFAULT_CONFIG.target_width
    enhance: bool = False
    quality: float = DEFAULT_CONFIG.quality
    image_format: str = '.jpg'

    def __post_init__(self):
        if int(self.target_width) <= 0:
            raise ValueError(f"target_width must be positive, got {self.target_width}")
        if not 0 < self.quality <= 1:
            raise ValueError(f"quality must be in (0, 1], got {self.quality}")


def canvas_size(target_width: int, max_dimension: Optional[int] = None) -> Tuple[int, int]:
    """
    Output (width, height) for the given width.

    With max_dimension set, the canvas is shrunk (aspect kept) so that its
    longest side fits.
    """
    width, height = int(target_width), int(round(target_width * A_SERIES_ASPECT))

    longest = max(width, height)
    if max_dimension is not None and longest > max_dimension:
        scale = max_dimension / float(longest)
        width, height = max(1, int(round(width * scale))), max(1, int(round(height * scale)))

    return width, height


def _as_points(corners: Corners) -> List[Point]:
    if isinstance(corners, Quadrilateral):
        return corners.points()
    array = np.asarray(corners, dtype=np.float64)
    if array.size != 8:
        raise GeometryError(f"Expected 4 corner points, got array of shape {array.shape}")
    return [Point(float(x), float(y)) for x, y in array.reshape(4, 2)]


def check_geometry(
    ordered: Sequence[Point],
    image_shape: Tuple[int, ...],
    min_area_fraction: float = MIN_AREA_FRACTION
) -> None:
    """
    Raise GeometryError if the ordered corners cannot define a stable transform.

    Args:
        ordered: Corners as [top-left, top-right, bottom-right, bottom-left]
        image_shape: Shape of the source image
        min_area_fraction: Minimum enclosed area as a fraction of the source area
    """
    coords = np.array(ordered, dtype=np.float64)
    if not np.all(np.isfinite(coords)):
        raise GeometryError("Corners contain non-finite coordinates")

    h, w = image_shape[:2]
    area = polygon_area(ordered)
    if area < min_area_fraction * h * w:
        raise GeometryError(f"Corners enclose {area:.1f} px^2, too small for a {w}x{h} image")

    for a, b, c in itertools.combinations(coords, 3):
        ab = b - a
        ac = c - a
        norms = np.linalg.norm(ab) * np.linalg.norm(ac)
        if norms == 0:
            raise GeometryError("Corners contain coincident points")
        sine = abs(ab[0] * ac[1] - ab[1] * ac[0]) / norms
        if sine < COLLINEAR_SINE:
            raise GeometryError(f"Corners {a.tolist()}, {b.tolist()}, {c.tolist()} are collinear")


def perspective_matrix(ordered: Sequence[Point], width: int, height: int) -> np.ndarray:
    """3x3 projective transform mapping the ordered corners onto a width x height canvas."""
    src = np.array(ordered, dtype=np.float32)
    dst = np.array([
        [0, 0],
        [width, 0],
        [width, height],
        [0, height],
    ], dtype=np.float32)
    return cv2.getPerspectiveTransform(src, dst)


def warp_document(
    image: np.ndarray,
    corners: Corners,
    target_width: int,
    max_dimension: Optional[int] = None
) -> np.ndarray:
    """
    Resample the document region onto a fixed-aspect canvas.

    Corner labels of the input are ignored; true roles are derived from
    the point positions. The canvas is bounded by max_dimension before
    any pixel is allocated.
    """
    ordered = order_corners(_as_points(corners))
    check_geometry(ordered, image.shape)

    width, height = canvas_size(target_width, max_dimension)
    if (width, height) != canvas_size(target_width):
        logger.debug("Canvas for width %d bounded to %dx%d", target_width, width, height)
    matrix = perspective_matrix(ordered, width, height)

    try:
        return cv2.warpPerspective(
            image,
            matrix,
            (width, height),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_REPLICATE
        )
    except cv2.error as e:
        raise ResourceError(f"Failed to warp document onto a {width}x{height} canvas: {e}") from e


def enhance_scan(image: np.ndarray, block_size: int = 11, bias: int = 2) -> np.ndarray:
    """Binarize against the local mean to imitate a flatbed scan."""
    gray = to_grayscale(image)
    return cv2.adaptiveThreshold(gray, 255, cv2.ADAPTIVE_THRESH_MEAN_C, cv2.THRESH_BINARY, block_size, bias)


def encode_image(image: np.ndarray, quality: float = 0.95, image_format: str = '.jpg') -> bytes:
    """
    Encode an image to bytes.

    Args:
        image: Pixel buffer
        quality: Quality factor in (0, 1], used for JPEG and WebP
        image_format: File extension understood by cv2.imencode

    Returns:
        Encoded image bytes
    """
    params = []
    if image_format.lower() in ('.jpg', '.jpeg'):
        params = [cv2.IMWRITE_JPEG_QUALITY, int(round(quality * 100))]
    elif image_format.lower() == '.webp':
        params = [cv2.IMWRITE_WEBP_QUALITY, int(round(quality * 100))]

    try:
        ok, buffer = cv2.imencode(image_format, image, params)
    except cv2.error as e:
        raise EncodingError(f"Failed to encode image as {image_format}: {e}") from e

    if not ok or buffer is None or buffer.size == 0:
        raise EncodingError(f"Failed to encode image as {image_format}")

    return buffer.tobytes()


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes to a BGR pixel buffer."""
    if not data:
        raise EncodingError("No image data")

    array = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(array, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise EncodingError(f"Failed to decode image: {e}") from e

    if image is None:
        raise EncodingError("Failed to decode image")

    return image


def rectify_image(
    image: np.ndarray,
    corners: Corners,
    options: Optional[RectifyOptions] = None,
    config: Optional[ScannerConfig] = None
) -> np.ndarray:
    """
    Warp (and optionally enhance) the document; returns a new pixel buffer.

    The longest side of the result never exceeds config.encode_max_dimension.
    """
    require_backend()
    options = options or RectifyOptions()
    config = config or DEFAULT_CONFIG

    if image is None or image.size == 0:
        raise GeometryError("Cannot rectify an empty image")

    warped = warp_document(image, corners, options.target_width, config.encode_max_dimension)
    if options.enhance:
        return enhance_scan(warped)
    return warped


def rectify(
    image: np.ndarray,
    corners: Corners,
    options: Optional[RectifyOptions] = None,
    config: Optional[ScannerConfig] = None
) -> bytes:
    """
    Produce the encoded, perspective-corrected document.

    Args:
        image: Source image (not modified)
        corners: Document quadrilateral in source coordinates, any labeling
        options: Output width, enhancement and quality
        config: Scanner configuration (for the encode size bound)

    Returns:
        Encoded image bytes

    Raises:
        GeometryError: corners are degenerate
        ResourceError: the canvas could not be allocated
        EncodingError: the result could not be encoded
    """
    options = options or RectifyOptions()

    result = rectify_image(image, corners, options, config)
    return encode_image(result, options.quality, options.image_format)
