import json
from typing import Optional

import numpy as np

from common.geometry import Quadrilateral
from document_detection import EncodingError, decode_image


def read_image(files) -> Optional[np.ndarray]:
    """Decode the first uploaded 'file' part, or None when nothing was sent."""
    uploaded = files.getlist('file')
    if len(uploaded) == 0:
        return None

    # Uploads are decoded in memory, nothing is written to disk
    try:
        return decode_image(uploaded[0].read())
    except EncodingError as e:
        raise ValueError(f"Uploaded file is not a readable image: {e}") from e


def parse_corners(raw) -> Optional[Quadrilateral]:
    """Parse corners from a JSON string or an already decoded dict."""
    if raw is None or raw == '':
        return None

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Corners are not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ValueError("Corners must be an object with topLeft, topRight, bottomRight and bottomLeft")

    return Quadrilateral.from_dict(raw)


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')
