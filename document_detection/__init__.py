"""
Document Detection Module

Locates a photographed paper document in an image and produces a flat,
perspective-corrected rendering of it, as if it had been scanned.
"""

from .config import DEFAULT_CONFIG, ScannerConfig
from .detector import BoundaryDetector, DetectionResult, detect_boundary
from .errors import ConfigurationError, EncodingError, GeometryError, ResourceError, ScannerError
from .framing import evaluate_framing, framing_report
from .preview import PreviewResult, PreviewWorker
from .rectifier import RectifyOptions, decode_image, encode_image, rectify, rectify_image

__all__ = [
    'BoundaryDetector',
    'ConfigurationError',
    'DEFAULT_CONFIG',
    'DetectionResult',
    'EncodingError',
    'GeometryError',
    'PreviewResult',
    'PreviewWorker',
    'RectifyOptions',
    'ResourceError',
    'ScannerConfig',
    'ScannerError',
    'decode_image',
    'detect_boundary',
    'encode_image',
    'evaluate_framing',
    'framing_report',
    'rectify',
    'rectify_image',
]
