"""
Exceptions raised by document detection and rectification.

A document that cannot be found is not an error: detection returns None.
"""


class ScannerError(Exception):
    """Base class for all scanner failures."""


class GeometryError(ScannerError, ValueError):
    """Corners are degenerate (collinear, coincident or enclosing ~no area)."""


class EncodingError(ScannerError):
    """An image could not be encoded to, or decoded from, a byte stream."""


class ResourceError(ScannerError, MemoryError):
    """Input image is too large to process even after downscaling."""


class ConfigurationError(ScannerError, RuntimeError):
    """Scanner configuration is invalid or the image backend is unavailable."""
