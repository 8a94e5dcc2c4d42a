"""
Shared fixtures: synthetic photographs of a document on a contrasting background.
"""

import cv2
import numpy as np
import pytest

from common.geometry import order_corners


def _render_document(width, height, corners, document_color=255, background_color=0, channels=3):
    """Fill the polygon `corners` with document_color on a background_color canvas."""
    shape = (height, width, channels) if channels > 1 else (height, width)
    image = np.full(shape, background_color, dtype=np.uint8)
    color = (document_color,) * channels if channels > 1 else document_color
    cv2.fillPoly(image, [np.array(corners, dtype=np.int32)], color)
    return image


def _assert_corners_close(detected, expected, tolerance):
    """Compare two quads after canonical ordering."""
    detected_ordered = order_corners(list(detected))
    expected_ordered = order_corners(list(expected))
    for got, want in zip(detected_ordered, expected_ordered):
        distance = got.distance_to(want)
        assert distance <= tolerance, f"Corner {got} is {distance:.1f}px from {want}"


@pytest.fixture
def rectangle_corners():
    return [(100, 100), (900, 100), (900, 1300), (100, 1300)]


@pytest.fixture
def rectangle_image(rectangle_corners):
    """1000x1400 image with a white rectangle (100,100)-(900,1300) on black."""
    image = np.zeros((1400, 1000, 3), dtype=np.uint8)
    cv2.rectangle(image, (100, 100), (900, 1300), (255, 255, 255), -1)
    return image


@pytest.fixture
def skewed_corners():
    return [(250, 200), (780, 260), (850, 1250), (150, 1150)]


@pytest.fixture
def skewed_image(skewed_corners):
    return _render_document(1000, 1400, skewed_corners)


@pytest.fixture
def blank_image():
    return np.full((1400, 1000, 3), 128, dtype=np.uint8)


@pytest.fixture
def text_document_image():
    """White page with dark 'text' lines on a dark gray background."""
    image = np.full((1400, 1000, 3), 40, dtype=np.uint8)
    cv2.rectangle(image, (100, 100), (900, 1300), (245, 245, 245), -1)
    for y in range(200, 1200, 60):
        cv2.line(image, (160, y), (840, y), (20, 20, 20), 6)
    return image


@pytest.fixture
def render_document():
    return _render_document


@pytest.fixture
def assert_corners_close():
    return _assert_corners_close
