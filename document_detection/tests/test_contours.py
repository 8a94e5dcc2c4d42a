"""
Tests for contour candidate extraction
"""

import cv2
import numpy as np
import pytest

from document_detection.contours import edge_contours, is_degenerate, threshold_contours, to_grayscale


class TestGrayscale:
    def test_bgr(self, rectangle_image):
        gray = to_grayscale(rectangle_image)
        assert gray.shape == rectangle_image.shape[:2]
        assert gray.dtype == np.uint8

    def test_bgra(self, rectangle_image):
        bgra = cv2.cvtColor(rectangle_image, cv2.COLOR_BGR2BGRA)
        assert to_grayscale(bgra).shape == rectangle_image.shape[:2]

    def test_gray_is_copied(self):
        gray = np.zeros((10, 10), dtype=np.uint8)
        result = to_grayscale(gray)
        result[0, 0] = 255
        assert gray[0, 0] == 0

    def test_unsupported_shape(self):
        with pytest.raises(ValueError):
            to_grayscale(np.zeros((4, 4, 2), dtype=np.uint8))


class TestDegenerateInput:
    def test_empty(self):
        assert is_degenerate(np.array([], dtype=np.uint8))
        assert edge_contours(np.zeros((0, 0), dtype=np.uint8)) == []
        assert threshold_contours(np.zeros((0, 0), dtype=np.uint8)) == []

    def test_uniform(self, blank_image):
        gray = to_grayscale(blank_image)
        assert edge_contours(gray) == []
        assert threshold_contours(gray) == []

    def test_nearly_uniform(self):
        rng = np.random.default_rng(0)
        gray = (128 + rng.integers(-1, 2, size=(200, 200))).astype(np.uint8)
        assert threshold_contours(gray) == []


class TestEdgeStrategy:
    def test_finds_document_outline(self, rectangle_image):
        gray = to_grayscale(rectangle_image)
        contours = edge_contours(gray)
        assert len(contours) >= 1

        largest = max(contours, key=cv2.contourArea)
        x, y, w, h = cv2.boundingRect(largest)
        assert abs(x - 100) <= 4 and abs(y - 100) <= 4
        assert abs(w - 801) <= 8 and abs(h - 1201) <= 8

    def test_does_not_mutate_input(self, rectangle_image):
        gray = to_grayscale(rectangle_image)
        before = gray.copy()
        edge_contours(gray)
        assert np.array_equal(gray, before)


class TestThresholdStrategy:
    def test_both_polarities(self, rectangle_image):
        gray = to_grayscale(rectangle_image)
        contours = threshold_contours(gray)
        frame_area = gray.shape[0] * gray.shape[1]
        ratios = sorted(cv2.contourArea(c) / frame_area for c in contours)

        # Normal polarity: the page; inverted polarity: the whole frame
        assert any(abs(r - 800 * 1200 / frame_area) < 0.01 for r in ratios)
        assert ratios[-1] > 0.95

    def test_dark_document_on_light_background(self, render_document, rectangle_corners):
        image = render_document(1000, 1400, rectangle_corners, document_color=30, background_color=220)
        gray = to_grayscale(image)
        contours = threshold_contours(gray)
        frame_area = gray.shape[0] * gray.shape[1]
        assert any(abs(cv2.contourArea(c) / frame_area - 800 * 1200 / frame_area) < 0.01 for c in contours)

    def test_does_not_mutate_input(self, rectangle_image):
        gray = to_grayscale(rectangle_image)
        before = gray.copy()
        threshold_contours(gray)
        assert np.array_equal(gray, before)
