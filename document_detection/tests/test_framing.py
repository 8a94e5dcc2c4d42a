"""
Tests for live framing guidance
"""

import itertools

import pytest

from common.geometry import Quadrilateral
from document_detection import evaluate_framing, framing_report

FRAME_W, FRAME_H = 640, 480


def quad(points):
    return Quadrilateral.from_points(points)


@pytest.fixture
def centered():
    # 400 x 300 = 0.39 of the frame, well inside the margins
    return [(120, 90), (520, 90), (520, 390), (120, 390)]


class TestFraming:
    def test_well_framed(self, centered):
        assert evaluate_framing(quad(centered), FRAME_W, FRAME_H)

    def test_labels_do_not_matter(self, centered):
        for permutation in itertools.permutations(centered):
            assert evaluate_framing(quad(permutation), FRAME_W, FRAME_H)

    def test_corner_in_margin(self, centered):
        points = list(centered)
        points[0] = (20, 90)
        assert not evaluate_framing(quad(points), FRAME_W, FRAME_H)

    def test_corner_outside_frame(self, centered):
        points = list(centered)
        points[2] = (700, 390)
        assert not evaluate_framing(quad(points), FRAME_W, FRAME_H)

    def test_too_small(self):
        small = [(250, 180), (390, 180), (390, 300), (250, 300)]
        report = framing_report(quad(small), FRAME_W, FRAME_H)
        assert report.within_margins
        assert report.area_ratio < 0.3
        assert not report.well_framed

    def test_too_large(self):
        # Within 30 px margins of a 640x480 frame the ratio tops out below 0.8
        large = [(35, 35), (1245, 35), (1245, 925), (35, 925)]
        report = framing_report(quad(large), 1280, 960)
        assert report.within_margins
        assert report.area_ratio > 0.8
        assert not report.well_framed

    def test_custom_margin(self, centered):
        assert not evaluate_framing(quad(centered), FRAME_W, FRAME_H, margin=100)

    @pytest.mark.parametrize('index, axis', itertools.product(range(4), (0, 1)))
    def test_monotonic_in_margin_violation(self, centered, index, axis):
        """Moving one corner towards the nearest edge flips True -> False once, never back."""
        start = centered[index][axis]
        limit = FRAME_W if axis == 0 else FRAME_H
        target = 0 if start < limit / 2 else limit
        step = -1 if target < start else 1

        results = []
        for value in range(int(start), int(target) + step, step):
            points = list(centered)
            moved = list(points[index])
            moved[axis] = value
            points[index] = tuple(moved)
            report = framing_report(quad(points), FRAME_W, FRAME_H)
            results.append(report.within_margins)

        assert results[0] is True
        assert results[-1] is False
        first_false = results.index(False)
        assert all(r is False for r in results[first_false:])

    def test_corner_on_margin_is_inside(self, centered):
        points = list(centered)
        points[0] = (30, 30)
        report = framing_report(quad(points), FRAME_W, FRAME_H)
        assert report.within_margins
