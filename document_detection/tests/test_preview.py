"""
Tests for the preview worker's frame dropping
"""

import logging
import threading
import time

import numpy as np
import pytest

from common.geometry import Quadrilateral
from document_detection import PreviewWorker

TIMEOUT = 10


class BlockingDetector:
    """Detector stand-in that holds each call until released."""

    def __init__(self, corners=None, error=None):
        self.corners = corners
        self.error = error
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def detect(self, frame):
        self.calls += 1
        self.started.set()
        assert self.release.wait(TIMEOUT)
        if self.error is not None:
            raise self.error
        return self.corners


def wait_until_idle(worker):
    deadline = time.monotonic() + TIMEOUT
    while worker.busy() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert not worker.busy()


@pytest.fixture
def frame():
    return np.zeros((480, 640, 3), dtype=np.uint8)


@pytest.fixture
def centered_quad():
    return Quadrilateral.from_points([(120, 90), (520, 90), (520, 390), (120, 390)])


class TestPreviewWorker:
    def test_frames_dropped_while_busy(self, frame, centered_quad):
        detector = BlockingDetector(corners=centered_quad)
        with PreviewWorker(detector=detector) as worker:
            assert worker.submit(frame)
            assert detector.started.wait(TIMEOUT)

            assert worker.busy()
            assert not worker.submit(frame)
            assert not worker.submit(frame)

            detector.release.set()
            wait_until_idle(worker)

        assert detector.calls == 1

    def test_latest_result(self, frame, centered_quad):
        detector = BlockingDetector(corners=centered_quad)
        detector.release.set()
        with PreviewWorker(detector=detector) as worker:
            assert worker.latest() is None
            worker.submit(frame)
            wait_until_idle(worker)
            result = worker.latest()

        assert result.corners == centered_quad
        assert result.well_framed
        assert result.frame_size == (640, 480)

    def test_nothing_found(self, frame):
        detector = BlockingDetector(corners=None)
        detector.release.set()
        with PreviewWorker(detector=detector) as worker:
            worker.submit(frame)
            wait_until_idle(worker)
            result = worker.latest()

        assert result.corners is None
        assert not result.well_framed

    def test_accepts_again_after_completion(self, frame, centered_quad):
        detector = BlockingDetector(corners=centered_quad)
        detector.release.set()
        with PreviewWorker(detector=detector) as worker:
            assert worker.submit(frame)
            wait_until_idle(worker)
            assert worker.submit(frame)
            wait_until_idle(worker)

        assert detector.calls == 2

    def test_caller_may_reuse_frame_buffer(self, frame, centered_quad):
        seen = []

        class RecordingDetector:
            def detect(self, image):
                seen.append(image)
                return centered_quad

        with PreviewWorker(detector=RecordingDetector()) as worker:
            worker.submit(frame)
            wait_until_idle(worker)

        assert seen[0] is not frame

    def test_failure_is_logged_and_dropped(self, frame, centered_quad, caplog):
        detector = BlockingDetector(error=RuntimeError('camera glitch'))
        detector.release.set()
        with caplog.at_level(logging.WARNING, logger='document_detection.preview'):
            with PreviewWorker(detector=detector) as worker:
                worker.submit(frame)
                wait_until_idle(worker)
                assert worker.latest() is None
                assert worker.submit(frame)
                wait_until_idle(worker)

        assert 'camera glitch' in caplog.text

    def test_real_detector(self, rectangle_image):
        with PreviewWorker() as worker:
            worker.submit(rectangle_image)
            wait_until_idle(worker)
            result = worker.latest()

        assert result.corners is not None
        assert result.well_framed
        assert result.frame_size == (1000, 1400)
