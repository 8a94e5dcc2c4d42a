"""
Background detection for live preview.

At most one detection runs at a time; frames submitted while it is busy
are dropped rather than queued, so guidance never lags behind the camera.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from common.geometry import Quadrilateral
from .config import DEFAULT_CONFIG, ScannerConfig
from .detector import BoundaryDetector
from .framing import evaluate_framing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewResult:
    corners: Optional[Quadrilateral]
    well_framed: bool
    frame_size: Tuple[int, int]


class PreviewWorker:
    def __init__(self, config: Optional[ScannerConfig] = None, detector: Optional[BoundaryDetector] = None):
        self.config = config or DEFAULT_CONFIG
        self.detector = detector or BoundaryDetector(self.config)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='preview-detect')
        self._lock = threading.Lock()
        self._in_flight: Optional[Future] = None
        self._latest: Optional[PreviewResult] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()

    def _run(self, frame: np.ndarray) -> PreviewResult:
        h, w = frame.shape[:2]
        corners = self.detector.detect(frame)
        well_framed = corners is not None and evaluate_framing(
            corners,
            w,
            h,
            margin=self.config.framing_margin,
            min_ratio=self.config.framing_min_ratio,
            max_ratio=self.config.framing_max_ratio
        )
        return PreviewResult(corners=corners, well_framed=well_framed, frame_size=(w, h))

    def _on_done(self, future: Future):
        with self._lock:
            self._in_flight = None
            if future.cancelled():
                return
            error = future.exception()
            if error is not None:
                logger.warning("Preview detection failed: %s", error)
                return
            self._latest = future.result()

    def submit(self, frame: np.ndarray) -> bool:
        """
        Start detection on a frame unless one is already running.

        Returns:
            True if the frame was accepted, False if it was dropped
        """
        with self._lock:
            if self._in_flight is not None:
                return False
            # Copy so the caller can reuse its capture buffer
            future = self._executor.submit(self._run, frame.copy())
            self._in_flight = future

        future.add_done_callback(self._on_done)
        return True

    def busy(self) -> bool:
        with self._lock:
            return self._in_flight is not None

    def latest(self) -> Optional[PreviewResult]:
        with self._lock:
            return self._latest

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)
