"""
Live document framing guidance from a webcam.

Detection runs in the background; frames arriving while it is busy are
shown without waiting for a new result. Press 'q' to quit.
"""

import cv2 as cv
import numpy as np

from document_detection import PreviewWorker, ScannerConfig

GOOD_COLOR = (73, 197, 150)  # green (BGR)
BAD_COLOR = (113, 113, 248)  # red (BGR)


def renderGuidance(frame, result):
    if result is None or result.corners is None:
        return frame

    ordered = result.corners.ordered().as_array().astype(np.int32)
    color = GOOD_COLOR if result.well_framed else BAD_COLOR

    cv.polylines(frame, [ordered], True, color, 3)
    for x, y in ordered:
        cv.circle(frame, (int(x), int(y)), 8, color, -1)

    return frame


def launchRealTimeDetection(camera_index: int = 0):
    cap = cv.VideoCapture(camera_index)
    if not cap.isOpened():
        print("Camera not available.")
        return

    with PreviewWorker(ScannerConfig.from_env()) as worker:
        while(True):
            ret, frame = cap.read()
            if not ret:
                break

            # Dropped when the previous detection is still running
            worker.submit(frame)

            frame = renderGuidance(frame, worker.latest())
            cv.imshow('frame', frame)

            if cv.waitKey(10) & 0xFF == ord('q'):
                break

    cap.release()
    cv.destroyAllWindows()


if __name__ == "__main__":
    launchRealTimeDetection()
