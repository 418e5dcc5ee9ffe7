"""Camera capability used for verification photos.

The check-in flow only sees ``start() -> stream``, ``capture_frame(stream)`` and
``stop(stream)``; ``OpenCVCamera`` drives a kiosk webcam, ``UploadedFrameCamera``
wraps a frame that was captured elsewhere.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import cv2

from ..core.constants import CAMERA_HEIGHT, CAMERA_WIDTH, PHOTO_JPEG_QUALITY
from ..core.exceptions import CameraUnavailable

logger = logging.getLogger(__name__)


class Camera(Protocol):
    def start(self) -> Any:
        raise NotImplementedError

    def capture_frame(self, stream: Any) -> bytes:
        raise NotImplementedError

    def stop(self, stream: Any) -> None:
        raise NotImplementedError


class OpenCVCamera:
    def __init__(self, index: int = 0, *, width: int = CAMERA_WIDTH, height: int = CAMERA_HEIGHT):
        self._index = int(index)
        self._width = int(width)
        self._height = int(height)

    def start(self) -> "cv2.VideoCapture":
        try:
            capture = cv2.VideoCapture(self._index)
        except cv2.error as e:
            raise CameraUnavailable() from e

        if not capture.isOpened():
            capture.release()
            logger.warning("Camera %s could not be opened", self._index)
            raise CameraUnavailable()

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        return capture

    def capture_frame(self, stream: "cv2.VideoCapture") -> bytes:
        ok, frame = stream.read()
        if not ok or frame is None:
            raise CameraUnavailable("Could not read from the camera. Please try again.")

        ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), PHOTO_JPEG_QUALITY])
        if not ok:
            raise CameraUnavailable("Could not encode the captured photo.")
        return buf.tobytes()

    def stop(self, stream: "cv2.VideoCapture") -> None:
        stream.release()


class _FrameStream:
    def __init__(self, frame: bytes):
        self.frame = frame
        self.live = True


class UploadedFrameCamera:
    """A camera whose only frame is an image captured by the client."""

    def __init__(self, image_bytes: bytes):
        self._image_bytes = image_bytes
        self.open_streams = 0

    def start(self) -> _FrameStream:
        if not self._image_bytes:
            raise CameraUnavailable("No photo was received from the camera.")
        self.open_streams += 1
        return _FrameStream(self._image_bytes)

    def capture_frame(self, stream: _FrameStream) -> bytes:
        if not stream.live:
            raise CameraUnavailable("Camera stream is closed.")
        return stream.frame

    def stop(self, stream: _FrameStream) -> None:
        if stream.live:
            stream.live = False
            self.open_streams -= 1
