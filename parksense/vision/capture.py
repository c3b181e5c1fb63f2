"""Single-frame capture from the camera collaborator.

Example:
    >>> from parksense.vision.capture import SignCapture
    >>>
    >>> capture = SignCapture(camera)
    >>> frame = capture.capture()
    >>> print(f"Captured {frame.width}x{frame.height}")
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from parksense.interfaces.camera import Camera, CameraConfig
from parksense.interfaces.vision import CapturedImage, CaptureError
from parksense.vision.codec import ImageCodec

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)


class FileCamera(Camera):
    """Camera that serves a still image from disk.

    Used by the CLI and tests in place of a device. Each stream re-reads the
    file, so the same path always yields the same frame.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def start_stream(self, config: CameraConfig) -> Path:
        if not self._path.is_file():
            raise FileNotFoundError(f"Image not found: {self._path}")
        return self._path

    def stop_stream(self, stream: Any) -> None:
        pass

    def capture_frame(self, stream: Any) -> Image.Image:
        return ImageCodec.decode(Path(stream).read_bytes())


class SignCapture:
    """Open a camera stream, grab one frame, and release the stream.

    The stream is always stopped, including when the frame grab fails.
    """

    def __init__(self, camera: Camera, config: CameraConfig | None = None) -> None:
        self._camera = camera
        self._config = config or CameraConfig()

    @property
    def config(self) -> CameraConfig:
        return self._config

    def capture(self) -> CapturedImage:
        """Capture one frame.

        Returns:
            CapturedImage with the frame and its timestamp.

        Raises:
            CaptureError: If the stream cannot be opened or the frame grab fails.
        """
        try:
            stream = self._camera.start_stream(self._config)
        except Exception as e:
            raise CaptureError(f"Unable to access camera: {e}") from e

        try:
            timestamp = datetime.now()
            image = self._camera.capture_frame(stream)
        except Exception as e:
            raise CaptureError(f"Frame capture failed: {e}") from e
        finally:
            self._camera.stop_stream(stream)

        frame = CapturedImage.from_image(image, timestamp=timestamp)
        logger.debug(f"Captured frame {frame.width}x{frame.height}")
        return frame
