"""Image payloads and errors shared by capture and encoding."""

from __future__ import annotations

import base64
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image


class CapturedImage:
    """A single frame captured from the camera."""

    __slots__ = ("image", "timestamp", "width", "height")

    def __init__(
        self,
        image: Image.Image,
        timestamp: datetime,
        width: int,
        height: int,
    ) -> None:
        """Initialize a captured image.

        Args:
            image: PIL Image object.
            timestamp: When the frame was captured.
            width: Image width in pixels.
            height: Image height in pixels.
        """
        self.image = image
        self.timestamp = timestamp
        self.width = width
        self.height = height

    @classmethod
    def from_image(cls, image: Image.Image, timestamp: datetime | None = None) -> CapturedImage:
        """Wrap a PIL image, reading dimensions from it."""
        width, height = image.size
        return cls(image=image, timestamp=timestamp or datetime.now(), width=width, height=height)


class EncodedImage:
    """An encoded image ready for network transport."""

    __slots__ = ("data", "width", "height", "media_type")

    def __init__(self, data: bytes, width: int, height: int, media_type: str = "image/jpeg") -> None:
        self.data = data
        self.width = width
        self.height = height
        self.media_type = media_type

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def to_base64(self) -> str:
        """Base64-encode the payload."""
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_uri(self) -> str:
        """Render the payload as a ``data:`` URI."""
        return f"data:{self.media_type};base64,{self.to_base64()}"


class VisionError(Exception):
    """Error raised when image capture or encoding fails."""

    pass


class ImageDecodeError(VisionError):
    """Raised when image bytes cannot be decoded."""

    pass


class CaptureError(VisionError):
    """Raised when the camera cannot produce a frame."""

    pass
