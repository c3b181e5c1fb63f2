"""Interface definitions for ParkSense collaborators."""

from parksense.interfaces.camera import Camera, CameraConfig
from parksense.interfaces.vision import (
    CapturedImage,
    CaptureError,
    EncodedImage,
    ImageDecodeError,
    VisionError,
)

__all__ = [
    "Camera",
    "CameraConfig",
    "CapturedImage",
    "CaptureError",
    "EncodedImage",
    "ImageDecodeError",
    "VisionError",
]
