"""Vision package for frame capture and image encoding.

This package provides:
- SignCapture: One-shot frame capture through the camera collaborator
- ImageCodec: Downscaling and JPEG encoding for provider upload
"""

from parksense.vision.capture import FileCamera, SignCapture
from parksense.vision.codec import ImageCodec, scaled_size

__all__ = [
    "FileCamera",
    "ImageCodec",
    "SignCapture",
    "scaled_size",
]
