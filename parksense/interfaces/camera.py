"""Camera collaborator interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True)
class CameraConfig:
    """Stream constraints requested from the camera.

    Attributes:
        facing_mode: Which camera to prefer ("environment" is the rear camera).
        ideal_width: Preferred frame width in pixels.
        ideal_height: Preferred frame height in pixels.
    """

    facing_mode: str = "environment"
    ideal_width: int = 1280
    ideal_height: int = 720

    def to_constraints(self) -> dict[str, Any]:
        """Render as media-stream constraints."""
        return {
            "video": {
                "facingMode": self.facing_mode,
                "width": {"ideal": self.ideal_width},
                "height": {"ideal": self.ideal_height},
            }
        }


class Camera(ABC):
    """Abstract camera device.

    Implementations wrap a real device (or a file source in tests). The
    stream handle returned by ``start_stream`` is opaque to callers.
    """

    @abstractmethod
    def start_stream(self, config: CameraConfig) -> Any:
        """Open a video stream.

        Args:
            config: Requested stream constraints.

        Returns:
            Opaque stream handle.
        """
        ...

    @abstractmethod
    def stop_stream(self, stream: Any) -> None:
        """Release a stream opened by ``start_stream``."""
        ...

    @abstractmethod
    def capture_frame(self, stream: Any) -> Image.Image:
        """Grab the current frame from an open stream."""
        ...
