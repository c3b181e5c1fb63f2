"""Image optimization for provider upload.

Captured frames are downscaled to a bounded width and re-encoded as JPEG
before they are embedded in an analysis request.

Example:
    >>> from parksense.vision.codec import ImageCodec
    >>>
    >>> codec = ImageCodec()
    >>> encoded = codec.optimize(frame, max_width=1024, quality=0.8)
    >>> print(f"{encoded.width}x{encoded.height}, {encoded.size_bytes} bytes")
"""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from parksense.interfaces.vision import CapturedImage, EncodedImage, ImageDecodeError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 1024
DEFAULT_QUALITY = 0.8


def scaled_size(width: int, height: int, max_width: int) -> tuple[int, int]:
    """Compute dimensions that fit ``max_width`` while keeping aspect ratio.

    Args:
        width: Source width in pixels.
        height: Source height in pixels.
        max_width: Largest allowed width.

    Returns:
        (width, height) tuple. Unchanged if already narrow enough.
    """
    if width <= max_width:
        return width, height
    new_height = max(1, round(height * max_width / width))
    return max_width, new_height


def _check_max_width(max_width: int) -> int:
    if max_width < 1:
        raise ValueError(f"max_width must be positive, got {max_width}")
    return max_width


class ImageCodec:
    """Downscale and JPEG-encode images for network transport."""

    def __init__(
        self,
        max_width: int = DEFAULT_MAX_WIDTH,
        quality: float = DEFAULT_QUALITY,
    ) -> None:
        """Initialize the codec.

        Args:
            max_width: Default maximum output width.
            quality: Default lossy quality in [0, 1].
        """
        self._max_width = _check_max_width(max_width)
        self._quality = quality

    @staticmethod
    def decode(data: bytes) -> Image.Image:
        """Decode encoded image bytes into a PIL image.

        Raises:
            ImageDecodeError: If the bytes are not a readable image.
        """
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Failed to decode image: {e}") from e
        return image

    @staticmethod
    def _jpeg_quality(quality: float) -> int:
        # Pillow JPEG quality above 95 only grows the file.
        return min(95, max(1, round(quality * 100)))

    def optimize(
        self,
        image: Image.Image | CapturedImage | bytes,
        max_width: int | None = None,
        quality: float | None = None,
    ) -> EncodedImage:
        """Resize an image to at most ``max_width`` and re-encode it as JPEG.

        Args:
            image: PIL image, captured frame, or encoded bytes.
            max_width: Maximum output width. Defaults to the codec setting.
            quality: Lossy quality in [0, 1]. Defaults to the codec setting.

        Returns:
            EncodedImage with JPEG bytes and final dimensions.

        Raises:
            ImageDecodeError: If ``image`` is bytes that cannot be decoded.
            ValueError: If ``max_width`` is not positive.
        """
        max_width = self._max_width if max_width is None else _check_max_width(max_width)
        quality = self._quality if quality is None else quality

        if isinstance(image, bytes):
            pil_image = self.decode(image)
        elif isinstance(image, CapturedImage):
            pil_image = image.image
        else:
            pil_image = image

        source_width, source_height = pil_image.size
        width, height = scaled_size(source_width, source_height, max_width)
        if (width, height) != (source_width, source_height):
            pil_image = pil_image.resize((width, height), Image.Resampling.LANCZOS)

        if pil_image.mode != "RGB":
            pil_image = pil_image.convert("RGB")

        buffer = io.BytesIO()
        pil_image.save(buffer, format="JPEG", quality=self._jpeg_quality(quality))
        encoded = EncodedImage(data=buffer.getvalue(), width=width, height=height)

        logger.debug(
            f"Optimized image {source_width}x{source_height} -> {width}x{height} "
            f"({encoded.size_bytes} bytes)"
        )
        return encoded
