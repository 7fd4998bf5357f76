"""Image decoding into RGBA pixel buffers."""

import asyncio
import io
from dataclasses import dataclass
from typing import Protocol

from PIL import Image

from local_estimation.domain.reference import PixelBuffer


class ImageDecoder(Protocol):
    """Interface for turning encoded image bytes into pixels."""

    async def decode(self, image_bytes: bytes) -> PixelBuffer:
        """Decode an encoded image (JPEG, PNG, WebP...)."""


@dataclass
class PillowImageDecoder(ImageDecoder):
    """Pillow-backed decoder that runs off the event loop."""

    async def decode(self, image_bytes: bytes) -> PixelBuffer:
        """Decode bytes to RGBA; unreadable data raises Pillow's error."""
        return await asyncio.to_thread(_decode_rgba, image_bytes)


def _decode_rgba(image_bytes: bytes) -> PixelBuffer:
    with Image.open(io.BytesIO(image_bytes)) as image:
        rgba = image.convert("RGBA")
    return PixelBuffer(width=rgba.width, height=rgba.height, data=rgba.tobytes())
