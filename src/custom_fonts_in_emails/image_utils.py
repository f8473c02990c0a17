import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageMetadata:
    """Pixel metadata of an encoded image."""

    width: int
    height: int


class RasterImage:
    """Mutable raster handle wrapping a PIL image.

    Operations are applied in place, in the order they are called, and the
    result is read back with :meth:`encode_png`.
    """

    def __init__(self, image: Image.Image) -> None:
        self.image = image.convert("RGBA") if image.mode != "RGBA" else image

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def trim(self, tolerance: float) -> "RasterImage":
        """Crop away the border that matches the top-left pixel.

        A pixel belongs to the border when every RGBA channel differs from the
        top-left pixel by at most ``tolerance`` percent of 255. The image is
        left untouched when nothing but border would remain.
        """
        pixels = np.asarray(self.image, dtype=np.int16)
        reference = pixels[0, 0]
        threshold = 255.0 * tolerance / 100.0
        mask = np.any(np.abs(pixels - reference) > threshold, axis=2)
        if not mask.any():
            logger.debug("Nothing to trim: image is uniform within tolerance")
            return self
        rows = np.flatnonzero(mask.any(axis=1))
        cols = np.flatnonzero(mask.any(axis=0))
        box = (int(cols[0]), int(rows[0]), int(cols[-1]) + 1, int(rows[-1]) + 1)
        logger.debug(f"Trimming {self.image.size} to box {box}")
        self.image = self.image.crop(box)
        return self

    def resize(self, width: Optional[int], height: Optional[int]) -> "RasterImage":
        """Resize the image; a missing side keeps the aspect ratio."""
        if width is None and height is None:
            return self
        current_width, current_height = self.image.size
        if width is None:
            assert height is not None
            width = max(1, round(current_width * height / current_height))
        elif height is None:
            height = max(1, round(current_height * width / current_width))
        if (width, height) != self.image.size:
            self.image = self.image.resize((width, height), Image.Resampling.LANCZOS)
        return self

    def encode_png(self) -> bytes:
        return encode_image(self.image, "PNG")


def encode_image(image: Image.Image, format: str = "PNG") -> bytes:
    """Encode a PIL image to bytes in the specified format."""
    with io.BytesIO() as output:
        image.save(output, format=format.upper())
        return output.getvalue()


def read_metadata(data: bytes) -> ImageMetadata:
    """Read the pixel size of encoded image data."""
    with io.BytesIO(data) as input:
        image = Image.open(input)
        return ImageMetadata(width=image.width, height=image.height)


def encode_bytes_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    base64_data = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type};base64,{base64_data}"
