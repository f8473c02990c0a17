import logging
from abc import ABC, abstractmethod
from typing import Union

from PIL import Image

from custom_fonts_in_emails.image_utils import RasterImage

logger = logging.getLogger(__name__)


class BaseRasterizer(ABC):
    """Base class for SVG rasterizer implementations.

    This abstract base class defines the interface for converting SVG documents
    to raster images (PIL Image objects). Subclasses must implement the
    `from_string` method to provide the actual rasterization logic.
    """

    def rasterize(self, svg_content: Union[str, bytes]) -> RasterImage:
        """Rasterize SVG content into a raster handle for trimming and resizing.

        Args:
            svg_content: SVG content as string or bytes.

        Returns:
            RasterImage wrapping the RGBA rendering.
        """
        return RasterImage(self.from_string(svg_content))

    @abstractmethod
    def from_string(self, svg_content: Union[str, bytes]) -> Image.Image:
        """Rasterize SVG content from a string or bytes to a PIL Image.

        Args:
            svg_content: SVG content as string or bytes.

        Returns:
            PIL Image object containing the rasterized SVG.
        """
        raise NotImplementedError

    def _composite_background(self, image: Image.Image) -> Image.Image:
        """Composite image onto a transparent background to normalize alpha."""
        background = Image.new("RGBA", size=image.size, color=(255, 255, 255, 0))
        background.alpha_composite(image.convert("RGBA"))
        return background
