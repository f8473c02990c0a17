"""Resvg-based rasterizer module.

This module provides SVG rasterization using the resvg library via resvg-py,
offering fast and accurate rendering with no external dependencies.
"""

import logging
from io import BytesIO
from typing import Union

import resvg_py
from PIL import Image

from .base_rasterizer import BaseRasterizer

logger = logging.getLogger(__name__)


class ResvgRasterizer(BaseRasterizer):
    """SVG rasterizer using resvg.

    Text is already converted to outlines before rasterization, so no font
    files are handed to resvg.

    Example:
        >>> rasterizer = ResvgRasterizer()
        >>> image = rasterizer.rasterize('<svg>...</svg>')
        >>> png = image.trim(10).resize(None, 24).encode_png()
    """

    def __init__(self, dpi: int = 0) -> None:
        """Initialize the resvg rasterizer.

        Args:
            dpi: Dots per inch for rendering. If 0 (default), uses resvg's
                default of 96 DPI.
        """
        self.dpi = dpi

    def from_string(self, svg_content: Union[str, bytes]) -> Image.Image:
        """Rasterize SVG content to a PIL Image in RGBA mode.

        Raises:
            ValueError: If the SVG content is invalid.
        """
        svg_string = (
            svg_content.decode("utf-8")
            if isinstance(svg_content, bytes)
            else svg_content
        )
        png_bytes = resvg_py.svg_to_bytes(svg_string=svg_string, dpi=int(self.dpi))
        logger.debug(f"Rasterized {len(svg_string)} bytes of SVG")
        image = Image.open(BytesIO(png_bytes))
        return self._composite_background(image)
