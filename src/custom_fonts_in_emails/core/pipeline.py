"""Rendering stages: SVG markup, SVG image tags and PNG image tags.

Every stage consults the render cache before doing any work. Raster stages
build on the vector stage, so a raster render also fills the vector cache for
its working-scale request.
"""

import asyncio
import logging
import re
from typing import Any, Callable, Optional

from custom_fonts_in_emails import svg_utils
from custom_fonts_in_emails.core.cache import RenderCache
from custom_fonts_in_emails.core.options import (
    RenderRequest,
    round_half_up,
    to_finite_float,
)
from custom_fonts_in_emails.core.outline import OutlineFont, load_outline_font
from custom_fonts_in_emails.errors import Constraint, ValidationError
from custom_fonts_in_emails.image_utils import encode_bytes_data_uri, read_metadata
from custom_fonts_in_emails.rasterizer import BaseRasterizer, ResvgRasterizer

logger = logging.getLogger(__name__)

VECTOR = "vector"
IMAGE = "image"
RASTER = "raster"

NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))")


def check_scale(scale: Any) -> float:
    """Validate a working scale multiplier.

    Raises:
        TypeError: If ``scale`` is not a number.
        ValidationError: If ``scale`` is not greater than 0, or is not finite.
    """
    if not isinstance(scale, (int, float)) or isinstance(scale, bool):
        raise TypeError("`scale` must be a number")
    if to_finite_float(scale) is None:
        raise ValidationError("scale", Constraint.NOT_FINITE_NUMBER)
    if not scale > 0:
        raise ValidationError("scale", Constraint.NOT_POSITIVE_NUMBER)
    return scale


def raster_kind(scale: float) -> str:
    """Cache kind of a raster render, e.g. ``raster`` or ``raster@2x``."""
    if scale == 1:
        return RASTER
    return f"{RASTER}@{svg_utils.num2str(float(scale))}x"


def parse_length(value: Optional[str]) -> float:
    """Leading number of an attribute value such as ``"24"`` or ``"24px"``."""
    match = NUMBER_RE.match(value or "")
    if match is None:
        raise ValueError(f"Not a length: {value!r}")
    return float(match.group(1))


def check_drawable(markup: str) -> None:
    """Reject SVG markup that would rasterize to an empty image.

    Raises:
        ValidationError: If the width or height is below 1 pixel, e.g. for
            empty text.
    """
    svg = svg_utils.fromstring(markup)
    for key in ("width", "height"):
        value = svg_utils.get_attribute(svg, key)
        # Caller attributes such as width="auto" are left to the rasterizer.
        if NUMBER_RE.match(value or "") and parse_length(value) < 1:
            raise ValidationError("text", Constraint.EMPTY_IMAGE)


def fallback_attributes(
    text: str, height: float, font_color: str, background_color: str
) -> dict[str, str]:
    """Attributes that keep the text readable when images are not shown."""
    text = svg_utils.safe_utf8(text)
    style = (
        f"color: {font_color};"
        f"font-size: {svg_utils.num2str(height / 2)}px;"
        f"line-height: {svg_utils.num2str(height)}px;"
        "text-align: center;"
        f"background-color: {background_color};"
    )
    return {"title": text, "alt": text, "style": style}


class RenderPipeline:
    """Render requests to SVG markup and HTML image tags.

    Args:
        cache: Shared render cache.
        rasterizer: Converts SVG markup to raster images.
        outline_loader: Loads a font file into an object providing
            ``get_outline_markup(text, config)``.
    """

    def __init__(
        self,
        cache: RenderCache,
        rasterizer: Optional[BaseRasterizer] = None,
        outline_loader: Optional[Callable[[str], OutlineFont]] = None,
    ) -> None:
        self.cache = cache
        self.rasterizer = rasterizer or ResvgRasterizer()
        self.outline_loader = outline_loader or load_outline_font

    async def render_vector(self, request: RenderRequest) -> str:
        """SVG markup of the text on a background rectangle."""
        cached = self.cache.get(VECTOR, request)
        if cached is not None:
            return cached
        result = await asyncio.to_thread(self._draw_vector, request)
        self.cache.put(VECTOR, request, result)
        return result

    async def render_image_tag(self, request: RenderRequest) -> str:
        """``<img>`` tag embedding the SVG markup as a data URI."""
        cached = self.cache.get(IMAGE, request)
        if cached is not None:
            return cached

        markup = await self.render_vector(request)
        svg = svg_utils.fromstring(markup)
        width = svg_utils.get_attribute(svg, "width")
        height = svg_utils.get_attribute(svg, "height")
        src = encode_bytes_data_uri(markup.encode("utf-8"), "image/svg+xml")
        result = self._image_tag(request, width, height, src)
        self.cache.put(IMAGE, request, result)
        return result

    async def render_raster(self, request: RenderRequest, scale: float = 1) -> str:
        """``<img>`` tag embedding a PNG rendered at ``scale`` times the size.

        The tag declares the logical size, so images rendered at any scale
        display at the same size.
        """
        scale = check_scale(scale)
        kind = raster_kind(scale)
        cached = self.cache.get(kind, request)
        if cached is not None:
            return cached

        working = request.scaled(scale)
        markup = await self.render_vector(working)
        check_drawable(markup)
        png = await asyncio.to_thread(self._draw_raster, working, markup)
        metadata = read_metadata(png)
        width = round_half_up(metadata.width / scale)
        height = round_half_up(metadata.height / scale)
        logger.debug(
            f"Rendered {metadata.width}x{metadata.height} PNG "
            f"for {width}x{height} at scale {scale}"
        )
        src = encode_bytes_data_uri(png, "image/png")
        result = self._image_tag(request, width, height, src)
        self.cache.put(kind, request, result)
        return result

    def _draw_vector(self, request: RenderRequest) -> str:
        font = self.outline_loader(request.font_path)
        markup = font.get_outline_markup(request.text, request.outline.to_dict())

        svg = svg_utils.fromstring(markup)
        width = svg_utils.get_attribute(svg, "width")
        height = svg_utils.get_attribute(svg, "height")
        # Background goes first so it paints beneath the glyphs.
        rect = svg_utils.create_node(
            svg_utils.svg_tag("rect"),
            width=width,
            height=height,
            fill=request.background_color,
        )
        svg.insert(0, rect)

        rounded_width = round_half_up(parse_length(width))
        rounded_height = round_half_up(parse_length(height))
        svg_utils.set_attribute(svg, "width", rounded_width)
        svg_utils.set_attribute(svg, "height", rounded_height)
        svg.set("viewBox", svg_utils.seq2str([0, 0, rounded_width, rounded_height], " "))

        svg_utils.set_attributes(svg, request.attrs)
        return svg_utils.tostring(svg)

    def _draw_raster(self, request: RenderRequest, markup: str) -> bytes:
        image = self.rasterizer.rasterize(markup.encode("utf-8"))
        if request.trim:
            image.trim(request.trim_tolerance)
        if request.resize_to_font_size:
            image.resize(None, request.font_size)
        return image.encode_png()

    def _image_tag(
        self,
        request: RenderRequest,
        width: Any,
        height: Any,
        src: str,
    ) -> str:
        img = svg_utils.create_node("img", width=width, height=height, src=src)
        if request.supports_fallback:
            logical_height = parse_length(svg_utils.get_attribute(img, "height"))
            svg_utils.set_attributes(
                img,
                fallback_attributes(
                    request.text,
                    logical_height,
                    request.font_color,
                    request.background_color,
                ),
            )
        # Caller attributes take precedence over fallback attributes.
        svg_utils.set_attributes(img, request.attrs)
        return svg_utils.tohtml(img)
