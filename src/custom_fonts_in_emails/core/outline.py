"""Convert a line of text to SVG path outlines using fontTools.

Glyphs are laid out on a single line using advance widths only; no shaping
or kerning is applied.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont

from custom_fonts_in_emails import svg_utils

logger = logging.getLogger(__name__)

HORIZONTAL_ANCHORS = ("left", "center", "right")
VERTICAL_ANCHORS = ("baseline", "top", "middle", "bottom")


def parse_anchor(anchor: str) -> tuple[str, str]:
    """Split an anchor like ``"left top"`` into its horizontal and vertical parts.

    Raises:
        ValueError: If the anchor is malformed.
    """
    parts = anchor.split()
    if (
        len(parts) != 2
        or parts[0] not in HORIZONTAL_ANCHORS
        or parts[1] not in VERTICAL_ANCHORS
    ):
        raise ValueError(f"Invalid anchor: {anchor!r}")
    return parts[0], parts[1]


@dataclass(frozen=True)
class TextMetrics:
    """Placement of a line of text, in pixels."""

    x: float
    y: float
    baseline: float
    width: float
    height: float
    ascender: float
    descender: float


class OutlineFont:
    """A font that renders text to SVG outlines.

    Layout options are read from a mapping with the keys ``x``, ``y``,
    ``font_size``, ``anchor`` and ``attributes`` (path attributes).
    """

    def __init__(self, font: TTFont) -> None:
        self.font = font
        self.glyph_set = font.getGlyphSet()
        self.cmap = font.getBestCmap() or {}
        self.units_per_em = font["head"].unitsPerEm
        self.ascender = font["hhea"].ascent
        self.descender = font["hhea"].descent

    def _glyph_names(self, text: str) -> list[str]:
        return [self.cmap.get(ord(char), ".notdef") for char in text]

    def _advance(self, glyph_name: str) -> float:
        if glyph_name not in self.glyph_set:
            return 0.0
        return self.glyph_set[glyph_name].width

    def get_metrics(self, text: str, config: Mapping[str, Any]) -> TextMetrics:
        """Compute the box of ``text`` anchored at ``(x, y)``."""
        scale = config["font_size"] / self.units_per_em
        horizontal, vertical = parse_anchor(config.get("anchor", "left baseline"))

        width = sum(self._advance(name) for name in self._glyph_names(text)) * scale
        ascender = self.ascender * scale
        descender = self.descender * scale
        height = ascender - descender

        x = float(config.get("x", 0))
        if horizontal == "center":
            x -= width / 2
        elif horizontal == "right":
            x -= width

        y = float(config.get("y", 0))
        if vertical == "baseline":
            y -= ascender
        elif vertical == "middle":
            y -= height / 2
        elif vertical == "bottom":
            y -= height

        return TextMetrics(
            x=x,
            y=y,
            baseline=y + ascender,
            width=width,
            height=height,
            ascender=ascender,
            descender=descender,
        )

    def get_path_data(self, text: str, config: Mapping[str, Any]) -> str:
        """SVG path data (``d`` attribute) of ``text``."""
        metrics = self.get_metrics(text, config)
        scale = config["font_size"] / self.units_per_em
        svg_pen = SVGPathPen(self.glyph_set, ntos=lambda v: svg_utils.num2str(float(v)))

        offset = metrics.x
        for glyph_name in self._glyph_names(text):
            if glyph_name not in self.glyph_set:
                logger.debug(f"Glyph '{glyph_name}' missing from font")
                continue
            # Font units are y-up; SVG is y-down.
            pen = TransformPen(svg_pen, (scale, 0, 0, -scale, offset, metrics.baseline))
            self.glyph_set[glyph_name].draw(pen)
            offset += self._advance(glyph_name) * scale
        return svg_pen.getCommands()

    def get_outline_markup(self, text: str, config: Mapping[str, Any]) -> str:
        """Standalone SVG document whose width and height fit ``text``."""
        metrics = self.get_metrics(text, config)
        svg = svg_utils.create_node(
            svg_utils.svg_tag("svg"),
            width=metrics.width,
            height=metrics.height,
        )
        path = svg_utils.create_node(svg_utils.svg_tag("path"), parent=svg)
        svg_utils.set_attributes(path, config.get("attributes", {}))
        path.set("d", self.get_path_data(text, config))
        return svg_utils.tostring(svg)


def load_outline_font(font_path: str) -> OutlineFont:
    """Load a TrueType, OpenType or WOFF font file.

    The file is read into memory and closed before parsing, so the returned
    font holds no file handle.
    """
    logger.debug(f"Loading font {font_path}")
    with open(font_path, "rb") as f:
        data = f.read()
    return OutlineFont(TTFont(io.BytesIO(data), lazy=True))
