"""Rasterizer module for converting SVG markup to raster images.

This module provides the ResvgRasterizer for converting SVG documents
to raster handles using the resvg rendering engine.
"""

from .base_rasterizer import BaseRasterizer
from .resvg_rasterizer import ResvgRasterizer

__all__ = ["BaseRasterizer", "ResvgRasterizer"]
