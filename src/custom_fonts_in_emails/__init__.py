from logging import getLogger
from typing import Any, Mapping, Optional

from custom_fonts_in_emails.context import CustomFonts
from custom_fonts_in_emails.core.options import OutlineConfig, RenderRequest
from custom_fonts_in_emails.errors import (
    Constraint,
    CustomFontsError,
    NotFoundError,
    ValidationError,
)
from custom_fonts_in_emails.settings import Settings
from custom_fonts_in_emails.version import __version__ as __version__

logger = getLogger(__name__)

__all__ = [
    "Constraint",
    "CustomFonts",
    "CustomFontsError",
    "NotFoundError",
    "OutlineConfig",
    "RenderRequest",
    "Settings",
    "ValidationError",
    "get_default_context",
    "get_defaults",
    "get_font_path_by_name",
    "get_font_paths_by_name",
    "list_font_names",
    "list_font_paths",
    "normalize_options",
    "render_image_tag",
    "render_raster",
    "render_raster_2x",
    "render_raster_3x",
    "render_vector",
    "resolve_closest_font_name",
    "set_defaults",
]

_default_context: Optional[CustomFonts] = None


def get_default_context() -> CustomFonts:
    """The context used by the module-level functions, created on first use."""
    global _default_context
    if _default_context is None:
        _default_context = CustomFonts()
    return _default_context


def set_defaults(options: Mapping[str, Any]) -> dict[str, Any]:
    return get_default_context().set_defaults(options)


def get_defaults() -> dict[str, Any]:
    return get_default_context().get_defaults()


async def normalize_options(options: Optional[Mapping[str, Any]] = None) -> RenderRequest:
    return await get_default_context().normalize_options(options)


async def render_vector(options: Optional[Mapping[str, Any]] = None) -> str:
    return await get_default_context().render_vector(options)


async def render_image_tag(options: Optional[Mapping[str, Any]] = None) -> str:
    return await get_default_context().render_image_tag(options)


async def render_raster(
    options: Optional[Mapping[str, Any]] = None, scale: float = 1
) -> str:
    return await get_default_context().render_raster(options, scale)


async def render_raster_2x(options: Optional[Mapping[str, Any]] = None) -> str:
    return await get_default_context().render_raster_2x(options)


async def render_raster_3x(options: Optional[Mapping[str, Any]] = None) -> str:
    return await get_default_context().render_raster_3x(options)


async def resolve_closest_font_name(name: str) -> str:
    return await get_default_context().resolve_closest_font_name(name)


async def get_font_path_by_name(name: str) -> Optional[str]:
    return await get_default_context().get_font_path_by_name(name)


async def get_font_paths_by_name() -> dict[str, str]:
    return await get_default_context().get_font_paths_by_name()


async def list_font_paths() -> list[str]:
    return await get_default_context().list_font_paths()


async def list_font_names() -> list[str]:
    return await get_default_context().list_font_names()
