import copy
import logging
from typing import Any, Callable, Mapping, Optional

from custom_fonts_in_emails.core.cache import RenderCache
from custom_fonts_in_emails.core.font_catalog import FontCatalog
from custom_fonts_in_emails.core.font_resolver import FontResolver
from custom_fonts_in_emails.core.font_scanner import FontDirectoryScanner
from custom_fonts_in_emails.core.options import (
    DEFAULT_OPTIONS,
    RenderRequest,
    build_request,
    deep_merge,
    normalize_options,
)
from custom_fonts_in_emails.core.outline import OutlineFont
from custom_fonts_in_emails.core.pipeline import RenderPipeline, check_scale
from custom_fonts_in_emails.rasterizer import BaseRasterizer
from custom_fonts_in_emails.settings import Settings

logger = logging.getLogger(__name__)


class CustomFonts:
    """Render text in any font to SVG markup and image tags.

    The context owns the option defaults, the font catalog and the render
    cache shared by every call made through it.

    Example:
        >>> fonts = CustomFonts()
        >>> fonts.set_defaults({"font_color": "white"})
        >>> html = await fonts.render_raster_2x(
        ...     {"text": "Hello World", "font_name_or_path": "Georgia"}
        ... )
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        scanner: Optional[FontDirectoryScanner] = None,
        rasterizer: Optional[BaseRasterizer] = None,
        outline_loader: Optional[Callable[[str], OutlineFont]] = None,
    ) -> None:
        self.settings = settings or Settings.default()
        self.catalog = FontCatalog(self.settings, scanner)
        self.resolver = FontResolver(self.catalog)
        self.cache = RenderCache()
        self.pipeline = RenderPipeline(self.cache, rasterizer, outline_loader)
        self._defaults: dict[str, Any] = copy.deepcopy(DEFAULT_OPTIONS)

    def set_defaults(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """Merge ``options`` over the current defaults and return a copy."""
        self._defaults = deep_merge(options, self._defaults)
        logger.debug(f"Defaults updated: {sorted(options)}")
        return self.get_defaults()

    def get_defaults(self) -> dict[str, Any]:
        return copy.deepcopy(self._defaults)

    async def normalize_options(
        self, options: Optional[Mapping[str, Any]] = None
    ) -> RenderRequest:
        """Validate ``options`` and resolve the font.

        Raises:
            ValidationError: If an option is malformed.
            NotFoundError: If the font cannot be found.
        """
        normalized = normalize_options(options, self._defaults)
        font = await self.resolver.resolve(normalized["font_name_or_path"])
        return build_request(normalized, font.font_name, font.font_path)

    async def render_vector(self, options: Optional[Mapping[str, Any]] = None) -> str:
        """Render text to SVG markup."""
        request = await self.normalize_options(options)
        return await self.pipeline.render_vector(request)

    async def render_image_tag(
        self, options: Optional[Mapping[str, Any]] = None
    ) -> str:
        """Render text to an ``<img>`` tag embedding SVG markup."""
        request = await self.normalize_options(options)
        return await self.pipeline.render_image_tag(request)

    async def render_raster(
        self, options: Optional[Mapping[str, Any]] = None, scale: float = 1
    ) -> str:
        """Render text to an ``<img>`` tag embedding a PNG.

        Raises:
            TypeError: If ``scale`` is not a number.
        """
        check_scale(scale)
        request = await self.normalize_options(options)
        return await self.pipeline.render_raster(request, scale)

    async def render_raster_2x(
        self, options: Optional[Mapping[str, Any]] = None
    ) -> str:
        return await self.render_raster(options, 2)

    async def render_raster_3x(
        self, options: Optional[Mapping[str, Any]] = None
    ) -> str:
        return await self.render_raster(options, 3)

    async def resolve_closest_font_name(self, name: str) -> str:
        """Installed font name closest to ``name``."""
        return await self.resolver.closest_font_name(name)

    async def get_font_path_by_name(self, name: str) -> Optional[str]:
        return await self.catalog.get_path_by_name(name)

    async def get_font_paths_by_name(self) -> dict[str, str]:
        return await self.catalog.get_font_paths_by_name()

    async def list_font_paths(self) -> list[str]:
        return await self.catalog.get_font_paths()

    async def list_font_names(self) -> list[str]:
        return await self.catalog.get_font_names()
