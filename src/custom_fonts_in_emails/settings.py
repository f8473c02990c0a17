"""Process configuration for font discovery.

Settings can be configured via environment variables or constructor parameters.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Font directory categories, in scan precedence.
FONT_CATEGORIES: tuple[str, ...] = ("user", "local", "network", "system")

PACKAGE_FONT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fonts")


@dataclass(frozen=True)
class Settings:
    """Where the font catalog looks for fonts.

    Environment variables:
        CUSTOM_FONTS_CATEGORIES: Comma separated OS font categories to scan
            (default: user,local,network,system). An empty value disables
            scanning of installed fonts.
        CUSTOM_FONTS_PATH: Extra font directories separated by ``os.pathsep``.

    Example:
        >>> settings = Settings.default()
        >>> settings = Settings(categories=(), font_dirs=("/srv/fonts",))
    """

    categories: tuple[str, ...] = FONT_CATEGORIES
    font_dirs: tuple[str, ...] = ()
    include_package_fonts: bool = True

    def __post_init__(self) -> None:
        unknown = [c for c in self.categories if c not in FONT_CATEGORIES]
        if unknown:
            raise ValueError(
                f"Unknown font categories {unknown!r}, "
                f"expected a subset of {FONT_CATEGORIES!r}"
            )

    @classmethod
    def default(cls) -> "Settings":
        """Create Settings from environment variables.

        Raises:
            ValueError: If CUSTOM_FONTS_CATEGORIES names an unknown category.
        """
        categories_str = os.environ.get("CUSTOM_FONTS_CATEGORIES")
        if categories_str is None:
            categories = FONT_CATEGORIES
        else:
            # Keep the fixed precedence regardless of the order given.
            requested = {c.strip() for c in categories_str.split(",") if c.strip()}
            unknown = requested.difference(FONT_CATEGORIES)
            if unknown:
                raise ValueError(
                    f"Environment variable CUSTOM_FONTS_CATEGORIES={categories_str!r} "
                    f"names unknown categories {sorted(unknown)!r}"
                )
            categories = tuple(c for c in FONT_CATEGORIES if c in requested)

        path_str = os.environ.get("CUSTOM_FONTS_PATH", "")
        font_dirs = tuple(p for p in path_str.split(os.pathsep) if p)
        if font_dirs:
            logger.debug(f"Extra font directories from environment: {font_dirs}")

        return cls(categories=categories, font_dirs=font_dirs)

    @property
    def bundled_dirs(self) -> tuple[str, ...]:
        """Directories scanned in addition to the OS categories."""
        if self.include_package_fonts:
            return (PACKAGE_FONT_DIR,) + self.font_dirs
        return self.font_dirs
