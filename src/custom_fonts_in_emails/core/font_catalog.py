import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

from custom_fonts_in_emails.core.font_scanner import FontDirectoryScanner
from custom_fonts_in_emails.settings import Settings

logger = logging.getLogger(__name__)

# Supported font file extensions, in resolution priority order.
FONT_EXTENSIONS: tuple[str, ...] = ("otf", "OTF", "ttf", "TTF", "woff", "WOFF")


def get_extension(path: str) -> str:
    """File extension of ``path`` without the leading dot."""
    return os.path.splitext(path)[1][1:]


def has_font_extension(path: str) -> bool:
    """Whether ``path`` ends with a supported font extension (case sensitive)."""
    return get_extension(path) in FONT_EXTENSIONS


def get_font_name(path: str) -> str:
    """Font name derived from a path: the basename without extension."""
    return os.path.splitext(os.path.basename(path))[0]


@dataclass(frozen=True)
class FontEntry:
    """A font file known to the catalog."""

    name: str
    path: str


class FontCatalog:
    """Index of installed and bundled font files.

    The catalog is built on first access by scanning the categories and
    directories named in the settings, then memoized for the lifetime of the
    catalog. Concurrent first accesses may scan redundantly; the first result
    stored is kept.

    When two files share a name, the path that sorts later wins the name
    mapping. Both files remain listed in :meth:`get_font_paths`.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        scanner: Optional[FontDirectoryScanner] = None,
    ) -> None:
        self.settings = settings or Settings.default()
        self.scanner = scanner or FontDirectoryScanner()
        self._entries: Optional[tuple[FontEntry, ...]] = None
        self._paths_by_name: Optional[dict[str, str]] = None

    async def get_entries(self) -> tuple[FontEntry, ...]:
        if self._entries is None:
            entries = await self._scan()
            if self._entries is None:
                self._entries = entries
                logger.info(f"Font catalog built with {len(entries)} font(s)")
        return self._entries

    async def get_font_paths(self) -> list[str]:
        """All supported font files, sorted by path."""
        return [entry.path for entry in await self.get_entries()]

    async def get_font_names(self) -> list[str]:
        """Font names, parallel to :meth:`get_font_paths`."""
        return [entry.name for entry in await self.get_entries()]

    async def get_font_paths_by_name(self) -> dict[str, str]:
        """Mapping of font name to path."""
        if self._paths_by_name is None:
            names, paths = await asyncio.gather(
                self.get_font_names(), self.get_font_paths()
            )
            paths_by_name = dict(zip(names, paths))
            if self._paths_by_name is None:
                self._paths_by_name = paths_by_name
        return dict(self._paths_by_name)

    async def get_path_by_name(self, name: str) -> Optional[str]:
        """Path of the font called ``name``, or None."""
        return (await self.get_font_paths_by_name()).get(name)

    async def _scan(self) -> tuple[FontEntry, ...]:
        jobs = [
            asyncio.to_thread(self.scanner.list_installed_fonts, category)
            for category in self.settings.categories
        ]
        jobs.extend(
            asyncio.to_thread(self.scanner.list_directory_fonts, directory)
            for directory in self.settings.bundled_dirs
        )
        results = await asyncio.gather(*jobs)

        paths = sorted(
            os.path.abspath(path)
            for paths in results
            for path in paths
            if has_font_extension(path)
        )
        return tuple(FontEntry(name=get_font_name(path), path=path) for path in paths)
