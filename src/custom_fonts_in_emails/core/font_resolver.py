"""Resolve a font name or path to a font file.

Resolution is attempted in three tiers:

1. A path with a supported extension must point at an existing file.
2. A path without a supported extension has any other extension dropped and
   is probed with every supported extension appended; the first extension in
   priority order that exists wins.
3. Anything else is treated as a font name and matched against the catalog
   by case-insensitive edit distance.
"""

import asyncio
import logging
import os
from dataclasses import dataclass

from custom_fonts_in_emails.core.font_catalog import (
    FONT_EXTENSIONS,
    FontCatalog,
    get_font_name,
    has_font_extension,
)
from custom_fonts_in_emails.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedFont:
    font_name: str
    font_path: str


def levenshtein(a: str, b: str) -> int:
    """Minimum number of single character edits turning ``a`` into ``b``."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + (char_a != char_b),  # substitution
                )
            )
        previous = current
    return previous[-1]


def _has_separator(path: str) -> bool:
    return os.sep in path or bool(os.altsep and os.altsep in path)


class FontResolver:
    """Resolve user input to a concrete font file."""

    def __init__(self, catalog: FontCatalog) -> None:
        self.catalog = catalog

    async def resolve(self, name_or_path: str) -> ResolvedFont:
        """Resolve ``name_or_path`` to a font name and an absolute file path.

        Raises:
            NotFoundError: If no font file matches.
        """
        if has_font_extension(name_or_path):
            font_path = os.path.abspath(name_or_path)
            if not await asyncio.to_thread(os.path.isfile, font_path):
                raise NotFoundError(f"{font_path} was not a valid file")
            return ResolvedFont(get_font_name(font_path), font_path)

        # Any other extension is replaced, so "Goudy.v2" can match "Goudy.otf".
        stem = os.path.splitext(name_or_path)[0]
        font_path = await self._probe_extensions(stem)
        if font_path is not None:
            return ResolvedFont(os.path.basename(stem), font_path)

        if _has_separator(name_or_path):
            raise NotFoundError(f'`font_name_or_path` "{name_or_path}" file was not found')

        font_name = await self.closest_font_name(name_or_path)
        font_path = await self.catalog.get_path_by_name(font_name)
        if font_path is None:
            raise NotFoundError(f'"{font_name}" is missing from the font catalog')
        return ResolvedFont(font_name, font_path)

    async def closest_font_name(self, name: str) -> str:
        """Catalog name closest to ``name`` by case-insensitive edit distance.

        Ties are broken by name. A match is rejected when the distance exceeds
        half the length of ``name``.

        Raises:
            NotFoundError: If the catalog is empty or no name is close enough.
        """
        query = name.lower()
        candidates = sorted(
            (levenshtein(query, font_name.lower()), font_name)
            for font_name in await self.catalog.get_font_names()
        )
        if not candidates or candidates[0][0] > len(name) / 2:
            raise NotFoundError(f'"{name}" was not found, did you forget to install it?')
        distance, font_name = candidates[0]
        logger.debug(f"Matched '{name}' to font '{font_name}' (distance {distance})")
        return font_name

    async def _probe_extensions(self, stem: str) -> str | None:
        path = os.path.abspath(stem)
        candidates = [f"{path}.{ext}" for ext in FONT_EXTENSIONS]
        found = await asyncio.gather(
            *(asyncio.to_thread(os.path.isfile, candidate) for candidate in candidates)
        )
        # Reduce in priority order, never in completion order.
        for candidate, exists in zip(candidates, found):
            if exists:
                logger.debug(f"Resolved '{stem}' to {candidate}")
                return candidate
        return None
