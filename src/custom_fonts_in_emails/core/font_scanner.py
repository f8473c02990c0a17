"""Enumerate font files installed on the system.

Installed fonts are grouped in four categories, following the usual
per-platform layout:

- ``user``: fonts installed for the current user only;
- ``local``: fonts installed for all users of the machine;
- ``network``: fonts shared over the network (macOS only);
- ``system``: fonts shipped with the operating system.
"""

import logging
import os
import sys
from typing import Optional

from custom_fonts_in_emails.settings import FONT_CATEGORIES

logger = logging.getLogger(__name__)


def _expand(*paths: str) -> list[str]:
    return [os.path.expandvars(os.path.expanduser(path)) for path in paths]


def get_font_directories(category: str, platform: Optional[str] = None) -> list[str]:
    """Directories that hold the fonts of ``category`` on ``platform``.

    Args:
        category: One of ``user``, ``local``, ``network`` or ``system``.
        platform: Value like ``sys.platform``. Defaults to the running platform.

    Raises:
        ValueError: If the category is unknown.
    """
    if category not in FONT_CATEGORIES:
        raise ValueError(f"Unknown font category: {category!r}")
    platform = platform or sys.platform

    if platform == "darwin":
        directories = {
            "user": _expand("~/Library/Fonts"),
            "local": ["/Library/Fonts"],
            "network": ["/Network/Library/Fonts"],
            "system": ["/System/Library/Fonts", "/System/Library/Fonts/Supplemental"],
        }
    elif platform == "win32":
        windir = os.environ.get("WINDIR", r"C:\Windows")
        directories = {
            "user": _expand(r"%LOCALAPPDATA%\Microsoft\Windows\Fonts"),
            "local": [],
            "network": [],
            "system": [os.path.join(windir, "Fonts")],
        }
    else:
        data_home = os.environ.get("XDG_DATA_HOME") or os.path.expanduser(
            "~/.local/share"
        )
        directories = {
            "user": _expand("~/.fonts") + [os.path.join(data_home, "fonts")],
            "local": ["/usr/local/share/fonts"],
            "network": [],
            "system": ["/usr/share/fonts"],
        }
    return directories[category]


class FontDirectoryScanner:
    """List font files by category or by directory.

    Files are reported regardless of their extension; filtering to supported
    formats is left to the catalog.
    """

    def __init__(self, platform: Optional[str] = None) -> None:
        self.platform = platform or sys.platform

    def list_installed_fonts(self, category: str) -> list[str]:
        """List font files installed in ``category``."""
        paths: list[str] = []
        for directory in get_font_directories(category, self.platform):
            paths.extend(self.list_directory_fonts(directory))
        logger.debug(f"Found {len(paths)} file(s) in '{category}' font directories")
        return paths

    def list_directory_fonts(self, directory: str) -> list[str]:
        """Recursively list the files under ``directory``.

        A missing directory yields an empty list.
        """
        if not os.path.isdir(directory):
            return []
        paths = []
        for root, _, files in os.walk(directory):
            for filename in files:
                paths.append(os.path.join(root, filename))
        return paths
