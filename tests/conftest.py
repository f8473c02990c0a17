import logging
import os
import shutil
import string

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from custom_fonts_in_emails import CustomFonts, Settings

logger = logging.getLogger(__name__)

# Fixture font metrics, in font units.
UNITS_PER_EM = 1000
ASCENT = 800
DESCENT = -200
ADVANCE = 500
GLYPH_TOP = 700

# Names of the fonts in the fuzzy matching catalog.
CATALOG_FONT_NAMES = ("Arial", "Arian", "Fixture", "Georgia", "Verdana")


def build_fixture_font(path: str, family: str = "Fixture") -> str:
    """Build a TrueType font where every ASCII letter is a filled box.

    Glyphs are 500 units wide, the box spans x 50-450 and y 0-700, and the
    font has an ascent of 800 and a descent of -200 units.
    """
    letters = {f"uni{ord(char):04X}": ord(char) for char in string.ascii_letters}
    glyph_order = [".notdef", "space"] + list(letters)

    glyphs = {}
    metrics = {}
    for name in glyph_order:
        pen = TTGlyphPen(None)
        if name in letters:
            pen.moveTo((50, 0))
            pen.lineTo((50, GLYPH_TOP))
            pen.lineTo((450, GLYPH_TOP))
            pen.lineTo((450, 0))
            pen.closePath()
            metrics[name] = (ADVANCE, 50)
        else:
            metrics[name] = (ADVANCE, 0)
        glyphs[name] = pen.glyph()

    cmap = dict((code, name) for name, code in letters.items())
    cmap[ord(" ")] = "space"

    builder = FontBuilder(UNITS_PER_EM, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    builder.setupCharacterMap(cmap)
    builder.setupGlyf(glyphs)
    builder.setupHorizontalMetrics(metrics)
    builder.setupHorizontalHeader(ascent=ASCENT, descent=DESCENT)
    builder.setupNameTable({"familyName": family, "styleName": "Regular"})
    builder.setupOS2(
        sTypoAscender=ASCENT,
        sTypoDescender=DESCENT,
        usWinAscent=ASCENT,
        usWinDescent=-DESCENT,
    )
    builder.setupPost()
    builder.save(path)
    return path


@pytest.fixture(scope="session")
def fixture_font(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Path of the generated fixture font."""
    directory = tmp_path_factory.mktemp("fixtures")
    return build_fixture_font(str(directory / "Fixture.ttf"))


@pytest.fixture(scope="session")
def catalog_dir(tmp_path_factory: pytest.TempPathFactory, fixture_font: str) -> str:
    """Directory with one copy of the fixture font per catalog name."""
    directory = tmp_path_factory.mktemp("catalog")
    for name in CATALOG_FONT_NAMES:
        shutil.copyfile(fixture_font, os.path.join(directory, f"{name}.ttf"))
    # Unsupported formats are ignored by the catalog.
    (directory / "README.txt").write_text("not a font")
    (directory / "Legacy.pfb").write_bytes(b"")
    return str(directory)


@pytest.fixture
def settings(catalog_dir: str) -> Settings:
    """Settings that only look at the fixture catalog."""
    return Settings(categories=(), font_dirs=(catalog_dir,), include_package_fonts=False)


@pytest.fixture
def fonts(settings: Settings) -> CustomFonts:
    """A fresh context with an empty cache."""
    return CustomFonts(settings=settings)
