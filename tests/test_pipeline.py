"""End-to-end rendering tests using the fixture font."""

import asyncio
import base64
import re
from typing import Any
from unittest.mock import MagicMock

import pytest

from custom_fonts_in_emails import (
    CustomFonts,
    NotFoundError,
    Settings,
    ValidationError,
    svg_utils,
)
from custom_fonts_in_emails.core.cache import RenderCache
from custom_fonts_in_emails.core.outline import load_outline_font
from custom_fonts_in_emails.core.pipeline import (
    check_drawable,
    check_scale,
    fallback_attributes,
    parse_length,
    raster_kind,
)
from custom_fonts_in_emails.errors import Constraint
from custom_fonts_in_emails.image_utils import read_metadata
from custom_fonts_in_emails.rasterizer import ResvgRasterizer

IMG_ATTR_RE = re.compile(r'([\w-]+)="([^"]*)"')


def parse_img(tag: str) -> dict[str, str]:
    assert tag.startswith("<img ")
    return dict(IMG_ATTR_RE.findall(tag))


def decode_src(src: str) -> tuple[str, bytes]:
    header, data = src.split(",", 1)
    assert header.endswith(";base64")
    return header[len("data:") : -len(";base64")], base64.b64decode(data)


@pytest.fixture
def options(fixture_font: str) -> dict[str, Any]:
    return {"text": "Hello World", "font_name_or_path": fixture_font}


class TestHelpers:
    """Tests for pipeline helper functions."""

    @pytest.mark.parametrize(
        "scale, expected",
        [(1, "raster"), (2, "raster@2x"), (3, "raster@3x"), (1.5, "raster@1.5x")],
    )
    def test_raster_kind(self, scale: float, expected: str) -> None:
        assert raster_kind(scale) == expected

    @pytest.mark.parametrize("value, expected", [("24", 24), ("24px", 24), ("7.5", 7.5)])
    def test_parse_length(self, value: str, expected: float) -> None:
        assert parse_length(value) == expected

    def test_parse_length_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_length("auto")

    def test_fallback_attributes(self) -> None:
        attrs = fallback_attributes("Hi", 24, "red", "white")
        assert attrs == {
            "title": "Hi",
            "alt": "Hi",
            "style": (
                "color: red;font-size: 12px;line-height: 24px;"
                "text-align: center;background-color: white;"
            ),
        }

    @pytest.mark.parametrize("scale", ["foo", None, True, [2]])
    def test_check_scale_type(self, scale: Any) -> None:
        with pytest.raises(TypeError):
            check_scale(scale)

    @pytest.mark.parametrize("scale", [0, -1, -0.5])
    def test_check_scale_positive(self, scale: Any) -> None:
        with pytest.raises(ValidationError):
            check_scale(scale)

    @pytest.mark.parametrize("scale", [float("inf"), float("nan"), 10**400])
    def test_check_scale_finite(self, scale: Any) -> None:
        """Infinities, NaN and ints too large for a float are rejected."""
        with pytest.raises(ValidationError) as excinfo:
            check_scale(scale)
        assert excinfo.value.field == "scale"
        assert excinfo.value.constraint is Constraint.NOT_FINITE_NUMBER

    def test_check_drawable(self) -> None:
        check_drawable('<svg xmlns="http://www.w3.org/2000/svg" width="1" height="24"/>')
        with pytest.raises(ValidationError) as excinfo:
            check_drawable(
                '<svg xmlns="http://www.w3.org/2000/svg" width="0" height="24"/>'
            )
        assert excinfo.value.field == "text"
        assert excinfo.value.constraint is Constraint.EMPTY_IMAGE


class TestRenderVector:
    """Tests for CustomFonts.render_vector."""

    @pytest.mark.asyncio
    async def test_markup(self, fonts: CustomFonts, options: dict[str, Any]) -> None:
        markup = await fonts.render_vector(options)
        svg = svg_utils.fromstring(markup)
        assert svg.tag == svg_utils.svg_tag("svg")
        assert svg.get("width") == "132"
        assert svg.get("height") == "24"
        assert svg.get("viewBox") == "0 0 132 24"

        rect, path = list(svg)
        assert rect.tag == svg_utils.svg_tag("rect")
        assert rect.get("fill") == "transparent"
        assert path.tag == svg_utils.svg_tag("path")
        assert path.get("fill") == "#000"
        assert path.get("stroke") == "none"
        assert path.get("d")

    @pytest.mark.asyncio
    async def test_colors(self, fonts: CustomFonts, options: dict[str, Any]) -> None:
        markup = await fonts.render_vector(
            {**options, "font_color": "red", "background_color": "#fff"}
        )
        rect, path = list(svg_utils.fromstring(markup))
        assert rect.get("fill") == "#fff"
        assert path.get("fill") == "red"

    @pytest.mark.asyncio
    async def test_dimensions_rounded(
        self, fonts: CustomFonts, fixture_font: str
    ) -> None:
        markup = await fonts.render_vector(
            {"text": "H", "font_name_or_path": fixture_font, "font_size": 15}
        )
        svg = svg_utils.fromstring(markup)
        assert svg.get("width") == "8"
        assert svg.get("height") == "15"
        # The background keeps the unrounded size.
        assert svg[0].get("width") == "7.5"

    @pytest.mark.asyncio
    async def test_caller_attrs(self, fonts: CustomFonts, options: dict[str, Any]) -> None:
        markup = await fonts.render_vector(
            {**options, "attrs": {"foo": "bar", "width": 200}}
        )
        svg = svg_utils.fromstring(markup)
        assert svg.get("foo") == "bar"
        assert svg.get("width") == "200"

    @pytest.mark.asyncio
    async def test_fuzzy_font_name(self, fonts: CustomFonts) -> None:
        markup = await fonts.render_vector({"text": "Hi", "font_name_or_path": "Gorgia"})
        assert svg_utils.fromstring(markup).get("width") == "24"

    @pytest.mark.asyncio
    async def test_missing_font(self, fonts: CustomFonts) -> None:
        with pytest.raises(NotFoundError):
            await fonts.render_vector({"text": "Hi", "font_name_or_path": "Zzzzzzzzzz"})


class TestRenderImageTag:
    """Tests for CustomFonts.render_image_tag."""

    @pytest.mark.asyncio
    async def test_tag(self, fonts: CustomFonts, options: dict[str, Any]) -> None:
        tag = await fonts.render_image_tag(options)
        attrs = parse_img(tag)
        assert attrs["width"] == "132"
        assert attrs["height"] == "24"
        assert attrs["alt"] == "Hello World"
        assert attrs["title"] == "Hello World"
        assert "font-size: 12px;line-height: 24px;" in attrs["style"]

        mime, data = decode_src(attrs["src"])
        assert mime == "image/svg+xml"
        assert data.decode("utf-8") == await fonts.render_vector(options)

    @pytest.mark.asyncio
    async def test_no_fallback(self, fonts: CustomFonts, options: dict[str, Any]) -> None:
        attrs = parse_img(
            await fonts.render_image_tag({**options, "supports_fallback": False})
        )
        assert "alt" not in attrs
        assert "title" not in attrs
        assert "style" not in attrs

    @pytest.mark.asyncio
    async def test_caller_attrs_win(
        self, fonts: CustomFonts, options: dict[str, Any]
    ) -> None:
        attrs = parse_img(
            await fonts.render_image_tag(
                {**options, "attrs": {"style": "border: 0", "class": "title"}}
            )
        )
        assert attrs["style"] == "border: 0"
        assert attrs["class"] == "title"
        assert attrs["alt"] == "Hello World"


class TestRenderRaster:
    """Tests for CustomFonts.render_raster."""

    @pytest.mark.asyncio
    async def test_png(self, fonts: CustomFonts, options: dict[str, Any]) -> None:
        attrs = parse_img(await fonts.render_raster(options))
        assert attrs["width"] == "132"
        assert attrs["height"] == "24"
        mime, data = decode_src(attrs["src"])
        assert mime == "image/png"
        assert data.startswith(b"\x89PNG")
        metadata = read_metadata(data)
        assert (metadata.width, metadata.height) == (132, 24)

    @pytest.mark.asyncio
    async def test_scales_share_logical_size(
        self, fonts: CustomFonts, options: dict[str, Any]
    ) -> None:
        tags = [
            parse_img(tag)
            for tag in await asyncio.gather(
                fonts.render_raster(options),
                fonts.render_raster_2x(options),
                fonts.render_raster_3x(options),
            )
        ]
        assert {(tag["width"], tag["height"]) for tag in tags} == {("132", "24")}

        pixel_sizes = [read_metadata(decode_src(tag["src"])[1]) for tag in tags]
        assert [m.width for m in pixel_sizes] == [132, 264, 396]
        assert [m.height for m in pixel_sizes] == [24, 48, 72]

    @pytest.mark.asyncio
    async def test_trim(self, fonts: CustomFonts, options: dict[str, Any]) -> None:
        attrs = parse_img(await fonts.render_raster({**options, "trim": True}))
        assert int(attrs["height"]) < 24
        assert int(attrs["width"]) <= 132

    @pytest.mark.asyncio
    async def test_trim_and_resize(
        self, fonts: CustomFonts, options: dict[str, Any]
    ) -> None:
        for render in (fonts.render_raster, fonts.render_raster_2x):
            attrs = parse_img(
                await render({**options, "trim": True, "resize_to_font_size": True})
            )
            assert attrs["height"] == "24"

    @pytest.mark.asyncio
    async def test_fallback_uses_logical_height(
        self, fonts: CustomFonts, options: dict[str, Any]
    ) -> None:
        attrs = parse_img(await fonts.render_raster_3x(options))
        assert "font-size: 12px;line-height: 24px;" in attrs["style"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scale", ["foo", None])
    async def test_bad_scale(
        self, fonts: CustomFonts, options: dict[str, Any], scale: Any
    ) -> None:
        with pytest.raises(TypeError):
            await fonts.render_raster(options, scale)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scale", [float("inf"), float("nan"), 10**400])
    async def test_non_finite_scale(
        self, fonts: CustomFonts, options: dict[str, Any], scale: Any
    ) -> None:
        with pytest.raises(ValidationError) as excinfo:
            await fonts.render_raster(options, scale)
        assert excinfo.value.constraint is Constraint.NOT_FINITE_NUMBER

    @pytest.mark.asyncio
    async def test_empty_text(self, fonts: CustomFonts, fixture_font: str) -> None:
        """Empty text has no width, so there is no image to rasterize."""
        options = {"text": "", "font_name_or_path": fixture_font}
        assert svg_utils.fromstring(await fonts.render_vector(options)).get("width") == "0"
        for render in (fonts.render_raster, fonts.render_raster_2x):
            with pytest.raises(ValidationError) as excinfo:
                await render(options)
            assert excinfo.value.field == "text"
            assert excinfo.value.constraint is Constraint.EMPTY_IMAGE

    @pytest.mark.asyncio
    async def test_cached_by_unscaled_request(
        self, fonts: CustomFonts, options: dict[str, Any]
    ) -> None:
        await fonts.render_raster_2x(options)
        request = await fonts.normalize_options(options)
        assert RenderCache.key("raster@2x", request) in fonts.cache
        assert RenderCache.key("vector", request.scaled(2)) in fonts.cache
        assert RenderCache.key("vector", request) not in fonts.cache


class TestCaching:
    """Tests for cache reuse across calls."""

    @pytest.fixture
    def loader(self) -> MagicMock:
        return MagicMock(wraps=load_outline_font)

    @pytest.fixture
    def rasterizer(self) -> MagicMock:
        return MagicMock(wraps=ResvgRasterizer())

    @pytest.fixture
    def spied_fonts(
        self, settings: Settings, loader: MagicMock, rasterizer: MagicMock
    ) -> CustomFonts:
        return CustomFonts(settings=settings, rasterizer=rasterizer, outline_loader=loader)

    @pytest.mark.asyncio
    async def test_equivalent_options_share_entry(
        self, spied_fonts: CustomFonts, loader: MagicMock, fixture_font: str
    ) -> None:
        first = await spied_fonts.render_vector(
            {"text": "Hi", "font_name_or_path": fixture_font, "font_size": "24px"}
        )
        second = await spied_fonts.render_vector(
            {"text": "Hi", "font_name_or_path": fixture_font, "font_size": 24}
        )
        assert first == second
        assert loader.call_count == 1

    @pytest.mark.asyncio
    async def test_raster_rendered_once(
        self,
        spied_fonts: CustomFonts,
        rasterizer: MagicMock,
        loader: MagicMock,
        options: dict[str, Any],
    ) -> None:
        first = await spied_fonts.render_raster_2x(options)
        second = await spied_fonts.render_raster_2x(options)
        assert first == second
        assert rasterizer.rasterize.call_count == 1
        assert loader.call_count == 1

    @pytest.mark.asyncio
    async def test_image_tag_reuses_vector(
        self, spied_fonts: CustomFonts, loader: MagicMock, options: dict[str, Any]
    ) -> None:
        await spied_fonts.render_vector(options)
        await spied_fonts.render_image_tag(options)
        assert loader.call_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_agree(
        self, fonts: CustomFonts, options: dict[str, Any]
    ) -> None:
        results = await asyncio.gather(*(fonts.render_vector(options) for _ in range(5)))
        assert len(set(results)) == 1
        tags = await asyncio.gather(*(fonts.render_raster(options) for _ in range(3)))
        assert len(set(tags)) == 1

    @pytest.mark.asyncio
    async def test_separate_contexts(
        self, settings: Settings, options: dict[str, Any]
    ) -> None:
        first = CustomFonts(settings=settings)
        second = CustomFonts(settings=settings)
        assert await first.render_vector(options) == await second.render_vector(options)
        assert len(first.cache) == 1
        assert len(second.cache) == 1
