"""Normalization and validation of render options.

Caller options are a loose mapping. They are deep-merged over the defaults,
validated against ``OPTION_SCHEMA`` in a single pass, and coerced into plain
values. The font is resolved afterwards by the caller of
:func:`normalize_options`, which turns the result into a :class:`RenderRequest`.
"""

import copy
import dataclasses
import logging
import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple, Optional

from custom_fonts_in_emails import svg_utils
from custom_fonts_in_emails.core.outline import parse_anchor
from custom_fonts_in_emails.errors import Constraint, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: dict[str, Any] = {
    "text": "",
    "font_name_or_path": "Arial",
    "font_size": "24px",
    "font_color": "#000",
    "background_color": "transparent",
    "supports_fallback": True,
    "resize_to_font_size": False,
    "trim": False,
    "trim_tolerance": 10,
    "attrs": {},
    "outline": {
        "x": 0,
        "y": 0,
        "anchor": "left top",
        "attributes": {"stroke": "none"},
    },
}

# Leading number with an optional unit suffix, e.g. "24px" or "1.5em".
FONT_SIZE_RE = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))\s*[a-zA-Z%]*\s*$")


@dataclass(frozen=True)
class OutlineConfig:
    """Layout passed to the text-outline engine."""

    x: float
    y: float
    anchor: str
    font_size: int
    attributes: Mapping[str, str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "anchor": self.anchor,
            "font_size": self.font_size,
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class RenderRequest:
    """Fully resolved render options. Nothing downstream applies defaults."""

    text: str
    font_size: int
    font_color: str
    background_color: str
    supports_fallback: bool
    resize_to_font_size: bool
    trim: bool
    trim_tolerance: float
    attrs: Mapping[str, str]
    outline: OutlineConfig
    font_name: str
    font_path: str

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON serializable snapshot of the request."""
        result = {
            field.name: getattr(self, field.name) for field in dataclasses.fields(self)
        }
        result["attrs"] = dict(self.attrs)
        result["outline"] = self.outline.to_dict()
        return result

    def scaled(self, scale: float) -> "RenderRequest":
        """Copy with font sizes multiplied by ``scale`` and rounded."""
        outline = dataclasses.replace(
            self.outline, font_size=round_half_up(self.outline.font_size * scale)
        )
        return dataclasses.replace(
            self, font_size=round_half_up(self.font_size * scale), outline=outline
        )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def deep_merge(options: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``options`` over ``defaults``; options win recursively per key.

    A key that is missing or None in ``options`` takes the default. Neither
    input is modified and the result shares no mutable state with them.
    """
    result = copy.deepcopy(dict(defaults))
    for key, value in options.items():
        if value is None:
            continue
        default = result.get(key)
        if isinstance(value, Mapping):
            result[key] = deep_merge(
                value, default if isinstance(default, Mapping) else {}
            )
        else:
            result[key] = copy.deepcopy(value)
    return result


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def to_finite_float(value: Any) -> Optional[float]:
    """Convert a number to a finite float, or None.

    Booleans, NaN, infinities and ints too large for a float give None.
    """
    if not _is_number(value):
        return None
    try:
        result = float(value)
    except OverflowError:
        return None
    return result if math.isfinite(result) else None


def parse_font_size(value: Any) -> Optional[int]:
    """Parse a font size like ``24``, ``24.6`` or ``"24px"`` to whole pixels.

    Returns None when the value is not a finite number greater than 0 after
    rounding.
    """
    if isinstance(value, str):
        match = FONT_SIZE_RE.match(value)
        if match is None:
            return None
        value = float(match.group(1))
    value = to_finite_float(value)
    if value is None:
        return None
    size = round_half_up(value)
    return size if size > 0 else None


def _check_text(value: Any) -> Any:
    if not isinstance(value, str):
        raise ValidationError("text", Constraint.NOT_STRING)
    return value


def _check_non_blank(field: str) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if _is_blank(value):
            raise ValidationError(field, Constraint.BLANK_STRING)
        return value

    return check


def _check_font_size(value: Any) -> Any:
    size = parse_font_size(value)
    if size is None:
        raise ValidationError("font_size", Constraint.NOT_POSITIVE_NUMBER)
    return size


def _check_bool(field: str) -> Callable[[Any], Any]:
    def check(value: Any) -> Any:
        if not isinstance(value, bool):
            raise ValidationError(field, Constraint.NOT_BOOLEAN)
        return value

    return check


def _check_trim_tolerance(value: Any) -> Any:
    if not _is_number(value) or not 1 <= value <= 99:
        raise ValidationError("trim_tolerance", Constraint.OUT_OF_RANGE)
    return value


def _stringify(field: str, value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ValidationError(field, Constraint.NOT_MAPPING)
    result = {}
    for key, item in value.items():
        result[str(key)] = (
            svg_utils.num2str(item) if isinstance(item, (int, float)) else str(item)
        )
    return result


def _check_attrs(value: Any) -> Any:
    return _stringify("attrs", value)


def _check_outline(value: Any) -> Any:
    if not isinstance(value, Mapping):
        raise ValidationError("outline", Constraint.NOT_MAPPING)
    result = dict(value)
    for axis in ("x", "y"):
        # Ints too large for a float, NaN and infinities are rejected too.
        if to_finite_float(result.get(axis)) is None:
            raise ValidationError(f"outline.{axis}", Constraint.NOT_NUMBER)
    try:
        parse_anchor(result.get("anchor", ""))
    except (AttributeError, ValueError) as e:
        raise ValidationError("outline.anchor", Constraint.BAD_ANCHOR) from e
    if result.get("font_size") is not None:
        result["font_size"] = parse_font_size(result["font_size"])
        if result["font_size"] is None:
            raise ValidationError("outline.font_size", Constraint.NOT_POSITIVE_NUMBER)
    result["attributes"] = _stringify(
        "outline.attributes", result.get("attributes", {})
    )
    return result


class FieldSpec(NamedTuple):
    name: str
    check: Callable[[Any], Any]


OPTION_SCHEMA: tuple[FieldSpec, ...] = (
    FieldSpec("text", _check_text),
    FieldSpec("font_name_or_path", _check_non_blank("font_name_or_path")),
    FieldSpec("font_size", _check_font_size),
    FieldSpec("font_color", _check_non_blank("font_color")),
    FieldSpec("background_color", _check_non_blank("background_color")),
    FieldSpec("supports_fallback", _check_bool("supports_fallback")),
    FieldSpec("resize_to_font_size", _check_bool("resize_to_font_size")),
    FieldSpec("trim", _check_bool("trim")),
    FieldSpec("trim_tolerance", _check_trim_tolerance),
    FieldSpec("attrs", _check_attrs),
    FieldSpec("outline", _check_outline),
)


def normalize_options(
    options: Optional[Mapping[str, Any]], defaults: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge ``options`` over ``defaults`` and validate every field.

    Returns:
        Validated options, with ``font_size`` in whole pixels and outline
        ``fill`` and ``font_size`` derived from the top-level values when unset.

    Raises:
        ValidationError: If a field is malformed or out of range.
    """
    if options is not None and not isinstance(options, Mapping):
        raise ValidationError("options", Constraint.NOT_MAPPING)
    merged = deep_merge(options or {}, defaults)

    result = {spec.name: spec.check(merged.get(spec.name)) for spec in OPTION_SCHEMA}

    outline = result["outline"]
    outline["attributes"].setdefault("fill", result["font_color"])
    if outline.get("font_size") is None:
        outline["font_size"] = result["font_size"]
    return result


def build_request(options: Mapping[str, Any], font_name: str, font_path: str) -> RenderRequest:
    """Freeze validated options and the resolved font into a request."""
    outline = options["outline"]
    return RenderRequest(
        text=options["text"],
        font_size=options["font_size"],
        font_color=options["font_color"],
        background_color=options["background_color"],
        supports_fallback=options["supports_fallback"],
        resize_to_font_size=options["resize_to_font_size"],
        trim=options["trim"],
        trim_tolerance=options["trim_tolerance"],
        attrs=MappingProxyType(dict(options["attrs"])),
        outline=OutlineConfig(
            x=float(outline["x"]),
            y=float(outline["y"]),
            anchor=outline["anchor"],
            font_size=outline["font_size"],
            attributes=MappingProxyType(dict(outline["attributes"])),
        ),
        font_name=font_name,
        font_path=font_path,
    )
