import logging
import re
import xml.etree.ElementTree as ET
from re import Pattern
from typing import Any, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

NAMESPACE = "http://www.w3.org/2000/svg"

ILLEGAL_XML_RE: Pattern[str] = re.compile(
    "[\x00-\x08\x0b-\x1f\x7f-\x84\x86-\x9f\ud800-\udfff\ufdd0-\ufddf\ufffe-\uffff]"
)

DEFAULT_NUMBER_DIGITS = 2

# Serialize SVG elements without an "ns0:" prefix.
ET.register_namespace("", NAMESPACE)


def safe_utf8(text: str) -> str:
    """Remove illegal XML characters from text."""
    return ILLEGAL_XML_RE.sub(" ", text)


def num2str(num: int | float | bool, digit: int = DEFAULT_NUMBER_DIGITS) -> str:
    """Convert a number to a string, using the specified format for floats."""
    if isinstance(num, bool):
        return "true" if num else "false"
    if isinstance(num, int):
        return str(num)
    if isinstance(num, float):
        if num.is_integer():
            return str(int(num))
        # Format float with specified number of digits, and trim trailing zeros
        number = f"{num:.{digit}f}"
        return f"{number[0]}{number[1:].rstrip('0').rstrip('.')}"
    raise ValueError(f"Unsupported type: {type(num)}")


def seq2str(
    seq: Sequence[int | float | bool],
    sep: str = ",",
    digit: int = DEFAULT_NUMBER_DIGITS,
) -> str:
    """Convert a sequence of numbers to a string, using the specified format for floats."""
    return sep.join(num2str(n, digit) for n in seq)


def svg_tag(name: str) -> str:
    """Qualified tag name of an SVG element."""
    return f"{{{NAMESPACE}}}{name}"


def create_node(
    tag: str,
    parent: Optional[ET.Element] = None,
    **kwargs: Any,
) -> ET.Element:
    """Create an XML node with attributes.

    Underscores in keyword names become hyphens and a trailing underscore is
    dropped, so ``stroke_width=1`` sets ``stroke-width``.
    """
    node = ET.Element(tag)
    for key, value in kwargs.items():
        if value is None:
            continue
        key = key.rstrip("_")  # allow trailing underscore for keywords
        key = key.replace("_", "-")  # convert underscores to hyphens
        set_attribute(node, key, value)
    if parent is not None:
        parent.append(node)
    return node


def fromstring(data: str) -> ET.Element:
    """Parse an XML string to an Element."""
    return ET.fromstring(data)


def tostring(node: ET.Element) -> str:
    """Convert an XML node to a string."""
    return ET.tostring(node, encoding="unicode", xml_declaration=False)


def tohtml(node: ET.Element) -> str:
    """Convert a node to an HTML fragment, e.g. ``<img src="...">``."""
    return ET.tostring(node, encoding="unicode", method="html")


def get_attribute(node: ET.Element, key: str) -> Optional[str]:
    """Get an attribute of an XML node."""
    return node.get(key)


def set_attribute(node: ET.Element, key: str, value: Any) -> None:
    """Add an attribute to an XML node."""
    if isinstance(value, (int, float, bool)):
        node.set(key, num2str(value))
    elif isinstance(value, list) and all(
        isinstance(v, (int, float, bool)) for v in value
    ):
        node.set(key, seq2str(value))
    else:
        node.set(key, str(value))


def set_attributes(node: ET.Element, attrs: Mapping[str, Any]) -> None:
    """Set attributes in order; later keys override existing values."""
    for key, value in attrs.items():
        set_attribute(node, key, value)
