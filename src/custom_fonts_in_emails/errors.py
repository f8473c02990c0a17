"""Exceptions raised by custom_fonts_in_emails."""

import enum


class Constraint(enum.Enum):
    """Constraint violated by an option value."""

    NOT_STRING = "must be a str"
    BLANK_STRING = "must be a str and not blank"
    NOT_POSITIVE_NUMBER = "must be a number or numeric str greater than 0"
    NOT_BOOLEAN = "must be a bool"
    NOT_NUMBER = "must be a number"
    NOT_FINITE_NUMBER = "must be a finite number greater than 0"
    EMPTY_IMAGE = "must render to an image at least 1 pixel wide and high"
    OUT_OF_RANGE = "must be a number between 1 and 99 inclusive"
    NOT_MAPPING = "must be a mapping"
    BAD_ANCHOR = "must be '<left|center|right> <baseline|top|middle|bottom>'"


class CustomFontsError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(CustomFontsError, ValueError):
    """An option value is malformed or out of range.

    Attributes:
        field: Dotted name of the offending option, e.g. ``outline.x``.
        constraint: The violated constraint.
    """

    def __init__(self, field: str, constraint: Constraint) -> None:
        self.field = field
        self.constraint = constraint
        super().__init__(f"`{field}` {constraint.value}")


class NotFoundError(CustomFontsError, LookupError):
    """A font file or font name could not be resolved."""
