"""Compile-time errors raised while turning an emoji table into a pattern."""

from __future__ import annotations


class PatternCompileError(ValueError):
    """Base class for table inconsistencies detected at compile time.

    ``key`` identifies the offending sequence (hex key) or, for category
    level failures, the category name.
    """

    def __init__(self, message: str, key: str = "") -> None:
        super().__init__(message)
        self.key = key


class UnknownEmojiTypeError(PatternCompileError):
    """A record carries a type tag outside the known set."""


class MalformedRecordError(PatternCompileError):
    """A record is missing data its type requires."""


class UnsupportedZwjTypeError(PatternCompileError):
    """A ZWJ sequence has a type other than ``diversity`` or ``normal``."""


class EmptyCategoryError(PatternCompileError):
    """Partitioning left a category with no sequences."""


class MissingGenderComplementError(PatternCompileError):
    """A gendered ZWJ sequence lacks one of its man/woman/person siblings."""

    def __init__(self, message: str, key: str = "", complement: str = "") -> None:
        super().__init__(message, key)
        self.complement = complement


class UnrecognizedZwjShapeError(PatternCompileError):
    """A ZWJ diversity sequence matches none of the gender-pair shapes."""


__all__ = [
    "PatternCompileError",
    "UnknownEmojiTypeError",
    "MalformedRecordError",
    "UnsupportedZwjTypeError",
    "EmptyCategoryError",
    "MissingGenderComplementError",
    "UnrecognizedZwjShapeError",
]
