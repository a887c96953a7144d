"""Emoji sequence pattern compiler and accessible image decorator."""

from emojiparse.compiler.pattern import CompiledPattern, PatternCompiler, compile_pattern
from emojiparse.compiler.records import EmojiCategory, EmojiRecord, EmojiType
from emojiparse.scanner.decorator import EmojiDecorator, EmojiMatch
from emojiparse.telemetry.logging import configure_logging

__version__ = "0.1.0"

__all__ = [
    "CompiledPattern",
    "PatternCompiler",
    "compile_pattern",
    "EmojiCategory",
    "EmojiRecord",
    "EmojiType",
    "EmojiDecorator",
    "EmojiMatch",
    "configure_logging",
]
