from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from emojiparse.compiler.codepoints import to_utf16_units
from emojiparse.settings import Flavor

Span = Tuple[int, int]


def literal(cp: int, flavor: Flavor = "python") -> str:
    """Render one codepoint (or UTF-16 unit) as a pattern literal."""
    if cp < 0x80 and chr(cp).isalnum():
        return chr(cp)
    if cp < 0x100:
        return f"\\x{cp:02x}"
    if cp < 0x10000:
        return f"\\u{cp:04x}"
    if flavor == "utf16":
        return "".join(f"\\u{unit:04x}" for unit in to_utf16_units([cp]))
    return f"\\U{cp:08x}"


def find_contiguous_spans(values: Iterable[int]) -> List[Span]:
    """
    Collapse values into closed ranges of consecutive integers.

    Input is like [1,2,3,4,6,7,9]; output is like [(1,4), (6,7), (9,9)].
    Duplicates are ignored; order of the input does not matter.
    """
    seq = sorted(set(values))
    if not seq:
        return []
    spans: List[Span] = []
    start = seq[0]
    prev = seq[0]
    for value in seq[1:]:
        if value != prev + 1:
            spans.append((start, prev))
            start = value
        prev = value
    spans.append((start, prev))
    return spans


def render_spans(spans: Sequence[Span], flavor: Flavor = "python") -> str:
    """
    Render spans as a character class, e.g. [(1,4), (6,7), (9,9)] -> "[1-4679]".

    A class holding a single member is emitted as the bare literal.
    """
    if not spans:
        return ""
    if len(spans) == 1 and spans[0][0] == spans[0][1]:
        return literal(spans[0][0], flavor)
    parts: List[str] = []
    for start, end in spans:
        if start > end:
            raise ValueError(f"broken span: start {start:#x} after end {end:#x}")
        if start == end:
            parts.append(literal(start, flavor))
        elif start + 1 == end:
            # two literals read better than a range operator
            parts.append(literal(start, flavor) + literal(end, flavor))
        else:
            parts.append(f"{literal(start, flavor)}-{literal(end, flavor)}")
    return "[" + "".join(parts) + "]"


def compact(codepoints: Iterable[int], flavor: Flavor = "python") -> str:
    """Smallest class fragment matching exactly the given codepoints."""
    values = sorted(set(codepoints))
    if not values:
        raise ValueError("cannot compact an empty codepoint set")
    if len(values) == 1:
        return literal(values[0], flavor)
    if flavor == "python" or values[-1] < 0x10000:
        return render_spans(find_contiguous_spans(values), flavor)

    # UTF-16: astral members become high-surrogate + class-of-low-surrogates,
    # one alternative per high unit so ranges never cross a high unit change.
    lows_by_high: Dict[int, List[int]] = {}
    bmp: List[int] = []
    for value in values:
        if value < 0x10000:
            bmp.append(value)
            continue
        high, low = to_utf16_units([value])
        lows_by_high.setdefault(high, []).append(low)
    parts = [
        literal(high, flavor) + render_spans(find_contiguous_spans(lows), flavor)
        for high, lows in sorted(lows_by_high.items())
    ]
    if bmp:
        parts.append(render_spans(find_contiguous_spans(bmp), flavor))
    return "(?:" + "|".join(parts) + ")"


__all__ = ["Span", "literal", "find_contiguous_spans", "render_spans", "compact"]
