from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple, Union

# Code point helpers
CP_ZWJ = 0x200D  # Zero-Width Joiner
CP_VS15 = 0xFE0E  # Variation Selector-15 (text presentation)
CP_VS16 = 0xFE0F  # Variation Selector-16 (emoji presentation)
CP_KEYCAP = 0x20E3  # COMBINING ENCLOSING KEYCAP
CP_MAN = 0x1F468
CP_WOMAN = 0x1F469
CP_PERSON = 0x1F9D1
CP_FEMALE_SIGN = 0x2640
CP_MALE_SIGN = 0x2642
CP_LIGHTEST_SKIN_TONE = 0x1F3FB
CP_DARKEST_SKIN_TONE = 0x1F3FF

SKIN_TONES: Tuple[int, ...] = tuple(range(CP_LIGHTEST_SKIN_TONE, CP_DARKEST_SKIN_TONE + 1))

_MAX_CODEPOINT = 0x10FFFF
_SURROGATE_HIGH = 0xD800
_SURROGATE_HIGH_END = 0xDBFF
_SURROGATE_LOW = 0xDC00
_SURROGATE_LOW_END = 0xDFFF


def _check_codepoint(cp: int) -> int:
    value = int(cp)
    if value < 0 or value > _MAX_CODEPOINT:
        raise ValueError(f"codepoint out of range: {cp!r}")
    if _SURROGATE_HIGH <= value <= _SURROGATE_LOW_END:
        raise ValueError(f"surrogate is not a scalar value: {value:#x}")
    return value


@dataclass(frozen=True)
class CodepointSequence:
    """Immutable run of Unicode scalar values identified by its hex ``key``.

    ``include_in_picker`` only affects enumeration for pickers; equality and
    hashing look at the codepoints alone.
    """

    cp: Tuple[int, ...]
    include_in_picker: bool = field(default=True, compare=False)

    def __init__(self, cp: Iterable[int], include_in_picker: bool = True) -> None:
        object.__setattr__(self, "cp", tuple(_check_codepoint(c) for c in cp))
        object.__setattr__(self, "include_in_picker", bool(include_in_picker))

    @property
    def key(self) -> str:
        return "-".join(f"{c:x}" for c in self.cp)

    @property
    def has_zwj(self) -> bool:
        return CP_ZWJ in self.cp

    @property
    def text(self) -> str:
        return "".join(chr(c) for c in self.cp)

    @classmethod
    def from_key(cls, key: str, include_in_picker: bool = True) -> "CodepointSequence":
        parts = [p for p in key.strip().split("-") if p]
        if not parts:
            raise ValueError(f"empty codepoint key: {key!r}")
        return cls((int(p, 16) for p in parts), include_in_picker)

    @classmethod
    def from_text(cls, text: str) -> "CodepointSequence":
        return cls(ord(ch) for ch in text)

    def __len__(self) -> int:
        return len(self.cp)

    def __iter__(self):
        return iter(self.cp)

    def __str__(self) -> str:
        return self.key


def to_utf16_units(cps: Iterable[int]) -> List[int]:
    """Split astral codepoints into surrogate pairs; BMP values pass through."""
    units: List[int] = []
    for cp in cps:
        value = _check_codepoint(cp)
        if value >= 0x10000:
            value -= 0x10000
            units.append(_SURROGATE_HIGH + (value >> 10))
            units.append(_SURROGATE_LOW + (value & 0x3FF))
        else:
            units.append(value)
    return units


def to_code_point(text: str, sep: str = "-") -> str:
    """
    Hex codepoints of ``text`` joined by ``sep``.

    Surrogate pairs (e.g. text decoded with ``surrogatepass``) are recombined,
    so ``"\\ud83c\\udde8\\ud83c\\uddf3"`` and ``"\\U0001f1e8\\U0001f1f3"`` both
    give ``"1f1e8-1f1f3"``.
    """
    result: List[str] = []
    pending = 0
    for ch in text:
        code = ord(ch)
        if pending:
            if _SURROGATE_LOW <= code <= _SURROGATE_LOW_END:
                combined = 0x10000 + ((pending - _SURROGATE_HIGH) << 10) + (code - _SURROGATE_LOW)
                result.append(f"{combined:x}")
                pending = 0
                continue
            result.append(f"{pending:x}")
            pending = 0
        if _SURROGATE_HIGH <= code <= _SURROGATE_HIGH_END:
            pending = code
        else:
            result.append(f"{code:x}")
    if pending:
        result.append(f"{pending:x}")
    return sep.join(result)


def from_code_point(codepoint: Union[str, int]) -> str:
    """Character for one codepoint given as hex text (``"1f4a9"``) or int."""
    code = int(codepoint, 16) if isinstance(codepoint, str) else int(codepoint)
    return chr(_check_codepoint(code))


__all__ = [
    "CP_ZWJ",
    "CP_VS15",
    "CP_VS16",
    "CP_KEYCAP",
    "CP_MAN",
    "CP_WOMAN",
    "CP_PERSON",
    "CP_FEMALE_SIGN",
    "CP_MALE_SIGN",
    "SKIN_TONES",
    "CodepointSequence",
    "to_utf16_units",
    "to_code_point",
    "from_code_point",
]
