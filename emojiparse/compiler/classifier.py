"""
Partition an emoji table into the categories the pattern compiler renders.

Gendered ZWJ diversity sequences are reduced to their gender-neutral residual
(the compiler re-inserts a man/woman/person or female/male sign class), which
is only sound when every gendered sibling exists. That closed-world check
happens here, before any pattern is emitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from emojiparse.compiler.codepoints import (
    CP_FEMALE_SIGN,
    CP_KEYCAP,
    CP_MALE_SIGN,
    CP_MAN,
    CP_PERSON,
    CP_VS16,
    CP_WOMAN,
    CP_ZWJ,
    CodepointSequence,
)
from emojiparse.compiler.records import EmojiRecord, EmojiType, flatten
from emojiparse.errors import (
    MissingGenderComplementError,
    UnrecognizedZwjShapeError,
    UnsupportedZwjTypeError,
)
from emojiparse.telemetry.logging import bind

log = bind(logging.getLogger(__name__), component="classifier")


class Category(str, Enum):
    MULTI_DIVERSITY = "multi_diversity"
    ZWJ_LEADING_GENDER = "zwj_leading_gender"
    ZWJ_TRAILING_GENDER_WITH_VARIANT = "zwj_trailing_gender_with_variant"
    ZWJ_TRAILING_GENDER_WITHOUT_VARIANT = "zwj_trailing_gender_without_variant"
    ZWJ = "zwj_plain"
    KEYCAP = "keycap_prefix"
    VARIANT_DIVERSITY = "variant_diversity"
    DIVERSITY = "diversity"
    TEXT_DEFAULT = "text_default"
    VARIANT = "variant"
    NORMAL = "normal"


class GenderAxis(str, Enum):
    LEADING_GENDER = "leading-gender"
    TRAILING_GENDER_WITH_VARIANT = "trailing-gender-with-variant"
    TRAILING_GENDER_WITHOUT_VARIANT = "trailing-gender-without-variant"


_AXIS_CATEGORY = {
    GenderAxis.LEADING_GENDER: Category.ZWJ_LEADING_GENDER,
    GenderAxis.TRAILING_GENDER_WITH_VARIANT: Category.ZWJ_TRAILING_GENDER_WITH_VARIANT,
    GenderAxis.TRAILING_GENDER_WITHOUT_VARIANT: Category.ZWJ_TRAILING_GENDER_WITHOUT_VARIANT,
}

# Non-ZWJ types and where they land
_PLAIN_CATEGORY = {
    EmojiType.NORMAL: Category.NORMAL,
    EmojiType.FLAG: Category.NORMAL,
    EmojiType.REGIONAL: Category.NORMAL,
    EmojiType.KEYCAP: Category.KEYCAP,
    EmojiType.DIVERSITY: Category.DIVERSITY,
    EmojiType.VARIANT_DIVERSITY: Category.VARIANT_DIVERSITY,
    EmojiType.VARIANT: Category.VARIANT,
    EmojiType.TEXT_DEFAULT: Category.TEXT_DEFAULT,
}

_MALE_TAIL_VS = (CP_VS16, CP_ZWJ, CP_MALE_SIGN, CP_VS16)
_FEMALE_TAIL_VS = (CP_VS16, CP_ZWJ, CP_FEMALE_SIGN, CP_VS16)
_MALE_TAIL = (CP_ZWJ, CP_MALE_SIGN, CP_VS16)
_FEMALE_TAIL = (CP_ZWJ, CP_FEMALE_SIGN, CP_VS16)


@dataclass(frozen=True)
class GenderAxisEntry:
    axis: GenderAxis
    residual: CodepointSequence


@dataclass
class ClassifiedTable:
    """Sequences per category, in table order."""

    sequences: Dict[Category, List[CodepointSequence]] = field(
        default_factory=lambda: {category: [] for category in Category}
    )

    def add(self, category: Category, sequence: CodepointSequence) -> None:
        self.sequences[category].append(sequence)

    def __getitem__(self, category: Category) -> List[CodepointSequence]:
        return self.sequences[category]

    def empty_categories(self) -> List[Category]:
        return [category for category in Category if not self.sequences[category]]

    def counts(self) -> Dict[str, int]:
        return {category.value: len(seqs) for category, seqs in self.sequences.items()}


def _with_head(head: int, seq: Sequence[int]) -> CodepointSequence:
    return CodepointSequence((head,) + tuple(seq[1:]))


def _with_sign(seq: Sequence[int], sign: int) -> CodepointSequence:
    return CodepointSequence(tuple(seq[:-2]) + (sign, CP_VS16))


def _ends_with(seq: Sequence[int], tail: Tuple[int, ...]) -> bool:
    return len(seq) >= len(tail) and tuple(seq[-len(tail):]) == tail


def _starts_with(seq: Sequence[int], head: Tuple[int, ...]) -> bool:
    return len(seq) >= len(head) and tuple(seq[: len(head)]) == head


def _require(
    known: Set[CodepointSequence], complement: CodepointSequence, item: EmojiRecord
) -> None:
    if complement not in known:
        raise MissingGenderComplementError(
            f"ZWJ diversity item {item.key} is missing its gender-complement sequence "
            f"{complement.key}",
            item.key,
            complement.key,
        )


# Each shape: (predicate, complements to verify, axis or None, residual slice).
# Order matters: the variant tails must be tried before the bare tails they end with.
_Shape = Tuple[
    Callable[[Sequence[int]], bool],
    Callable[[Sequence[int]], List[CodepointSequence]],
    Optional[GenderAxis],
    Callable[[Sequence[int]], Sequence[int]],
]

_SHAPES: Tuple[_Shape, ...] = (
    (
        lambda cp: _starts_with(cp, (CP_MAN, CP_ZWJ)),
        lambda cp: [_with_head(CP_WOMAN, cp), _with_head(CP_PERSON, cp)],
        None,
        lambda cp: (),
    ),
    (
        lambda cp: _starts_with(cp, (CP_WOMAN, CP_ZWJ)),
        lambda cp: [_with_head(CP_MAN, cp), _with_head(CP_PERSON, cp)],
        None,
        lambda cp: (),
    ),
    (
        lambda cp: _starts_with(cp, (CP_PERSON, CP_ZWJ)),
        lambda cp: [_with_head(CP_MAN, cp), _with_head(CP_WOMAN, cp)],
        GenderAxis.LEADING_GENDER,
        lambda cp: cp[2:],
    ),
    (
        lambda cp: _ends_with(cp, _MALE_TAIL_VS),
        lambda cp: [_with_sign(cp, CP_FEMALE_SIGN)],
        GenderAxis.TRAILING_GENDER_WITH_VARIANT,
        lambda cp: cp[:-4],
    ),
    (
        lambda cp: _ends_with(cp, _FEMALE_TAIL_VS),
        lambda cp: [_with_sign(cp, CP_MALE_SIGN)],
        None,
        lambda cp: (),
    ),
    (
        lambda cp: _ends_with(cp, _MALE_TAIL),
        lambda cp: [_with_sign(cp, CP_FEMALE_SIGN)],
        GenderAxis.TRAILING_GENDER_WITHOUT_VARIANT,
        lambda cp: cp[:-3],
    ),
    (
        lambda cp: _ends_with(cp, _FEMALE_TAIL),
        lambda cp: [_with_sign(cp, CP_MALE_SIGN)],
        None,
        lambda cp: (),
    ),
)


def gender_axis(item: EmojiRecord, known: Set[CodepointSequence]) -> Optional[GenderAxisEntry]:
    """
    Classify a ZWJ diversity item along the gender axis.

    Only the canonical member of a complementary set (person-led, or the
    male-sign tail) yields an entry; the others just verify their siblings.
    Raises when a sibling is missing or the item fits none of the shapes.
    """
    cp = item.codepoints.cp
    for matches, complements, axis, residual in _SHAPES:
        if not matches(cp):
            continue
        for complement in complements(cp):
            _require(known, complement, item)
        if axis is None:
            return None
        return GenderAxisEntry(axis, CodepointSequence(residual(cp)))
    raise UnrecognizedZwjShapeError(
        f"ZWJ diversity item {item.key} must be part of a gender pair "
        "(leading man/woman/person or trailing male/female sign)",
        item.key,
    )


def _strip(seq: CodepointSequence, drop: Iterable[int]) -> CodepointSequence:
    dropped = set(drop)
    return CodepointSequence((c for c in seq.cp if c not in dropped), seq.include_in_picker)


def _strip_trailing_vs16(seq: CodepointSequence) -> CodepointSequence:
    cp = list(seq.cp)
    while len(cp) > 1 and cp[-1] == CP_VS16:
        cp.pop()
    return CodepointSequence(cp, seq.include_in_picker)


def classify(table: Iterable[object]) -> ClassifiedTable:
    """Partition records (or categories / raw rows) into pattern categories."""
    records = flatten(table)
    out = ClassifiedTable()

    multi = [r for r in records if r.type is EmojiType.MULTI_DIVERSITY]
    rest = [r for r in records if r.type is not EmojiType.MULTI_DIVERSITY]
    zwj_items = [r for r in rest if r.has_zwj]
    plain_items = [r for r in rest if not r.has_zwj]

    for item in zwj_items:
        if item.type not in (EmojiType.DIVERSITY, EmojiType.NORMAL):
            raise UnsupportedZwjTypeError(
                f"ZWJ item {item.key}: invalid type ({item.type.value}). "
                "Must be 'diversity' or 'normal'.",
                item.key,
            )

    for item in multi:
        for seq in item.diversity_sequences():
            out.add(Category.MULTI_DIVERSITY, seq)

    zwj_diversity = [r for r in zwj_items if r.type is EmojiType.DIVERSITY]
    known = {r.codepoints for r in zwj_diversity}
    for item in zwj_diversity:
        entry = gender_axis(item, known)
        if entry is not None:
            out.add(_AXIS_CATEGORY[entry.axis], entry.residual)

    for item in zwj_items:
        if item.type is EmojiType.NORMAL:
            out.add(Category.ZWJ, item.codepoints)

    for item in plain_items:
        category = _PLAIN_CATEGORY[item.type]
        seq = item.codepoints
        if category is Category.KEYCAP:
            # the keycap mark is matched as a fixed literal after an optional VS16
            seq = _strip(seq, (CP_KEYCAP, CP_VS16))
        elif category is not Category.NORMAL:
            seq = _strip_trailing_vs16(seq)
        out.add(category, seq)

    log.debug("emoji table classified", extra={"records": len(records), "counts": out.counts()})
    return out


__all__ = [
    "Category",
    "GenderAxis",
    "GenderAxisEntry",
    "ClassifiedTable",
    "gender_axis",
    "classify",
]
