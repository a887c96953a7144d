"""Typed emoji table records and their derived (skin tone) sequences."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from emojiparse.compiler.codepoints import CP_VS16, CP_ZWJ, SKIN_TONES, CodepointSequence
from emojiparse.errors import MalformedRecordError, UnknownEmojiTypeError

# Template token meaning "insert a skin tone here"
SKIN_TONE_SLOT = "skintone"

Template = Tuple[Optional[int], ...]


class EmojiType(str, Enum):
    NORMAL = "normal"
    VARIANT = "variant"
    DIVERSITY = "diversity"
    VARIANT_DIVERSITY = "variant,diversity"
    MULTI_DIVERSITY = "multi-diversity"
    KEYCAP = "keycap"
    FLAG = "flag"
    REGIONAL = "regional"
    TEXT_DEFAULT = "text-default"

    @classmethod
    def parse(cls, tag: Any, key: str = "") -> "EmojiType":
        if isinstance(tag, EmojiType):
            return tag
        if tag is None:
            return cls.NORMAL
        text = str(tag).strip().lower().replace(" ", "")
        try:
            return cls(text)
        except ValueError:
            raise UnknownEmojiTypeError(
                f"Emoji item {key or '?'}: unknown type tag {tag!r}", key
            ) from None


def parse_template(raw: Any, key: str = "") -> Optional[Template]:
    """Parse ``"1f9d1-skintone-200d-1f91d-200d-1f9d1-skintone"`` into a template."""
    if raw is None:
        return None
    if isinstance(raw, str):
        tokens: Iterable[Any] = [t for t in raw.strip().split("-") if t]
    else:
        tokens = raw
    out: List[Optional[int]] = []
    for token in tokens:
        if token is None or (isinstance(token, str) and token.lower() == SKIN_TONE_SLOT):
            out.append(None)
        elif isinstance(token, int):
            out.append(token)
        else:
            try:
                out.append(int(str(token), 16))
            except ValueError:
                raise MalformedRecordError(
                    f"Emoji item {key}: bad template token {token!r}", key
                ) from None
    if not out:
        raise MalformedRecordError(f"Emoji item {key}: empty multi-diversity template", key)
    return tuple(out)


def fill_template(template: Template, tones: Sequence[int]) -> List[int]:
    """Substitute tones into the placeholder slots, left to right."""
    filled: List[int] = []
    slot = 0
    for token in template:
        if token is None:
            # a template with more slots than tones reuses the last tone
            filled.append(tones[min(slot, len(tones) - 1)])
            slot += 1
        else:
            filled.append(token)
    return filled


def _keywords(raw: Any) -> Tuple[str, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        return tuple(k.strip() for k in raw.split(",") if k.strip())
    return tuple(str(k).strip() for k in raw if str(k).strip())


@dataclass(frozen=True)
class EmojiRecord:
    codepoints: CodepointSequence
    type: EmojiType = EmojiType.NORMAL
    multi_diversity_base_same: Optional[Template] = None
    multi_diversity_base_different: Optional[Template] = None
    multi_diversity_base_different_is_sorted: bool = False
    description: str = ""
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    exclude_from_picker: bool = False

    @property
    def key(self) -> str:
        return self.codepoints.key

    @property
    def has_zwj(self) -> bool:
        return self.codepoints.has_zwj

    @property
    def text(self) -> str:
        return self.codepoints.text

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "EmojiRecord":
        """Build a record from a raw table row (``unicode``, ``type``, ...)."""
        unicode = raw.get("unicode")
        if unicode is None:
            unicode = raw.get("codepoints")
        if unicode is None:
            raise MalformedRecordError("Emoji item without 'unicode' codepoints")
        try:
            if isinstance(unicode, str):
                base = CodepointSequence.from_key(unicode)
            else:
                base = CodepointSequence(unicode)
        except (TypeError, ValueError) as exc:
            label = unicode if isinstance(unicode, str) else repr(unicode)
            raise MalformedRecordError(
                f"Emoji item {label}: bad codepoints ({exc})", label
            ) from exc
        key = base.key
        exclude = bool(raw.get("exclude_from_picker", False))
        return cls(
            codepoints=CodepointSequence(base.cp, include_in_picker=not exclude),
            type=EmojiType.parse(raw.get("type"), key),
            multi_diversity_base_same=parse_template(raw.get("multi_diversity_base_same"), key),
            multi_diversity_base_different=parse_template(
                raw.get("multi_diversity_base_different"), key
            ),
            multi_diversity_base_different_is_sorted=bool(
                raw.get("multi_diversity_base_different_is_sorted", False)
            ),
            description=str(raw.get("description") or ""),
            keywords=_keywords(raw.get("keywords")),
            exclude_from_picker=exclude,
        )

    def diversity_sequences(self) -> List[CodepointSequence]:
        """
        Every sequence this record can render as, base first.

        ``diversity`` / ``variant,diversity``: one skin tone inserted before
        the first ZWJ (dropping a VS16 directly in front of it) or appended.
        ``multi-diversity``: all 25 ordered tone pairs through the templates.
        """
        base = self.codepoints
        if self.type in (EmojiType.DIVERSITY, EmojiType.VARIANT_DIVERSITY):
            out = [base]
            for tone in SKIN_TONES:
                if base.has_zwj:
                    idx = base.cp.index(CP_ZWJ)
                    before = list(base.cp[:idx])
                    while before and before[-1] == CP_VS16:
                        before.pop()
                    out.append(CodepointSequence(before + [tone] + list(base.cp[idx:])))
                else:
                    out.append(CodepointSequence(base.cp + (tone,)))
            return out
        if self.type is EmojiType.MULTI_DIVERSITY:
            return [base] + self._multi_diversity_sequences()
        return [base]

    def _multi_diversity_sequences(self) -> List[CodepointSequence]:
        different = self.multi_diversity_base_different
        same = self.multi_diversity_base_same
        if different is None:
            raise MalformedRecordError(
                f"Multi-diversity item {self.key} has no multi_diversity_base_different template",
                self.key,
            )
        out: List[CodepointSequence] = []
        for first in SKIN_TONES:
            for second in SKIN_TONES:
                if first == second and same is not None and same != different:
                    out.append(CodepointSequence(fill_template(same, (first,))))
                    continue
                in_picker = first >= second or not self.multi_diversity_base_different_is_sorted
                out.append(
                    CodepointSequence(fill_template(different, (first, second)), in_picker)
                )
        return out

    def picker_sequences(self) -> List[CodepointSequence]:
        return [seq for seq in self.diversity_sequences() if seq.include_in_picker]


@dataclass(frozen=True)
class EmojiCategory:
    id: str
    title: str = ""
    items: Tuple[EmojiRecord, ...] = ()

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "EmojiCategory":
        return cls(
            id=str(raw.get("id") or ""),
            title=str(raw.get("title") or ""),
            items=tuple(EmojiRecord.from_raw(item) for item in raw.get("items") or ()),
        )


def flatten(table: Iterable[Any]) -> List[EmojiRecord]:
    """Accept categories, records, or raw rows and return records in table order."""
    records: List[EmojiRecord] = []
    for entry in table:
        if isinstance(entry, EmojiCategory):
            records.extend(entry.items)
        elif isinstance(entry, EmojiRecord):
            records.append(entry)
        elif isinstance(entry, Mapping):
            if "items" in entry:
                records.extend(EmojiCategory.from_raw(entry).items)
            else:
                records.append(EmojiRecord.from_raw(entry))
        else:
            raise MalformedRecordError(f"Unsupported emoji table entry: {type(entry).__name__}")
    return records


__all__ = [
    "SKIN_TONE_SLOT",
    "EmojiType",
    "EmojiRecord",
    "EmojiCategory",
    "parse_template",
    "fill_template",
    "flatten",
]
