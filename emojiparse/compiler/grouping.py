from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple, Union

from emojiparse.compiler.codepoints import CodepointSequence, to_utf16_units
from emojiparse.compiler.spans import find_contiguous_spans, literal, render_spans
from emojiparse.errors import EmptyCategoryError
from emojiparse.settings import Flavor

SequenceLike = Union[CodepointSequence, Iterable[int]]


@dataclass(frozen=True)
class SpanGroup:
    """Shared prefix and the sorted terminal units that may follow it."""

    prefix: Tuple[int, ...]
    terminals: Tuple[int, ...]

    def render(self, flavor: Flavor = "python") -> str:
        head = "".join(literal(unit, flavor) for unit in self.prefix)
        return head + render_spans(find_contiguous_spans(self.terminals), flavor)


def _units(sequence: SequenceLike, flavor: Flavor) -> Tuple[int, ...]:
    cps = sequence.cp if isinstance(sequence, CodepointSequence) else tuple(sequence)
    if flavor == "utf16":
        return tuple(to_utf16_units(cps))
    return tuple(cps)


def group_by_prefix(
    sequences: Iterable[SequenceLike], flavor: Flavor = "python"
) -> List[SpanGroup]:
    """
    Map common prefixes to the last units that share them.

    [[1,2,3], [1,2,5], [1,2,9], [8,9], [20]] gives the groups
    (1,2)->(3,5,9), (8,)->(9,), ()->(20,). Longer prefixes sort first so an
    alternation never settles on a shorter alternative while a longer one
    could still match; equal lengths sort by prefix units.
    """
    grouped: Dict[Tuple[int, ...], Set[int]] = {}
    for sequence in sequences:
        units = _units(sequence, flavor)
        if not units:
            raise ValueError("cannot group an empty codepoint sequence")
        grouped.setdefault(units[:-1], set()).add(units[-1])

    groups = [SpanGroup(prefix, tuple(sorted(lasts))) for prefix, lasts in grouped.items()]
    groups.sort(key=lambda g: (-len(g.prefix), g.prefix))
    return groups


def pattern_from_sequences(
    sequences: Iterable[SequenceLike], flavor: Flavor = "python", name: str = ""
) -> str:
    """
    Alternation fragment matching exactly the given sequences.

    Returns a bare literal or class when every sequence is one unit long,
    otherwise a non-capturing group of ``prefix + class`` alternatives.
    """
    groups = group_by_prefix(sequences, flavor)
    if not groups:
        label = name or "pattern"
        raise EmptyCategoryError(f"Emoji category '{label}' cannot be empty", label)
    if len(groups) == 1 and not groups[0].prefix:
        return groups[0].render(flavor)
    return "(?:" + "|".join(group.render(flavor) for group in groups) + ")"


__all__ = ["SpanGroup", "group_by_prefix", "pattern_from_sequences"]
