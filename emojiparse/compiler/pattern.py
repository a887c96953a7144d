"""
Assemble the master emoji pattern from a classified table.

The output mirrors the layout of the generated twemoji-style regex: one
fragment per category, glued together with fixed fragments for the
variation selectors, keycap mark, skin tones and gender signs. ZWJ and
multi-person alternatives come first so a shorter single-codepoint emoji
never wins over a longer sequence starting at the same position.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Iterable, List, Mapping, Optional

from emojiparse.compiler.classifier import Category, ClassifiedTable, classify
from emojiparse.compiler.codepoints import (
    CP_FEMALE_SIGN,
    CP_KEYCAP,
    CP_MALE_SIGN,
    CP_MAN,
    CP_PERSON,
    CP_VS15,
    CP_VS16,
    CP_WOMAN,
    CP_ZWJ,
    SKIN_TONES,
)
from emojiparse.compiler.grouping import pattern_from_sequences
from emojiparse.compiler.spans import literal
from emojiparse.errors import EmptyCategoryError, PatternCompileError
from emojiparse.settings import CompilerSettings, Flavor, get_compiler_settings
from emojiparse.telemetry import metrics
from emojiparse.telemetry.logging import bind

log = bind(logging.getLogger(__name__), component="compiler")


@dataclass(frozen=True)
class CompiledPattern:
    """Pattern source plus the named fragments it was built from."""

    source: str
    flavor: Flavor = "python"
    fragments: Mapping[str, str] = field(default_factory=dict)

    @cached_property
    def regex(self) -> "re.Pattern[str]":
        if self.flavor != "python":
            raise ValueError(
                f"{self.flavor} patterns are for embedding; compile with flavor='python' to execute"
            )
        return re.compile(self.source)

    def fullmatch(self, text: str) -> bool:
        return self.regex.fullmatch(text) is not None

    def as_dict(self) -> Dict[str, object]:
        return {"flavor": self.flavor, "source": self.source, "fragments": dict(self.fragments)}


def auxiliary_fragments(flavor: Flavor = "python") -> Dict[str, str]:
    tones = [[t] for t in SKIN_TONES]
    return {
        "zwj": literal(CP_ZWJ, flavor),
        "vs15": literal(CP_VS15, flavor),
        "vs16": literal(CP_VS16, flavor),
        "keycap": literal(CP_KEYCAP, flavor),
        "skin_tone": pattern_from_sequences(tones, flavor, "skin_tone"),
        "skin_tone_or_vs16": pattern_from_sequences(
            [[CP_VS16]] + tones, flavor, "skin_tone_or_vs16"
        ),
        "gender_sign": pattern_from_sequences(
            [[CP_FEMALE_SIGN], [CP_MALE_SIGN]], flavor, "gender_sign"
        ),
        "man_woman_person": pattern_from_sequences(
            [[CP_MAN], [CP_WOMAN], [CP_PERSON]], flavor, "man_woman_person"
        ),
    }


def _assemble(f: Mapping[str, str]) -> str:
    def opt(fragment: str) -> str:
        return fragment + "?"

    # A fragment is missing only when optional categories were allowed to be empty.
    alternatives: List[Optional[str]] = [
        f.get("multi_diversity"),
        _join(f, "zwj_leading_gender", f["man_woman_person"], opt(f["skin_tone"]), f["zwj"]),
        _join_before(
            f,
            "zwj_trailing_gender_with_variant",
            opt(f["skin_tone_or_vs16"]) + f["zwj"] + f["gender_sign"] + opt(f["vs16"]),
        ),
        _join_before(
            f,
            "zwj_trailing_gender_without_variant",
            opt(f["skin_tone"]) + f["zwj"] + f["gender_sign"] + opt(f["vs16"]),
        ),
        f.get("zwj_plain"),
        _join_before(f, "keycap_prefix", opt(f["vs16"]) + f["keycap"]),
        _join_before(f, "variant_diversity", opt(f["skin_tone_or_vs16"])),
        _join_before(f, "diversity", opt(f["skin_tone"])),
        _join_before(f, "text_default", f["vs16"]),
        _join_before(f, "variant", f"(?:{f['vs16']}|(?!{f['vs15']}))"),
        f.get("normal"),
    ]
    return "(?:" + "|".join(a for a in alternatives if a) + ")"


def _join(f: Mapping[str, str], name: str, *head: str) -> Optional[str]:
    body = f.get(name)
    return "".join(head) + body if body else None


def _join_before(f: Mapping[str, str], name: str, tail: str) -> Optional[str]:
    body = f.get(name)
    return body + tail if body else None


class PatternCompiler:
    """Compile an emoji table into a single :class:`CompiledPattern`."""

    def __init__(self, settings: Optional[CompilerSettings] = None) -> None:
        self.settings = settings or get_compiler_settings()

    @property
    def flavor(self) -> Flavor:
        return self.settings.flavor

    def fragments(self, classified: ClassifiedTable) -> Dict[str, str]:
        flavor = self.flavor
        out: Dict[str, str] = {}
        for category in Category:
            sequences = classified[category]
            if not sequences:
                if self.settings.require_all_categories:
                    raise EmptyCategoryError(
                        f"Emoji category '{category.value}' cannot be empty", category.value
                    )
                log.warning("emoji category empty; omitted", extra={"category": category.value})
                continue
            out[category.value] = pattern_from_sequences(sequences, flavor, category.value)
        out.update(auxiliary_fragments(flavor))
        return out

    def compile(self, table: Iterable[object]) -> CompiledPattern:
        started = time.perf_counter()
        try:
            fragments = self.fragments(classify(table))
            source = _assemble(fragments)
        except PatternCompileError as exc:
            metrics.record_compile("error", time.perf_counter() - started)
            log.error(
                "emoji pattern compilation failed",
                extra={"error": type(exc).__name__, "key": exc.key},
            )
            raise
        metrics.record_compile("ok", time.perf_counter() - started)
        log.info(
            "emoji pattern compiled",
            extra={"flavor": self.flavor, "pattern_chars": len(source)},
        )
        return CompiledPattern(source=source, flavor=self.flavor, fragments=fragments)


def compile_pattern(table: Iterable[object], flavor: Optional[Flavor] = None) -> CompiledPattern:
    settings = get_compiler_settings()
    if flavor is not None:
        settings = settings.model_copy(update={"flavor": flavor})
    return PatternCompiler(settings).compile(table)


__all__ = ["CompiledPattern", "PatternCompiler", "auxiliary_fragments", "compile_pattern"]
