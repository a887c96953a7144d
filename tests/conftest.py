# tests/conftest.py
from __future__ import annotations

import copy
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from emojiparse.compiler.pattern import CompiledPattern, compile_pattern  # noqa: E402
from emojiparse.compiler.records import EmojiCategory, EmojiRecord  # noqa: E402
from emojiparse.scanner.decorator import EmojiDecorator  # noqa: E402

# A small table touching every category the compiler renders.
RAW_TABLE: List[Dict[str, Any]] = [
    {
        "id": "people",
        "title": "People",
        "items": [
            {"unicode": "1f44b", "type": "diversity", "description": "waving hand"},
            {"unicode": "1f468", "type": "diversity", "description": "man"},
            {"unicode": "1f469", "type": "diversity", "description": "woman"},
            {"unicode": "1f9d1", "type": "diversity", "description": "person"},
            {"unicode": "1f3c3", "type": "diversity", "description": "person running"},
            {"unicode": "261d", "type": "variant,diversity", "description": "index pointing up"},
            {"unicode": "26f9", "type": "variant,diversity", "description": "person bouncing ball"},
            {"unicode": "1f468-200d-1f4bb", "type": "diversity", "description": "man technologist"},
            {"unicode": "1f469-200d-1f4bb", "type": "diversity", "description": "woman technologist"},
            {"unicode": "1f9d1-200d-1f4bb", "type": "diversity", "description": "technologist"},
            {
                "unicode": "26f9-fe0f-200d-2642-fe0f",
                "type": "diversity",
                "description": "man bouncing ball",
            },
            {
                "unicode": "26f9-fe0f-200d-2640-fe0f",
                "type": "diversity",
                "description": "woman bouncing ball",
            },
            {"unicode": "1f3c3-200d-2642-fe0f", "type": "diversity", "description": "man running"},
            {"unicode": "1f3c3-200d-2640-fe0f", "type": "diversity", "description": "woman running"},
            {
                "unicode": "1f468-200d-1f469-200d-1f466",
                "description": "family: man, woman, boy",
                "keywords": "family,household",
            },
            {
                "unicode": "1f9d1-200d-1f91d-200d-1f9d1",
                "type": "multi-diversity",
                "description": "people holding hands",
                "multi_diversity_base_same": "1f9d1-skintone-200d-1f91d-200d-1f9d1-skintone",
                "multi_diversity_base_different": "1f9d1-skintone-200d-1f91d-200d-1f9d1-skintone",
            },
            {
                "unicode": "1f46d",
                "type": "multi-diversity",
                "description": "women holding hands",
                "multi_diversity_base_same": "1f46d-skintone",
                "multi_diversity_base_different": "1f469-skintone-200d-1f91d-200d-1f469-skintone",
                "multi_diversity_base_different_is_sorted": True,
            },
        ],
    },
    {
        "id": "symbols",
        "title": "Symbols",
        "items": [
            {"unicode": "2764", "type": "variant", "description": "red heart"},
            {"unicode": "2640", "type": "variant", "description": "female sign"},
            {"unicode": "2642", "type": "variant", "description": "male sign"},
            {"unicode": "a9", "type": "text-default", "description": "copyright"},
            {"unicode": "ae", "type": "text-default", "description": "registered"},
            {"unicode": "23-20e3", "type": "keycap", "description": "keycap: #"},
            {"unicode": "2a-20e3", "type": "keycap", "description": "keycap: *"},
        ]
        + [
            {"unicode": f"{0x30 + d:x}-20e3", "type": "keycap", "description": f"keycap: {d}"}
            for d in range(10)
        ],
    },
    {
        "id": "misc",
        "title": "Smileys & Objects",
        "items": [
            {"unicode": "1f600", "description": "grinning face"},
            {"unicode": "1f4bb", "description": "laptop"},
            {"unicode": "1f525", "description": "fire", "exclude_from_picker": True},
            {"unicode": "1f3f3-fe0f-200d-1f308", "description": "rainbow flag"},
        ],
    },
    {
        "id": "flags",
        "title": "Flags",
        "items": [
            {"unicode": "1f1fa-1f1f8", "type": "flag", "description": "flag: United States"},
            {"unicode": "1f1fa", "type": "regional", "description": "regional indicator U"},
            {"unicode": "1f1f8", "type": "regional", "description": "regional indicator S"},
        ],
    },
]


@pytest.fixture()
def raw_table() -> List[Dict[str, Any]]:
    return copy.deepcopy(RAW_TABLE)


@pytest.fixture()
def categories() -> List[EmojiCategory]:
    return [EmojiCategory.from_raw(c) for c in RAW_TABLE]


@pytest.fixture()
def records(categories: List[EmojiCategory]) -> List[EmojiRecord]:
    return [r for c in categories for r in c.items]


@pytest.fixture(scope="session")
def compiled() -> CompiledPattern:
    return compile_pattern([EmojiCategory.from_raw(c) for c in RAW_TABLE], flavor="python")


@pytest.fixture()
def resolver_calls() -> List[str]:
    return []


@pytest.fixture()
def decorator(compiled: CompiledPattern, resolver_calls: List[str]) -> EmojiDecorator:
    def resolve(key: str) -> str:
        resolver_calls.append(key)
        return f"/assets/{key}.png"

    return EmojiDecorator(compiled, resolve_image=resolve)
