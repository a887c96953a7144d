"""
Decorate the emoji found in strings and element trees with image versions
while staying accessible: every image keeps the original text as ``alt``.

    decorator = EmojiDecorator(compiled)
    decorator.parse_string("I ❤️ emoji!")
    # I <img draggable="false" class="emoji" alt="❤️" src=".../72x72/2764.png"/> emoji!

    EmojiDecorator(compiled, resolve_image=lambda key: f"/assets/{key}.gif")

Emoji that cannot be resolved are left exactly as they were.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import Callable, Dict, Iterator, List, Mapping, NamedTuple, Optional, Tuple, Union

from bs4 import NavigableString, Tag

from emojiparse.compiler.codepoints import CP_VS16, CP_ZWJ, to_code_point
from emojiparse.compiler.pattern import CompiledPattern
from emojiparse.scanner.markup import SKIPPED_TAGS, local_name, merge_attributes, render_img
from emojiparse.settings import DecoratorSettings, get_decorator_settings
from emojiparse.telemetry import metrics
from emojiparse.telemetry.logging import bind

log = bind(logging.getLogger(__name__), component="scanner")

ImageResolver = Callable[[str], Optional[str]]
AttributesCallback = Callable[[str, str], Optional[Mapping[str, object]]]
PatternLike = Union[CompiledPattern, "re.Pattern[str]", str]
TreeNode = Union[ET.Element, Tag]

_VS16 = chr(CP_VS16)
_ZWJ = chr(CP_ZWJ)


class EmojiMatch(NamedTuple):
    text: str
    start: int

    @property
    def end(self) -> int:
        return self.start + len(self.text)


def _as_regex(pattern: PatternLike) -> "re.Pattern[str]":
    if isinstance(pattern, CompiledPattern):
        return pattern.regex
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def _no_attributes(raw: str, key: str) -> Optional[Mapping[str, object]]:
    return None


class EmojiDecorator:
    def __init__(
        self,
        pattern: PatternLike,
        resolve_image: Optional[ImageResolver] = None,
        decorate_attributes: Optional[AttributesCallback] = None,
        settings: Optional[DecoratorSettings] = None,
    ) -> None:
        self.settings = settings or get_decorator_settings()
        self._regex = _as_regex(pattern)
        self.resolve_image: ImageResolver = resolve_image or self.default_image_src
        self.decorate_attributes: AttributesCallback = decorate_attributes or _no_attributes

    @property
    def class_name(self) -> str:
        return self.settings.class_name

    def default_image_src(self, key: str) -> str:
        s = self.settings
        return f"{s.base_url}{s.size}/{key}{s.image_type}"

    # ------------------------------------------------------------------ matching

    def find_all(self, text: str) -> Iterator[EmojiMatch]:
        """Matches left to right, non-overlapping; each call starts afresh."""
        for m in self._regex.finditer(text):
            yield EmojiMatch(m.group(0), m.start())

    def test(self, text: str) -> bool:
        """True when ``text`` holds at least one emoji."""
        return self._regex.search(text) is not None

    def replace(self, text: str, callback: Callable[[str], str]) -> str:
        """Replace every emoji with whatever ``callback(raw_emoji)`` returns."""
        return self._regex.sub(lambda m: callback(m.group(0)), text)

    @staticmethod
    def canonical_key(raw: str) -> str:
        """
        Hex key used for asset lookup. VS16 is dropped unless the match holds a
        ZWJ; joined sequences keep every codepoint.
        """
        if _ZWJ not in raw:
            raw = raw.replace(_VS16, "")
        return to_code_point(raw)

    # ---------------------------------------------------------------- resolution

    def _resolve(self, raw: str) -> Tuple[str, Optional[str]]:
        key = self.canonical_key(raw)
        if not key:
            metrics.record_match("unresolved")
            return key, None
        try:
            src = self.resolve_image(key)
        except Exception as exc:
            log.warning("emoji image resolver failed", extra={"key": key, "error": repr(exc)})
            metrics.record_match("error")
            return key, None
        if not src:
            metrics.record_match("unresolved")
            return key, None
        metrics.record_match("resolved")
        return key, str(src)

    def _attributes(self, raw: str, key: str, src: str) -> Dict[str, str]:
        try:
            extra = self.decorate_attributes(raw, key)
        except Exception as exc:
            log.warning("emoji attribute callback failed", extra={"key": key, "error": repr(exc)})
            extra = None
        if extra is not None and not isinstance(extra, Mapping):
            log.warning(
                "emoji attribute callback returned a non-mapping",
                extra={"key": key, "returned": type(extra).__name__},
            )
            extra = None
        attrs = merge_attributes(
            {"draggable": "false", "class": self.class_name, "alt": raw, "src": src}, extra
        )
        # the accessible text is always the original match
        attrs["alt"] = raw
        return attrs

    def _pieces(self, text: str) -> Optional[List[Union[str, Dict[str, str]]]]:
        """
        Split ``text`` into plain strings and ``img`` attribute dicts, in order.
        Stray VS16 is removed from the plain parts. None when nothing resolved.
        """
        pieces: List[Union[str, Dict[str, str]]] = []
        buf: List[str] = []
        pos = 0
        resolved = False
        for m in self._regex.finditer(text):
            raw = m.group(0)
            buf.append(text[pos : m.start()].replace(_VS16, ""))
            pos = m.end()
            key, src = self._resolve(raw)
            if src is None:
                buf.append(raw)
                continue
            if "".join(buf):
                pieces.append("".join(buf))
            buf.clear()
            pieces.append(self._attributes(raw, key, src))
            resolved = True

        if not resolved:
            return None
        buf.append(text[pos:].replace(_VS16, ""))
        if "".join(buf):
            pieces.append("".join(buf))
        return pieces

    # ------------------------------------------------------------------- strings

    def parse_string(self, text: str) -> str:
        """Replace emoji in an HTML string with ``<img/>`` tags."""

        def _sub(m: "re.Match[str]") -> str:
            raw = m.group(0)
            key, src = self._resolve(raw)
            if src is None:
                return raw
            return render_img(self._attributes(raw, key, src).items())

        return self._regex.sub(_sub, text)

    # ------------------------------------------------------------------ elements

    def parse_element(self, element: TreeNode) -> TreeNode:
        """
        Decorate text inside a tree in place, inserting ``img`` elements.

        Accepts an ``xml.etree.ElementTree`` element (XHTML) or a BeautifulSoup
        tag / document for real-world HTML. Script, style, form-control, svg
        and img subtrees are left alone. Returns the same object.
        """
        if isinstance(element, Tag):
            self._decorate_soup(element)
        else:
            self._decorate(element)
        return element

    def parse(self, what: Union[str, TreeNode]) -> Union[str, TreeNode]:
        if isinstance(what, str):
            return self.parse_string(what)
        if isinstance(what, (ET.Element, Tag)):
            return self.parse_element(what)
        raise TypeError(f"cannot decorate {type(what).__name__}")

    def _decorate(self, element: ET.Element) -> None:
        children = list(element)
        for child in children:
            if isinstance(child.tag, str) and local_name(child.tag) not in SKIPPED_TAGS:
                self._decorate(child)
            if child.tail:
                split = self._split(child.tail, element.tag)
                if split is not None:
                    child.tail, nodes = split
                    at = list(element).index(child) + 1
                    for offset, node in enumerate(nodes):
                        element.insert(at + offset, node)

        if element.text:
            split = self._split(element.text, element.tag)
            if split is not None:
                element.text, nodes = split
                for offset, node in enumerate(nodes):
                    element.insert(offset, node)

    def _split(
        self, text: str, parent_tag: object
    ) -> Optional[Tuple[Optional[str], List[ET.Element]]]:
        """Leading text plus img elements, each carrying the text after it as ``tail``."""
        pieces = self._pieces(text)
        if pieces is None:
            return None
        leading: Optional[str] = None
        nodes: List[ET.Element] = []
        for piece in pieces:
            if isinstance(piece, dict):
                nodes.append(ET.Element(_img_tag(parent_tag), piece))
            elif nodes:
                nodes[-1].tail = piece
            else:
                leading = piece
        return leading, nodes

    def _decorate_soup(self, root: Tag) -> None:
        for node in list(root.find_all(string=True)):
            # comments, doctypes and script bodies are NavigableString subclasses
            if type(node) is not NavigableString:
                continue
            if any(local_name(parent.name) in SKIPPED_TAGS for parent in node.parents):
                continue
            pieces = self._pieces(str(node))
            if pieces is None:
                continue
            node.replace_with(
                *(
                    Tag(name="img", attrs=piece, can_be_empty_element=True)
                    if isinstance(piece, dict)
                    else NavigableString(piece)
                    for piece in pieces
                )
            )


def _img_tag(parent_tag: object) -> str:
    # keep XHTML trees in their namespace
    if isinstance(parent_tag, str) and parent_tag.startswith("{"):
        return parent_tag.split("}", 1)[0] + "}img"
    return "img"


def parse(
    what: Union[str, TreeNode], pattern: PatternLike, **options: object
) -> Union[str, TreeNode]:
    """Shortcut for ``EmojiDecorator(pattern, **options).parse(what)``."""
    return EmojiDecorator(pattern, **options).parse(what)  # type: ignore[arg-type]


__all__ = ["EmojiMatch", "EmojiDecorator", "parse"]
