import xml.etree.ElementTree as ET

import pytest
from bs4 import BeautifulSoup

from emojiparse.compiler.codepoints import CodepointSequence, to_code_point
from emojiparse.scanner.decorator import EmojiDecorator, EmojiMatch, parse
from emojiparse.settings import DecoratorSettings

HEART = chr(0x2764) + chr(0xFE0F)
GRIN = chr(0x1F600)
KEYCAP_3 = "3" + chr(0xFE0F) + chr(0x20E3)
FAMILY = CodepointSequence.from_key("1f468-200d-1f469-200d-1f466").text
RAINBOW = CodepointSequence.from_key("1f3f3-fe0f-200d-1f308").text


def test_parse_string_replaces_with_accessible_img(decorator, resolver_calls) -> None:
    out = decorator.parse_string(f"I {HEART} emoji!")
    assert out == (
        f'I <img draggable="false" class="emoji" alt="{HEART}" src="/assets/2764.png"/> emoji!'
    )
    assert resolver_calls == ["2764"]


def test_canonical_keys() -> None:
    assert EmojiDecorator.canonical_key(HEART) == "2764"
    assert EmojiDecorator.canonical_key(KEYCAP_3) == "33-20e3"
    # joined sequences keep every codepoint, VS16 included
    assert EmojiDecorator.canonical_key(FAMILY) == "1f468-200d-1f469-200d-1f466"
    assert EmojiDecorator.canonical_key(RAINBOW) == "1f3f3-fe0f-200d-1f308"


def test_zwj_sequence_resolves_as_one_image(decorator, resolver_calls) -> None:
    out = decorator.parse_string(FAMILY)
    assert out.count("<img") == 1
    assert resolver_calls == ["1f468-200d-1f469-200d-1f466"]


def test_keycap_resolves(decorator, resolver_calls) -> None:
    decorator.parse_string(f"press {KEYCAP_3}")
    assert resolver_calls == ["33-20e3"]


def test_unresolved_emoji_left_untouched(compiled) -> None:
    decorator = EmojiDecorator(compiled, resolve_image=lambda key: None)
    text = f"a {GRIN} b {HEART}"
    assert decorator.parse_string(text) == text


def test_resolver_failure_leaves_text(compiled) -> None:
    def broken(key: str) -> str:
        raise RuntimeError("cdn down")

    decorator = EmojiDecorator(compiled, resolve_image=broken)
    assert decorator.parse_string(GRIN) == GRIN


def test_attribute_callback_is_filtered_and_escaped(compiled) -> None:
    def extra(raw: str, key: str):
        return {
            "onclick": "alert(1)",
            "OnLoad": "x",
            "title": 'a<b "c"',
            "alt": "overridden",
            "data-key": key,
            "bad name": "x",
            "width": None,
        }

    decorator = EmojiDecorator(
        compiled, resolve_image=lambda key: f"/e/{key}.png", decorate_attributes=extra
    )
    out = decorator.parse_string(GRIN)
    assert "onclick" not in out and "OnLoad" not in out and "bad name" not in out
    assert 'title="a&lt;b &quot;c&quot;"' in out
    assert f'alt="{GRIN}"' in out
    assert 'data-key="1f600"' in out
    assert "width" not in out


def test_attribute_callback_failure_keeps_defaults(compiled) -> None:
    def extra(raw: str, key: str):
        raise KeyError(key)

    decorator = EmojiDecorator(
        compiled, resolve_image=lambda key: f"/e/{key}.png", decorate_attributes=extra
    )
    assert decorator.parse_string(GRIN) == (
        f'<img draggable="false" class="emoji" alt="{GRIN}" src="/e/1f600.png"/>'
    )


def test_default_image_src_uses_settings(compiled) -> None:
    settings = DecoratorSettings(
        base_url="/static/", size="36x36", image_type=".svg", class_name="e"
    )
    decorator = EmojiDecorator(compiled, settings=settings)
    assert decorator.default_image_src("2764") == "/static/36x36/2764.svg"
    out = decorator.parse_string(HEART)
    assert 'class="e"' in out
    assert 'src="/static/36x36/2764.svg"' in out


def test_find_all_is_restartable(decorator) -> None:
    text = f"x{GRIN}y{FAMILY}z{KEYCAP_3}"
    first = list(decorator.find_all(text))
    second = list(decorator.find_all(text))
    assert first == second
    assert [m.text for m in first] == [GRIN, FAMILY, KEYCAP_3]
    assert first[0] == EmojiMatch(GRIN, 1)
    assert text[first[1].start : first[1].end] == FAMILY


def test_test_and_replace(decorator) -> None:
    assert decorator.test(f"hi {GRIN}")
    assert not decorator.test("plain text 123")
    assert not decorator.test(chr(0xA9))
    replaced = decorator.replace(f"a{GRIN}b{HEART}", lambda raw: f"[{to_code_point(raw)}]")
    assert replaced == "a[1f600]b[2764-fe0f]"


def test_accepts_pattern_source(compiled) -> None:
    decorator = EmojiDecorator(compiled.source, resolve_image=lambda key: key)
    assert decorator.test(GRIN)


def test_parse_element_inserts_img_nodes(decorator) -> None:
    root = ET.fromstring(
        f"<p>hi {HEART}<b>x</b> tail {GRIN} end<script>{GRIN}</script></p>"
    )
    assert decorator.parse_element(root) is root
    assert [child.tag for child in root] == ["img", "b", "img", "script"]
    assert root.text == "hi "
    heart, bold, grin, script = list(root)
    assert heart.get("alt") == HEART
    assert heart.get("src") == "/assets/2764.png"
    assert heart.tail is None
    assert bold.tail == " tail "
    assert grin.get("src") == "/assets/1f600.png"
    assert grin.tail == " end"
    assert script.text == GRIN


def test_parse_element_skips_images_and_form_controls(decorator, resolver_calls) -> None:
    root = ET.fromstring(f"<div><textarea>{GRIN}</textarea><style>{GRIN}</style></div>")
    decorator.parse_element(root)
    assert [child.tag for child in root] == ["textarea", "style"]
    assert resolver_calls == []


def test_parse_element_keeps_xhtml_namespace(decorator) -> None:
    root = ET.fromstring(f'<p xmlns="http://www.w3.org/1999/xhtml">{GRIN}</p>')
    decorator.parse_element(root)
    assert [child.tag for child in root] == ["{http://www.w3.org/1999/xhtml}img"]


def test_parse_element_strips_stray_vs16_around_images(decorator) -> None:
    root = ET.fromstring(f"<p>{GRIN} a{chr(0xFE0F)}b</p>")
    decorator.parse_element(root)
    assert root[0].tail == " ab"


def test_parse_element_without_matches_is_untouched(decorator) -> None:
    root = ET.fromstring("<p>nothing here</p>")
    decorator.parse_element(root)
    assert root.text == "nothing here"
    assert len(root) == 0


def test_parse_dispatches_on_input(compiled) -> None:
    assert parse(GRIN, compiled, resolve_image=lambda key: None) == GRIN
    element = ET.fromstring(f"<span>{GRIN}</span>")
    parse(element, compiled, resolve_image=lambda key: f"/{key}")
    assert element[0].get("src") == "/1f600"
    with pytest.raises(TypeError):
        EmojiDecorator(compiled).parse(42)  # type: ignore[arg-type]


def test_non_mapping_attributes_fall_back_to_defaults(compiled) -> None:
    decorator = EmojiDecorator(
        compiled,
        resolve_image=lambda key: f"/e/{key}.png",
        decorate_attributes=lambda raw, key: [("title", "t")],
    )
    out = decorator.parse_string(f"a {GRIN} b {GRIN}")
    img = f'<img draggable="false" class="emoji" alt="{GRIN}" src="/e/1f600.png"/>'
    assert out == f"a {img} b {img}"
    assert "title" not in out


def test_parse_element_decorates_html_soup(decorator) -> None:
    soup = BeautifulSoup(
        f"<p>hi {GRIN}<br>x &amp; {HEART}{chr(0xFE0F)}!</p>"
        f"<!-- {GRIN} --><script>var s = '{GRIN}';</script><textarea>{GRIN}</textarea>",
        "html.parser",
    )
    assert decorator.parse_element(soup) is soup
    images = soup.p.find_all("img")
    assert [img["src"] for img in images] == ["/assets/1f600.png", "/assets/2764.png"]
    assert images[1]["alt"] == HEART
    assert images[1]["class"] == "emoji" or images[1]["class"] == ["emoji"]
    assert soup.p.contents[0] == "hi "
    assert images[1].next_sibling == "!"
    assert "x &amp; <img" in str(soup.p)
    assert GRIN in soup.script.string
    assert GRIN in soup.textarea.string
    assert len(soup.find_all("img")) == 2


def test_parse_dispatches_soup_tags(compiled) -> None:
    soup = BeautifulSoup(f"<div><span>{GRIN}</span></div>", "html.parser")
    parse(soup.span, compiled, resolve_image=lambda key: f"/{key}")
    assert soup.span.img["src"] == "/1f600"
