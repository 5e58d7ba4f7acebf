"""
Tests for the Loader and the document tree it builds.

Checks the "never fail on bad markup" contract, whitespace handling,
sanitization warnings, the authored-element census and the frozen tree.
"""

import pytest

from html_audit.loader import Loader, load
from html_audit.exceptions import ParseFailure


def test_collapses_whitespace_by_default():
    tree = load("<html><body><p>a   \n\t  b</p></body></html>")
    assert tree.find("p").text_content() == "a b"


def test_preserve_whitespace_keeps_text_as_written():
    tree = load("<html><body><p>a   \n  b</p></body></html>", preserve_whitespace=True)
    assert tree.find("p").text_content() == "a   \n  b"


def test_script_text_is_never_collapsed():
    tree = load("<html><head><script>var  x = 1;\n</script></head></html>")
    assert tree.find("script").text_content() == "var  x = 1;\n"


def test_per_call_override_beats_loader_setting():
    loader = Loader(preserve_whitespace=True)
    tree = loader.load("<p>a    b</p>", preserve_whitespace=False)
    assert tree.find("p").text_content() == "a b"


def test_entities_are_decoded():
    tree = load("<p>Fish &amp; Chips &copy;</p>")
    assert tree.find("p").text_content() == "Fish & Chips ©"


def test_comments_are_dropped():
    tree = load("<html><body><!-- note --><p>x</p></body></html>")
    assert tree.find("body").text_content() == "x"


def test_multi_valued_attributes_are_flattened():
    tree = load('<div class="a  b" rel="x"></div>')
    assert tree.find("div").get("class") == "a b"


def test_malformed_markup_is_repaired_not_rejected():
    tree = load("<div><p>one<p>two</div></span><b>bold")
    assert [p.text_content() for p in tree.find_all("p")] == ["one", "two"]
    assert tree.find("b").text_content() == "bold"
    assert tree.parser == "html5lib"


def test_sanitization_warnings():
    tree = load("<html>\x00<body>\x07text</body></html>")
    assert "Removed NULL bytes" in tree.warnings
    assert "Removed control characters" in tree.warnings
    assert tree.find("body").text_content() == "text"


def test_census_ignores_synthesized_elements():
    tree = load("<p>hi</p>")
    # html5lib builds html/head/body anyway...
    assert tree.find("html") is not None
    assert tree.find("body") is not None
    # ...but none of them were written
    assert dict(tree.authored_counts) == {"html": 0, "head": 0, "body": 0, "title": 0}


def test_census_counts_authored_elements():
    tree = load("<html><html><head><title>T</title></head><body></body></html>")
    assert tree.authored_counts["html"] == 2
    assert tree.authored_counts["head"] == 1
    assert tree.authored_counts["title"] == 1


def test_document_element_is_html():
    tree = load('<html lang="en"><body></body></html>')
    assert tree.document_element.tag == "html"
    assert tree.document_element.get("lang") == "en"


def test_tree_is_frozen():
    tree = load('<img src="a.png">')
    img = tree.find("img")
    with pytest.raises(TypeError):
        img.attrs["src"] = "b.png"
    assert isinstance(img.children, tuple)
    assert img.parent.tag == "body"


def test_non_string_input_raises_parse_failure():
    with pytest.raises(ParseFailure):
        load(None)


def test_xml_mode():
    tree = Loader(xml_mode=True).load('<root><item id="a">x</item></root>')
    assert tree.parser == "xml"
    assert tree.find("item").get("id") == "a"
    assert tree.authored_counts["html"] == 0


def test_detect_charset_from_bytes():
    assert Loader.detect_charset_from_bytes(b'<meta charset="utf-8">') == "utf-8"
    # WHATWG remaps latin-1 labels the way browsers do
    assert Loader.detect_charset_from_bytes(b'<meta charset="ISO-8859-1">') == "windows-1252"
    legacy = b'<meta http-equiv="Content-Type" content="text/html; charset=Shift_JIS">'
    assert Loader.detect_charset_from_bytes(legacy) == "shift_jis"
    assert Loader.detect_charset_from_bytes(b"<p>no declaration</p>") == "utf-8"
