from __future__ import annotations

import pytest
from lxml import etree

from nixdoc.constants import XML_NS
from nixdoc.errors import MarkupError
from nixdoc.markup import MarkupWriter


def test_characters_are_escaped() -> None:
    w = MarkupWriter()
    w.start_element("para")
    w.characters("a < b & c")
    w.end_element()

    assert b"<para>a &lt; b &amp; c</para>" in w.finish()


def test_cdata_is_written_verbatim() -> None:
    w = MarkupWriter()
    w.start_element("programlisting")
    w.cdata('x < y && "z"')
    w.end_element()

    assert b'<programlisting><![CDATA[x < y && "z"]]></programlisting>' in w.finish()


def test_text_after_child_becomes_mixed_content() -> None:
    w = MarkupWriter()
    w.start_element("title")
    w.start_element("function")
    w.characters("lib.f")
    w.end_element()
    w.characters(" usage example")
    w.end_element()

    assert b"<title><function>lib.f</function> usage example</title>" in w.finish()


def test_prefixed_names_resolve_against_namespace_map() -> None:
    w = MarkupWriter({None: "urn:doc", "xi": "urn:xi", "xml": XML_NS})
    w.start_element("section", {"xml:id": "s1"})
    w.start_element("xi:include", {"href": "./x.xml"})
    w.end_element()
    w.end_element()

    out = w.finish()
    assert b'xmlns="urn:doc"' in out
    assert b'xmlns:xi="urn:xi"' in out
    assert b'xml:id="s1"' in out
    assert b'<xi:include href="./x.xml"/>' in out


def test_output_has_xml_declaration() -> None:
    w = MarkupWriter()
    w.start_element("a")
    w.end_element()

    assert w.finish().startswith(b"<?xml")


def test_end_element_without_open_element_raises() -> None:
    with pytest.raises(MarkupError):
        MarkupWriter().end_element()


def test_characters_without_open_element_raises() -> None:
    with pytest.raises(MarkupError):
        MarkupWriter().characters("x")


def test_finish_with_open_element_raises() -> None:
    w = MarkupWriter()
    w.start_element("a")

    with pytest.raises(MarkupError, match="still open"):
        w.finish()


def test_finish_without_content_raises() -> None:
    with pytest.raises(MarkupError):
        MarkupWriter().finish()


def test_second_root_element_raises() -> None:
    w = MarkupWriter()
    w.start_element("a")
    w.end_element()

    with pytest.raises(MarkupError):
        w.start_element("b")


def test_unknown_prefix_raises() -> None:
    with pytest.raises(MarkupError, match="Unknown namespace prefix"):
        MarkupWriter().start_element("xi:include")


def test_cdata_must_be_only_content() -> None:
    w = MarkupWriter()
    w.start_element("a")
    w.characters("text")

    with pytest.raises(MarkupError):
        w.cdata("code")


def test_text_after_cdata_raises() -> None:
    w = MarkupWriter()
    w.start_element("a")
    w.cdata("code")

    with pytest.raises(MarkupError):
        w.characters("more")


def test_cdata_containing_terminator_keeps_its_text() -> None:
    w = MarkupWriter()
    w.start_element("programlisting")
    w.cdata("f [[1]]>x")
    w.end_element()

    document = w.finish()

    assert b"f [[1]]&gt;x" in document
    assert etree.fromstring(document).text == "f [[1]]>x"


def test_depth_tracks_open_elements() -> None:
    w = MarkupWriter()
    w.start_element("a")
    w.start_element("b")
    assert w.depth == 2
    w.end_element()
    assert w.depth == 1
