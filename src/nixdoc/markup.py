"""Streaming-style XML writer on top of lxml.

Callers open and close elements, write escaped text and raw CDATA blocks.
The writer refuses unbalanced nesting and serializes the finished tree as
indented XML.
"""

from __future__ import annotations

from collections.abc import Mapping

from lxml import etree

from .errors import MarkupError

_CDATA_END = "]]>"


class MarkupWriter:
    """Event sink building one XML document.

    *namespaces* maps prefixes to URIs; the `None` key is the default
    namespace of unprefixed element names. Prefixed names such as `xi:include`
    or `xml:id` are resolved against the same map.
    """

    def __init__(self, namespaces: Mapping[str | None, str] | None = None) -> None:
        self._namespaces = dict(namespaces or {})
        self._stack: list[etree._Element] = []
        self._has_cdata: list[bool] = []
        self._root: etree._Element | None = None

    @property
    def depth(self) -> int:
        return len(self._stack)

    def start_element(self, name: str, attributes: Mapping[str, str] | None = None) -> None:
        tag = self._qualify(name, default_namespace=True)
        attrib = {
            self._qualify(key, default_namespace=False): value
            for key, value in (attributes or {}).items()
        }
        if not self._stack:
            if self._root is not None:
                raise MarkupError(f"Document already has a root element; cannot open {name!r}.")
            nsmap = {prefix: uri for prefix, uri in self._namespaces.items() if prefix != "xml"}
            element = etree.Element(tag, attrib, nsmap=nsmap)
            self._root = element
        else:
            element = etree.SubElement(self._stack[-1], tag, attrib)
        self._stack.append(element)
        self._has_cdata.append(False)

    def characters(self, text: str) -> None:
        current = self._current("characters")
        if len(current):
            last = current[-1]
            last.tail = (last.tail or "") + text
        else:
            if self._has_cdata[-1]:
                raise MarkupError("Cannot mix text with a CDATA block.")
            try:
                current.text = (current.text or "") + text
            except ValueError as exc:
                raise MarkupError(f"Cannot write text: {exc}") from exc

    def cdata(self, text: str) -> None:
        current = self._current("cdata")
        if len(current) or current.text:
            raise MarkupError("A CDATA block must be the only content of its element.")
        # A CDATA section cannot contain its own terminator; such text is escaped.
        try:
            current.text = text if _CDATA_END in text else etree.CDATA(text)
        except ValueError as exc:
            raise MarkupError(f"Cannot write CDATA block: {exc}") from exc
        self._has_cdata[-1] = True

    def end_element(self) -> None:
        self._current("end_element")
        self._stack.pop()
        self._has_cdata.pop()

    def finish(self) -> bytes:
        """Return the serialized document. All elements must be closed."""
        if self._stack:
            raise MarkupError(f"{len(self._stack)} element(s) still open.")
        if self._root is None:
            raise MarkupError("Nothing was written.")
        return etree.tostring(
            self._root, pretty_print=True, xml_declaration=True, encoding="UTF-8"
        )

    def _current(self, operation: str) -> etree._Element:
        if not self._stack:
            raise MarkupError(f"{operation}() called with no open element.")
        return self._stack[-1]

    def _qualify(self, name: str, *, default_namespace: bool) -> str:
        prefix, sep, local = name.partition(":")
        if sep:
            uri = self._namespaces.get(prefix)
            if uri is None:
                raise MarkupError(f"Unknown namespace prefix {prefix!r} in {name!r}.")
            return f"{{{uri}}}{local}"
        default = self._namespaces.get(None)
        if default_namespace and default is not None:
            return f"{{{default}}}{name}"
        return name
