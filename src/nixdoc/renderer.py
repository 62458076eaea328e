"""DocBook renderer for manual entries."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path

from .constants import (
    ARGUMENT_CAPTION,
    CATEGORY_ID_PREFIX,
    DEFAULT_PREFIX,
    DOCBOOK_NS,
    ENTRY_ID_PREFIX,
    EXAMPLE_TITLE_SUFFIX,
    LOCATIONS_HREF,
    NAMESPACES,
)
from .errors import RenderError
from .markup import MarkupWriter
from .models import ManualEntry


def entry_ident(entry: ManualEntry, prefix: str = DEFAULT_PREFIX) -> str:
    """Return the qualified identifier, e.g. `lib.strings.concat`."""
    return f"{prefix}.{entry.category}.{entry.name}"


def write_section_xml(
    entry: ManualEntry, w: MarkupWriter, prefix: str = DEFAULT_PREFIX
) -> None:
    """Write one DocBook `<section>` describing a documented function."""
    ident = entry_ident(entry, prefix)

    w.start_element("section", {"xml:id": f"{ENTRY_ID_PREFIX}{ident}"})

    w.start_element("title")
    _function_name(w, ident)
    w.end_element()

    if entry.fn_type is not None:
        w.start_element("subtitle")
        w.start_element("literal")
        w.characters(entry.fn_type)
        w.end_element()
        w.end_element()

    # Location information comes from a separately generated file.
    w.start_element("xi:include", {"href": LOCATIONS_HREF, "xpointer": ident})
    w.end_element()

    for paragraph in entry.description:
        w.start_element("para")
        w.characters(paragraph)
        w.end_element()

    if entry.args:
        w.start_element("variablelist")
        for arg in entry.args:
            w.start_element("varlistentry")

            w.start_element("term")
            w.start_element("varname")
            w.characters(arg)
            w.end_element()
            w.end_element()

            w.start_element("listitem")
            w.start_element("para")
            w.characters(ARGUMENT_CAPTION)
            w.end_element()
            w.end_element()

            w.end_element()
        w.end_element()

    if entry.example is not None:
        w.start_element("example")
        w.start_element("title")
        _function_name(w, ident)
        w.characters(EXAMPLE_TITLE_SUFFIX)
        w.end_element()
        w.start_element("programlisting")
        w.cdata(entry.example)
        w.end_element()
        w.end_element()

    w.end_element()


def render_document(
    entries: Sequence[ManualEntry],
    category: str,
    description: str,
    prefix: str = DEFAULT_PREFIX,
) -> bytes:
    """Render the category section holding all *entries*, in order."""
    w = MarkupWriter({None: DOCBOOK_NS, **NAMESPACES})
    w.start_element("section", {"xml:id": f"{CATEGORY_ID_PREFIX}{category}"})

    w.start_element("title")
    w.characters(description)
    w.end_element()

    for entry in entries:
        write_section_xml(entry, w, prefix)

    w.end_element()
    return w.finish()


def write_document(document: bytes, output_path: Path | None) -> None:
    """Write *document* to *output_path*, or to stdout when it is None."""
    try:
        if output_path is None:
            sys.stdout.buffer.write(document)
            sys.stdout.buffer.flush()
            return
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(document)
    except OSError as exc:
        target = "stdout" if output_path is None else str(output_path)
        raise RenderError(f"Failed to write document to {target}: {exc}") from exc


def _function_name(w: MarkupWriter, ident: str) -> None:
    w.start_element("function")
    w.characters(ident)
    w.end_element()
