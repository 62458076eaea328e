"""Doc comment body parser.

A comment body is free text with optional sections:

    @doc <description, may continue over several lines>
    Type: <type signature, joined into one line>
    Example: <verbatim usage example>

Markers are only recognised at the start of a (trimmed) line. A section lasts
until the next marker.
"""

from __future__ import annotations

from enum import Enum

from .constants import DOC_MARKER, EXAMPLE_MARKER, TYPE_MARKER
from .models import DocComment

_DOC_PREFIX = DOC_MARKER + " "


class Section(Enum):
    DOC = "doc"
    TYPE = "type"
    EXAMPLE = "example"


def parse_doc_comment(raw: str) -> DocComment:
    """Parse the text of one multiline comment into a DocComment."""
    buffers: dict[Section, list[str]] = {section: [] for section in Section}
    section = Section.DOC

    for line in raw.strip().split("\n"):
        section, text = step(section, line.strip())
        if section == Section.TYPE:
            buffers[section].append(text)
        else:
            buffers[section].append(text + "\n")

    doc_type = "".join(buffers[Section.TYPE])
    example = "".join(buffers[Section.EXAMPLE]).strip()
    return DocComment(
        doc="".join(buffers[Section.DOC]).strip(),
        doc_type=doc_type or None,
        example=example or None,
    )


def step(section: Section, line: str) -> tuple[Section, str]:
    """Apply the section markers of one trimmed *line*.

    Returns the section the line belongs to and the trimmed text to buffer.
    The three checks run in order on the progressively shortened line, so one
    line may switch section more than once.
    """
    if line.startswith(_DOC_PREFIX) or line == DOC_MARKER:
        section = Section.DOC
        line = _strip_repeated(line, _DOC_PREFIX)
        if line == DOC_MARKER:
            line = ""

    if line.startswith(TYPE_MARKER):
        section = Section.TYPE
        line = line[len(TYPE_MARKER):]

    if line.startswith(EXAMPLE_MARKER):
        section = Section.EXAMPLE
        line = _strip_repeated(line, EXAMPLE_MARKER)

    return section, line.strip()


def _strip_repeated(line: str, prefix: str) -> str:
    while line.startswith(prefix):
        line = line[len(prefix):]
    return line
