"""Literal constants used by nixdoc."""

APP_NAME = "nixdoc"

# Doc comment mini-language markers
DOC_MARKER = "@doc"
TYPE_MARKER = "Type:"
EXAMPLE_MARKER = "Example:"
PARAGRAPH_SEPARATOR = "\n\n"

# DocBook output
DOCBOOK_NS = "http://docbook.org/ns/docbook"
XLINK_NS = "http://www.w3.org/1999/xlink"
XINCLUDE_NS = "http://www.w3.org/2001/XInclude"
XML_NS = "http://www.w3.org/XML/1998/namespace"
NAMESPACES = {
    "xlink": XLINK_NS,
    "xi": XINCLUDE_NS,
    "xml": XML_NS,
}

DEFAULT_PREFIX = "lib"
CATEGORY_ID_PREFIX = "sec-functions-library-"
ENTRY_ID_PREFIX = "function-library-"
LOCATIONS_HREF = "./locations.xml"
ARGUMENT_CAPTION = "Function argument"
EXAMPLE_TITLE_SUFFIX = " usage example"

ERROR_PREFIX = "ERROR:"
SOURCE_ENCODING = "utf-8"
