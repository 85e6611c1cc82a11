"""
harel: SCXML parser, validator and serializer

Parse W3C SCXML 1.0 documents into an immutable AST, check them for
unique ids and resolvable targets, and write them back as canonical XML.

    from harel import parse_string, validate, serialize

    document = parse_string(xml_text)
    validate(document)
    print(serialize(document))

No state machine is ever executed; this package only describes and
checks one.
"""

import logging

from .element import Element, load
from .errors import (
    CircularInitial,
    DuplicateId,
    HarelError,
    InvalidDatamodel,
    InvalidNamespace,
    InvalidStructure,
    InvalidTarget,
    InvalidXml,
    MissingAttribute,
    MissingElement,
    ParseError,
    ValidationError,
)
from .model import (
    EXECUTABLE_TYPES,
    STATE_LIKE_TYPES,
    Assign,
    Cancel,
    Content,
    DataItem,
    Document,
    DoneData,
    Executable,
    Final,
    Finalize,
    Foreach,
    History,
    If,
    Initial,
    Invoke,
    Log,
    Other,
    Parallel,
    Param,
    Raise,
    Script,
    Send,
    State,
    StateLike,
    Transition,
)
from .parser import SCXML_NAMESPACE, ParseOptions, SCXMLParser, parse, parse_string
from .serializer import serialize
from .validator import validate

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Assign",
    "Cancel",
    "CircularInitial",
    "Content",
    "DataItem",
    "Document",
    "DoneData",
    "DuplicateId",
    "EXECUTABLE_TYPES",
    "Element",
    "Executable",
    "Final",
    "Finalize",
    "Foreach",
    "HarelError",
    "History",
    "If",
    "Initial",
    "InvalidDatamodel",
    "InvalidNamespace",
    "InvalidStructure",
    "InvalidTarget",
    "InvalidXml",
    "Invoke",
    "Log",
    "MissingAttribute",
    "MissingElement",
    "Other",
    "Parallel",
    "Param",
    "ParseError",
    "ParseOptions",
    "Raise",
    "SCXMLParser",
    "SCXML_NAMESPACE",
    "STATE_LIKE_TYPES",
    "Script",
    "Send",
    "State",
    "StateLike",
    "Transition",
    "ValidationError",
    "load",
    "parse",
    "parse_string",
    "serialize",
    "validate",
    "__version__",
]
