"""
Error types for SCXML parsing and validation.

Both stages are fail-fast: the first violation is raised and nothing
partial is returned.
"""

from typing import Sequence


class HarelError(Exception):
    """Base exception for all harel errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ParseError(HarelError):
    """
    Raised when text or an element tree cannot be turned into a Document.

    Examples:
    - Malformed XML
    - Root element other than <scxml>
    - Wrong namespace or version
    - Required attribute or child element missing
    """


class InvalidXml(ParseError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Invalid XML: {detail}")


class MissingAttribute(ParseError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required attribute: {name}")


class InvalidStructure(ParseError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid structure: {reason}")


class InvalidNamespace(ParseError):
    def __init__(self, expected: str):
        self.expected = expected
        super().__init__(f"Invalid namespace: expected {expected}")


class ValidationError(HarelError):
    """
    Raised when a parsed Document fails semantic validation.

    Examples:
    - Two state-like elements sharing an id
    - Transition target naming no declared state
    - Initial references that loop back on themselves
    - Duplicate data ids in the datamodel
    """


class DuplicateId(ValidationError):
    def __init__(self, id: str):
        self.id = id
        super().__init__(f"Duplicate state ID: {id}")


class InvalidTarget(ValidationError):
    def __init__(self, id: str):
        self.id = id
        super().__init__(f"Invalid transition target: {id}")


class CircularInitial(ValidationError):
    def __init__(self, chain: Sequence[str] = ()):
        self.chain = tuple(chain)
        message = "Circular initial state reference"
        if self.chain:
            message += ": " + " -> ".join(self.chain)
        super().__init__(message)


class InvalidDatamodel(ValidationError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid datamodel constraint: {reason}")


class MissingElement(ValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing required element: {name}")
