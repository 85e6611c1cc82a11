"""
Element tree collaborator

Thin read-only view over lxml elements. Character-level XML handling is
left entirely to lxml; the grammar parser only sees tag names,
namespaces, attributes, child elements and trimmed text.
"""

import logging
from typing import Iterator, Optional, Union

from lxml import etree

from .errors import InvalidXml

logger = logging.getLogger(__name__)


class Element:
    """Read-only navigation over one lxml element"""

    __slots__ = ("_node",)

    def __init__(self, node):
        self._node = node

    def __repr__(self):
        return f"<Element {self.tag_name()}>"

    @property
    def node(self):
        """The wrapped lxml element"""
        return self._node

    def tag_name(self) -> str:
        # Use localname to strip namespace
        return etree.QName(self._node).localname

    def namespace(self) -> Optional[str]:
        return etree.QName(self._node).namespace

    def attribute(self, name: str) -> Optional[str]:
        return self._node.get(name)

    def children(self) -> Iterator["Element"]:
        for child in self._node:
            # Skip comments and processing instructions
            if not isinstance(child.tag, str):
                continue
            yield Element(child)

    def text(self) -> Optional[str]:
        text = self._node.text
        if text is None:
            return None
        text = text.strip()
        return text or None


def load(source: Union[str, bytes]) -> Element:
    """
    Tokenize XML text with lxml and return the root element

    Args:
        source: XML document as str or bytes

    Returns:
        Element wrapping the document root

    Raises:
        InvalidXml: if lxml rejects the text
    """
    if isinstance(source, str):
        # lxml refuses str input that carries an encoding declaration,
        # and the declared encoding no longer describes the bytes
        source = source.encode("utf-8")
        parser = etree.XMLParser(encoding="utf-8", resolve_entities=False, no_network=True)
    else:
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(source, parser)
    except etree.XMLSyntaxError as exc:
        raise InvalidXml(str(exc)) from exc

    logger.debug("Loaded XML document with root <%s>", etree.QName(root).localname)
    return Element(root)
