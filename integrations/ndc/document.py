"""
NDC Fare Engine - Structured Document Reader
Schema-agnostic accessors over a parsed provider response.

Lookups match on the element's local name (namespace prefixes are ignored) and
search all descendants, not only direct children, because providers nest the
same logical field at different depths depending on the call type.
"""

from typing import Iterator, List, Optional, Union

from lxml import etree
from loguru import logger

from app.core.exceptions import DocumentParseError, PayloadTooLargeError


def local_name(element: etree._Element) -> str:
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


class Node:
    """Read-only view of one element of a provider document."""

    __slots__ = ("_element",)

    def __init__(self, element: etree._Element):
        self._element = element

    @property
    def element(self) -> etree._Element:
        return self._element

    @property
    def name(self) -> str:
        return local_name(self._element)

    def _candidates(self) -> Iterator[etree._Element]:
        return self._element.iterdescendants()

    def _matching(self, name: str) -> Iterator[etree._Element]:
        for candidate in self._candidates():
            if isinstance(candidate.tag, str) and local_name(candidate) == name:
                yield candidate

    # ------------------------------------------------------------------
    # Element lookups
    # ------------------------------------------------------------------

    def find(self, name: str) -> Optional["Node"]:
        """First descendant named `name`, in document order."""
        for match in self._matching(name):
            return Node(match)
        return None

    def find_all(self, name: str) -> List["Node"]:
        """Every descendant named `name`, in document order."""
        return [Node(match) for match in self._matching(name)]

    def has(self, name: str) -> bool:
        return self.find(name) is not None

    # ------------------------------------------------------------------
    # Text / attribute lookups
    # ------------------------------------------------------------------

    @property
    def content(self) -> Optional[str]:
        """Concatenated text of this element and its descendants, stripped."""
        text = "".join(self._element.itertext()).strip()
        return text or None

    def text(self, name: str) -> Optional[str]:
        """Text content of the first descendant named `name`."""
        node = self.find(name)
        return node.content if node is not None else None

    def texts(self, name: str) -> List[str]:
        """Non-empty text content of every descendant named `name`."""
        return [text for text in (node.content for node in self.find_all(name)) if text]

    def attr(self, name: str) -> Optional[str]:
        value = self._element.get(name)
        if value is None:
            return None
        return value.strip() or None

    def value(self, name: str) -> Optional[str]:
        """Attribute `name`, else the text of the first descendant named `name`."""
        return self.attr(name) or self.text(name)

    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Node) and other._element is self._element

    def __hash__(self) -> int:
        return id(self._element)

    def __repr__(self) -> str:
        return f"<Node {self.name}>"


class Document(Node):
    """Root of a parsed response; lookups include the root element itself."""

    __slots__ = ()

    def _candidates(self) -> Iterator[etree._Element]:
        return self._element.iter()


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=False,
        remove_comments=True,
    )


def parse_document(payload: Union[str, bytes], max_bytes: Optional[int] = None) -> Document:
    """
    Parse a provider response into a Document.

    Raises:
        PayloadTooLargeError: payload is larger than `max_bytes`
        DocumentParseError: payload is empty or not well-formed XML
    """
    data = payload.encode("utf-8") if isinstance(payload, str) else payload
    if max_bytes is not None and len(data) > max_bytes:
        raise PayloadTooLargeError(max_bytes, details={"size": len(data)})
    if not data or not data.strip():
        raise DocumentParseError("Empty document")

    try:
        root = etree.fromstring(data, parser=_xml_parser())
    except etree.XMLSyntaxError as e:
        logger.error(f"Failed to parse XML: {e}")
        raise DocumentParseError(
            f"XML parsing failed: {e}",
            details={"line": e.lineno, "column": e.offset}
        ) from e

    return Document(root)
