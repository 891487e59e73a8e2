"""
HTML parser adapter.
Exposes a parsed document as a tree of read-only nodes.
"""

from typing import Dict, List, Tuple, Union
from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag


class ParseError(Exception):
    """Raised when a document cannot be turned into a tree at all."""
    pass


class DocumentNode:
    """
    Read-only view of one node of a parsed document.

    Text nodes carry their string; element nodes carry a tag name, an
    attribute mapping and ordered children. Comments, doctypes and
    similar markup are neither.
    """

    __slots__ = ('_node',)

    def __init__(self, node: Union[Tag, NavigableString]):
        self._node = node

    def is_text(self) -> Tuple[bool, str]:
        node = self._node
        if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            return True, str(node)
        return False, ""

    def is_element(self) -> Tuple[bool, str]:
        if isinstance(self._node, Tag):
            return True, self._node.name
        return False, ""

    def attributes(self) -> Dict[str, str]:
        if isinstance(self._node, Tag):
            return dict(self._node.attrs)
        return {}

    def children(self) -> List['DocumentNode']:
        if isinstance(self._node, Tag):
            return [DocumentNode(child) for child in self._node.contents]
        return []

    def __repr__(self) -> str:
        is_element, tag = self.is_element()
        if is_element:
            return f"<DocumentNode element {tag}>"
        is_text, text = self.is_text()
        if is_text:
            return f"<DocumentNode text {text[:20]!r}>"
        return "<DocumentNode other>"


class ContentParser:
    """
    Parses raw HTML with BeautifulSoup. Malformed markup degrades to a
    best-effort tree; ParseError is raised only when no tree can be built.
    """

    def __init__(self, features: str = 'lxml'):
        self.features = features

    def parse(self, html_content: Union[bytes, str]) -> DocumentNode:
        """
        Parse HTML content.

        Args:
            html_content: Raw HTML, bytes or text

        Returns:
            Root DocumentNode of the parsed tree
        """
        try:
            # Keep every attribute a plain string ("class", "rel" included)
            soup = BeautifulSoup(html_content, self.features, multi_valued_attributes=None)
        except Exception as e:
            raise ParseError(f"Unable to parse document: {e}") from e

        return DocumentNode(soup)
