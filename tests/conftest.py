"""
Shared test fixtures and utilities for Feuille tests.
"""

from typing import Dict, Optional
from unittest.mock import Mock

import pytest
from lsprotocol.types import Location, Position
from pygls import uris
from pygls.workspace import TextDocument

from feuille.cache import SymbolCache
from feuille.features.definition import goto_definition
from feuille.nodes import Node, NodeType
from feuille.parser import parse_symbols
from feuille.server import ScssLanguageServer
from feuille.settings import Settings

WORKSPACE_ROOT = "/work"


# =============================================================================
# Basic Mocks
# =============================================================================


@pytest.fixture
def mock_language_server():
    """Create a mock ScssLanguageServer."""
    ls = Mock(spec=ScssLanguageServer)
    ls.logger = Mock()
    ls.cache = SymbolCache()
    ls.settings = Settings()
    return ls


@pytest.fixture
def mock_workspace():
    """Create a mock workspace."""
    workspace = Mock()
    workspace.root_path = WORKSPACE_ROOT
    return workspace


@pytest.fixture
def cache():
    return SymbolCache()


@pytest.fixture
def settings():
    return Settings()


def make_document(path: str, source: str) -> TextDocument:
    """Create an in-memory document for a filesystem path."""
    return TextDocument(uris.from_fs_path(path), source=source)


@pytest.fixture
def make_doc():
    """Provide the in-memory document factory."""
    return make_document


# =============================================================================
# SCSS Source Test Harness
# =============================================================================


class ScssTestHarness:
    """
    Test harness for go-to-definition.

    Documents are registered with their source; indexed documents are put in
    the symbol cache in registration order, the way the workspace scan does.
    """

    def __init__(self, cache: SymbolCache, settings: Settings):
        self.cache = cache
        self.settings = settings
        self.docs: Dict[str, TextDocument] = {}

    def add(self, path: str, source: str, index: bool = True) -> TextDocument:
        """
        Register a document.

        Args:
            path: Filesystem path of the document.
            source: SCSS source code.
            index: Whether to put the document's symbols in the cache now.

        Returns:
            The created document.
        """
        doc = make_document(path, source)
        self.docs[path] = doc
        if index:
            self.cache.set(path, parse_symbols(source, path, WORKSPACE_ROOT))
        return doc

    def goto_definition(
        self, path: str, line: int, character: int
    ) -> Optional[Location]:
        """Request the definition at a cursor position of a registered document."""
        doc = self.docs[path]
        offset = doc.offset_at_position(Position(line=line, character=character))
        return goto_definition(WORKSPACE_ROOT, doc, offset, self.cache, self.settings)

    def assert_definition_at(
        self,
        path: str,
        cursor_line: int,
        cursor_char: int,
        expected_path: str,
        expected_line: int,
        expected_char: int,
        expected_end_char: Optional[int] = None,
    ) -> Location:
        """Assert that goto_definition returns a location at the expected position."""
        result = self.goto_definition(path, cursor_line, cursor_char)
        assert result is not None, "Expected a definition location, got None"
        assert isinstance(result, Location)
        assert result.uri == uris.from_fs_path(expected_path)
        assert result.range.start.line == expected_line, (
            f"Expected line {expected_line}, got {result.range.start.line}"
        )
        assert result.range.start.character == expected_char, (
            f"Expected char {expected_char}, got {result.range.start.character}"
        )
        assert result.range.end.line == expected_line
        if expected_end_char is not None:
            assert result.range.end.character == expected_end_char
        return result

    def assert_no_definition(self, path: str, cursor_line: int, cursor_char: int) -> None:
        """Assert that goto_definition returns None."""
        result = self.goto_definition(path, cursor_line, cursor_char)
        assert result is None, f"Expected None, got {result}"


@pytest.fixture
def scss_harness(cache, settings):
    """Create a ScssTestHarness instance."""
    return ScssTestHarness(cache, settings)


# =============================================================================
# Node Builders (for unit tests that need manual tree construction)
# =============================================================================


class NodeBuilder:
    """
    Builder for syntax trees in tests.

    Useful for classifier tests that need shapes the parser never produces.
    """

    @staticmethod
    def node(
        node_type: str,
        offset: int = 0,
        end: Optional[int] = None,
        name: Optional[str] = None,
        parent: Optional[Node] = None,
    ) -> Node:
        node = Node(node_type, offset, end, name=name)
        if parent is not None:
            parent.add_child(node)
        return node

    @staticmethod
    def chain(leaf: Node, *ancestors: Node) -> Node:
        """Link leaf under ancestors, nearest first, and return the leaf."""
        child = leaf
        for ancestor in ancestors:
            ancestor.add_child(child)
            child = ancestor
        return leaf

    @staticmethod
    def stylesheet(length: int = 100) -> Node:
        return Node(NodeType.Stylesheet, 0, length)


@pytest.fixture
def node_builder():
    """Provide a NodeBuilder instance."""
    return NodeBuilder()
