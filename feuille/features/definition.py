"""
Definition finding functionality for the SCSS Language Server.

This module provides the go-to-definition feature: it classifies the
identifier under the cursor, refreshes the current document's entry in the
symbol cache and returns the first matching declaration found across the
cached documents.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from lsprotocol import types
from pygls import uris
from pygls.workspace import TextDocument

from feuille import utils
from feuille.cache import SymbolCache
from feuille.nodes import Node, NodeType
from feuille.parser import parse_document
from feuille.settings import Settings
from feuille.symbols import (
    DocumentSymbols,
    Symbol,
    SymbolCategory,
    get_symbols_collection,
)

logger = logging.getLogger("feuille")

# How many parents an Identifier may climb to reach its MixinReference/Function
MAX_ANCESTOR_CLIMB = 2

_DECLARATION_PARENTS = (NodeType.FunctionParameter, NodeType.VariableDeclaration)
_REFERENCE_TYPES = {
    NodeType.MixinReference: SymbolCategory.MIXINS,
    NodeType.Function: SymbolCategory.FUNCTIONS,
}


@dataclass(frozen=True)
class Identifier:
    """The classified name under the cursor and where it is referenced."""

    category: SymbolCategory
    name: str
    position: types.Position


@dataclass(frozen=True)
class Candidate:
    """
    A declaration that may resolve an identifier.

    Attributes:
        document: Identity of the declaring document.
        path: Path of the declaring document relative to the current one.
        info: The declared symbol.
    """

    document: str
    path: str
    info: Symbol


def classify_identifier(
    node: Optional[Node], doc: TextDocument
) -> Optional[Identifier]:
    """
    Decide which kind of name the node under the cursor refers to.

    A `VariableName` is a variable reference unless it is the name of a
    parameter or a variable declaration. An `Identifier` is a mixin or a
    function reference when a `MixinReference` or `Function` node is found
    within MAX_ANCESTOR_CLIMB parents; the name and position are then taken
    from that ancestor.

    Args:
        node: The node under the cursor, if any.
        doc: The document owning the node.

    Returns:
        The classified identifier, or None if the node is not navigable.
    """
    if node is None or not node.type:
        return None

    if node.type == NodeType.VariableName:
        parent = node.get_parent()
        if parent is not None and parent.type in _DECLARATION_PARENTS:
            return None
        return Identifier(
            category=SymbolCategory.VARIABLES,
            name=node.get_name(),
            position=utils.position_at(doc, node.offset),
        )

    if node.type == NodeType.Identifier:
        climbed = 0
        current: Optional[Node] = node
        while (
            current is not None
            and current.type not in _REFERENCE_TYPES
            and climbed < MAX_ANCESTOR_CLIMB
        ):
            current = current.get_parent()
            climbed += 1

        if current is None or current.type not in _REFERENCE_TYPES:
            return None
        return Identifier(
            category=_REFERENCE_TYPES[current.type],
            name=current.get_name(),
            position=utils.position_at(doc, current.offset),
        )

    return None


def refresh_document_symbols(cache: SymbolCache, symbols: DocumentSymbols) -> None:
    """Stamp a freshly parsed symbol table and overwrite its cache entry."""
    symbols.ctime = datetime.now()
    cache.set(symbols.document, symbols)


def get_candidates(
    symbols_list: List[DocumentSymbols],
    identifier: Identifier,
    current_path: str,
) -> List[Candidate]:
    """
    Collect the declarations matching an identifier, in cache order.

    A declaration sitting exactly at the identifier's position is the
    identifier itself and is skipped.
    """
    candidates = []
    for symbols in symbols_list:
        path = utils.get_document_path(current_path, symbols.document)
        for info in symbols.collection(identifier.category):
            if info.name == identifier.name and info.position != identifier.position:
                candidates.append(
                    Candidate(document=symbols.document, path=path, info=info)
                )
    return candidates


def location_from_candidate(candidate: Candidate) -> types.Location:
    """Create an LSP Location spanning the declared name of a candidate."""
    return types.Location(
        uri=uris.from_fs_path(candidate.document) or candidate.document,
        range=utils.range_from_name(candidate.info.position, candidate.info.name),
    )


def goto_definition(
    root: Optional[str],
    doc: TextDocument,
    offset: int,
    cache: SymbolCache,
    settings: Optional[Settings] = None,
) -> Optional[types.Location]:
    """
    Get the definition location for the name at the given offset.

    Args:
        root: The workspace root.
        doc: The current document.
        offset: Zero-based character offset of the cursor.
        cache: The workspace symbol cache; the current document's entry is
            replaced by a fresh one.
        settings: Client settings, forwarded to the parser.

    Returns:
        Location of the first matching declaration, or None if not found.
    """
    current_path = utils.document_path(doc)
    if not current_path:
        return None

    resource = parse_document(root, doc, offset, settings)
    identifier = classify_identifier(resource.node, doc)
    if identifier is None:
        return None

    refresh_document_symbols(cache, resource.symbols)

    candidates = get_candidates(
        get_symbols_collection(cache), identifier, current_path
    )
    if not candidates:
        logger.debug("No declaration of %s found", identifier.name)
        return None

    return location_from_candidate(candidates[0])
