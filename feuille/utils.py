"""Utility functions for the SCSS Language Server."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from lsprotocol.types import Position, Range
from pygls import uris
from pygls.workspace import TextDocument
from pygls.workspace.position_codec import PositionCodec

logger = logging.getLogger("feuille")

STYLESHEET_SUFFIX = ".scss"

# Positions sent to and stored for the client are in UTF-16 code units
POSITION_CODEC = PositionCodec()


def client_units(text: str) -> int:
    """Return the length of text in client position units."""
    return POSITION_CODEC.client_num_units(text)


def line_position(text: str, line: int, line_start: int, offset: int) -> Position:
    """Create a Position for an offset lying on the line starting at line_start."""
    return Position(line=line, character=client_units(text[line_start:offset]))


def document_path(doc: TextDocument) -> str:
    """Return the filesystem path of a document, or its URI if it has none."""
    return uris.to_fs_path(doc.uri) or doc.uri


def position_at(doc: TextDocument, offset: int) -> Position:
    """Convert a character offset of a document into a line/character position."""
    text = doc.source
    offset = max(0, min(offset, len(text)))
    before = text[:offset]
    line = before.count("\n")
    return line_position(text, line, before.rfind("\n") + 1, offset)


def range_from_name(position: Position, name: str) -> Range:
    """Create an LSP Range covering a single-line name starting at position."""
    return Range(
        start=position,
        end=Position(
            line=position.line, character=position.character + client_units(name)
        ),
    )


def get_document_path(current_path: str, symbols_document: str) -> str:
    """
    Return the path of a declaring document relative to the current one.

    Returns "current" when the declaring document is the current document.
    """
    current_dir = os.path.dirname(current_path)
    doc_path = os.path.relpath(symbols_document, current_dir or os.curdir)
    if doc_path == os.path.basename(current_path):
        return "current"
    return doc_path.replace("\\", "/")


def _import_candidates(base: Path) -> List[Path]:
    """List the files an SCSS import of `base` may refer to, in lookup order."""
    name = base.name
    if base.suffix == STYLESHEET_SUFFIX:
        return [base, base.with_name(f"_{name}")]
    return [
        base.with_name(f"{name}{STYLESHEET_SUFFIX}"),
        base.with_name(f"_{name}{STYLESHEET_SUFFIX}"),
        base / f"index{STYLESHEET_SUFFIX}",
        base / f"_index{STYLESHEET_SUFFIX}",
    ]


def resolve_import(
    current_path: str, target: str, root: Optional[str] = None
) -> Optional[str]:
    """
    Map an import target to an existing stylesheet path.

    The target is looked up next to the importing document first and then
    relative to the workspace root. Plain CSS imports, URLs and built-in
    `sass:` modules never resolve.

    Args:
        current_path: Filesystem path of the importing document.
        target: The import target as written, without quotes.
        root: The workspace root, if any.

    Returns:
        The resolved path, or None if no file matches.
    """
    if not target or target.startswith(("sass:", "http://", "https://", "url(")):
        return None
    if target.endswith(".css"):
        return None

    bases = [Path(current_path).parent / target]
    if root:
        bases.append(Path(root) / target)

    for base in bases:
        if not base.name:
            continue
        for candidate in _import_candidates(base):
            if candidate.is_file():
                return str(candidate.resolve())
    logger.debug("Unresolved import %r from %s", target, current_path)
    return None
