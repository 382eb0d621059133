"""LSP feature implementations for SCSS."""

from feuille.features.definition import (
    MAX_ANCESTOR_CLIMB,
    Candidate,
    Identifier,
    classify_identifier,
    get_candidates,
    goto_definition,
    location_from_candidate,
    refresh_document_symbols,
)

__all__ = [
    "MAX_ANCESTOR_CLIMB",
    "Candidate",
    "Identifier",
    "classify_identifier",
    "get_candidates",
    "goto_definition",
    "location_from_candidate",
    "refresh_document_symbols",
]
