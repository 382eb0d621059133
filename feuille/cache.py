"""
Workspace symbol cache.

Maps a document identity to that document's symbol table. The cache is
shared by every request of the server: writes replace a whole table under a
single key, reads enumerate the stored tables in insertion order.
"""

from typing import Dict, Iterator, List, Optional

from feuille.symbols import DocumentSymbols


class SymbolCache:
    """Mapping from document identity to DocumentSymbols."""

    def __init__(self):
        self._storage: Dict[str, DocumentSymbols] = {}

    def __len__(self) -> int:
        return len(self._storage)

    def __contains__(self, document: str) -> bool:
        return document in self._storage

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._storage))

    def has(self, document: str) -> bool:
        return document in self._storage

    def get(self, document: str) -> Optional[DocumentSymbols]:
        return self._storage.get(document)

    def set(self, document: str, symbols: DocumentSymbols) -> None:
        """
        Store the table for a document, replacing any previous one.

        A document that is already cached keeps its place in the
        enumeration order.
        """
        self._storage[document] = symbols

    def drop(self, document: str) -> None:
        self._storage.pop(document, None)

    def keys(self) -> List[str]:
        return list(self._storage)

    def values(self) -> List[DocumentSymbols]:
        # Snapshot so that concurrent writers never change a running scan
        return list(self._storage.values())

    def dispose(self) -> None:
        self._storage = {}
