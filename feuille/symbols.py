"""
Symbol records for SCSS documents.

Each document contributes one DocumentSymbols table holding its declared
variables, mixins and functions. Entries only carry a name and the position
of that name, and a table is always replaced as a whole.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Union

from lsprotocol import types

if TYPE_CHECKING:
    from feuille.cache import SymbolCache


class SymbolCategory(str, Enum):
    """The partitions of a document symbol table."""

    VARIABLES = "variables"
    MIXINS = "mixins"
    FUNCTIONS = "functions"


@dataclass(frozen=True)
class VariableSymbol:
    """A `$name: value` declaration. The name keeps its leading `$`."""

    name: str
    position: types.Position
    category = SymbolCategory.VARIABLES


@dataclass(frozen=True)
class MixinSymbol:
    """A `@mixin name` declaration."""

    name: str
    position: types.Position
    category = SymbolCategory.MIXINS


@dataclass(frozen=True)
class FunctionSymbol:
    """A `@function name` declaration."""

    name: str
    position: types.Position
    category = SymbolCategory.FUNCTIONS


Symbol = Union[VariableSymbol, MixinSymbol, FunctionSymbol]


@dataclass
class DocumentSymbols:
    """
    Symbols declared by a single document.

    Attributes:
        document: Identity of the document (its filesystem path).
        variables: Variable declarations in source order.
        mixins: Mixin declarations in source order.
        functions: Function declarations in source order.
        imports: Resolved paths of the stylesheets this document imports.
        ctime: When this table was last written to the cache.
    """

    document: str
    variables: List[VariableSymbol] = field(default_factory=list)
    mixins: List[MixinSymbol] = field(default_factory=list)
    functions: List[FunctionSymbol] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)
    ctime: Optional[datetime] = None

    def collection(self, category: SymbolCategory) -> List[Symbol]:
        """Return the entries of the given category."""
        if category == SymbolCategory.VARIABLES:
            return self.variables
        if category == SymbolCategory.MIXINS:
            return self.mixins
        return self.functions

    def add(self, symbol: Symbol) -> None:
        self.collection(symbol.category).append(symbol)


def get_symbols_collection(cache: "SymbolCache") -> List[DocumentSymbols]:
    """Return every cached symbol table in cache order."""
    return list(cache.values())
