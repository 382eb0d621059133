"""
SCSS document parsing.

This module turns stylesheet text into a light syntax tree of `Node`s and
collects the variables, mixins and functions the document declares. The
parser is tolerant: malformed input never raises, unbalanced blocks simply
end at the end of the text.
"""

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Set

from lsprotocol.types import Position
from pygls.workspace import TextDocument

from feuille.nodes import Node, NodeType
from feuille.settings import Settings
from feuille.symbols import (
    DocumentSymbols,
    FunctionSymbol,
    MixinSymbol,
    Symbol,
    VariableSymbol,
)
from feuille.utils import document_path, line_position, resolve_import

logger = logging.getLogger("feuille")

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<url>url\([^)'"]*\))
    |(?P<comment>/\*.*?(?:\*/|\Z)|//[^\n]*)
    |(?P<string>"(?:\\.|[^"\\\n])*"?|'(?:\\.|[^'\\\n])*'?)
    |(?P<interp>\#\{)
    |(?P<var>\$[A-Za-z_\-][\w\-]*)
    |(?P<at>@[A-Za-z_\-][\w\-]*)
    |(?P<number>\d*\.?\d+(?:[A-Za-z%]+)?)
    |(?P<ident>-?[A-Za-z_][\w\-]*|--[\w\-]+)
    |(?P<space>\s+)
    |(?P<punct>[{}();:,])
    |(?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_SKIPPED_TOKENS = ("space", "comment")

_IMPORT_KEYWORDS = ("@import", "@use", "@forward")

# Stop sets for the expression parser
_STATEMENT_STOPS = frozenset({";", "{", "}"})
_ARGUMENT_STOPS = frozenset({",", ")", ";", "{", "}"})
_GROUP_STOPS = frozenset({")", ";", "{", "}"})
_INTERPOLATION_STOPS = frozenset({"}", ";"})


class Token(NamedTuple):
    kind: str
    value: str
    start: int
    end: int


def tokenize(text: str) -> List[Token]:
    """Split stylesheet text into tokens, dropping whitespace and comments."""
    tokens = []
    for match in _TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup
        if kind in _SKIPPED_TOKENS:
            continue
        tokens.append(Token(kind, match.group(), match.start(), match.end()))
    return tokens


@dataclass
class Stylesheet:
    """
    Result of parsing stylesheet text.

    Attributes:
        ast: The Stylesheet root node.
        symbols: Declared symbols in source order.
        imports: Import targets as written, without quotes.
    """

    ast: Node
    symbols: List[Symbol] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)


@dataclass
class ParsedDocument:
    """
    Result of parsing a document for a request.

    Attributes:
        node: The deepest node under the requested offset, or None when only
            the stylesheet root covers it.
        symbols: Symbol table of the document.
        ast: The Stylesheet root node.
    """

    node: Optional[Node]
    symbols: DocumentSymbols
    ast: Node


class _Parser:
    """Recursive descent over the token stream of one stylesheet."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0
        self.last_end = 0
        self.symbols: List[Symbol] = []
        self.imports: List[str] = []
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    def peek(self, ahead: int = 0) -> Optional[Token]:
        index = self.pos + ahead
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        self.last_end = tok.end
        return tok

    def at_punct(self, *values: str) -> bool:
        tok = self.peek()
        return tok is not None and tok.kind == "punct" and tok.value in values

    def position(self, offset: int) -> Position:
        line = bisect_right(self._line_starts, offset) - 1
        return line_position(self.text, line, self._line_starts[line], offset)

    def _is_call(self) -> bool:
        """Whether the current identifier is immediately followed by `(`."""
        tok, nxt = self.peek(), self.peek(1)
        return (
            nxt is not None
            and nxt.kind == "punct"
            and nxt.value == "("
            and tok.end == nxt.start
        )

    # -------------------------------------------------------------------------
    # Blocks and statements
    # -------------------------------------------------------------------------

    def parse(self) -> Node:
        root = Node(NodeType.Stylesheet, 0, len(self.text))
        self._parse_block(root, nested=False)
        return root

    def _parse_block(self, parent: Node, nested: bool) -> None:
        while self.peek() is not None:
            if self.at_punct("}"):
                if nested:
                    return
                # Stray closing brace at the top level
                self.advance()
            elif self.at_punct(";"):
                self.advance()
            else:
                self._parse_statement(parent)

    def _parse_body(self, node: Node) -> None:
        """Parse a `{ ... }` block into node; the current token is `{`."""
        self.advance()
        self._parse_block(node, nested=True)
        if self.at_punct("}"):
            self.advance()
        node.end = self.last_end

    def _parse_statement(self, parent: Node) -> None:
        tok = self.peek()
        nxt = self.peek(1)
        if tok.kind == "var" and nxt is not None and nxt.value == ":":
            self._parse_variable_declaration(parent)
        elif tok.kind == "at":
            keyword = tok.value.lower()
            if keyword == "@mixin":
                self._parse_declaration(parent, NodeType.MixinDeclaration)
            elif keyword == "@function":
                self._parse_declaration(parent, NodeType.FunctionDeclaration)
            elif keyword == "@include":
                self._parse_mixin_reference(parent)
            elif keyword in _IMPORT_KEYWORDS:
                self._parse_import(parent)
            else:
                self._parse_at_rule(parent)
        else:
            self._parse_ruleset_or_declaration(parent)

    def _parse_variable_declaration(self, parent: Node) -> None:
        tok = self.advance()
        decl = parent.add_child(Node(NodeType.VariableDeclaration, tok.start))
        decl.add_child(
            Node(NodeType.VariableName, tok.start, tok.end, name=tok.value)
        )
        self.symbols.append(VariableSymbol(tok.value, self.position(tok.start)))
        self.advance()  # ':'
        self._parse_expression(decl, _STATEMENT_STOPS)
        if self.at_punct(";"):
            self.advance()
        decl.end = self.last_end

    def _parse_declaration(self, parent: Node, node_type: str) -> None:
        """Parse a `@mixin` or `@function` declaration."""
        tok = self.advance()
        node = parent.add_child(Node(node_type, tok.start))
        name_tok = self.peek()
        if name_tok is not None and name_tok.kind == "ident":
            self.advance()
            node.name = name_tok.value
            node.add_child(
                Node(
                    NodeType.Identifier,
                    name_tok.start,
                    name_tok.end,
                    name=name_tok.value,
                )
            )
            symbol_cls = (
                MixinSymbol if node_type == NodeType.MixinDeclaration else FunctionSymbol
            )
            self.symbols.append(
                symbol_cls(name_tok.value, self.position(name_tok.start))
            )
        if self.at_punct("("):
            self._parse_parameters(node)
        # Anything between the signature and the body is ignored
        while self.peek() is not None and not self.at_punct("{", ";", "}"):
            self.advance()
        if self.at_punct("{"):
            self._parse_body(node)
        elif self.at_punct(";"):
            self.advance()
        node.end = self.last_end

    def _parse_parameters(self, node: Node) -> None:
        self.advance()  # '('
        while self.peek() is not None:
            tok = self.peek()
            if tok.kind == "var":
                self.advance()
                param = node.add_child(Node(NodeType.FunctionParameter, tok.start))
                param.add_child(
                    Node(NodeType.VariableName, tok.start, tok.end, name=tok.value)
                )
                if self.at_punct(":"):
                    self.advance()
                # Default values are references, not part of the parameter name
                self._parse_expression(param, _ARGUMENT_STOPS)
                param.end = self.last_end
            elif not self.at_punct(*_ARGUMENT_STOPS):
                self._parse_terms(node, _ARGUMENT_STOPS)

            if self.at_punct(","):
                self.advance()
            elif self.at_punct(")"):
                self.advance()
                return
            else:
                return

    def _parse_mixin_reference(self, parent: Node) -> None:
        tok = self.advance()
        node = parent.add_child(Node(NodeType.MixinReference, tok.start))
        name_tok = self._parse_qualified_name()
        if name_tok is not None:
            node.name = name_tok.value
            node.add_child(
                Node(
                    NodeType.Identifier, name_tok.start, name_tok.end, name=name_tok.value
                )
            )
        if self.at_punct("("):
            self._parse_arguments(node)
        # `using ($args)` and other trailing tokens
        self._parse_terms(node, _STATEMENT_STOPS)
        if self.at_punct("{"):
            self._parse_body(node)
        elif self.at_punct(";"):
            self.advance()
        node.end = self.last_end

    def _parse_qualified_name(self) -> Optional[Token]:
        """Consume `name` or `namespace.name` and return the last segment."""
        tok = self.peek()
        if tok is None or tok.kind != "ident":
            return None
        self.advance()
        while True:
            dot, nxt = self.peek(), self.peek(1)
            if (
                dot is not None
                and nxt is not None
                and dot.value == "."
                and nxt.kind == "ident"
                and dot.start == tok.end
                and nxt.start == dot.end
            ):
                self.advance()
                tok = self.advance()
            else:
                return tok

    def _parse_import(self, parent: Node) -> None:
        tok = self.advance()
        node = parent.add_child(Node(NodeType.Import, tok.start))
        while self.peek() is not None and not self.at_punct(*_STATEMENT_STOPS):
            item = self.advance()
            if item.kind == "string":
                target = item.value.strip("\"'")
                self.imports.append(target)
                if node.name is None:
                    node.name = target
        if self.at_punct(";"):
            self.advance()
        node.end = self.last_end

    def _parse_at_rule(self, parent: Node) -> None:
        tok = self.advance()
        node = parent.add_child(Node(NodeType.AtRule, tok.start, name=tok.value[1:]))
        self._parse_expression(node, _STATEMENT_STOPS)
        if self.at_punct("{"):
            self._parse_body(node)
        elif self.at_punct(";"):
            self.advance()
        node.end = self.last_end

    def _parse_ruleset_or_declaration(self, parent: Node) -> None:
        start = self.peek().start
        node = parent.add_child(Node(NodeType.Declaration, start))
        self._parse_expression(node, _STATEMENT_STOPS)
        if self.at_punct("{"):
            node.type = NodeType.Ruleset
            self._parse_body(node)
        elif self.at_punct(";"):
            self.advance()
        node.end = self.last_end

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def _parse_expression(self, parent: Node, stops: Set[str]) -> None:
        tok = self.peek()
        if tok is None or self.at_punct(*stops):
            return
        expr = parent.add_child(Node(NodeType.Expression, tok.start))
        self._parse_terms(expr, stops)
        expr.end = self.last_end

    def _parse_terms(self, parent: Node, stops: Set[str]) -> None:
        while self.peek() is not None and not self.at_punct(*stops):
            tok = self.peek()
            if tok.kind == "var":
                self.advance()
                parent.add_child(
                    Node(NodeType.VariableName, tok.start, tok.end, name=tok.value)
                )
            elif tok.kind == "ident" and self._is_call():
                self._parse_function(parent)
            elif tok.kind == "punct" and tok.value == "(":
                self.advance()
                self._parse_expression(parent, _GROUP_STOPS)
                if self.at_punct(")"):
                    self.advance()
            elif tok.kind == "interp":
                self.advance()
                self._parse_expression(parent, _INTERPOLATION_STOPS)
                if self.at_punct("}"):
                    self.advance()
            else:
                self.advance()

    def _parse_function(self, parent: Node) -> None:
        tok = self.advance()
        node = parent.add_child(Node(NodeType.Function, tok.start, name=tok.value))
        node.add_child(Node(NodeType.Identifier, tok.start, tok.end, name=tok.value))
        self._parse_arguments(node)
        node.end = self.last_end

    def _parse_arguments(self, node: Node) -> None:
        self.advance()  # '('
        while self.peek() is not None:
            tok = self.peek()
            if not self.at_punct(*_ARGUMENT_STOPS):
                arg = node.add_child(Node(NodeType.FunctionArgument, tok.start))
                self._parse_terms(arg, _ARGUMENT_STOPS)
                arg.end = self.last_end

            if self.at_punct(","):
                self.advance()
            elif self.at_punct(")"):
                self.advance()
                return
            else:
                return


def parse_stylesheet(text: str) -> Stylesheet:
    """Parse stylesheet text into its syntax tree, symbols and imports."""
    parser = _Parser(text)
    ast = parser.parse()
    return Stylesheet(ast, parser.symbols, parser.imports)


def _build_symbols(
    stylesheet: Stylesheet,
    path: str,
    root: Optional[str],
    settings: Optional[Settings],
) -> DocumentSymbols:
    symbols = DocumentSymbols(document=path)
    for symbol in stylesheet.symbols:
        symbols.add(symbol)

    settings = settings or Settings()
    if settings.scan_imported_files:
        for target in stylesheet.imports:
            resolved = resolve_import(path, target, root)
            if resolved is not None and resolved not in symbols.imports:
                symbols.imports.append(resolved)
    return symbols


def parse_symbols(
    text: str,
    path: str,
    root: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> DocumentSymbols:
    """
    Collect the symbols declared by stylesheet text.

    Args:
        text: The stylesheet source.
        path: Filesystem path of the stylesheet, used as its identity.
        root: The workspace root, for resolving imports.
        settings: Client settings.

    Returns:
        The document's symbol table.
    """
    return _build_symbols(parse_stylesheet(text), path, root, settings)


def parse_document(
    root: Optional[str],
    doc: TextDocument,
    offset: int,
    settings: Optional[Settings] = None,
) -> ParsedDocument:
    """
    Parse an open document and locate the node under the given offset.

    Args:
        root: The workspace root.
        doc: The document to parse.
        offset: Zero-based character offset of the cursor.
        settings: Client settings.

    Returns:
        The node under the cursor and the document's symbol table.
    """
    stylesheet = parse_stylesheet(doc.source)
    path = document_path(doc)
    node = stylesheet.ast.find_node_at_offset(offset)
    if node is stylesheet.ast:
        node = None
    symbols = _build_symbols(stylesheet, path, root, settings)
    logger.debug("Parsed %s: node at %d is %r", doc.uri, offset, node)
    return ParsedDocument(node, symbols, stylesheet.ast)
