"""
Syntax nodes for SCSS stylesheets.

The parser builds a light tree of these nodes; features only rely on the
node type, its offsets, its name and the parent links.
"""

from typing import List, Optional


class NodeType:
    """Closed set of node type tags produced by the parser."""

    Stylesheet = "Stylesheet"
    Ruleset = "Ruleset"
    Declaration = "Declaration"
    VariableDeclaration = "VariableDeclaration"
    VariableName = "VariableName"
    Identifier = "Identifier"
    MixinDeclaration = "MixinDeclaration"
    MixinReference = "MixinReference"
    FunctionDeclaration = "FunctionDeclaration"
    Function = "Function"
    FunctionParameter = "FunctionParameter"
    FunctionArgument = "FunctionArgument"
    Expression = "Expression"
    Import = "Import"
    AtRule = "AtRule"


class Node:
    """
    A node of the stylesheet tree.

    Attributes:
        type: One of the NodeType tags.
        offset: Character offset of the first character of the node.
        end: Character offset just past the last character of the node.
        name: The name carried by name-bearing nodes (variables, identifiers,
            mixin and function declarations or references).
        parent: The enclosing node, None for the stylesheet root.
        children: Child nodes in source order.
    """

    def __init__(
        self,
        type: str,
        offset: int,
        end: Optional[int] = None,
        name: Optional[str] = None,
    ):
        self.type = type
        self.offset = offset
        self.end = offset if end is None else end
        self.name = name
        self.parent: Optional["Node"] = None
        self.children: List["Node"] = []

    def __repr__(self) -> str:
        return f"Node({self.type}, {self.offset}-{self.end}, name={self.name!r})"

    def get_parent(self) -> Optional["Node"]:
        return self.parent

    def get_name(self) -> str:
        return self.name or ""

    def add_child(self, child: "Node") -> "Node":
        child.parent = self
        self.children.append(child)
        return child

    def find_node_at_offset(self, offset: int) -> Optional["Node"]:
        """
        Return the deepest node whose range contains the offset.

        The end of a range is inclusive so that a cursor placed right after
        a name still lands on it.
        """
        if not self.offset <= offset <= self.end:
            return None
        for child in self.children:
            found = child.find_node_at_offset(offset)
            if found is not None:
                return found
        return self
