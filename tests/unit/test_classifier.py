import pytest
from lsprotocol.types import Position

from feuille.features.definition import (
    MAX_ANCESTOR_CLIMB,
    Identifier,
    classify_identifier,
)
from feuille.nodes import Node, NodeType
from feuille.symbols import SymbolCategory

SOURCE = "line zero\n  line one, with text\nline two\n"


@pytest.fixture
def doc(make_doc):
    return make_doc("/work/a.scss", SOURCE)


def test_max_ancestor_climb():
    assert MAX_ANCESTOR_CLIMB == 2


def test_no_node(doc):
    assert classify_identifier(None, doc) is None


def test_node_without_type(doc):
    assert classify_identifier(Node("", 0, 4), doc) is None


def test_other_node_type(doc, node_builder):
    node = node_builder.node(NodeType.Ruleset, 0, 10)
    assert classify_identifier(node, doc) is None


def test_variable_reference(doc, node_builder):
    leaf = node_builder.chain(
        node_builder.node(NodeType.VariableName, 12, 14, name="$x"),
        node_builder.node(NodeType.Expression, 10, 20),
        node_builder.stylesheet(),
    )
    assert classify_identifier(leaf, doc) == Identifier(
        category=SymbolCategory.VARIABLES,
        name="$x",
        position=Position(line=1, character=2),
    )


def test_variable_without_parent(doc, node_builder):
    leaf = node_builder.node(NodeType.VariableName, 0, 2, name="$x")
    identifier = classify_identifier(leaf, doc)
    assert identifier is not None
    assert identifier.category == SymbolCategory.VARIABLES
    assert identifier.position == Position(line=0, character=0)


@pytest.mark.parametrize(
    "parent_type", [NodeType.FunctionParameter, NodeType.VariableDeclaration]
)
def test_variable_declaration_site(doc, node_builder, parent_type):
    leaf = node_builder.chain(
        node_builder.node(NodeType.VariableName, 0, 2, name="$x"),
        node_builder.node(parent_type, 0, 8),
    )
    assert classify_identifier(leaf, doc) is None


def test_identifier_below_mixin_reference(doc, node_builder):
    reference = node_builder.node(NodeType.MixinReference, 10, 30, name="box")
    leaf = node_builder.chain(
        node_builder.node(NodeType.Identifier, 21, 24, name="ignored"),
        reference,
    )
    assert classify_identifier(leaf, doc) == Identifier(
        category=SymbolCategory.MIXINS,
        name="box",
        position=Position(line=1, character=0),
    )


def test_identifier_two_hops_below_function(doc, node_builder):
    leaf = node_builder.chain(
        node_builder.node(NodeType.Identifier, 24, 28, name="x"),
        node_builder.node(NodeType.Expression, 24, 28),
        node_builder.node(NodeType.Function, 22, 30, name="double"),
    )
    identifier = classify_identifier(leaf, doc)
    assert identifier == Identifier(
        category=SymbolCategory.FUNCTIONS,
        name="double",
        position=Position(line=1, character=12),
    )


def test_identifier_three_hops_below_function(doc, node_builder):
    leaf = node_builder.chain(
        node_builder.node(NodeType.Identifier, 24, 28, name="x"),
        node_builder.node(NodeType.Expression, 24, 28),
        node_builder.node(NodeType.FunctionArgument, 24, 28),
        node_builder.node(NodeType.Function, 22, 30, name="double"),
    )
    assert classify_identifier(leaf, doc) is None


def test_identifier_below_declaration(doc, node_builder):
    leaf = node_builder.chain(
        node_builder.node(NodeType.Identifier, 7, 10, name="box"),
        node_builder.node(NodeType.MixinDeclaration, 0, 20, name="box"),
        node_builder.stylesheet(),
    )
    assert classify_identifier(leaf, doc) is None


def test_identifier_at_root(doc, node_builder):
    leaf = node_builder.node(NodeType.Identifier, 0, 4, name="line")
    assert classify_identifier(leaf, doc) is None


def test_nearest_reference_wins(doc, node_builder):
    leaf = node_builder.chain(
        node_builder.node(NodeType.Identifier, 24, 28, name="x"),
        node_builder.node(NodeType.Function, 22, 30, name="inner"),
        node_builder.node(NodeType.MixinReference, 10, 40, name="outer"),
    )
    identifier = classify_identifier(leaf, doc)
    assert identifier.category == SymbolCategory.FUNCTIONS
    assert identifier.name == "inner"
