"""Tests for splitting Stylus source into lines and building AST nodes from them."""

import pytest

from stylus_converter.ast import parse_ast
from stylus_converter.ast.builder import (
    Position,
    StylusSyntaxError,
    split_lines,
)
from stylus_converter.ast.nodes import (
    Root,
    Literal,
    String,
    Unit,
    Boolean,
    Ident,
    Expression,
    BinOp,
    Arguments,
    Params,
    Call,
    Block,
    Selector,
    Group,
    Property,
    Function,
    If,
    Import,
)


def _statements(parsers, code):
    """Helper to parse code and return the top-level nodes."""
    root = parse_ast(code, parsers=parsers)
    assert isinstance(root, Root)
    return root.nodes


def _single(parsers, code):
    nodes = _statements(parsers, code)
    assert len(nodes) == 1
    return nodes[0]


class TestPosition:
    """Test Position defaults."""

    def test_defaults(self):
        """Test the default origin, line and column."""
        pos = Position()
        assert pos.origin == "<string>"
        assert pos.line == 1
        assert pos.column == 1

    def test_node_position_accessors(self):
        """Test line, column and kind on a node."""
        node = Literal(val="a", position=Position(origin="x.styl", line=3, column=5))
        assert node.line == 3
        assert node.column == 5
        assert node.kind == "Literal"


class TestSplitLines:
    """Test indentation nesting and comment handling."""

    def test_nesting(self):
        """Test that lines nest under less indented lines."""
        lines = split_lines("a\n  b\n    c\n  d\ne\n")
        assert [line.text for line in lines] == ["a", "e"]
        assert [line.text for line in lines[0].children] == ["b", "d"]
        assert [line.text for line in lines[0].children[0].children] == ["c"]

    def test_numbers_and_columns(self):
        """Test line numbers and columns of split lines."""
        lines = split_lines("\n\na\n    b\n")
        assert lines[0].number == 3
        assert lines[0].column == 1
        assert lines[0].children[0].number == 4
        assert lines[0].children[0].column == 5

    def test_line_comments_are_dropped(self):
        """Test removal of // comments."""
        lines = split_lines("// heading\na // trailing\n  color red\n")
        assert len(lines) == 1
        assert lines[0].text == "a"
        assert lines[0].number == 2

    def test_urls_are_not_comments(self):
        """Test that // inside a URL is kept."""
        lines = split_lines("background url(http://example.com/a.png)")
        assert lines[0].text == "background url(http://example.com/a.png)"

    def test_block_comments_keep_line_numbers(self):
        """Test that block comments keep later line numbers."""
        lines = split_lines("/* one\n   two */\na\n")
        assert len(lines) == 1
        assert lines[0].number == 3

    def test_trailing_semicolon_is_dropped(self):
        """Test removal of a trailing semicolon."""
        lines = split_lines("color: red;")
        assert lines[0].text == "color: red"

    def test_blank_lines_are_skipped(self):
        """Test that blank lines do not become nodes."""
        lines = split_lines("a\n\n   \n  b\n")
        assert [line.text for line in lines[0].children] == ["b"]


class TestStatements:
    """Test AST nodes built from plain lines."""

    def test_assignment(self, parsers):
        """Test a variable assignment."""
        node = _single(parsers, "$width = 10px")
        assert isinstance(node, Ident)
        assert node.name == "$width"
        assert isinstance(node.val, Unit)
        assert node.val.val == "10"
        assert node.val.type == "px"

    def test_assignment_without_spaces(self, parsers):
        """Test an assignment without spaces around =."""
        node = _single(parsers, "width=10")
        assert isinstance(node, Ident)
        assert node.name == "width"
        assert isinstance(node.val, Unit)

    def test_assignment_of_several_values(self, parsers):
        """Test that a value list stays an Expression."""
        node = _single(parsers, "$border = 1px solid #ccc")
        assert isinstance(node.val, Expression)
        kinds = [child.kind for child in node.val.nodes]
        assert kinds == ["Unit", "Literal", "Ident", "Literal", "Color"]

    def test_assignment_of_string_and_boolean(self, parsers):
        """Test string and boolean values."""
        nodes = _statements(parsers, "$font = 'Helvetica'\n$dark = true")
        assert nodes[0].val == String(val="Helvetica", quote="'")
        assert nodes[1].val == Boolean(val=True)

    def test_property_with_colon(self, parsers):
        """Test a property written with a colon."""
        node = _single(parsers, "color: red")
        assert isinstance(node, Property)
        assert node.segments == [Literal(val="color")]
        assert node.expr.nodes == [Ident(name="red")]

    def test_property_with_space(self, parsers):
        """Test a property written with a space."""
        node = _single(parsers, "margin 0 auto")
        assert isinstance(node, Property)
        assert node.expr.nodes == [Unit(val="0"), Literal(val=" "), Ident(name="auto")]

    def test_property_with_comma_list(self, parsers):
        """Test a comma separated property value."""
        node = _single(parsers, "font-family Arial, sans-serif")
        assert node.expr.nodes == [Ident(name="Arial"), Literal(val=", "), Ident(name="sans-serif")]

    def test_property_with_call(self, parsers):
        """Test a call as a property value."""
        node = _single(parsers, "color rgba(0, 0, 0, .5)")
        call = node.expr.nodes[0]
        assert isinstance(call, Call)
        assert call.name == "rgba"
        assert [arg.val for arg in call.args.nodes] == ["0", "0", "0", ".5"]

    def test_property_with_raw_values(self, parsers):
        """Test values kept as raw literals."""
        node = _single(parsers, "font 12px/1.5 Arial")
        assert node.expr.nodes[0] == Literal(val="12px/1.5")

    def test_property_with_important(self, parsers):
        """Test the !important flag."""
        node = _single(parsers, "color red !important")
        assert node.expr.nodes[-1] == Literal(val="!important")

    def test_property_with_url(self, parsers):
        """Test an unquoted url() argument."""
        node = _single(parsers, "background url(images/a.png)")
        call = node.expr.nodes[0]
        assert call.name == "url"
        assert call.args.nodes == [Literal(val="images/a.png")]

    def test_property_with_operation(self, parsers):
        """Test a binary operation as a property value."""
        node = _single(parsers, "width 100% - 10px")
        op = node.expr.nodes[0]
        assert isinstance(op, BinOp)
        assert op.op == "-"
        assert op.left == Unit(val="100", type="%")
        assert op.right == Unit(val="10", type="px")

    def test_negative_value_is_not_an_operation(self, parsers):
        """Test that a minus sign without spaces is part of the number."""
        node = _single(parsers, "margin 0 -1px")
        assert node.expr.nodes == [Unit(val="0"), Literal(val=" "), Unit(val="-1", type="px")]

    def test_operations_fold_left(self, parsers):
        """Test left associativity of operators."""
        node = _single(parsers, "a + b - c")
        assert isinstance(node, Expression)
        op = node.nodes[0]
        assert op.op == "-"
        assert op.left == BinOp(op="+", left=Ident(name="a"), right=Ident(name="b"))
        assert op.right == Ident(name="c")

    def test_bare_value_is_an_expression(self, parsers):
        """Test a line holding only a value."""
        node = _single(parsers, "n")
        assert node == Expression(nodes=[Ident(name="n")])

    def test_call_statement(self, parsers):
        """Test a call on its own line."""
        node = _single(parsers, "border-radius(5px)")
        assert isinstance(node, Call)
        assert node.args == Arguments(nodes=[Unit(val="5", type="px")])

    def test_call_with_space_separated_argument(self, parsers):
        """Test a call argument made of several values."""
        node = _single(parsers, "background linear-gradient(to right, red)")
        args = node.expr.nodes[0].args.nodes
        assert args[0] == Expression(nodes=[Ident(name="to"), Literal(val=" "), Ident(name="right")])
        assert args[1] == Ident(name="red")

    def test_import_quoted(self, parsers):
        """Test an import of a quoted path."""
        node = _single(parsers, "@import 'foo'")
        assert isinstance(node, Import)
        assert node.path.nodes == [String(val="foo", quote="'")]

    def test_import_unquoted(self, parsers):
        """Test an import of a bare path."""
        node = _single(parsers, "@import foo")
        assert node.path.nodes == [Literal(val="foo")]

    def test_return(self, parsers):
        """Test that return gives a plain Expression."""
        node = _single(parsers, "return n * 2")
        assert isinstance(node, Expression)
        assert node.nodes[0] == BinOp(op="*", left=Ident(name="n"), right=Unit(val="2"))

    def test_positions(self, parsers):
        """Test node columns within an indented line."""
        group = _single(parsers, "a\n  color   red")
        prop = group.block.nodes[0]
        assert (prop.line, prop.column) == (2, 3)
        assert (prop.expr.line, prop.expr.column) == (2, 11)


class TestBlockHeaders:
    """Test AST nodes built from lines that open a block."""

    def test_group(self, parsers):
        """Test a selector line with a block."""
        node = _single(parsers, ".nav a:hover\n  color red")
        assert isinstance(node, Group)
        selector = node.nodes[0]
        assert isinstance(selector, Selector)
        assert selector.segments == [Literal(val=".nav a:hover")]
        assert len(node.block.nodes) == 1

    def test_nested_group(self, parsers):
        """Test the position of a nested rule set."""
        node = _single(parsers, "ul\n  li\n    color red")
        inner = node.block.nodes[0]
        assert isinstance(inner, Group)
        assert (inner.line, inner.column) == (2, 3)

    def test_definition(self, parsers):
        """Test a definition bound to its name."""
        node = _single(parsers, "add(a, b)\n  a + b")
        assert isinstance(node, Ident)
        assert node.name == "add"
        function = node.val
        assert isinstance(function, Function)
        assert function.name == "add"
        assert function.params == Params(nodes=[Ident(name="a"), Ident(name="b")])
        assert isinstance(function.block, Block)
        assert isinstance(function.block.nodes[0], Expression)

    def test_definition_without_params(self, parsers):
        """Test a definition without parameters."""
        node = _single(parsers, "reset()\n  margin 0")
        assert node.val.params.nodes == []

    def test_if(self, parsers):
        """Test a conditional without branches."""
        node = _single(parsers, "if $dark\n  color white")
        assert isinstance(node, If)
        assert node.cond.nodes == [Ident(name="$dark")]
        assert node.elses == []

    def test_if_condition_with_operator(self, parsers):
        """Test a comparison in a condition."""
        node = _single(parsers, "if $size == 10px\n  width 1px")
        assert node.cond.nodes == [BinOp(op="==", left=Ident(name="$size"), right=Unit(val="10", type="px"))]

    def test_else_chain_is_flat(self, parsers):
        """Test that else if and else attach to the first if."""
        code = "if a\n  color red\nelse if b\n  color blue\nelse\n  color green\n"
        node = _single(parsers, code)
        assert isinstance(node, If)
        assert len(node.elses) == 2
        assert isinstance(node.elses[0], If)
        assert node.elses[0].cond.nodes == [Ident(name="b")]
        assert isinstance(node.elses[1], Block)
        assert node.elses[1].nodes[0].expr.nodes == [Ident(name="green")]

    def test_else_without_if(self, parsers):
        """Test an else with no conditional before it."""
        with pytest.raises(StylusSyntaxError) as excinfo:
            parse_ast("else\n  color red", parsers=parsers)
        assert excinfo.value.line == 1
        assert "without a preceding 'if'" in str(excinfo.value)

    def test_else_after_other_statement(self, parsers):
        """Test an else separated from its if."""
        with pytest.raises(StylusSyntaxError):
            parse_ast("if a\n  color red\nb = 1\nelse\n  color blue", parsers=parsers)


class TestSyntaxErrors:
    """Test syntax error reporting."""

    def test_error_location(self, parsers):
        """Test the location of a syntax error."""
        with pytest.raises(StylusSyntaxError) as excinfo:
            parse_ast("a\n  color: (", parsers=parsers, origin="theme.styl")
        error = excinfo.value
        assert error.origin == "theme.styl"
        assert error.line == 2
        assert error.column >= 3
        assert str(error).startswith("Syntax error in theme.styl at line 2")

    def test_caret(self):
        """Test the caret line of a syntax error."""
        error = StylusSyntaxError("x.styl", 1, 5, "a = (")
        assert error.caret() == "a = (\n    ^"

    def test_caret_expands_tabs(self):
        """Test that tabs are expanded in the caret display."""
        error = StylusSyntaxError("x.styl", 1, 2, "\tb")
        assert error.caret() == "        b\n        ^"
