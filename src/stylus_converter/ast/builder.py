import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from arpeggio import NoMatch, PTNodeVisitor, Terminal

from .nodes import (
    ASTNode,
    Root,
    Literal,
    String,
    Unit,
    Boolean,
    Color,
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

logger = logging.getLogger(__name__)


@dataclass
class Position:
    """Represents a position in source code.

    Attributes:
        origin: Identifier for the source origin (file path, "<string>", ...)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    origin: str = "<string>"
    line: int = 1
    column: int = 1


class StylusSyntaxError(Exception):
    """Raised when a line of Stylus source cannot be parsed.

    Attributes:
        origin: Where the source came from.
        line: Line number of the error (1-indexed).
        column: Column number of the error (1-indexed).
        source_line: The text of the offending line.
    """

    def __init__(self, origin: str, line: int, column: int, source_line: str = "", reason: str = ""):
        self.origin = origin
        self.line = line
        self.column = column
        self.source_line = source_line
        self.reason = reason
        message = f"Syntax error in {origin} at line {line}, column {column}"
        if reason:
            message += f": {reason}"
        super().__init__(message)

    def caret(self) -> str:
        """Return the offending line with a caret under the error column."""
        caret_pos = self.column - 1
        if caret_pos < 0:
            caret_pos = 0  # pragma: no cover
        if caret_pos > len(self.source_line):
            caret_pos = len(self.source_line)
        # Expand tabs for display
        expanded_caret_pos = len(self.source_line[:caret_pos].expandtabs())
        return self.source_line.expandtabs() + "\n" + " " * expanded_caret_pos + "^"


# --- Source lines ---

_BLOCK_COMMENT_RE = re.compile(r'/\*.*?\*/', re.S)
_LINE_COMMENT_RE = re.compile(r'(^|[ \t])//.*$')


@dataclass
class SourceLine:
    """One non-blank line of Stylus source and the lines indented under it.

    Attributes:
        number: Line number (1-indexed).
        indent: Number of leading whitespace characters.
        text: The line content without indentation, comments or a trailing semicolon.
        raw: The full original line, used in error messages.
        children: The more deeply indented lines that follow.
    """
    number: int
    indent: int
    text: str
    raw: str = ""
    children: list["SourceLine"] = field(default_factory=list)

    @property
    def column(self) -> int:
        return self.indent + 1


def _blank_out_comment(match) -> str:
    # Keep the newlines so line numbers stay put
    return "\n" * match.group(0).count("\n")


def split_lines(code: str) -> list[SourceLine]:
    """Split Stylus source into a forest of lines nested by indentation.

    Blank lines and comments are dropped. A line belongs to the closest
    preceding line with a smaller indentation.

    Args:
        code: The Stylus source.

    Returns:
        The top-level lines, each holding its nested lines.
    """
    code = _BLOCK_COMMENT_RE.sub(_blank_out_comment, code)
    roots: list[SourceLine] = []
    stack: list[SourceLine] = []
    for number, raw in enumerate(code.splitlines(), start=1):
        stripped = _LINE_COMMENT_RE.sub('', raw).rstrip()
        if stripped.endswith(';'):
            stripped = stripped[:-1].rstrip()
        content = stripped.lstrip(' \t')
        if not content:
            continue
        line = SourceLine(number=number, indent=len(stripped) - len(content), text=content, raw=raw)
        while stack and stack[-1].indent >= line.indent:
            stack.pop()
        if stack:
            stack[-1].children.append(line)
        else:
            roots.append(line)
        stack.append(line)
    return roots


# --- Parse tree to AST ---

@dataclass
class _Operator:
    """Binary operator token seen between two terms."""
    op: str


@dataclass
class _Header:
    """Result of parsing a line that opens a block.

    Attributes:
        keyword: One of "if", "else if", "else", "def" or "selector".
        node: The node the block will be attached to, None for "else".
    """
    keyword: str
    node: Optional[ASTNode] = None


class ASTBuilderVisitor(PTNodeVisitor):
    """
    Visits the parse tree of one Stylus line and builds AST nodes from it.
    """

    def __init__(self, origin: str = "<string>", line: int = 1, offset: int = 0):
        """Initialize the visitor for one source line.

        Args:
            origin: Identifier for the source origin
            line: The line number of the parsed text
            offset: Number of indentation characters stripped before parsing
        """
        super().__init__()
        self.origin = origin
        self.line = line
        self.offset = offset

    def visit_parse_tree(self, parse_tree):
        """Visit a parse tree and return the AST node for the line."""
        result = self._visit_node(parse_tree)
        if isinstance(result, list):
            return result[0] if result else None
        return result

    def _visit_node(self, node):
        """Recursively visit a parse tree node.

        Rules with a visit method produce AST nodes. Other non-terminals
        pass up the flattened results of their children, and other
        terminals (punctuation, keywords, plain whitespace) are dropped.
        """
        method = getattr(self, f"visit_{node.rule_name}", None)
        if isinstance(node, Terminal):
            return method(node, []) if method else None
        children = []
        for child in node:
            child_ast = self._visit_node(child)
            if child_ast is None:
                continue
            if isinstance(child_ast, list):
                children.extend(child_ast)
            else:
                children.append(child_ast)
        if method:
            return method(node, children)
        return children

    def _get_node_position(self, node) -> Position:
        return Position(origin=self.origin, line=self.line, column=self.offset + node.position + 1)

    # --- Tokens ---

    def visit_TOK_ID(self, node, children):
        return Ident(name=node.value, position=self._get_node_position(node))

    def visit_TOK_PROPERTY(self, node, children):
        return Literal(val=node.value, position=self._get_node_position(node))

    def visit_TOK_COLOR(self, node, children):
        return Color(raw=node.value, position=self._get_node_position(node))

    def visit_TOK_UNIT(self, node, children):
        match = re.match(r'(-?(?:\d+(?:\.\d+)?|\.\d+))(.*)', node.value)
        return Unit(val=match.group(1), type=match.group(2), position=self._get_node_position(node))

    def visit_TOK_BOOLEAN(self, node, children):
        return Boolean(val=node.value == 'true', position=self._get_node_position(node))

    def visit_TOK_STRING(self, node, children):
        return String(val=node.value[1:-1], quote=node.value[0], position=self._get_node_position(node))

    def visit_TOK_LITERAL(self, node, children):
        return Literal(val=node.value, position=self._get_node_position(node))

    def visit_TOK_OPERATOR(self, node, children):
        return _Operator(op=node.value.strip())

    def visit_TOK_SEPARATOR(self, node, children):
        return Literal(val=node.value, position=self._get_node_position(node))

    def visit_TOK_SPACE(self, node, children):
        return Literal(val=node.value, position=self._get_node_position(node))

    # --- Values ---

    def visit_expression(self, node, children):
        # term (operator term)* folds left: a + b - c is (a + b) - c
        result = children[0]
        for operator, right in zip(children[1::2], children[2::2]):
            result = BinOp(op=operator.op, left=result, right=right, position=result.position)
        return result

    def visit_value_list(self, node, children):
        return Expression(nodes=children, position=children[0].position)

    def visit_argument(self, node, children):
        if len(children) == 1:
            return children[0]
        return Expression(nodes=children, position=children[0].position)

    def visit_arguments(self, node, children):
        return Arguments(nodes=children, position=self._get_node_position(node))

    def visit_call(self, node, children):
        name = children[0]
        args = children[1] if len(children) > 1 else Arguments(position=name.position)
        return Call(name=name.name, args=args, position=name.position)

    # --- Block headers ---

    def visit_if_header(self, node, children):
        return _Header("if", If(cond=children[0], position=self._get_node_position(node)))

    def visit_else_if_header(self, node, children):
        return _Header("else if", If(cond=children[0], position=self._get_node_position(node)))

    def visit_else_header(self, node, children):
        return _Header("else")

    def visit_params(self, node, children):
        return Params(nodes=children, position=self._get_node_position(node))

    def visit_definition_header(self, node, children):
        name = children[0]
        params = children[1] if len(children) > 1 else Params(position=name.position)
        return _Header("def", Function(name=name.name, params=params, position=name.position))

    def visit_selector(self, node, children):
        position = self._get_node_position(node)
        selector = Selector(segments=[Literal(val=node.value, position=position)], position=position)
        return _Header("selector", Group(nodes=[selector], position=position))

    # --- Statements ---

    def visit_import_stmt(self, node, children):
        position = self._get_node_position(node)
        return Import(path=Expression(nodes=children, position=children[0].position), position=position)

    def visit_return_stmt(self, node, children):
        # Function bodies prefix statement expressions with @return themselves
        return children[0]

    def visit_assignment(self, node, children):
        name, value = children
        if isinstance(value, Expression) and len(value.nodes) == 1:
            value = value.nodes[0]
        return Ident(name=name.name, val=value, position=name.position)

    def visit_expression_stmt(self, node, children):
        value = children[0]
        if isinstance(value, Call):
            return value
        return Expression(nodes=[value], position=value.position)

    def visit_property_decl(self, node, children):
        name, value = children
        return Property(segments=[name], expr=value, position=name.position)


# --- Lines to AST ---

class StylusTreeBuilder(object):
    """Builds a Root node from Stylus source text.

    The source is split into lines nested by indentation. A line with
    nested lines is a block header (rule set, conditional or definition);
    any other line is a statement. Each line's content is parsed with the
    matching Arpeggio parser.
    """

    def __init__(self, header_parser, statement_parser, origin: str = "<string>"):
        self.header_parser = header_parser
        self.statement_parser = statement_parser
        self.origin = origin

    def build(self, code: str) -> Root:
        lines = split_lines(code)
        return Root(nodes=self._build_body(lines), position=Position(origin=self.origin))

    def _parse_line(self, parser, line: SourceLine):
        try:
            parse_tree = parser.parse(line.text)
        except NoMatch as e:
            char_pos = e.position if isinstance(e.position, int) else 0
            raise StylusSyntaxError(
                self.origin, line.number, line.indent + char_pos + 1, line.raw
            ) from e
        visitor = ASTBuilderVisitor(origin=self.origin, line=line.number, offset=line.indent)
        return visitor.visit_parse_tree(parse_tree)

    def _build_body(self, lines: list[SourceLine]) -> list[ASTNode]:
        nodes: list[ASTNode] = []
        last_if: Optional[If] = None
        for line in lines:
            if not line.children:
                nodes.append(self._parse_line(self.statement_parser, line))
                last_if = None
                continue

            header = self._parse_line(self.header_parser, line)
            block = Block(
                nodes=self._build_body(line.children),
                position=Position(origin=self.origin, line=line.number, column=line.column),
            )
            logger.debug("line %d opens a %s block", line.number, header.keyword)

            if header.keyword in ("else if", "else"):
                if last_if is None:
                    raise StylusSyntaxError(
                        self.origin, line.number, line.column, line.raw,
                        reason=f"'{header.keyword}' without a preceding 'if'",
                    )
                if header.keyword == "else":
                    last_if.elses.append(block)
                    last_if = None
                else:
                    header.node.block = block
                    last_if.elses.append(header.node)
                continue

            header.node.block = block
            if header.keyword == "if":
                last_if = header.node
                nodes.append(header.node)
            elif header.keyword == "def":
                # Stylus binds definitions to their name with an identifier
                function = header.node
                nodes.append(Ident(name=function.name, val=function, position=function.position))
                last_if = None
            else:
                nodes.append(header.node)
                last_if = None
        return nodes
