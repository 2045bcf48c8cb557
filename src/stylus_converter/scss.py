"""Rendering of Stylus syntax trees as SCSS source text.

The renderer walks the tree with a table keyed by node kind and rebuilds the
punctuation Stylus leaves out: braces around indented blocks, semicolons after
declarations, and the ``@``-keywords of conditionals, mixins and functions.
Whitespace is not laid out from scratch. Newlines and indentation are derived
from the recorded line and column of each node, so the output lines up with
the Stylus input line for line.

Node kinds without a renderer produce an empty string. That is the policy for
anything the converter does not understand (comments, media queries, loops
exported by the Stylus parser...): the rest of the stylesheet still converts.

Example:
    from stylus_converter import converter

    scss = converter("$width = 10px")
    # '$width = 10px;'
"""

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum

from .ast import parse_ast
from .ast.nodes import ASTNode

logger = logging.getLogger(__name__)


IF_KEYWORD = "@if "
ELSE_IF_KEYWORD = " @else if "
ELSE_KEYWORD = " @else"
FUNCTION_KEYWORD = "@function "
MIXIN_KEYWORD = "@mixin "
RETURN_KEYWORD = "@return "

_SIGIL_RE = re.compile(r'^[$@]?')


def _pad(width: int) -> str:
    return " " * max(0, width)


def _format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def variable_name(name: str) -> str:
    """Return a Stylus variable name with exactly one leading ``$``.

    A leading ``$`` or ``@`` sigil is replaced, a bare name gets one.

    Examples:
        variable_name("@width")  # '$width'
        variable_name("width")   # '$width'
        variable_name("$width")  # '$width'
    """
    return _SIGIL_RE.sub('$', name, count=1)


# --- Rendering state ---

@dataclass
class PositionTracker:
    """The virtual write cursor: the last source line and column emitted.

    Attributes:
        last_line: Last line reproduced in the output (1-indexed).
        last_column: Column the horizontal padding is measured from (1-indexed).
    """
    last_line: int = 1
    last_column: int = 1

    def vertical(self, line: int) -> str:
        """Newlines needed to reach `line`, never a negative count."""
        return "\n" * max(0, line - self.last_line)

    def horizontal(self, column: int) -> str:
        """Spaces needed to reach `column`, never a negative count."""
        return " " * max(0, column - self.last_column)

    def move_to(self, line: int, column: int) -> str:
        return self.vertical(line) + self.horizontal(column)

    def advance(self, line: int):
        # Whitespace already written cannot be taken back
        self.last_line = max(self.last_line, line)

    def reset(self):
        self.last_line = 1
        self.last_column = 1


class Role(Enum):
    """Where an expression is being rendered."""
    STATEMENT = "statement"
    CONDITION = "condition"
    VALUE = "value"


@dataclass
class RenderState:
    """Mutable state of one conversion.

    Attributes:
        tracker: The position tracker.
        role: Where the expression being rendered sits: a statement of its
            own, the condition of an ``@if``, or the value of a declaration,
            assignment or call argument.
        return_keyword: Prefix for statement expressions, set while rendering
            the body of a mixin or function and empty elsewhere.
    """
    tracker: PositionTracker = field(default_factory=PositionTracker)
    role: Role = Role.STATEMENT
    return_keyword: str = ""

    @property
    def inside_condition(self) -> bool:
        return self.role is Role.CONDITION

    @contextmanager
    def in_role(self, role: Role):
        saved = self.role
        self.role = role
        try:
            yield self
        finally:
            self.role = saved

    @contextmanager
    def returning(self, keyword: str):
        saved = self.return_keyword
        self.return_keyword = keyword
        try:
            yield self
        finally:
            self.return_keyword = saved


# --- The renderer ---

class ScssRenderer(object):
    """Renders Stylus AST nodes as SCSS text.

    Each instance owns its rendering state, so separate conversions never
    share a position tracker. `render_tree` starts from a fresh state;
    successive `render` calls on the same instance continue from where the
    previous one left the tracker.

    Args:
        option: The target dialect. Only SCSS is produced; other values are
            accepted and ignored.
    """

    def __init__(self, option: str = "scss"):
        self.option = option
        self.state = RenderState()
        self._renderers = {
            "Root": self.render_root,
            "Import": self.render_import,
            "Selector": self.render_selector,
            "Group": self.render_group,
            "Block": self.render_block,
            "Property": self.render_property,
            "Ident": self.render_ident,
            "Expression": self.render_expression,
            "Call": self.render_call,
            "Arguments": self.render_arguments,
            "Params": self.render_arguments,
            "Literal": self.render_literal,
            "String": self.render_string,
            "Unit": self.render_unit,
            "Boolean": self.render_boolean,
            "Color": self.render_color,
            "RGBA": self.render_color,
            "BinOp": self.render_binop,
            "Function": self.render_function,
            "If": self.render_if,
            "Null": self.render_null,
        }

    @property
    def tracker(self) -> PositionTracker:
        return self.state.tracker

    # --- Dispatch ---

    def render(self, node) -> str:
        """Render one node. Kinds without a renderer give an empty string."""
        kind = getattr(node, "kind", None)
        renderer = self._renderers.get(kind)
        if renderer is None:
            logger.debug("no renderer for node kind %r, emitting nothing", kind)
            return ""
        return renderer(node)

    def render_sequence(self, nodes) -> str:
        """Render nodes in order and concatenate the results without separators."""
        return "".join(self.render(node) for node in nodes or [])

    def render_tree(self, ast) -> str:
        """Render a whole tree (a node or a list of top-level nodes) from a fresh state."""
        self.state = RenderState()
        if isinstance(ast, list):
            return self.render_sequence(ast)
        return self.render(ast)

    # --- Statements ---

    def render_root(self, node) -> str:
        return self.render_sequence(node.nodes)

    def render_import(self, node) -> str:
        before = self.tracker.vertical(node.line) + "@import "
        self.tracker.advance(node.line)
        segments = getattr(node.path, "nodes", None) or []
        quote = next((seg.quote for seg in segments if getattr(seg, "quote", "")), "")
        text = "".join(str(getattr(seg, "val", "") or "") for seg in segments)
        return f"{before}{quote}{text}{quote};"

    def render_selector(self, node) -> str:
        before = self.tracker.move_to(node.line, node.column)
        self.tracker.advance(node.line)
        return before + self.render_sequence(node.segments)

    def render_group(self, node) -> str:
        selector = self.render_sequence(node.nodes)
        # The closing brace goes under the end of the selector
        closing_indent = _pad(node.column - len(selector.lstrip("\n")))
        return selector + self.render_block(node.block, closing_indent)

    def render_block(self, node, closing_indent: str = "") -> str:
        """Wrap the statements of a block in braces.

        The opening brace follows the header after one space, the closing
        brace sits on a new line after `closing_indent`.
        """
        with self.state.in_role(Role.STATEMENT):
            text = self.render_sequence(getattr(node, "nodes", None))
        return " {" + text + "\n" + closing_indent + "}"

    def render_property(self, node) -> str:
        before = self.tracker.move_to(node.line, node.column)
        self.tracker.advance(node.line)
        name = self.render_sequence(node.segments)
        with self.state.in_role(Role.VALUE):
            value = self.render(node.expr)
        return f"{before}{name}: {value};"

    def render_ident(self, node) -> str:
        """Render an identifier, an assignment, or a definition bound to a name.

        Binary operations send both operands here whatever their kind, so
        anything that is not an identifier is rendered as a plain value.
        """
        if getattr(node, "kind", None) != "Ident":
            return self.render(node)
        value = node.val
        value_kind = getattr(value, "kind", None)
        if value is None or value_kind == "Null":
            return node.name or ""
        if value_kind == "Function":
            return self.render_function(value)
        before = self.tracker.vertical(node.line)
        self.tracker.advance(node.line)
        with self.state.in_role(Role.VALUE):
            text = self.render(value)
        return f"{before}{variable_name(node.name or '')} = {text};"

    def render_expression(self, node) -> str:
        text = self.render_sequence(node.nodes)
        keyword = self.state.return_keyword
        if not keyword or self.state.role is not Role.STATEMENT:
            return text
        # Statement expressions in a definition body are its return values
        return "\n" + _pad(node.column - len(text) - 1) + keyword + text

    def render_call(self, node) -> str:
        before = self.tracker.vertical(node.line)
        self.tracker.advance(node.line)
        with self.state.in_role(Role.VALUE):
            args = self.render(node.args)
        return f"{before}{node.name or ''}({args});"

    def render_arguments(self, node) -> str:
        return ", ".join(self.render(child) for child in node.nodes or [])

    # --- Values ---

    def render_literal(self, node) -> str:
        return "" if node.val is None else str(node.val)

    def render_string(self, node) -> str:
        quote = node.quote or ""
        return f"{quote}{node.val or ''}{quote}"

    def render_unit(self, node) -> str:
        return _format_number(node.val) + (node.type or "")

    def render_boolean(self, node) -> str:
        if isinstance(node.val, bool):
            return "true" if node.val else "false"
        return str(node.val)

    def render_color(self, node) -> str:
        return node.raw or ""

    def render_null(self, node) -> str:
        return ""

    def render_binop(self, node) -> str:
        return f"{self.render_ident(node.left)} {node.op} {self.render_ident(node.right)}"

    # --- Control flow and definitions ---

    def render_if(self, node, intro: str = IF_KEYWORD) -> str:
        """Render a conditional and its else branches.

        Args:
            node: The If node.
            intro: ``@if `` for the head of a chain; branches recurse with
                `` @else if `` and continue on the line of the previous brace.
        """
        with self.state.in_role(Role.CONDITION):
            condition = self.render(node.cond)
        indent = self.tracker.horizontal(node.column - (len(condition) + 2))

        before = ""
        if intro == IF_KEYWORD:
            before = self.tracker.vertical(node.line)
            self.tracker.advance(node.line)
            before += indent

        block = self.render_block(node.block, indent)

        elses = []
        for branch in node.elses or []:
            # "} @else" is written on the line of the else keyword itself
            self.tracker.advance(branch.line)
            if getattr(branch, "kind", None) == "If":
                elses.append(self.render_if(branch, ELSE_IF_KEYWORD))
            else:
                elses.append(ELSE_KEYWORD + self.render_block(branch, indent))

        return before + intro + condition + block + "".join(elses)

    def render_function(self, node) -> str:
        """Render a definition as ``@mixin`` or ``@function``.

        A body that declares at least one property directly is a mixin,
        any other body is a function.
        """
        body = getattr(node.block, "nodes", None) or []
        is_function = not any(getattr(child, "kind", None) == "Property" for child in body)
        keyword = FUNCTION_KEYWORD if is_function else MIXIN_KEYWORD

        before = self.tracker.vertical(node.line)
        self.tracker.advance(node.line)
        with self.state.in_role(Role.VALUE):
            params = self.render(node.params)

        with self.state.returning(RETURN_KEYWORD):
            block = self.render_block(node.block)
        return f"{before}{keyword}({params}){block}"


# --- Entry points ---

def visitor(ast, option: str = "scss") -> str:
    """Render a Stylus tree as SCSS with a fresh rendering state.

    Args:
        ast: A Root node, any other node, or a list of top-level nodes.
        option: Target dialect, accepted for compatibility and not validated.

    Returns:
        The SCSS text.
    """
    return ScssRenderer(option=option).render_tree(ast)


def converter(result, option: str = "scss", origin: str = "<string>"):
    """Convert Stylus source text, or a Stylus tree, to SCSS.

    Text is parsed first; trees are rendered directly. Any other value is
    returned unchanged.

    Args:
        result: Stylus source text, a tree, or a value to pass through.
        option: Target dialect, accepted for compatibility and not validated.
        origin: Origin used in syntax error locations.

    Returns:
        The SCSS text, or `result` itself when it is neither text nor a tree.

    Raises:
        StylusSyntaxError: If the source text cannot be parsed.
    """
    if isinstance(result, ASTNode) or (isinstance(result, list) and all(isinstance(n, ASTNode) for n in result)):
        return visitor(result, option)
    if not isinstance(result, str):
        return result
    ast = parse_ast(result, origin=origin)
    return visitor(ast, option)
