from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .builder import Position


def _default_position() -> "Position":
    from .builder import Position
    return Position()


# --- AST nodes classes. ---

@dataclass
class ASTNode(object):
    """Base class for all Stylus AST nodes.

    Every node carries the source position of its first character. The node
    kind is the class name, matching the ``__type`` tag the Stylus parser
    writes when it exports a tree.

    Attributes:
        position: The source position of this node in the original Stylus code.
    """
    position: "Position" = field(default_factory=_default_position, repr=False, compare=False)

    @property
    def kind(self) -> str:
        """The discriminator used to pick a renderer for this node."""
        return type(self).__name__

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column


@dataclass
class Root(ASTNode):
    """The top-level list of statements of a stylesheet."""
    nodes: list[ASTNode] = field(default_factory=list)


@dataclass
class Null(ASTNode):
    """Null marker, used as the value of an identifier that holds nothing."""
    pass


@dataclass
class Literal(ASTNode):
    """Raw text copied verbatim to the output.

    Selector segments and the separators between space or comma separated
    values are literals.

    Attributes:
        val: The raw text.
    """
    val: str = ""


@dataclass
class String(ASTNode):
    """A quoted string.

    Examples:
        'foo.styl'
        "Helvetica Neue"

    Attributes:
        val: The string contents without quotes.
        quote: The quote character used in the source, or an empty string.
    """
    val: str = ""
    quote: str = ""


@dataclass
class Unit(ASTNode):
    """A number with an optional unit suffix, such as ``10px`` or ``1.5``.

    Attributes:
        val: The numeric value, or its source text when parsed from Stylus.
        type: The unit suffix (``px``, ``%``, ``em``...), empty for plain numbers.
    """
    val: float | int | str = 0
    type: str = ""


@dataclass
class Boolean(ASTNode):
    """A ``true`` or ``false`` literal."""
    val: bool | str = False


@dataclass
class Color(ASTNode):
    """A color literal such as ``#fff``.

    Attributes:
        raw: The color exactly as written in the source.
    """
    raw: str = ""


@dataclass
class Ident(ASTNode):
    """An identifier, optionally bound to a value.

    A bare identifier is a variable reference or a parameter name. With a value
    it is a variable assignment, and with a Function value it is the name
    binding of a mixin or function definition.

    Examples:
        $width = 10px
        border-radius(n)
          -webkit-border-radius n

    Attributes:
        name: The identifier as written, including any ``$`` or ``@`` sigil.
        val: The bound value, or None.
    """
    name: str = ""
    val: ASTNode | None = None


@dataclass
class Expression(ASTNode):
    """An ordered run of values rendered back to back.

    Attributes:
        nodes: The values, including separator literals between them.
    """
    nodes: list[ASTNode] = field(default_factory=list)


@dataclass
class BinOp(ASTNode):
    """A binary operation such as ``a + b`` or ``x == 1``.

    Attributes:
        op: The operator token.
        left: The left operand.
        right: The right operand.
    """
    op: str = ""
    left: ASTNode | None = None
    right: ASTNode | None = None


@dataclass
class Arguments(ASTNode):
    """The argument list of a call."""
    nodes: list[ASTNode] = field(default_factory=list)


@dataclass
class Params(ASTNode):
    """The parameter list of a mixin or function definition."""
    nodes: list[ASTNode] = field(default_factory=list)


@dataclass
class Call(ASTNode):
    """A call such as ``rgba(0, 0, 0, .5)`` or a mixin invocation.

    Attributes:
        name: The callee name.
        args: The argument list.
    """
    name: str = ""
    args: Arguments = field(default_factory=Arguments)


@dataclass
class Block(ASTNode):
    """An indented block of statements."""
    nodes: list[ASTNode] = field(default_factory=list)


@dataclass
class Selector(ASTNode):
    """One selector of a rule set.

    Attributes:
        segments: The selector text pieces.
    """
    segments: list[ASTNode] = field(default_factory=list)


@dataclass
class Group(ASTNode):
    """A rule set: selectors followed by an indented block.

    Attributes:
        nodes: The selectors.
        block: The declarations and nested rules.
    """
    nodes: list[ASTNode] = field(default_factory=list)
    block: Block = field(default_factory=Block)


@dataclass
class Property(ASTNode):
    """A CSS declaration such as ``color red`` or ``margin: 0 auto``.

    Attributes:
        segments: The property name pieces.
        expr: The value.
    """
    segments: list[ASTNode] = field(default_factory=list)
    expr: Expression = field(default_factory=Expression)


@dataclass
class Function(ASTNode):
    """A mixin or function definition.

    Stylus does not distinguish the two. A definition whose body declares
    properties is a mixin, anything else is a function.

    Attributes:
        name: The definition name.
        params: The parameter list.
        block: The body.
    """
    name: str = ""
    params: Params = field(default_factory=Params)
    block: Block = field(default_factory=Block)


@dataclass
class If(ASTNode):
    """A conditional.

    Examples:
        if $dark
          color white
        else if $muted
          color gray
        else
          color black

    Attributes:
        cond: The condition.
        block: The body executed when the condition holds.
        elses: The ``else if`` branches (as If nodes) and the final ``else``
            (as a Block), in source order.
    """
    cond: Expression = field(default_factory=Expression)
    block: Block = field(default_factory=Block)
    elses: list[ASTNode] = field(default_factory=list)


@dataclass
class Import(ASTNode):
    """An ``@import`` statement.

    Attributes:
        path: The imported path, an Expression of String or Literal segments.
    """
    path: Expression = field(default_factory=Expression)


@dataclass
class UnknownNode(ASTNode):
    """A node of a kind this package has no class for.

    Produced when loading an exported tree that contains, for example, media
    queries or comments. It renders as an empty string.

    Attributes:
        type_name: The kind tag found in the exported data.
    """
    type_name: str = ""

    @property
    def kind(self) -> str:
        return self.type_name
