import os

from stylus_converter import getStylusParsers

# Import all AST nodes from nodes
from .nodes import (
    ASTNode,
    Root,
    Null,
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
    UnknownNode,
)

# Import the builder, Position and the syntax error
from .builder import (
    ASTBuilderVisitor,
    Position,
    SourceLine,
    StylusSyntaxError,
    StylusTreeBuilder,
    split_lines,
)

# Import serialization functions
from .serialization import (
    ast_to_dict,
    ast_to_json,
    ast_from_dict,
    ast_from_json,
    ast_to_yaml,
    ast_from_yaml,
)


# --- AST convenience functions ---

def parse_ast(code: str, origin: str = "<string>", parsers=None) -> Root:
    """Parse Stylus code and return its AST.

    This is the main public API for converting Stylus code to an AST.

    Args:
        code: The Stylus code string to parse
        origin: Origin identifier for source location tracking
        parsers: Optional (block header, statement) parser pair from
            getStylusParsers(), created on demand when omitted

    Returns:
        The Root node of the stylesheet

    Raises:
        StylusSyntaxError: If a line cannot be parsed.
    """
    if parsers is None:
        parsers = getStylusParsers()
    header_parser, statement_parser = parsers
    builder = StylusTreeBuilder(header_parser, statement_parser, origin=origin)
    return builder.build(code)


def getASTfromString(code: str, origin: str = "<string>") -> Root:
    """
    Parse Stylus source code from a string and return its abstract syntax tree (AST).

    Args:
        code (str): The Stylus source code to be parsed.
        origin (str): Origin identifier for source location tracking (default: "<string>").

    Returns:
        Root: The AST of the stylesheet. An empty stylesheet gives a Root with no nodes.

    Raises:
        StylusSyntaxError: If a line cannot be parsed.

    Example:
        ast = getASTfromString("a\\n  color red")
    """
    return parse_ast(code, origin=origin)


def getASTfromFile(file: str) -> Root:
    """
    Parse a Stylus source file and return its abstract syntax tree (AST).

    Imports are not followed; they stay in the tree as Import nodes.

    Args:
        file (str): The Stylus source file to be parsed.

    Returns:
        Root: The AST of the stylesheet, with positions pointing into the file.

    Raises:
        FileNotFoundError: If the specified file does not exist.
        StylusSyntaxError: If a line cannot be parsed.

    Example:
        ast = getASTfromFile("theme.styl")
    """
    file_path = os.path.abspath(file)
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File {file} not found")

    with open(file_path, 'r', encoding='utf-8') as f:
        code = f.read()

    return parse_ast(code, origin=file_path)
