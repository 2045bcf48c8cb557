#######################################################################
# Arpeggio PEG parsers for Stylus
#######################################################################

from arpeggio import ParserPython
from .grammar import block_header, statement


# --- The parsers ---

def getStylusParser(root=statement, debug=False):
    """Create a Stylus line parser instance.

    Args:
        root: The grammar rule to parse with, `statement` (default) for plain
            lines or `block_header` for lines that open an indented block
        debug: If True, enable debug output (default: False)

    Returns:
        ParserPython instance configured for one line of Stylus
    """
    # Whitespace separates values, so it is never skipped implicitly
    return ParserPython(root, skipws=False, memoization=True, debug=debug)


def getStylusParsers(debug=False):
    """Create the (block header, statement) parser pair used by the tree builder."""
    return getStylusParser(block_header, debug=debug), getStylusParser(statement, debug=debug)


from .scss import converter, visitor, ScssRenderer  # noqa: E402


# vim: set ts=4 sw=4 expandtab:
