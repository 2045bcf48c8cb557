#######################################################################
# Arpeggio PEG Grammar for Stylus
#######################################################################
#
# Stylus nests by indentation, so the grammar works one logical line at
# a time: the builder strips indentation and comments, decides whether
# a line opens a block, and parses its content with either
# `block_header` or `statement`. Whitespace is significant inside a
# line (it separates values), so the parsers run with skipws=False.

from arpeggio import (
    Optional, ZeroOrMore, EOF, Not,
    RegExMatch as _
)

# A value token must end where the value ends, otherwise `foo.png`
# would match as the identifier `foo`.
_BOUNDARY = r'(?=[\s,()=]|$)'


# --- Roots ---

def block_header():
    return [(if_header, EOF), (else_if_header, EOF), (else_header, EOF),
            (definition_header, EOF), (selector, EOF)]


def statement():
    return [(import_stmt, EOF), (return_stmt, EOF), (assignment, EOF),
            expression_stmt, (property_decl, EOF)]


# --- Tokens ---

def WS():
    return _(r'[ \t]+')


def TOK_ID():
    return _(r'-?[$@]?[A-Za-z_][\w-]*' + _BOUNDARY)


def TOK_PROPERTY():
    return _(r'(-?[A-Za-z_*][\w-]*|\{[^}]*\})+')


def TOK_COLOR():
    return _(r'#(?:[0-9A-Fa-f]{8}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{3,4})' + _BOUNDARY)


def TOK_UNIT():
    return _(r'-?(?:\d+(?:\.\d+)?|\.\d+)(?:%|[A-Za-z]+)?' + _BOUNDARY)


def TOK_BOOLEAN():
    return _(r'(?:true|false)' + _BOUNDARY)


def TOK_STRING():
    return _(r'\'[^\']*\'|"[^"]*"')


def TOK_LITERAL():
    return _(r'[^\s,()\'"]+')


def TOK_OPERATOR():
    return _(r'[ \t]+(?:==|!=|>=|<=|>|<|\+|-|\*|/|%|and|or|is)[ \t]+')


def TOK_SEPARATOR():
    return _(r'[ \t]*,[ \t]*|[ \t]+')


def TOK_SPACE():
    return _(r'[ \t]+')


def TOK_ASSIGN():
    return (Optional(WS), '=', Not('='), Optional(WS))


def TOK_PROPERTY_SEP():
    return [(':', Optional(WS)), WS]


# --- Block headers ---

def if_header():
    return 'if', WS, value_list


def else_if_header():
    return 'else', WS, 'if', WS, value_list


def else_header():
    return 'else'


def definition_header():
    return TOK_ID, '(', Optional(WS), Optional(params), Optional(WS), ')'


def params():
    return TOK_ID, ZeroOrMore(_(r'[ \t]*,[ \t]*'), TOK_ID)


def selector():
    return _(r'.+')


# --- Statements ---

def import_stmt():
    return '@import', WS, [TOK_STRING, TOK_LITERAL]


def return_stmt():
    return 'return', WS, value_list


def assignment():
    return TOK_ID, TOK_ASSIGN, value_list


def expression_stmt():
    return expression, EOF


def property_decl():
    return TOK_PROPERTY, TOK_PROPERTY_SEP, value_list


# --- Values ---

def value_list():
    return expression, ZeroOrMore(TOK_SEPARATOR, expression)


def expression():
    return term, ZeroOrMore(TOK_OPERATOR, term)


def term():
    return [TOK_COLOR, TOK_UNIT, TOK_BOOLEAN, TOK_STRING, call, TOK_ID, TOK_LITERAL]


def call():
    return TOK_ID, '(', Optional(WS), Optional(arguments), Optional(WS), ')'


def arguments():
    return argument, ZeroOrMore(_(r'[ \t]*,[ \t]*'), argument)


def argument():
    return expression, ZeroOrMore(TOK_SPACE, expression)


# vim: set ts=4 sw=4 expandtab:
