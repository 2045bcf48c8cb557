"""Pytest configuration and shared fixtures for Stylus converter tests."""

import pytest
from stylus_converter import getStylusParser, getStylusParsers
from stylus_converter.grammar import block_header, statement
from stylus_converter.scss import ScssRenderer


@pytest.fixture
def statement_parser():
    """Create a parser for plain Stylus lines."""
    return getStylusParser(statement)


@pytest.fixture
def header_parser():
    """Create a parser for lines that open a block."""
    return getStylusParser(block_header)


@pytest.fixture(scope="session")
def parsers():
    """The (block header, statement) parser pair, shared across tests."""
    return getStylusParsers()


@pytest.fixture
def renderer():
    """Create a renderer with a fresh state."""
    return ScssRenderer()


def parse_success(parser, code):
    """Helper function to parse a line and assert success."""
    result = parser.parse(code)
    assert result is not None
    return result


def parse_failure(parser, code):
    """Helper function to parse a line and assert failure."""
    with pytest.raises(Exception):
        parser.parse(code)
