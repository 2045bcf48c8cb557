"""JSON and YAML serialization for Stylus AST trees.

This module provides functions to serialize AST trees to JSON and YAML formats,
and to deserialize them back to AST nodes.

Two input formats are understood. The package's own format tags each node
with ``_type`` and keeps its location under ``_position``. The format written
by the Stylus parser's ``toJSON()`` tags nodes with ``__type`` and stores the
location as ``lineno``/``column``/``filename`` keys on the node itself; its
field names match the node attributes here, so exported Stylus trees load
directly. Node types with no class in this package load as UnknownNode.

Example:
    from stylus_converter.ast import getASTfromString, ast_to_json, ast_from_json

    ast = getASTfromString("a\\n  color red")
    json_str = ast_to_json(ast)
    ast_restored = ast_from_json(json_str)
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any

from .builder import Position
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


# Registry mapping kind names to classes for deserialization
_NODE_REGISTRY: dict[str, type[ASTNode]] = {
    cls.__name__: cls
    for cls in [
        Root,
        Null,
        # Values
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
        # Statements
        Block,
        Selector,
        Group,
        Property,
        Function,
        If,
        Import,
    ]
}

# Stylus names colors after their internal representation
_NODE_REGISTRY["RGBA"] = Color
_NODE_REGISTRY["HSLA"] = Color


def _serialize_position(position: Position) -> dict[str, Any]:
    """Serialize a Position to a dictionary."""
    return {
        "origin": position.origin,
        "line": position.line,
        "column": position.column,
    }


def _serialize_value(value: Any, include_position: bool) -> Any:
    """Serialize a field value recursively."""
    if value is None:
        return None
    elif isinstance(value, ASTNode):
        return _serialize_node(value, include_position)
    elif isinstance(value, list):
        return [_serialize_value(item, include_position) for item in value]
    elif isinstance(value, (str, int, float, bool)):
        return value
    else:
        raise TypeError(f"Unsupported type for serialization: {type(value)}")


def _serialize_node(node: ASTNode, include_position: bool) -> dict[str, Any]:
    """Serialize a single AST node to a dictionary."""
    result: dict[str, Any] = {
        "_type": node.kind,
    }

    if include_position:
        result["_position"] = _serialize_position(node.position)

    for field in dataclasses.fields(node):
        if field.name in ("position", "type_name"):
            continue
        value = getattr(node, field.name)
        result[field.name] = _serialize_value(value, include_position)

    return result


def ast_to_dict(
    ast: ASTNode | list[ASTNode] | None,
    include_position: bool = True,
) -> dict[str, Any] | list[dict[str, Any]] | None:
    """Convert an AST to a Python dictionary (JSON-serializable).

    Args:
        ast: An AST node, list of AST nodes, or None.
        include_position: If True, include source position information (default: True).

    Returns:
        A dictionary representation of the AST, a list of dictionaries, or None.

    Example:
        ast = getASTfromString("$width = 10px")
        data = ast_to_dict(ast)
    """
    if ast is None:
        return None
    elif isinstance(ast, list):
        return [_serialize_node(node, include_position) for node in ast]
    else:
        return _serialize_node(ast, include_position)


def ast_to_json(
    ast: ASTNode | list[ASTNode] | None,
    include_position: bool = True,
    indent: int | None = 2,
) -> str:
    """Serialize an AST to a JSON string.

    Args:
        ast: An AST node, list of AST nodes, or None.
        include_position: If True, include source position information (default: True).
        indent: Indentation level for pretty-printing. Use None for compact output.

    Returns:
        A JSON string representation of the AST.
    """
    data = ast_to_dict(ast, include_position=include_position)
    return json.dumps(data, indent=indent)


def _deserialize_position(data: dict[str, Any]) -> Position:
    """Deserialize a Position from a dictionary."""
    if "_position" in data:
        position = data["_position"]
        return Position(
            origin=position.get("origin", "<unknown>"),
            line=position.get("line", 1),
            column=position.get("column", 1),
        )
    # Stylus export: location lives on the node itself
    return Position(
        origin=data.get("filename") or "<unknown>",
        line=data.get("lineno", 1),
        column=data.get("column", 1),
    )


def _type_name(data: dict[str, Any]) -> str | None:
    if "_type" in data:
        return data["_type"]
    return data.get("__type")


def _deserialize_value(value: Any) -> Any:
    """Deserialize a field value recursively."""
    if value is None:
        return None
    elif isinstance(value, dict):
        return _deserialize_node(value)
    elif isinstance(value, list):
        return [_deserialize_value(item) for item in value]
    elif isinstance(value, (str, int, float, bool)):
        return value
    else:
        raise TypeError(f"Unsupported type for deserialization: {type(value)}")


def _deserialize_node(data: dict[str, Any]) -> ASTNode:
    """Deserialize a single AST node from a dictionary."""
    type_name = _type_name(data)
    if type_name is None:
        raise ValueError("Missing '_type' field in node data")

    position = _deserialize_position(data)
    if type_name not in _NODE_REGISTRY:
        return UnknownNode(type_name=type_name, position=position)

    node_class = _NODE_REGISTRY[type_name]

    # Get field names from dataclass (excluding position)
    field_names = {f.name for f in dataclasses.fields(node_class) if f.name != "position"}

    # Build kwargs for constructor
    kwargs: dict[str, Any] = {"position": position}
    for key, value in data.items():
        if key.startswith("_"):
            continue  # Skip _type, _position, __type
        if key in field_names:
            kwargs[key] = _deserialize_value(value)

    return node_class(**kwargs)


def ast_from_dict(data: dict[str, Any] | list[dict[str, Any]] | None) -> ASTNode | list[ASTNode] | None:
    """Reconstruct an AST from a Python dictionary.

    Args:
        data: A dictionary, list of dictionaries, or None (as returned by
            ast_to_dict, or by JSON-decoding a Stylus ``toJSON()`` export).

    Returns:
        An AST node, list of AST nodes, or None.

    Raises:
        ValueError: If a node is missing its type tag.
        TypeError: If a field holds a value that is not JSON data.
    """
    if data is None:
        return None
    elif isinstance(data, list):
        return [_deserialize_node(item) for item in data]
    else:
        return _deserialize_node(data)


def ast_from_json(json_str: str) -> ASTNode | list[ASTNode] | None:
    """Deserialize an AST from a JSON string.

    Args:
        json_str: A JSON string (as returned by ast_to_json).

    Returns:
        An AST node, list of AST nodes, or None.

    Raises:
        ValueError: If a node is missing its type tag.
        json.JSONDecodeError: If the string is not valid JSON.
    """
    data = json.loads(json_str)
    return ast_from_dict(data)


def ast_to_yaml(
    ast: ASTNode | list[ASTNode] | None,
    include_position: bool = True,
) -> str:
    """Serialize an AST to a YAML string.

    Requires PyYAML to be installed: pip install stylus_converter[yaml]

    Args:
        ast: An AST node, list of AST nodes, or None.
        include_position: If True, include source position information (default: True).

    Returns:
        A YAML string representation of the AST.

    Raises:
        ImportError: If PyYAML is not installed.
    """
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML is required for YAML serialization. "
            "Install it with: pip install stylus_converter[yaml]"
        )

    data = ast_to_dict(ast, include_position=include_position)
    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def ast_from_yaml(yaml_str: str) -> ASTNode | list[ASTNode] | None:
    """Deserialize an AST from a YAML string.

    Requires PyYAML to be installed: pip install stylus_converter[yaml]

    Args:
        yaml_str: A YAML string (as returned by ast_to_yaml).

    Returns:
        An AST node, list of AST nodes, or None.

    Raises:
        ImportError: If PyYAML is not installed.
        ValueError: If a node is missing its type tag.
    """
    try:
        import yaml
    except ImportError:
        raise ImportError(
            "PyYAML is required for YAML deserialization. "
            "Install it with: pip install stylus_converter[yaml]"
        )

    data = yaml.safe_load(yaml_str)
    return ast_from_dict(data)
