"""tree-sitter node helpers shared by the collector, resolver and transformer.

Covers the node types of both the JavaScript and TypeScript grammars.
"""

import re
from typing import Optional

import tree_sitter

# Function-like nodes that carry "parameters" and "body" fields.
# "function" is the pre-0.21 grammar name of "function_expression".
FUNCTION_TYPES = frozenset({
    "function_expression",
    "function",
    "arrow_function",
    "generator_function",
    "method_definition",
})

# Nodes that rebind `this` for everything inside them
THIS_BINDING_TYPES = frozenset({
    "function_expression",
    "function",
    "function_declaration",
    "generator_function",
    "generator_function_declaration",
    "method_definition",
    "class",
    "class_declaration",
})

_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][\w$]*")

# Wrappers that do not change the value of an expression
_TRANSPARENT_TYPES = frozenset({
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
})


def node_text(node: tree_sitter.Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def unwrap(node: Optional[tree_sitter.Node]) -> Optional[tree_sitter.Node]:
    """Strip parentheses and TypeScript type assertions around an expression."""
    while node is not None and node.type in _TRANSPARENT_TYPES:
        node = node.named_children[0] if node.named_children else None
    return node


def is_function(node: Optional[tree_sitter.Node]) -> bool:
    return node is not None and node.type in FUNCTION_TYPES


def has_token(node: tree_sitter.Node, token: str) -> bool:
    """Check for an anonymous keyword child such as 'async', 'get' or '*'."""
    return any(not c.is_named and c.type == token for c in node.children)


def is_accessor(node: tree_sitter.Node) -> bool:
    """True for `get x() {}` / `set x(v) {}` method definitions."""
    return node.type == "method_definition" and (has_token(node, "get") or has_token(node, "set"))


def string_value(node: Optional[tree_sitter.Node], source: bytes) -> Optional[str]:
    """Content of a plain string literal, without quotes."""
    if node is None or node.type != "string":
        return None
    return node_text(node, source)[1:-1]


def key_name(node: tree_sitter.Node, source: bytes) -> Optional[str]:
    """Static name of a pair or method key; None for computed keys."""
    if node.type in ("property_identifier", "identifier", "private_property_identifier", "number"):
        return node_text(node, source)
    if node.type == "string":
        return string_value(node, source)
    return None


def member_key(node: tree_sitter.Node, source: bytes) -> Optional[str]:
    """Static key of an object member (pair, method or shorthand)."""
    if node.type == "pair":
        key = node.child_by_field_name("key")
    elif node.type == "method_definition":
        key = node.child_by_field_name("name")
    elif node.type == "shorthand_property_identifier":
        return node_text(node, source)
    else:
        return None
    return key_name(key, source) if key is not None else None


def object_members(node: Optional[tree_sitter.Node]):
    """Named, non-comment members of an object literal."""
    if node is None or node.type != "object":
        return []
    return [c for c in node.named_children if c.type != "comment"]


def returned_object(fn: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Object literal returned by a function's top-level return statement.

    Handles `() => ({...})` as well as `{ ...; return {...} }`. Returns None
    for any other shape.
    """
    body = fn.child_by_field_name("body")
    if body is None:
        return None
    if body.type != "statement_block":
        candidate = unwrap(body)
        return candidate if candidate is not None and candidate.type == "object" else None
    for stmt in body.named_children:
        if stmt.type == "return_statement":
            value = unwrap(stmt.named_children[0]) if stmt.named_children else None
            return value if value is not None and value.type == "object" else None
    return None


def is_identifier(name: Optional[str]) -> bool:
    """True when name can be declared as a JavaScript binding."""
    return bool(name) and _IDENTIFIER_RE.fullmatch(name) is not None
