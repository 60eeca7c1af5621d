"""Static evaluation of literal story values.

Only literals, arrays and object literals are resolved. Anything that would
need a scope or execution (identifiers, calls, template strings, functions,
spreads) evaluates to :data:`UNSUPPORTED`, as do numbers that overflow to
infinity and values nested deeper than :data:`MAX_NESTING_DEPTH`. The
evaluator never looks outside the node it is given, so evaluating the same
node twice gives equal results.
"""
from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional, Tuple

from tree_sitter import Node

from ..models.records import UNSUPPORTED

# Expression wrappers that don't change the value (TypeScript assertions, parens).
TRANSPARENT_NODE_TYPES = {
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
    "type_assertion",
}

SKIPPED_NODE_TYPES = {"comment"}

# Arrays and objects nested deeper than this are not evaluated at all.
MAX_NESTING_DEPTH = 100

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_ESCAPE_RE = re.compile(
    r"\\(?:u\{(?P<code>[0-9a-fA-F]+)\}|u(?P<u4>[0-9a-fA-F]{4})|x(?P<x2>[0-9a-fA-F]{2})"
    r"|(?P<newline>\r\n|\n|\r|\u2028|\u2029)|(?P<char>.))",
    re.DOTALL,
)


def evaluate(node: Optional[Node]) -> Any:
    """Convert a literal/array/object node into a plain Python value."""
    try:
        return _evaluate(node, None, 0)
    except _NestingTooDeep:
        return UNSUPPORTED


def evaluate_with_report(node: Optional[Node]) -> Tuple[Any, List[Node]]:
    """Evaluate ``node`` and also return every sub-node that was not resolvable."""
    rejected: List[Node] = []
    try:
        value = _evaluate(node, rejected, 0)
    except _NestingTooDeep:
        return UNSUPPORTED, [node] if node is not None else []
    return value, rejected


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip parentheses and TypeScript type assertions around an expression."""
    while node is not None and node.type in TRANSPARENT_NODE_TYPES:
        inner = _value_children(node)
        if not inner:
            return None
        # <Type>value puts the type first
        node = inner[-1] if node.type == "type_assertion" else inner[0]
    return node


def node_text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""


def property_key(pair: Node) -> Optional[str]:
    """Return the static key of a ``pair`` node, or None for computed keys."""
    key = pair.child_by_field_name("key")
    if key is None:
        return None
    if key.type == "property_identifier":
        return node_text(key)
    if key.type == "string":
        return decode_string(key)
    if key.type == "number":
        return _format_number_key(parse_number(node_text(key)))
    return None


def object_entries(node: Node) -> List[Tuple[str, Node]]:
    """List the ``(key, value node)`` pairs of an object literal in source order."""
    entries: List[Tuple[str, Node]] = []
    for child in node.named_children:
        if child.type != "pair":
            continue
        key = property_key(child)
        value = child.child_by_field_name("value")
        if key is None or value is None:
            continue
        entries.append((key, value))
    return entries


def decode_string(node: Node) -> str:
    parts: List[str] = []
    for child in node.named_children:
        text = node_text(child)
        if child.type == "escape_sequence":
            parts.append(decode_escapes(text))
        else:
            parts.append(text)
    return "".join(parts)


def decode_escapes(text: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        if match.group("code") is not None:
            return chr(int(match.group("code"), 16))
        if match.group("u4") is not None:
            return chr(int(match.group("u4"), 16))
        if match.group("x2") is not None:
            return chr(int(match.group("x2"), 16))
        if match.group("newline") is not None:
            return ""
        char = match.group("char")
        return _SIMPLE_ESCAPES.get(char, char)

    return _ESCAPE_RE.sub(_replace, text)


def parse_number(text: str) -> int | float:
    cleaned = text.replace("_", "")
    lowered = cleaned.lower()
    if lowered.endswith("n"):
        return int(cleaned[:-1], 0)
    if lowered.startswith(("0x", "0o", "0b")):
        return int(cleaned, 0)
    if len(cleaned) > 1 and cleaned.startswith("0") and cleaned.isdigit():
        # legacy octal literal, unless it contains 8 or 9
        try:
            return int(cleaned, 8)
        except ValueError:
            return int(cleaned)
    if "." in cleaned or "e" in lowered:
        value = float(cleaned)
        if value.is_integer():
            return int(value)
        return value
    return int(cleaned)


# --- internals -------------------------------------------------------------
class _NestingTooDeep(Exception):
    pass


def _evaluate(node: Optional[Node], rejected: Optional[List[Node]], depth: int) -> Any:
    node = unwrap(node)
    if node is None:
        return UNSUPPORTED
    if depth > MAX_NESTING_DEPTH:
        raise _NestingTooDeep()
    kind = node.type
    if kind == "string":
        return decode_string(node)
    if kind == "number":
        return _finite(parse_number(node_text(node)), node, rejected)
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind == "null":
        return None
    if kind == "unary_expression":
        return _evaluate_signed(node, rejected)
    if kind == "array":
        return _evaluate_array(node, rejected, depth)
    if kind == "object":
        return _evaluate_object(node, rejected, depth)
    return _reject(node, rejected)


def _evaluate_signed(node: Node, rejected: Optional[List[Node]]) -> Any:
    operator = node.child_by_field_name("operator")
    argument = unwrap(node.child_by_field_name("argument"))
    if operator is None or argument is None or argument.type != "number":
        return _reject(node, rejected)
    sign = node_text(operator)
    if sign not in {"-", "+"}:
        return _reject(node, rejected)
    value = parse_number(node_text(argument))
    return _finite(-value if sign == "-" else value, node, rejected)


def _evaluate_array(node: Node, rejected: Optional[List[Node]], depth: int) -> Any:
    items: List[Any] = []
    for child in _value_children(node):
        value = _evaluate(child, rejected, depth + 1)
        if value is UNSUPPORTED:
            continue
        items.append(value)
    return items


def _evaluate_object(node: Node, rejected: Optional[List[Node]], depth: int) -> Any:
    result: Dict[str, Any] = {}
    for child in _value_children(node):
        if child.type != "pair":
            # spread_element, method_definition, shorthand_property_identifier
            _reject(child, rejected)
            continue
        key = property_key(child)
        if key is None:
            _reject(child, rejected)
            continue
        value = _evaluate(child.child_by_field_name("value"), rejected, depth + 1)
        if value is UNSUPPORTED:
            continue
        result[key] = value
    return result


def _finite(value: int | float, node: Node, rejected: Optional[List[Node]]) -> Any:
    # 1e400 overflows to inf, which JSON cannot represent
    if isinstance(value, float) and not math.isfinite(value):
        return _reject(node, rejected)
    return value


def _reject(node: Node, rejected: Optional[List[Node]]) -> Any:
    if rejected is not None:
        rejected.append(node)
    return UNSUPPORTED


def _value_children(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type not in SKIPPED_NODE_TYPES]


def _format_number_key(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
