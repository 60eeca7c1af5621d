from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from tree_sitter import Node

from ..errors import UnsupportedNodeWarning
from ..logs import get_logger
from ..models.records import ABSENT, UNSUPPORTED, MetadataDeclaration, PropertyDescriptor
from .evaluator import (
    SKIPPED_NODE_TYPES,
    evaluate_with_report,
    node_text,
    object_entries,
    property_key,
    unwrap,
)

logger = get_logger("extractor.normalizer")

DECLARED_TYPES = {"string", "number", "boolean", "object"}
TYPE_ALIASES = {"array": "object"}


def infer_type(value: Any) -> str:
    """Derive a property type from the shape of its default value."""
    if value is ABSENT or value is UNSUPPORTED:
        return "unknown"
    if isinstance(value, (list, dict)):
        return "object"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "unknown"


def normalize_declared_type(name: str) -> str:
    name = TYPE_ALIASES.get(name, name)
    return name if name in DECLARED_TYPES else "unknown"


@dataclass(slots=True)
class _PropertyState:
    name: str
    declared_type: Optional[str] = None
    description: Optional[str] = None
    args_default: Any = ABSENT
    arg_types_default: Any = ABSENT

    def resolve(self) -> PropertyDescriptor:
        # args hold the effective run value, so they beat argTypes defaults
        default = self.args_default if self.args_default is not ABSENT else self.arg_types_default
        if self.declared_type is not None:
            prop_type = normalize_declared_type(self.declared_type)
        else:
            prop_type = infer_type(default)
        return PropertyDescriptor(
            name=self.name,
            type=prop_type,
            default_value=default,
            description=self.description,
            is_list=isinstance(default, list),
        )


@dataclass(slots=True)
class NormalizationResult:
    properties: List[PropertyDescriptor] = field(default_factory=list)
    warnings: List[UnsupportedNodeWarning] = field(default_factory=list)


class PropNormalizer:
    """Merge ``args`` and ``argTypes`` blocks into one ordered property list.

    The first occurrence of a key fixes its position. Later occurrences update
    only the fields they specify.
    """

    def __init__(self) -> None:
        self._states: Dict[str, _PropertyState] = {}
        self._warnings: List[UnsupportedNodeWarning] = []

    def normalize(self, declarations: Iterable[MetadataDeclaration]) -> NormalizationResult:
        self._states = {}
        self._warnings = []
        for declaration in declarations:
            for kind, node in self._blocks(declaration):
                if kind == "args":
                    self._merge_args(node)
                else:
                    self._merge_arg_types(node)
        return NormalizationResult(
            properties=[state.resolve() for state in self._states.values()],
            warnings=list(self._warnings),
        )

    # --- args --------------------------------------------------------------
    def _merge_args(self, block: Node) -> None:
        for name, value_node in self._entries(block, "args"):
            state = self._state(name)
            value, rejected = evaluate_with_report(value_node)
            self._report(name, rejected)
            if value is UNSUPPORTED:
                continue
            if state.args_default is not ABSENT and state.args_default != value:
                logger.debug("args.%s overridden by a later declaration", name)
            state.args_default = value

    # --- argTypes ----------------------------------------------------------
    def _merge_arg_types(self, block: Node) -> None:
        for name, entry in self._entries(block, "argTypes"):
            state = self._state(name)
            if entry is None:
                continue
            entry = unwrap(entry)
            if entry is None or entry.type != "object":
                self._warn(f"argTypes.{name}: expected an object literal", entry)
                continue
            for key, value_node in object_entries(entry):
                if key == "type":
                    declared = self._declared_type(name, value_node)
                    if declared is not None:
                        state.declared_type = declared
                elif key == "description":
                    value, rejected = evaluate_with_report(value_node)
                    self._report(name, rejected)
                    if isinstance(value, str):
                        state.description = value
                    elif value is not UNSUPPORTED:
                        self._warn(f"argTypes.{name}.description is not a string", value_node)
                elif key == "defaultValue":
                    value, rejected = evaluate_with_report(value_node)
                    self._report(name, rejected)
                    if value is not UNSUPPORTED:
                        state.arg_types_default = value

    def _declared_type(self, name: str, node: Node) -> Optional[str]:
        value, rejected = evaluate_with_report(node)
        self._report(name, rejected)
        # type: "string" or type: { name: "string", required: true }
        if isinstance(value, str):
            return value
        if isinstance(value, dict) and isinstance(value.get("name"), str):
            return value["name"]
        return None

    # --- helpers -----------------------------------------------------------
    def _blocks(self, declaration: MetadataDeclaration) -> List[Tuple[str, Node]]:
        blocks = []
        if declaration.args is not None:
            blocks.append(("args", declaration.args))
        if declaration.arg_types is not None:
            blocks.append(("argTypes", declaration.arg_types))
        return sorted(blocks, key=lambda item: item[1].start_byte)

    def _entries(self, block: Node, label: str) -> List[Tuple[str, Optional[Node]]]:
        node = unwrap(block)
        if node is None or node.type != "object":
            self._warn(f"{label} is not an object literal", block)
            return []
        entries: List[Tuple[str, Optional[Node]]] = []
        for child in node.named_children:
            if child.type in SKIPPED_NODE_TYPES:
                continue
            if child.type == "shorthand_property_identifier":
                name = node_text(child)
                self._warn(f"{label}.{name}: shorthand property cannot be evaluated statically", child)
                entries.append((name, None))
                continue
            key = property_key(child) if child.type == "pair" else None
            value = child.child_by_field_name("value") if child.type == "pair" else None
            if key is None or value is None:
                self._warn(f"{label}: skipped {child.type} entry", child)
                continue
            entries.append((key, value))
        return entries

    def _state(self, name: str) -> _PropertyState:
        state = self._states.get(name)
        if state is None:
            state = _PropertyState(name=name)
            self._states[name] = state
        return state

    def _report(self, name: str, rejected: List[Node]) -> None:
        for node in rejected:
            self._warn(f"{name}: cannot evaluate {node.type} statically", node)

    def _warn(self, message: str, node: Optional[Node]) -> None:
        line = node.start_point[0] + 1 if node is not None else None
        self._warnings.append(UnsupportedNodeWarning(message, line=line))


def normalize(declarations: Iterable[MetadataDeclaration]) -> NormalizationResult:
    return PropNormalizer().normalize(declarations)
