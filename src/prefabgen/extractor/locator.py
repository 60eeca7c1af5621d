from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from tree_sitter import Node

from ..errors import UnsupportedNodeWarning
from ..models.records import MetadataDeclaration, SourceUnit
from .evaluator import node_text, object_entries, unwrap

DEFAULT_META_IDENTIFIER = "meta"
METADATA_FIELDS = ("args", "argTypes")
DECLARATION_NODE_TYPES = {"lexical_declaration", "variable_declaration"}


class DeclarationLocator:
    """Find the object literals in a story file that describe component props.

    Every rule below is an independent producer; all matches are returned in
    source order so the normalizer can merge them deterministically.

    1. ``export default { ... }``
    2. a top-level variable holding an object literal that is default-exported
       by reference or named after the metadata identifier
    3. ``export const Story = { args: ... }`` named exports
    4. ``Story.args = { ... }`` / ``Story.argTypes = { ... }`` assignments
    """

    def __init__(self, meta_identifier: str = DEFAULT_META_IDENTIFIER) -> None:
        self.meta_identifier = meta_identifier
        self.warnings: List[UnsupportedNodeWarning] = []

    def locate(self, unit: SourceUnit) -> List[MetadataDeclaration]:
        self.warnings = []
        found: List[MetadataDeclaration] = []
        variables: Dict[str, Tuple[Node, Node]] = {}
        default_refs: Set[str] = set()

        for statement in self._top_level(unit.root):
            if statement.type == "export_statement":
                found.extend(self._from_export(statement, variables, default_refs))
            elif statement.type in DECLARATION_NODE_TYPES:
                for name, declarator, obj in self._object_declarators(statement):
                    variables[name] = (declarator, obj)
            elif statement.type == "expression_statement":
                declaration = self._from_assignment(statement)
                if declaration is not None:
                    found.append(declaration)

        for name, (declarator, obj) in variables.items():
            if name in default_refs:
                found.append(
                    self._declaration("default-export-reference", obj, declarator, name)
                )
            elif name == self.meta_identifier:
                found.append(self._declaration("meta-variable", obj, declarator, name))

        declarations = self._dedupe(found)
        for declaration in declarations:
            self._warn_shorthand(declaration.node)
        return declarations

    # --- producers ---------------------------------------------------------
    def _from_export(
        self,
        statement: Node,
        variables: Dict[str, Tuple[Node, Node]],
        default_refs: Set[str],
    ) -> List[MetadataDeclaration]:
        if self._is_default_export(statement):
            value = unwrap(statement.child_by_field_name("value"))
            if value is None:
                return []
            if value.type == "object":
                return [self._declaration("default-export", value, statement)]
            if value.type == "identifier":
                default_refs.add(node_text(value))
            return []

        declarations: List[MetadataDeclaration] = []
        declaration = statement.child_by_field_name("declaration")
        if declaration is not None and declaration.type in DECLARATION_NODE_TYPES:
            for name, declarator, obj in self._object_declarators(declaration):
                variables[name] = (declarator, obj)
                if name == self.meta_identifier or self._has_metadata_field(obj):
                    declarations.append(
                        self._declaration("named-export", obj, declarator, name)
                    )
        for clause in statement.named_children:
            if clause.type == "export_clause":
                default_refs.update(self._default_aliases(clause))
        return declarations

    def _from_assignment(self, statement: Node) -> Optional[MetadataDeclaration]:
        expression = next(
            (child for child in statement.named_children if child.type != "comment"),
            None,
        )
        if expression is None or expression.type != "assignment_expression":
            return None
        left = expression.child_by_field_name("left")
        right = unwrap(expression.child_by_field_name("right"))
        if left is None or right is None or left.type != "member_expression":
            return None
        target = left.child_by_field_name("object")
        prop = left.child_by_field_name("property")
        if target is None or prop is None or target.type != "identifier":
            return None
        field_name = node_text(prop)
        if field_name not in METADATA_FIELDS:
            return None
        declaration = MetadataDeclaration(
            provenance="property-assignment",
            node=right,
            start_byte=right.start_byte,
            line=statement.start_point[0] + 1,
            name=node_text(target),
        )
        if field_name == "args":
            declaration.args = right
        else:
            declaration.arg_types = right
        return declaration

    # --- helpers -----------------------------------------------------------
    def _declaration(
        self,
        provenance: str,
        obj: Node,
        anchor: Node,
        name: Optional[str] = None,
    ) -> MetadataDeclaration:
        fields = self._metadata_fields(obj)
        return MetadataDeclaration(
            provenance=provenance,
            node=obj,
            start_byte=obj.start_byte,
            line=anchor.start_point[0] + 1,
            name=name,
            args=fields.get("args"),
            arg_types=fields.get("argTypes"),
        )

    def _metadata_fields(self, obj: Node) -> Dict[str, Node]:
        fields: Dict[str, Node] = {}
        for key, value in object_entries(obj):
            # duplicate keys: the last one wins, as at runtime
            if key in METADATA_FIELDS:
                fields[key] = value
        return fields

    def _has_metadata_field(self, obj: Node) -> bool:
        if any(key in METADATA_FIELDS for key, _ in object_entries(obj)):
            return True
        return any(node_text(node) in METADATA_FIELDS for node in self._shorthand_entries(obj))

    def _shorthand_entries(self, obj: Node) -> Iterator[Node]:
        for child in obj.named_children:
            if child.type == "shorthand_property_identifier":
                yield child

    def _warn_shorthand(self, obj: Node) -> None:
        # { args } refers to a variable, which is never resolved
        for node in self._shorthand_entries(obj):
            name = node_text(node)
            if name in METADATA_FIELDS:
                self.warnings.append(
                    UnsupportedNodeWarning(
                        f"{name}: shorthand property cannot be evaluated statically",
                        line=node.start_point[0] + 1,
                    )
                )

    def _object_declarators(self, declaration: Node) -> Iterator[Tuple[str, Node, Node]]:
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value = unwrap(declarator.child_by_field_name("value"))
            if name_node is None or name_node.type != "identifier":
                continue
            if value is None or value.type != "object":
                continue
            yield node_text(name_node), declarator, value

    def _default_aliases(self, clause: Node) -> Iterable[str]:
        # export { meta as default }
        for specifier in clause.named_children:
            if specifier.type != "export_specifier":
                continue
            name = specifier.child_by_field_name("name")
            alias = specifier.child_by_field_name("alias")
            if name is not None and alias is not None and node_text(alias) == "default":
                yield node_text(name)

    def _is_default_export(self, statement: Node) -> bool:
        return any(child.type == "default" for child in statement.children)

    def _top_level(self, root: Node) -> Iterator[Node]:
        for child in root.named_children:
            if child.type != "comment":
                yield child

    def _dedupe(self, declarations: List[MetadataDeclaration]) -> List[MetadataDeclaration]:
        seen: Set[Tuple[int, int]] = set()
        unique: List[MetadataDeclaration] = []
        for declaration in sorted(declarations, key=lambda item: item.start_byte):
            key = (declaration.node.start_byte, declaration.node.end_byte)
            if key in seen:
                continue
            seen.add(key)
            unique.append(declaration)
        return unique


def locate_declarations(
    unit: SourceUnit, meta_identifier: str = DEFAULT_META_IDENTIFIER
) -> List[MetadataDeclaration]:
    return DeclarationLocator(meta_identifier).locate(unit)
