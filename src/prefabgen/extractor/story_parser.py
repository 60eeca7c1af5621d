from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..errors import StorySyntaxError
from ..models.records import SourceUnit
from .base import ParserAdapter, ParserRegistry

OBJECT_NODE_TYPES = {"object", "object_pattern"}


class TreeSitterStoryParser(ParserAdapter):
    """Parse story sources with a tree-sitter grammar.

    tree-sitter recovers from bad input instead of failing, so a tree that
    contains ``ERROR`` or ``MISSING`` nodes is reported as a syntax error.
    The grammars also accept empty slots in object literals (``{ a: 1,, }``),
    which JavaScript rejects, so those are reported too.
    """

    def __init__(self, language: Language) -> None:
        self._language = language
        self._parser = Parser(self._language)

    def parse(self, source: str, path: Path) -> SourceUnit:
        source_bytes = source.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        root = tree.root_node
        error_node = _first_error(root)
        if error_node is not None:
            line = error_node.start_point[0] + 1
            raise StorySyntaxError(
                path,
                f"invalid {self.variant} syntax near line {line}",
                line=line,
            )
        return SourceUnit(
            path=path,
            text=source,
            variant=self.variant,
            source_bytes=source_bytes,
            root=root,
        )


class JavaScriptStoryParser(TreeSitterStoryParser):
    variant = "javascript"
    extensions = ("js", "jsx", "mjs", "cjs")

    def __init__(self) -> None:
        super().__init__(Language(tree_sitter_javascript.language()))


class TypeScriptStoryParser(TreeSitterStoryParser):
    variant = "typescript"
    extensions = ("ts", "mts", "cts")

    def __init__(self) -> None:
        super().__init__(Language(tree_sitter_typescript.language_typescript()))


class TsxStoryParser(TreeSitterStoryParser):
    variant = "tsx"
    extensions = ("tsx",)

    def __init__(self) -> None:
        super().__init__(Language(tree_sitter_typescript.language_tsx()))


def build_registry() -> ParserRegistry:
    registry = ParserRegistry()
    registry.register(JavaScriptStoryParser())
    registry.register(TypeScriptStoryParser())
    registry.register(TsxStoryParser())
    return registry


def _first_error(node: Node) -> Optional[Node]:
    for current in _iterate(node):
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.type in OBJECT_NODE_TYPES:
            hole = _object_hole(current)
            if hole is not None:
                return hole
    return None


def _object_hole(node: Node) -> Optional[Node]:
    # a comma right after "{" or after another comma; array holes are legal
    previous = None
    for child in node.children:
        if child.type == "comment":
            continue
        if child.type == "," and previous in {"{", ","}:
            return child
        previous = child.type
    return None


def _iterate(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))
