from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..errors import StoryReadError, UnsupportedNodeWarning, UnsupportedStoryTypeError
from ..logs import get_logger
from ..models.records import MetadataDeclaration, PropertyDescriptor
from .base import ParserRegistry
from .locator import DEFAULT_META_IDENTIFIER, DeclarationLocator
from .normalizer import PropNormalizer
from .story_parser import build_registry

logger = get_logger("extractor")


@dataclass(slots=True)
class ExtractionResult:
    path: Path
    variant: str
    properties: List[PropertyDescriptor] = field(default_factory=list)
    declarations: List[MetadataDeclaration] = field(default_factory=list)
    warnings: List[UnsupportedNodeWarning] = field(default_factory=list)


class StoryExtractor:
    """Parse one story file and return its normalized property list.

    An extractor owns tree-sitter parsers, which must not be shared between
    threads; build one per worker.
    """

    def __init__(
        self,
        registry: Optional[ParserRegistry] = None,
        meta_identifier: str = DEFAULT_META_IDENTIFIER,
    ) -> None:
        self.registry = registry or build_registry()
        self.locator = DeclarationLocator(meta_identifier)

    # --- public API ---
    def extract(self, path: Path) -> ExtractionResult:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StoryReadError(path, f"unable to read story file: {exc}") from exc
        return self.extract_source(source, path)

    def extract_source(self, source: str, path: Path) -> ExtractionResult:
        try:
            adapter = self.registry.for_path(path)
        except ValueError as exc:
            raise UnsupportedStoryTypeError(path, str(exc)) from exc
        unit = adapter.parse(source, path)
        declarations = self.locator.locate(unit)
        normalized = PropNormalizer().normalize(declarations)
        warnings = self.locator.warnings + normalized.warnings
        for warning in warnings:
            logger.warning("%s:%s %s", path, warning.line or "?", warning.message)
        if not declarations:
            logger.debug("%s: no metadata declarations found", path)
        return ExtractionResult(
            path=path,
            variant=unit.variant,
            properties=normalized.properties,
            declarations=declarations,
            warnings=warnings,
        )
