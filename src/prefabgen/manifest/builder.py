from __future__ import annotations

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config import Settings
from ..errors import StoryFileError
from ..extractor.service import ExtractionResult, StoryExtractor
from ..logs import get_logger
from ..models.records import ComponentRecord, Diagnostic, Manifest
from .discovery import (
    component_token,
    discover_story_files,
    display_name,
    find_components_dir,
    find_sibling,
)

logger = get_logger("manifest")


@dataclass(slots=True)
class StoryOutcome:
    story_path: Path
    record: Optional[ComponentRecord] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass(slots=True)
class BuildResult:
    manifest: Manifest
    story_files: List[Path] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def skipped(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind != "UnsupportedNodeWarning"]


class ManifestBuilder:
    """Turn a components directory into a manifest.

    Story files are independent, so they may be processed on a thread pool.
    Records are appended in discovery order regardless of completion order.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._local = threading.local()

    # --- public API ---
    def build(self) -> BuildResult:
        components_dir = find_components_dir(self.settings.root, self.settings.components_dir)
        story_files = discover_story_files(components_dir, self.settings.story_extensions)
        logger.info("Story files found: %d", len(story_files))

        if self.settings.workers > 1 and len(story_files) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.workers) as pool:
                outcomes = list(pool.map(self.process_story, story_files))
        else:
            outcomes = [self.process_story(path) for path in story_files]

        manifest = Manifest()
        diagnostics: List[Diagnostic] = []
        for outcome in outcomes:
            diagnostics.extend(outcome.diagnostics)
            if outcome.record is not None:
                manifest.components.append(outcome.record)
        return BuildResult(manifest=manifest, story_files=story_files, diagnostics=diagnostics)

    def generate(self) -> BuildResult:
        result = self.build()
        output = self.settings.resolved_output_path()
        write_manifest(result.manifest, output)
        logger.info("%s has been generated with %d components", output, len(result.manifest.components))
        return result

    def process_story(self, story_path: Path) -> StoryOutcome:
        logger.info("Processing story file: %s", story_path)
        try:
            sibling = find_sibling(story_path, self.settings.component_extensions)
            extraction = self._extractor().extract(story_path)
        except StoryFileError as exc:
            logger.warning("Skipping %s: %s", exc.path, exc.message)
            diagnostic = Diagnostic(
                kind=type(exc).__name__,
                path=exc.path,
                message=exc.message,
                line=exc.line,
            )
            return StoryOutcome(story_path=story_path, diagnostics=[diagnostic])

        record = self.build_record(story_path, sibling, extraction)
        diagnostics = [
            Diagnostic(
                kind=type(warning).__name__,
                path=story_path,
                message=warning.message,
                line=warning.line,
            )
            for warning in extraction.warnings
        ]
        return StoryOutcome(story_path=story_path, record=record, diagnostics=diagnostics)

    def build_record(
        self, story_path: Path, sibling: Path, extraction: ExtractionResult
    ) -> ComponentRecord:
        component_dir = story_path.parent
        directory_name = component_dir.name
        component_file = sibling.relative_to(component_dir).as_posix()
        module_path = f"./{directory_name}/{component_file}"
        return ComponentRecord(
            name=component_token(directory_name),
            display_name=display_name(directory_name),
            version=self.settings.version,
            base_dir=self.settings.base_dir,
            module=f"require('{module_path}').default",
            include=[module_path],
            props=list(extraction.properties),
            packages=[],
        )

    # --- helpers ---
    def _extractor(self) -> StoryExtractor:
        extractor = getattr(self._local, "extractor", None)
        if extractor is None:
            extractor = StoryExtractor(meta_identifier=self.settings.meta_identifier)
            self._local.extractor = extractor
        return extractor


def write_manifest(manifest: Manifest, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False)
    path.write_text(payload + "\n", encoding="utf-8")
    return path


def read_manifest(path: Path) -> Manifest:
    return Manifest.from_dict(json.loads(path.read_text(encoding="utf-8")))
