"""Shared test fixtures for prefabgen tests.

``component_tree`` builds a components directory the way a Storybook project
lays it out: one folder per component holding a story file and an
implementation file named after the folder.
"""
from pathlib import Path
from typing import Callable, Optional

import pytest

from prefabgen.extractor.story_parser import build_registry
from prefabgen.models.records import SourceUnit

FIXTURES = Path(__file__).parent / "fixtures" / "stories"


def load_story(name: str) -> str:
    return (FIXTURES / name).read_text()


def parse_source(source: str, filename: str = "Sample.stories.js") -> SourceUnit:
    path = Path(filename)
    return build_registry().for_path(path).parse(source, path)


def parse_expression(code: str, filename: str = "expr.js"):
    """Parse ``const value = <code>;`` and return the initializer node."""
    unit = parse_source(f"const value = {code};\n", filename)
    declaration = unit.root.named_children[0]
    declarator = declaration.named_children[0]
    return declarator.child_by_field_name("value")


@pytest.fixture
def component_tree(tmp_path: Path) -> Callable[..., Path]:
    """Factory that adds ``components/<name>/`` folders under ``tmp_path``."""
    components = tmp_path / "components"
    components.mkdir()

    def _add(
        name: str,
        story: str,
        story_ext: str = "tsx",
        component_ext: Optional[str] = "tsx",
    ) -> Path:
        folder = components / name
        folder.mkdir(parents=True, exist_ok=True)
        story_path = folder / f"{name}.stories.{story_ext}"
        story_path.write_text(story)
        if component_ext:
            (folder / f"{name}.{component_ext}").write_text(
                f"export default function {name.replace('-', '')}() {{ return null; }}\n"
            )
        return story_path

    return _add
