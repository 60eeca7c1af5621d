import json
from pathlib import Path

import pytest

from prefabgen.config import Settings
from prefabgen.errors import DiscoveryError
from prefabgen.manifest.builder import ManifestBuilder, read_manifest, write_manifest

BUTTON_STORY = 'export default { args: { label: "Go", count: 3 } };\n'


def _settings(root: Path, **overrides) -> Settings:
    return Settings(root=root, **overrides)


def test_builds_record_for_each_component(tmp_path, component_tree):
    component_tree("button", BUTTON_STORY)
    result = ManifestBuilder(_settings(tmp_path)).build()

    assert result.diagnostics == []
    assert len(result.manifest.components) == 1
    record = result.manifest.components[0].to_dict()
    assert record == {
        "name": "button",
        "version": "1.0.0",
        "displayName": "BUTTON",
        "baseDir": "./components",
        "module": "require('./button/button.tsx').default",
        "include": ["./button/button.tsx"],
        "props": [
            {"name": "label", "type": "string", "defaultValue": "Go", "isList": False},
            {"name": "count", "type": "number", "defaultValue": 3, "isList": False},
        ],
        "packages": [],
    }
    assert list(record) == [
        "name",
        "version",
        "displayName",
        "baseDir",
        "module",
        "include",
        "props",
        "packages",
    ]


def test_names_are_lower_cased_and_display_names_derived(tmp_path, component_tree):
    component_tree("Date-Picker", BUTTON_STORY, story_ext="jsx", component_ext="js")
    record = ManifestBuilder(_settings(tmp_path)).build().manifest.components[0]
    assert record.name == "date-picker"
    assert record.display_name == "DATE PICKER"
    assert record.include == ["./Date-Picker/Date-Picker.js"]


def test_syntax_error_skips_only_that_component(tmp_path, component_tree):
    component_tree("alpha", BUTTON_STORY)
    component_tree("broken", "export default { args: { label: 'x' ,, } };\n")
    component_tree("zeta", BUTTON_STORY)

    result = ManifestBuilder(_settings(tmp_path)).build()

    assert [c.name for c in result.manifest.components] == ["alpha", "zeta"]
    assert len(result.story_files) == 3
    assert [d.kind for d in result.diagnostics] == ["StorySyntaxError"]
    assert result.diagnostics[0].path.name == "broken.stories.tsx"
    assert result.skipped == result.diagnostics


def test_missing_sibling_skips_component(tmp_path, component_tree):
    component_tree("orphan", BUTTON_STORY, component_ext=None)
    component_tree("button", BUTTON_STORY)

    result = ManifestBuilder(_settings(tmp_path)).build()

    assert [c.name for c in result.manifest.components] == ["button"]
    assert [d.kind for d in result.diagnostics] == ["MissingSiblingError"]
    assert "orphan" in result.diagnostics[0].message


def test_unsupported_values_are_reported_but_component_kept(tmp_path, component_tree):
    component_tree("button", "export default { args: { onClick: action('clicked'), label: 'Go' } };\n")
    result = ManifestBuilder(_settings(tmp_path)).build()

    assert [c.name for c in result.manifest.components] == ["button"]
    assert [d.kind for d in result.diagnostics] == ["UnsupportedNodeWarning"]
    assert result.diagnostics[0].line == 1
    assert result.skipped == []


def test_story_without_metadata_has_empty_props(tmp_path, component_tree):
    component_tree("plain", 'export default { title: "Plain" };\n')
    record = ManifestBuilder(_settings(tmp_path)).build().manifest.components[0]
    assert record.props == []


def test_parallel_build_preserves_discovery_order(tmp_path, component_tree):
    names = [f"comp{i:02d}" for i in range(12)]
    for name in reversed(names):
        component_tree(name, BUTTON_STORY)

    sequential = ManifestBuilder(_settings(tmp_path)).build().manifest
    parallel = ManifestBuilder(_settings(tmp_path, workers=4)).build().manifest

    assert [c.name for c in parallel.components] == names
    assert parallel == sequential


def test_missing_components_dir_is_fatal(tmp_path):
    with pytest.raises(DiscoveryError):
        ManifestBuilder(_settings(tmp_path)).build()


def test_generate_writes_manifest(tmp_path, component_tree):
    component_tree("button", BUTTON_STORY)
    settings = _settings(tmp_path, output_path="out/wmprefab.config.json")

    result = ManifestBuilder(settings).generate()

    output = tmp_path / "out" / "wmprefab.config.json"
    assert output.exists()
    data = json.loads(output.read_text())
    assert data == result.manifest.to_dict()
    assert output.read_text().endswith("\n")


def test_manifest_round_trip(tmp_path, component_tree):
    component_tree(
        "card",
        """
        export default {
          argTypes: { tone: { type: "string", description: "Tone" } },
          args: { tags: ["a", "b"], icon: null, size: 1.5, style: { gap: 2 } },
        };
        """,
    )
    manifest = ManifestBuilder(_settings(tmp_path)).build().manifest
    path = write_manifest(manifest, tmp_path / "wmprefab.config.json")
    assert read_manifest(path) == manifest


def _strict_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


def test_overflowing_number_is_left_out_of_manifest(tmp_path, component_tree):
    component_tree("gauge", "export default { args: { huge: 1e400, label: 'Go' } };\n")
    settings = _settings(tmp_path)

    result = ManifestBuilder(settings).generate()

    data = json.loads(
        settings.resolved_output_path().read_text(), parse_constant=_strict_constant
    )
    props = data["components"][0]["props"]
    assert props[0] == {"name": "huge", "type": "unknown", "isList": False}
    assert props[1]["defaultValue"] == "Go"
    assert [d.kind for d in result.diagnostics] == ["UnsupportedNodeWarning"]


def test_story_extension_without_parser_skips_only_that_file(tmp_path, component_tree):
    component_tree("alpha", BUTTON_STORY)
    component_tree("widget", "<template><div /></template>\n", story_ext="vue")

    settings = _settings(tmp_path, story_extensions=["tsx", "vue"])
    result = ManifestBuilder(settings).build()

    assert [c.name for c in result.manifest.components] == ["alpha"]
    assert [d.kind for d in result.diagnostics] == ["UnsupportedStoryTypeError"]
    assert result.diagnostics[0].path.name == "widget.stories.vue"


def test_deeply_nested_default_keeps_component(tmp_path, component_tree):
    depth = 3000
    story = "export default { args: { deep: " + "[" * depth + "]" * depth + ", label: 'Go' } };\n"
    component_tree("alpha", story)
    component_tree("zeta", BUTTON_STORY)

    result = ManifestBuilder(_settings(tmp_path)).build()

    assert [c.name for c in result.manifest.components] == ["alpha", "zeta"]
    alpha = result.manifest.components[0]
    assert [p.name for p in alpha.props] == ["deep", "label"]
    assert not alpha.props[0].has_default
    assert [d.kind for d in result.diagnostics] == ["UnsupportedNodeWarning"]
