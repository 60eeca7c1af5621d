import json
from pathlib import Path

from prefabgen.models.records import (
    ABSENT,
    ComponentRecord,
    Diagnostic,
    Manifest,
    PropertyDescriptor,
)


def _record() -> ComponentRecord:
    return ComponentRecord(
        name="button",
        display_name="BUTTON",
        version="1.0.0",
        base_dir="./components",
        module="require('./button/button.tsx').default",
        include=["./button/button.tsx"],
        props=[
            PropertyDescriptor(name="label", type="string", default_value="Go"),
            PropertyDescriptor(name="icon", type="null", default_value=None),
            PropertyDescriptor(name="onClick"),
            PropertyDescriptor(
                name="items",
                type="object",
                default_value=[["a", 1]],
                description="Rows",
                is_list=True,
            ),
        ],
    )


def test_property_descriptor_omits_absent_fields():
    prop = PropertyDescriptor(name="onClick")
    assert prop.default_value is ABSENT
    assert not prop.has_default
    assert prop.to_dict() == {"name": "onClick", "type": "unknown", "isList": False}


def test_null_default_is_serialized():
    prop = PropertyDescriptor(name="icon", type="null", default_value=None)
    assert prop.to_dict() == {"name": "icon", "type": "null", "defaultValue": None, "isList": False}


def test_descriptor_key_order_is_stable():
    prop = PropertyDescriptor(
        name="items", type="object", default_value=[1], description="Rows", is_list=True
    )
    assert list(prop.to_dict()) == ["name", "type", "description", "defaultValue", "isList"]


def test_manifest_json_round_trip():
    manifest = Manifest(components=[_record()])
    restored = Manifest.from_dict(json.loads(json.dumps(manifest.to_dict())))
    assert restored == manifest
    assert restored.components[0].props[2].default_value is ABSENT


def test_diagnostic_str():
    diagnostic = Diagnostic(kind="StorySyntaxError", path=Path("a.stories.js"), message="bad", line=3)
    assert str(diagnostic) == "StorySyntaxError: a.stories.js:3: bad"
