from pathlib import Path

import pytest
from pydantic import ValidationError

from prefabgen.config import Settings, load_settings


def test_defaults():
    settings = Settings()
    assert settings.components_dir == "components"
    assert settings.version == "1.0.0"
    assert settings.base_dir == "./components"
    assert settings.story_extensions == ["js", "jsx", "ts", "tsx"]
    assert settings.meta_identifier == "meta"
    assert settings.workers == 1
    assert settings.root.is_absolute()


def test_load_settings_from_yaml(tmp_path):
    config = tmp_path / "prefabgen.yaml"
    config.write_text(
        f"""
root: {tmp_path}
components_dir: widgets
output_path: build/manifest.json
version: 2.1.0
story_extensions: [".tsx", "ts"]
workers: 3
"""
    )
    settings = load_settings(config)
    assert settings.root == tmp_path.resolve()
    assert settings.components_dir == "widgets"
    assert settings.version == "2.1.0"
    assert settings.story_extensions == ["tsx", "ts"]
    assert settings.workers == 3
    assert settings.resolved_output_path() == (tmp_path / "build" / "manifest.json").resolve()


def test_missing_config_file_uses_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings == Settings(root=settings.root)


def test_absolute_output_path_is_kept(tmp_path):
    settings = Settings(root=tmp_path, output_path=tmp_path / "x.json")
    assert settings.resolved_output_path() == tmp_path / "x.json"


def test_workers_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(workers=0)
