"""Configuration for prefabgen.

Settings are read from ``prefabgen.yaml`` in the working directory (or an
explicit ``--config`` path) and can be overridden from the command line:
- root: project root that contains the components directory
- components_dir: name of the directory holding one folder per component
- output_path: where the manifest is written (relative paths resolve against root)
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_NAME = "prefabgen.yaml"
DEFAULT_EXTENSIONS = ["js", "jsx", "ts", "tsx"]


class Settings(BaseModel):
    """prefabgen settings."""

    root: Path = Field(
        default_factory=lambda: Path(".").resolve(),
        description="Project root containing the components directory",
    )
    components_dir: str = Field(
        default="components",
        description="Directory name (under root) with one folder per component",
    )
    output_path: Path = Field(
        default=Path("wmprefab.config.json"),
        description="Manifest output file",
    )
    version: str = Field(default="1.0.0", description="Version stamped on every component")
    base_dir: str = Field(default="./components", description="baseDir written to the manifest")
    story_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    component_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    meta_identifier: str = Field(
        default="meta",
        description="Variable name conventionally holding the story metadata object",
    )
    workers: int = Field(default=1, ge=1, description="Story files processed in parallel")

    @field_validator("root", mode="before")
    def _coerce_root(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()

    @field_validator("output_path", mode="before")
    def _coerce_output(cls, value: str | Path) -> Path:
        return Path(value).expanduser()

    @field_validator("story_extensions", "component_extensions", mode="before")
    def _strip_dots(cls, value: List[str]) -> List[str]:
        return [str(ext).lstrip(".") for ext in value]

    def resolved_output_path(self) -> Path:
        if self.output_path.is_absolute():
            return self.output_path
        return (self.root / self.output_path).resolve()


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load configuration from YAML if provided, otherwise use defaults."""
    path = config_path or Path.cwd() / DEFAULT_CONFIG_NAME
    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
    else:
        data = {}
    return Settings(**data)
