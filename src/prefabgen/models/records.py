from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from tree_sitter import Node


class _Marker:
    __slots__ = ("_label",)

    def __init__(self, label: str) -> None:
        self._label = label

    def __repr__(self) -> str:
        return self._label


# Evaluator result for nodes that cannot be resolved statically.
UNSUPPORTED = _Marker("UNSUPPORTED")
# Descriptor field that was never declared (distinct from a JS ``null``).
ABSENT = _Marker("ABSENT")


@dataclass(frozen=True, slots=True)
class SourceUnit:
    path: Path
    text: str
    variant: str
    source_bytes: bytes
    root: Node


@dataclass(slots=True)
class MetadataDeclaration:
    """One object literal in a story file that carries ``args``/``argTypes``."""

    provenance: str  # default-export, default-export-reference, meta-variable, named-export, property-assignment
    node: Node
    start_byte: int
    line: int
    name: Optional[str] = None
    args: Optional[Node] = None
    arg_types: Optional[Node] = None


@dataclass(slots=True)
class PropertyDescriptor:
    name: str
    type: str = "unknown"
    default_value: Any = ABSENT
    description: Optional[str] = None
    is_list: bool = False

    @property
    def has_default(self) -> bool:
        return self.default_value is not ABSENT

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.description is not None:
            data["description"] = self.description
        if self.has_default:
            data["defaultValue"] = self.default_value
        data["isList"] = self.is_list
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PropertyDescriptor":
        return cls(
            name=data["name"],
            type=data.get("type", "unknown"),
            default_value=data["defaultValue"] if "defaultValue" in data else ABSENT,
            description=data.get("description"),
            is_list=bool(data.get("isList", False)),
        )


@dataclass(slots=True)
class ComponentRecord:
    name: str
    display_name: str
    version: str
    base_dir: str
    module: str
    include: List[str] = field(default_factory=list)
    props: List[PropertyDescriptor] = field(default_factory=list)
    packages: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "displayName": self.display_name,
            "baseDir": self.base_dir,
            "module": self.module,
            "include": list(self.include),
            "props": [prop.to_dict() for prop in self.props],
            "packages": list(self.packages),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentRecord":
        return cls(
            name=data["name"],
            display_name=data["displayName"],
            version=data["version"],
            base_dir=data["baseDir"],
            module=data["module"],
            include=list(data.get("include", [])),
            props=[PropertyDescriptor.from_dict(item) for item in data.get("props", [])],
            packages=list(data.get("packages", [])),
        )


@dataclass(slots=True)
class Manifest:
    components: List[ComponentRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"components": [component.to_dict() for component in self.components]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        return cls(
            components=[
                ComponentRecord.from_dict(item) for item in data.get("components", [])
            ]
        )


@dataclass(slots=True)
class Diagnostic:
    kind: str
    path: Path
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        location = f"{self.path}:{self.line}" if self.line else str(self.path)
        return f"{self.kind}: {location}: {self.message}"
