from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List

from ..errors import DiscoveryError, MissingSiblingError
from ..logs import get_logger

logger = get_logger("discovery")

STORY_MARKER = ".stories"
_UNSAFE_TOKEN_CHARS = re.compile(r"[^a-z0-9._-]+")


def find_components_dir(root: Path, name: str = "components") -> Path:
    candidate = (root / name).resolve()
    if not candidate.is_dir():
        raise DiscoveryError(f"Components directory not found: {candidate}")
    logger.info("Found components directory at %s", candidate)
    return candidate


def discover_story_files(components_dir: Path, extensions: Iterable[str]) -> List[Path]:
    """Return every ``*.stories.<ext>`` file below the components directory, sorted."""
    found = set()
    for ext in extensions:
        for path in components_dir.rglob(f"*{STORY_MARKER}.{ext}"):
            if path.is_file():
                found.add(path)
    return sorted(found)


def find_sibling(story_path: Path, extensions: Iterable[str]) -> Path:
    """Locate ``<dir>/<dir name>.<ext>`` next to a story file."""
    component_dir = story_path.parent
    component_name = component_dir.name
    for ext in extensions:
        candidate = component_dir / f"{component_name}.{ext}"
        if candidate.is_file():
            return candidate
    raise MissingSiblingError(
        story_path, f"No component file found for {component_name}"
    )


def component_token(directory_name: str) -> str:
    """Lower-cased, URL-safe name used for the manifest and packaged artifacts."""
    token = _UNSAFE_TOKEN_CHARS.sub("-", directory_name.lower()).strip("-")
    return token or "component"


def display_name(directory_name: str) -> str:
    return directory_name.replace("-", " ").upper()
