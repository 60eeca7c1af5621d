"""Error kinds raised while generating a prefab manifest.

Only :class:`DiscoveryError` aborts a run. The other kinds are scoped to one
story file (or one property) and are turned into diagnostics by the manifest
builder.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class PrefabError(Exception):
    """Base class for prefabgen failures."""


class DiscoveryError(PrefabError):
    """The components root directory could not be found."""


class StoryFileError(PrefabError):
    def __init__(self, path: Path, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.path = path
        self.message = message
        self.line = line


class StorySyntaxError(StoryFileError):
    """A story file is not syntactically valid for its language variant."""


class StoryReadError(StoryFileError):
    """A story file could not be read or decoded."""


class MissingSiblingError(StoryFileError):
    """No implementation file matches the story file's directory name."""


class UnsupportedStoryTypeError(StoryFileError):
    """No parser is registered for the story file's extension."""


class UnsupportedNodeWarning(UserWarning):
    """A value could not be evaluated statically and was left out."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
