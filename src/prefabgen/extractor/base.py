from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable

from ..models.records import SourceUnit


class ParserAdapter(ABC):
    variant: str
    extensions: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, source: str, path: Path) -> SourceUnit:
        """Return the parsed story source, raising StorySyntaxError on invalid input."""


class ParserRegistry:
    def __init__(self) -> None:
        self._registry: Dict[str, ParserAdapter] = {}
        self._by_extension: Dict[str, ParserAdapter] = {}

    def register(self, adapter: ParserAdapter) -> None:
        self._registry[adapter.variant] = adapter
        for ext in adapter.extensions:
            self._by_extension[ext] = adapter

    def get(self, variant: str) -> ParserAdapter:
        try:
            return self._registry[variant]
        except KeyError as exc:
            raise ValueError(f"No parser registered for {variant}") from exc

    def for_path(self, path: Path) -> ParserAdapter:
        ext = path.suffix.lstrip(".").lower()
        try:
            return self._by_extension[ext]
        except KeyError as exc:
            raise ValueError(f"No parser registered for .{ext} files ({path})") from exc

    @property
    def variants(self) -> Iterable[str]:
        return tuple(self._registry)
