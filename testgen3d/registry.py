from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

import numpy as np

Synthesizer = Callable[[int], np.ndarray]


@dataclass(frozen=True)
class TextureEntry:
    name: str
    synthesize: Synthesizer
    hdr: bool = False

    @property
    def filename(self) -> str:
        return f"{self.name}.hdr" if self.hdr else f"{self.name}.png"


class TextureRegistry:
    def __init__(self) -> None:
        self._entries: Dict[str, TextureEntry] = {}

    def register(self, name: str, synthesize: Synthesizer, hdr: bool = False) -> None:
        if name in self._entries:
            raise ValueError(f"Texture {name!r} is already registered")
        self._entries[name] = TextureEntry(name, synthesize, hdr)

    def get(self, name: str) -> TextureEntry:
        try:
            return self._entries[name]
        except KeyError:
            raise KeyError(f"No texture registered as {name!r}") from None

    def names(self) -> List[str]:
        return list(self._entries)

    def hdr_names(self) -> List[str]:
        return [name for name, entry in self._entries.items() if entry.hdr]

    def entries(self) -> List[TextureEntry]:
        return list(self._entries.values())
