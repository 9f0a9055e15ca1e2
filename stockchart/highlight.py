from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass(frozen=True)
class Highlight:
    """Pointer position in panel pixels plus the logical point under it."""

    x: float
    y: float
    value_x: float
    value_y: float

    @property
    def idx(self) -> int:
        return int(math.floor(self.value_x))
