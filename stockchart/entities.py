from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union


@dataclass(frozen=True)
class KEntity:
    """One candle: open/high/low/close prices, traded volume, epoch-millis time."""

    open: float
    high: float
    low: float
    close: float
    volume: int = 0
    time: int = 0

    def __post_init__(self) -> None:
        if self.high < self.low:
            raise ValueError(f"high must be >= low (high={self.high}, low={self.low})")

    @property
    def is_empty(self) -> bool:
        return False

    @property
    def avg_price(self) -> float:
        return (self.high + self.low) / 2.0

    @property
    def is_rise(self) -> bool:
        return self.close >= self.open


@dataclass(frozen=True)
class EmptyKEntity:
    """Placeholder slot for a period that has no data yet (e.g. the rest of a year)."""

    time: int = 0

    @property
    def is_empty(self) -> bool:
        return True


AnyKEntity = Union[KEntity, EmptyKEntity]


def non_empty_indices(entities: Sequence[AnyKEntity], start: int, end: int) -> list[int]:
    lo = max(0, start)
    hi = min(len(entities) - 1, end)
    return [i for i in range(lo, hi + 1) if not entities[i].is_empty]
