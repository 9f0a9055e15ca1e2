from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np

from stockchart.entities import AnyKEntity, KEntity


IndexValues = list[list[float | None]]


class Index(Protocol):
    """Indicator calculator: one value list per drawn line, aligned with the entities."""

    def calculate(self, entities: Sequence[AnyKEntity]) -> IndexValues:
        ...


def _split_non_empty(entities: Sequence[AnyKEntity]) -> tuple[np.ndarray, list[KEntity]]:
    positions = [i for i, entity in enumerate(entities) if not entity.is_empty]
    return np.asarray(positions, dtype=np.int64), [entities[i] for i in positions]  # type: ignore[misc]


def _scatter(values: np.ndarray, positions: np.ndarray, size: int, first_valid: int = 0) -> list[float | None]:
    out: list[float | None] = [None] * size
    for n, (pos, value) in enumerate(zip(positions.tolist(), values.tolist())):
        if n < first_valid or not np.isfinite(value):
            continue
        out[pos] = float(value)
    return out


def ema(values: np.ndarray, period: int) -> np.ndarray:
    if period <= 0:
        raise ValueError("period must be > 0")
    out = np.empty_like(values, dtype=np.float64)
    if values.size == 0:
        return out
    alpha = 2.0 / (period + 1.0)
    out[0] = values[0]
    for i in range(1, values.size):
        out[i] = alpha * values[i] + (1.0 - alpha) * out[i - 1]
    return out


@dataclass(frozen=True)
class KdjIndex:
    n: int = 9
    m1: int = 3
    m2: int = 3

    def __post_init__(self) -> None:
        if self.n <= 0 or self.m1 <= 0 or self.m2 <= 0:
            raise ValueError("KDJ periods must be > 0")

    def calculate(self, entities: Sequence[AnyKEntity]) -> IndexValues:
        positions, candles = _split_non_empty(entities)
        size = len(entities)
        if not candles:
            return [[None] * size for _ in range(3)]

        high = np.asarray([c.high for c in candles], dtype=np.float64)
        low = np.asarray([c.low for c in candles], dtype=np.float64)
        close = np.asarray([c.close for c in candles], dtype=np.float64)

        k = np.empty_like(close)
        d = np.empty_like(close)
        prev_k = prev_d = 50.0
        for i in range(close.size):
            lo = max(0, i - self.n + 1)
            hh = float(np.max(high[lo : i + 1]))
            ll = float(np.min(low[lo : i + 1]))
            rsv = 50.0 if hh == ll else (close[i] - ll) / (hh - ll) * 100.0
            prev_k = ((self.m1 - 1) * prev_k + rsv) / self.m1
            prev_d = ((self.m2 - 1) * prev_d + prev_k) / self.m2
            k[i] = prev_k
            d[i] = prev_d
        j = 3.0 * k - 2.0 * d

        first_valid = self.n - 1
        return [
            _scatter(k, positions, size, first_valid),
            _scatter(d, positions, size, first_valid),
            _scatter(j, positions, size, first_valid),
        ]


@dataclass(frozen=True)
class MacdIndex:
    fast: int = 12
    slow: int = 26
    signal: int = 9

    def __post_init__(self) -> None:
        if self.fast <= 0 or self.slow <= 0 or self.signal <= 0:
            raise ValueError("MACD periods must be > 0")
        if self.fast >= self.slow:
            raise ValueError("MACD fast period must be < slow period")

    def calculate(self, entities: Sequence[AnyKEntity]) -> IndexValues:
        positions, candles = _split_non_empty(entities)
        size = len(entities)
        if not candles:
            return [[None] * size for _ in range(3)]

        close = np.asarray([c.close for c in candles], dtype=np.float64)
        dif = ema(close, self.fast) - ema(close, self.slow)
        dea = ema(dif, self.signal)
        macd = (dif - dea) * 2.0
        return [
            _scatter(dif, positions, size),
            _scatter(dea, positions, size),
            _scatter(macd, positions, size),
        ]


def values_range(
    index_values: IndexValues,
    start_index: int,
    end_index: int,
    *,
    include_zero: bool = True,
) -> tuple[float, float]:
    """Min/max over every line's non-null values in ``[start_index, end_index]``."""
    y_min = 0.0 if include_zero else np.inf
    y_max = 0.0 if include_zero else -np.inf
    lo = max(0, start_index)
    for line in index_values:
        window = [v for v in line[lo : end_index + 1] if v is not None]
        if window:
            y_min = min(y_min, min(window))
            y_max = max(y_max, max(window))
    if not np.isfinite(y_min) or not np.isfinite(y_max):
        return (0.0, 0.0)
    return (float(y_min), float(y_max))
