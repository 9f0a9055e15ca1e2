from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
import math
from typing import Any

import numpy as np

from stockchart.entities import AnyKEntity, EmptyKEntity, KEntity
from stockchart.errors import ChartDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


PRICE_FIELDS = ("open", "high", "low", "close")


def normalize_candles(data: Any) -> list[AnyKEntity]:
    """Coerce candle input into a list of entities.

    Accepts an iterable of ``KEntity``/``EmptyKEntity``/mappings, an ``(N, 4+)``
    numpy array of open/high/low/close[/volume[/time]] columns, or a pandas
    DataFrame with those columns. Rows whose prices are all missing become
    ``EmptyKEntity`` placeholders.
    """
    if pd is not None and isinstance(data, pd.DataFrame):
        return _from_dataframe(data)
    if isinstance(data, np.ndarray):
        return _from_array(data)
    if isinstance(data, Iterable) and not isinstance(data, (str, bytes, bytearray, Mapping)):
        return [_coerce_item(item, i) for i, item in enumerate(data)]
    raise ChartDataError(f"unsupported candle input type: {type(data)!r}")


def _from_dataframe(frame: Any) -> list[AnyKEntity]:
    columns = {str(c).lower(): c for c in frame.columns}
    missing = [name for name in PRICE_FIELDS if name not in columns]
    if missing:
        raise ChartDataError(f"DataFrame missing columns: {', '.join(missing)}")
    rows: list[dict[str, Any]] = []
    for record in frame.to_dict(orient="records"):
        rows.append({name: record[col] for name, col in columns.items()})
    return [_coerce_item(row, i) for i, row in enumerate(rows)]


def _from_array(arr: np.ndarray) -> list[AnyKEntity]:
    if arr.ndim != 2 or arr.shape[1] < 4:
        raise ChartDataError(f"candle array must have shape (N, >=4), got {arr.shape}")
    names = PRICE_FIELDS + ("volume", "time")
    return [_coerce_item(dict(zip(names, row.tolist())), i) for i, row in enumerate(arr)]


def _coerce_item(item: Any, i: int) -> AnyKEntity:
    if isinstance(item, (KEntity, EmptyKEntity)):
        return item
    if not isinstance(item, Mapping):
        raise ChartDataError(f"candle at index {i} must be a mapping, got {type(item)!r}")
    prices = [_to_float(item.get(name), name, i) for name in PRICE_FIELDS]
    time = _to_int(item.get("time"), "time", i)
    if all(math.isnan(p) for p in prices):
        return EmptyKEntity(time=time)
    if any(math.isnan(p) for p in prices):
        raise ChartDataError(f"candle at index {i} has partially missing prices")
    open_, high, low, close = prices
    try:
        return KEntity(
            open=open_,
            high=high,
            low=low,
            close=close,
            volume=_to_int(item.get("volume"), "volume", i),
            time=time,
        )
    except ValueError as exc:
        raise ChartDataError(f"candle at index {i}: {exc}") from exc


def _to_float(raw: Any, label: str, i: int) -> float:
    if raw is None:
        return math.nan
    if isinstance(raw, Decimal):
        return float(raw)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ChartDataError(f"{label} at index {i} is not numeric: {raw!r}") from exc


def _to_int(raw: Any, label: str, i: int) -> int:
    value = _to_float(raw, label, i)
    return 0 if math.isnan(value) else int(value)
