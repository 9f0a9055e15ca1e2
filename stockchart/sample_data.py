from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from stockchart.entities import AnyKEntity, EmptyKEntity, KEntity


LOGGER = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


def load_candles_json(path: str | Path) -> list[AnyKEntity]:
    """Read a JSON array of ``{high, low, open, close, volume, time}`` objects.

    Prices are stored as strings in the mock files; malformed rows are skipped.
    """
    out: list[AnyKEntity] = []
    for n, item in enumerate(_load_array(path)):
        entity = _parse_candle(item, n, path)
        if entity is not None:
            out.append(entity)
    return out


def load_time_data_json(path: str | Path) -> list[AnyKEntity]:
    """Read time-share data, where a single ``price`` fills all four prices."""
    out: list[AnyKEntity] = []
    for n, item in enumerate(_load_array(path)):
        if not isinstance(item, dict) or "price" not in item:
            LOGGER.warning("skipping time-share row %d in %s: missing price", n, path)
            continue
        flat = {name: item["price"] for name in ("high", "low", "open", "close")}
        flat["volume"] = item.get("volume", 0)
        flat["time"] = item.get("time", 0)
        entity = _parse_candle(flat, n, path)
        if entity is not None:
            out.append(entity)
    return out


def pad_with_empty(entities: Sequence[AnyKEntity], length: int, *, step_ms: int = DAY_MS) -> list[AnyKEntity]:
    """Append ``EmptyKEntity`` slots so the series spans ``length`` periods."""
    out = list(entities)
    last_time = out[-1].time if out else 0
    while len(out) < length:
        last_time += step_ms
        out.append(EmptyKEntity(time=last_time))
    return out


def random_walk_candles(
    count: int,
    *,
    seed: int | None = None,
    start_price: float = 100.0,
    volatility: float = 0.02,
    start_time: int = 0,
    step_ms: int = DAY_MS,
) -> list[KEntity]:
    if count < 0:
        raise ValueError("count must be >= 0")
    if start_price <= 0:
        raise ValueError("start_price must be > 0")
    rng = np.random.default_rng(seed)
    returns = rng.normal(0.0, volatility, size=count)
    closes = start_price * np.exp(np.cumsum(returns))
    opens = np.concatenate([[start_price], closes[:-1]]) if count else closes
    spread = np.abs(rng.normal(0.0, volatility / 2.0, size=(count, 2))) * closes[:, None]
    highs = np.maximum(opens, closes) + spread[:, 0]
    lows = np.minimum(opens, closes) - spread[:, 1]
    volumes = rng.integers(1_000, 100_000, size=count)
    return [
        KEntity(
            open=round(float(opens[i]), 4),
            high=round(float(highs[i]), 4),
            low=round(float(lows[i]), 4),
            close=round(float(closes[i]), 4),
            volume=int(volumes[i]),
            time=start_time + i * step_ms,
        )
        for i in range(count)
    ]


def dump_candles_json(entities: Sequence[AnyKEntity], path: str | Path) -> None:
    rows: list[dict[str, Any]] = []
    for entity in entities:
        if isinstance(entity, KEntity):
            rows.append(
                {
                    "high": str(entity.high),
                    "low": str(entity.low),
                    "open": str(entity.open),
                    "close": str(entity.close),
                    "volume": entity.volume,
                    "time": entity.time,
                }
            )
    Path(path).write_text(json.dumps(rows, indent=2), encoding="utf-8")


def _load_array(path: str | Path) -> list[Any]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"expected a JSON array in {path}")
    return raw


def _parse_candle(item: Any, n: int, path: str | Path) -> KEntity | None:
    try:
        return KEntity(
            high=float(item["high"]),
            low=float(item["low"]),
            open=float(item["open"]),
            close=float(item["close"]),
            volume=int(item.get("volume", 0)),
            time=int(item.get("time", 0)),
        )
    except (KeyError, TypeError, ValueError) as exc:
        LOGGER.warning("skipping candle row %d in %s: %s", n, path, exc)
        return None
