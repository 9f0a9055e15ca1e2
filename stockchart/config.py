from __future__ import annotations

from dataclasses import dataclass, field, fields
import logging
from pathlib import Path
import tomllib
from typing import Any

from stockchart.errors import ChartConfigError


LOGGER = logging.getLogger(__name__)

RGBA = tuple[int, int, int, int]


def _check_color(name: str, value: RGBA) -> None:
    if len(value) != 4 or any(not 0 <= int(c) <= 255 for c in value):
        raise ChartConfigError(f"{name} must be an RGBA tuple with channels in [0, 255]")


@dataclass(frozen=True)
class ChartConfig:
    show_start_index: int = 0
    show_end_index: int = 59
    scroll_smoothly: bool = True
    background: RGBA = (12, 16, 23, 255)
    rise_color: RGBA = (235, 84, 84, 255)
    down_color: RGBA = (38, 166, 124, 255)
    show_highlight_horizontal_line: bool = True
    show_highlight_vertical_line: bool = True
    highlight_line_color: RGBA = (186, 201, 220, 235)

    def __post_init__(self) -> None:
        if self.show_start_index < 0:
            raise ChartConfigError("show_start_index must be >= 0")
        if self.show_end_index < self.show_start_index:
            raise ChartConfigError("show_end_index must be >= show_start_index")
        for name in ("background", "rise_color", "down_color", "highlight_line_color"):
            _check_color(name, getattr(self, name))


@dataclass(frozen=True)
class PanelConfig:
    kind: str = "candle"
    height: int = 200
    margin_top: int = 0
    margin_bottom: int = 0
    main_padding_top: int = 10
    main_padding_bottom: int = 10
    background: RGBA = (20, 26, 36, 255)

    def __post_init__(self) -> None:
        if self.height <= 0:
            raise ChartConfigError("height must be > 0")
        if self.margin_top < 0 or self.margin_bottom < 0:
            raise ChartConfigError("margins must be >= 0")
        if self.main_padding_top < 0 or self.main_padding_bottom < 0:
            raise ChartConfigError("main paddings must be >= 0")
        if self.main_padding_top + self.main_padding_bottom >= self.height:
            raise ChartConfigError("main paddings must leave room inside the panel height")
        _check_color("background", self.background)

    @property
    def outer_height(self) -> int:
        return self.margin_top + self.height + self.margin_bottom


@dataclass(frozen=True)
class CandlePanelConfig(PanelConfig):
    kind: str = "candle"
    bar_space_ratio: float = 0.2

    def __post_init__(self) -> None:
        super().__post_init__()
        if not 0.0 <= self.bar_space_ratio < 1.0:
            raise ChartConfigError("bar_space_ratio must be in [0, 1)")


@dataclass(frozen=True)
class KdjPanelConfig(PanelConfig):
    kind: str = "kdj"
    height: int = 100
    k_line_color: RGBA = (255, 165, 0, 255)
    d_line_color: RGBA = (62, 149, 255, 255)
    j_line_color: RGBA = (200, 90, 220, 255)
    line_width: int = 1


@dataclass(frozen=True)
class MacdPanelConfig(PanelConfig):
    kind: str = "macd"
    height: int = 100
    dif_line_color: RGBA = (255, 165, 0, 255)
    dea_line_color: RGBA = (62, 149, 255, 255)
    line_width: int = 1
    bar_space_ratio: float = 0.2

    def __post_init__(self) -> None:
        super().__post_init__()
        if not 0.0 <= self.bar_space_ratio < 1.0:
            raise ChartConfigError("bar_space_ratio must be in [0, 1)")


@dataclass(frozen=True)
class AvgPricePanelConfig(PanelConfig):
    kind: str = "avg_price"
    point_color: RGBA = (235, 84, 84, 255)
    highlight_point_color: RGBA = (255, 220, 0, 255)
    point_size: int = 3


PANEL_CONFIG_TYPES: dict[str, type[PanelConfig]] = {
    "candle": CandlePanelConfig,
    "kdj": KdjPanelConfig,
    "macd": MacdPanelConfig,
    "avg_price": AvgPricePanelConfig,
}


@dataclass(frozen=True)
class ChartSettings:
    chart: ChartConfig = field(default_factory=ChartConfig)
    panels: tuple[PanelConfig, ...] = ()


def load_chart_config(path: str | Path) -> ChartSettings:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"chart config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ChartConfigError(f"invalid TOML in {config_path}: {exc}") from exc
    settings = parse_chart_settings(raw)
    LOGGER.debug("loaded chart config from %s with %d panels", config_path, len(settings.panels))
    return settings


def parse_chart_settings(raw: dict[str, Any]) -> ChartSettings:
    chart_raw = raw.get("chart", {})
    if not isinstance(chart_raw, dict):
        raise ChartConfigError("[chart] must be a table")
    chart = _build(ChartConfig, chart_raw, "chart")

    panels_raw = raw.get("panels", [])
    if not isinstance(panels_raw, list):
        raise ChartConfigError("[[panels]] must be an array of tables")
    panels: list[PanelConfig] = []
    for n, item in enumerate(panels_raw):
        if not isinstance(item, dict):
            raise ChartConfigError(f"panels[{n}] must be a table")
        kind = str(item.get("kind", "candle"))
        cls = PANEL_CONFIG_TYPES.get(kind)
        if cls is None:
            raise ChartConfigError(f"panels[{n}] has unknown kind: {kind}")
        panels.append(_build(cls, item, f"panels[{n}]"))
    return ChartSettings(chart=chart, panels=tuple(panels))


def _build(cls: type, raw: dict[str, Any], where: str):
    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ChartConfigError(f"{where} has unknown keys: {', '.join(unknown)}")
    kwargs: dict[str, Any] = {}
    for key, value in raw.items():
        if isinstance(value, list):
            value = tuple(int(v) for v in value)
        kwargs[key] = value
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise ChartConfigError(f"{where}: {exc}") from exc
