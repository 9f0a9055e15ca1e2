from __future__ import annotations

from stockchart.config import (
    AvgPricePanelConfig,
    CandlePanelConfig,
    KdjPanelConfig,
    MacdPanelConfig,
    PanelConfig,
)
from stockchart.errors import ChartConfigError
from stockchart.panels.avg_price import AvgPricePanel
from stockchart.panels.base import BasePanel
from stockchart.panels.candle import CandlePanel
from stockchart.panels.index_panel import IndexPanel
from stockchart.panels.kdj import KdjPanel
from stockchart.panels.macd import MacdPanel


def build_panel(config: PanelConfig) -> BasePanel:
    if isinstance(config, CandlePanelConfig):
        return CandlePanel(config)
    if isinstance(config, KdjPanelConfig):
        return KdjPanel(config)
    if isinstance(config, MacdPanelConfig):
        return MacdPanel(config)
    if isinstance(config, AvgPricePanelConfig):
        return AvgPricePanel(config)
    raise ChartConfigError(f"no panel for config kind: {config.kind}")


__all__ = [
    "AvgPricePanel",
    "BasePanel",
    "CandlePanel",
    "IndexPanel",
    "KdjPanel",
    "MacdPanel",
    "build_panel",
]
