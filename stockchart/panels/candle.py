from __future__ import annotations

import numpy as np

from stockchart.config import CandlePanelConfig
from stockchart.entities import KEntity, non_empty_indices
from stockchart.geometry import Rect
from stockchart.panels.base import BasePanel
from stockchart.raster import draw_vline, fill_rect


class CandlePanel(BasePanel):
    """Candlesticks: y range spans the lowest low to the highest high in the window."""

    def __init__(self, config: CandlePanelConfig | None = None) -> None:
        super().__init__(config or CandlePanelConfig())

    def get_y_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        entities = self.entities
        indices = non_empty_indices(entities, start_index, end_index)
        if not indices:
            return (0.0, 0.0)
        candles: list[KEntity] = [entities[i] for i in indices]  # type: ignore[misc]
        return (min(c.low for c in candles), max(c.high for c in candles))

    def draw_data(self, canvas: np.ndarray) -> None:
        if self.chart is None:
            return
        chart_cfg = self.chart.config
        space = self.config.bar_space_ratio
        entities = self.entities
        for idx in non_empty_indices(entities, 0, len(entities) - 1):
            candle: KEntity = entities[idx]  # type: ignore[assignment]
            color = chart_cfg.rise_color if candle.is_rise else chart_cfg.down_color
            wick = self.map_points_value_to_real([[idx + 0.5, candle.high], [idx + 0.5, candle.low]])
            if wick is None:
                return
            draw_vline(canvas, wick[0, 0], wick[0, 1], wick[1, 1], color)
            body = self.map_rect_value_to_real(
                Rect(
                    left=idx + space / 2.0,
                    top=max(candle.open, candle.close),
                    right=idx + 1.0 - space / 2.0,
                    bottom=min(candle.open, candle.close),
                )
            )
            if body is not None:
                fill_rect(canvas, body, color)
