from __future__ import annotations

import numpy as np

from stockchart.config import AvgPricePanelConfig
from stockchart.entities import non_empty_indices
from stockchart.panels.base import BasePanel
from stockchart.raster import draw_markers


class AvgPricePanel(BasePanel):
    """Dots at each period's mid price, (high + low) / 2."""

    def __init__(self, config: AvgPricePanelConfig | None = None) -> None:
        super().__init__(config or AvgPricePanelConfig())

    def get_y_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        entities = self.entities
        prices = [entities[i].avg_price for i in non_empty_indices(entities, start_index, end_index)]  # type: ignore[union-attr]
        if not prices:
            return (0.0, 0.0)
        return (min(prices), max(prices))

    def draw_data(self, canvas: np.ndarray) -> None:
        entities = self.entities
        indices = non_empty_indices(entities, 0, len(entities) - 1)
        if not indices:
            return
        logical = np.asarray([[i + 0.5, entities[i].avg_price] for i in indices], dtype=np.float64)  # type: ignore[union-attr]
        mapped = self.map_points_value_to_real(logical)
        if mapped is not None:
            draw_markers(canvas, mapped, self.config.point_color, size=self.config.point_size)

    def draw_highlight(self, canvas: np.ndarray) -> None:
        highlight = self.highlight
        area = self.display_area
        if highlight is None or area is None or not area.left <= highlight.x <= area.right:
            return
        idx = highlight.idx
        entities = self.entities
        if not 0 <= idx < len(entities) or entities[idx].is_empty:
            return
        mapped = self.map_point_value_to_real(idx + 0.5, entities[idx].avg_price)  # type: ignore[union-attr]
        if mapped is not None:
            draw_markers(canvas, np.asarray([mapped]), self.config.highlight_point_color, size=self.config.point_size * 2)
