from __future__ import annotations

from typing import Sequence

import numpy as np

from stockchart.config import PanelConfig, RGBA
from stockchart.indicators import Index, IndexValues, values_range
from stockchart.panels.base import BasePanel
from stockchart.raster import draw_polyline


class IndexPanel(BasePanel):
    """Panel driven by an indicator calculator producing one value list per line."""

    def __init__(self, config: PanelConfig, index: Index) -> None:
        self.index = index
        self.index_values: IndexValues = []
        super().__init__(config)

    def on_data_changed(self) -> None:
        self.index_values = self.index.calculate(self.entities) if self.entities else []

    def get_y_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        return values_range(self.index_values, start_index, end_index)

    def draw_index_line(self, canvas: np.ndarray, values: Sequence[float | None], color: RGBA, width: int = 1) -> None:
        if len(values) < 2:
            return
        logical = np.asarray(
            [[i + 0.5, np.nan if v is None else v] for i, v in enumerate(values)],
            dtype=np.float64,
        )
        mapped = self.map_points_value_to_real(logical)
        if mapped is not None:
            draw_polyline(canvas, mapped, color, width=width)
