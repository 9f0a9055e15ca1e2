from __future__ import annotations

import numpy as np

from stockchart.config import MacdPanelConfig
from stockchart.geometry import Rect
from stockchart.indicators import Index, MacdIndex
from stockchart.panels.index_panel import IndexPanel
from stockchart.raster import fill_rect


DIF_IDX = 0
DEA_IDX = 1
MACD_IDX = 2


class MacdPanel(IndexPanel):
    def __init__(self, config: MacdPanelConfig | None = None, index: Index | None = None) -> None:
        super().__init__(config or MacdPanelConfig(), index or MacdIndex())

    def draw_data(self, canvas: np.ndarray) -> None:
        if len(self.index_values) < 3 or self.chart is None:
            return
        cfg = self.config
        chart_cfg = self.chart.config
        space = cfg.bar_space_ratio
        bar_width = 1.0 - space
        for idx, value in enumerate(self.index_values[MACD_IDX]):
            if value is None:
                continue
            left = idx + space / 2.0
            rect = self.map_rect_value_to_real(Rect(left=left, top=value, right=left + bar_width, bottom=0.0))
            if rect is not None:
                fill_rect(canvas, rect, chart_cfg.rise_color if value >= 0 else chart_cfg.down_color)
        self.draw_index_line(canvas, self.index_values[DIF_IDX], cfg.dif_line_color, cfg.line_width)
        self.draw_index_line(canvas, self.index_values[DEA_IDX], cfg.dea_line_color, cfg.line_width)
