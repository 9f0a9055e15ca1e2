from __future__ import annotations

import numpy as np

from stockchart.config import KdjPanelConfig
from stockchart.indicators import Index, KdjIndex
from stockchart.panels.index_panel import IndexPanel


K_IDX = 0
D_IDX = 1
J_IDX = 2


class KdjPanel(IndexPanel):
    def __init__(self, config: KdjPanelConfig | None = None, index: Index | None = None) -> None:
        super().__init__(config or KdjPanelConfig(), index or KdjIndex())

    def draw_data(self, canvas: np.ndarray) -> None:
        if len(self.index_values) < 3:
            return
        cfg = self.config
        self.draw_index_line(canvas, self.index_values[K_IDX], cfg.k_line_color, cfg.line_width)
        self.draw_index_line(canvas, self.index_values[D_IDX], cfg.d_line_color, cfg.line_width)
        self.draw_index_line(canvas, self.index_values[J_IDX], cfg.j_line_color, cfg.line_width)
