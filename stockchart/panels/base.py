from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

import numpy as np

from stockchart.areas import PanelAreas, resolve_display_areas
from stockchart.config import PanelConfig
from stockchart.entities import AnyKEntity
from stockchart.geometry import Path, Rect
from stockchart.highlight import Highlight
from stockchart.matrix import Matrix
from stockchart.raster import draw_hline, draw_vline, fill_rect
from stockchart.transform import FrameMatrices, TransformPipeline

if TYPE_CHECKING:
    from stockchart.chart import StockChart


# Logical width of one data point on the x axis.
X_VALUE_UNIT_LEN = 1.0


class BasePanel(ABC):
    """One horizontally-stacked sub-chart sharing the chart's x axis.

    Subclasses supply the y logical range for an index window and the
    drawing steps; the base class owns the display areas and the
    transform pipeline.
    """

    def __init__(self, config: PanelConfig) -> None:
        self.config = config
        self._chart: StockChart | None = None
        self._pipeline: TransformPipeline | None = None
        self._areas: PanelAreas | None = None
        self._width = 0
        self._height = config.height

    # lifecycle

    @property
    def chart(self) -> "StockChart | None":
        return self._chart

    @property
    def pipeline(self) -> TransformPipeline | None:
        return self._pipeline

    @property
    def is_attached(self) -> bool:
        return self._chart is not None

    def attach(self, chart: "StockChart") -> None:
        if self._chart is not None:
            raise RuntimeError("panel is already attached to a chart")
        self._chart = chart
        self._pipeline = TransformPipeline(chart, self)
        self.on_data_changed()
        self.prepare()

    def detach(self) -> None:
        self._chart = None
        self._pipeline = None

    def on_size_changed(self, width: int, height: int) -> None:
        self._width = int(width)
        self._height = int(height)
        self._areas = resolve_display_areas(
            self._width,
            top=self.display_area_top(),
            bottom=self.display_area_bottom(),
            padding_top=self.config.main_padding_top,
            padding_bottom=self.config.main_padding_bottom,
        )
        self.prepare()

    def on_entities_changed(self) -> None:
        self.on_data_changed()
        self.prepare()

    def on_data_changed(self) -> None:
        """Hook: the chart's entities were replaced or extended."""

    def prepare(self) -> None:
        if self._chart is None or self._pipeline is None:
            return
        self._pipeline.prepare()

    # geometry

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def areas(self) -> PanelAreas | None:
        return self._areas

    @property
    def display_area(self) -> Rect | None:
        return None if self._areas is None else self._areas.full

    @property
    def main_display_area(self) -> Rect | None:
        return None if self._areas is None else self._areas.main

    def display_area_top(self) -> float:
        return 0.0

    def display_area_bottom(self) -> float:
        return float(self._height)

    @property
    def entities(self) -> Sequence[AnyKEntity]:
        return () if self._chart is None else self._chart.entities

    def get_x_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        return (float(start_index), float(end_index) + X_VALUE_UNIT_LEN)

    @abstractmethod
    def get_y_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        ...

    # drawing

    def draw(self, canvas: np.ndarray) -> FrameMatrices | None:
        if self._chart is None or self._pipeline is None or self._chart.entity_count() <= 0:
            return None
        frame = self._pipeline.on_draw()
        if frame is None:
            return None
        self.draw_background(canvas)
        self.draw_data(canvas)
        self.draw_highlight(canvas)
        return frame

    def draw_background(self, canvas: np.ndarray) -> None:
        if self._areas is not None:
            fill_rect(canvas, self._areas.full, self.config.background)

    @abstractmethod
    def draw_data(self, canvas: np.ndarray) -> None:
        ...

    def draw_highlight(self, canvas: np.ndarray) -> None:
        highlight = self.highlight
        area = self.display_area
        if highlight is None or area is None or self._chart is None:
            return
        config = self._chart.config
        color = config.highlight_line_color
        if config.show_highlight_horizontal_line and area.top <= highlight.y <= area.bottom:
            draw_hline(canvas, area.left, area.right, highlight.y, color)
        if config.show_highlight_vertical_line and area.left <= highlight.x <= area.right:
            mapped = self.map_point_value_to_real(highlight.idx + 0.5, 0.0)
            if mapped is not None:
                draw_vline(canvas, mapped[0], area.top, area.bottom, color)

    # highlight

    @property
    def highlight(self) -> Highlight | None:
        return None if self._chart is None else self._chart.get_highlight(self)

    def hit_test(self, x: float, y: float) -> Highlight | None:
        value = self.map_point_real_to_value(x, y)
        if value is None:
            return None
        return Highlight(x=float(x), y=float(y), value_x=value[0], value_y=value[1])

    # mapping

    @property
    def coordinate_matrix(self) -> Matrix | None:
        return None if self._pipeline is None else self._pipeline.coordinate_matrix

    def map_point_value_to_real(self, x: float, y: float) -> tuple[float, float] | None:
        return None if self._pipeline is None else self._pipeline.forward_point(x, y)

    def map_points_value_to_real(self, points) -> np.ndarray | None:
        return None if self._pipeline is None else self._pipeline.forward_points(points)

    def map_rect_value_to_real(self, rect: Rect) -> Rect | None:
        return None if self._pipeline is None else self._pipeline.forward_rect(rect)

    def map_path_value_to_real(self, path: Path) -> Path | None:
        return None if self._pipeline is None else self._pipeline.forward_path(path)

    def map_point_real_to_value(self, x: float, y: float) -> tuple[float, float] | None:
        return None if self._pipeline is None else self._pipeline.inverse_point(x, y)

    def map_points_real_to_value(self, points) -> np.ndarray | None:
        return None if self._pipeline is None else self._pipeline.inverse_points(points)

    def map_rect_real_to_value(self, rect: Rect) -> Rect | None:
        return None if self._pipeline is None else self._pipeline.inverse_rect(rect)

    def map_path_real_to_value(self, path: Path) -> Path | None:
        return None if self._pipeline is None else self._pipeline.inverse_path(path)
