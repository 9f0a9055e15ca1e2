from __future__ import annotations

from dataclasses import replace
import logging
from typing import Any, Callable, Sequence

import numpy as np

from stockchart.adapters import normalize_candles
from stockchart.config import ChartConfig, ChartSettings
from stockchart.entities import AnyKEntity
from stockchart.highlight import Highlight
from stockchart.matrix import Matrix
from stockchart.panels import BasePanel, build_panel
from stockchart.raster import blit, new_canvas
from stockchart.transform import ExternalTransforms


LOGGER = logging.getLogger(__name__)

EntitiesListener = Callable[[], None]


class StockChart:
    """Container for stacked panels sharing candle data and the x-axis transforms."""

    def __init__(self, width: int, config: ChartConfig | None = None) -> None:
        if width <= 0:
            raise ValueError("width must be > 0")
        self._width = int(width)
        self._config = config or ChartConfig()
        self._entities: list[AnyKEntity] = []
        self._panels: list[BasePanel] = []
        self._external = ExternalTransforms()
        self._highlight: Highlight | None = None
        self._highlight_panel: BasePanel | None = None
        self._listeners: list[EntitiesListener] = []

    @classmethod
    def from_settings(cls, width: int, settings: ChartSettings) -> "StockChart":
        chart = cls(width=width, config=settings.chart)
        for panel_config in settings.panels:
            chart.add_panel(build_panel(panel_config))
        return chart

    # state read by the panels' transform pipelines

    @property
    def config(self) -> ChartConfig:
        return self._config

    @property
    def entities(self) -> Sequence[AnyKEntity]:
        return self._entities

    def entity_count(self) -> int:
        return len(self._entities)

    def visible_window(self) -> tuple[int, int]:
        return (self._config.show_start_index, self._config.show_end_index)

    def snap_enabled(self) -> bool:
        return not self._config.scroll_smoothly

    def external_transforms(self) -> ExternalTransforms:
        return self._external

    # configuration

    def set_config(self, config: ChartConfig) -> None:
        self._config = config
        self._clamp_show_range()
        self._prepare_panels()

    def set_show_range(self, start_index: int, end_index: int) -> None:
        self._config = replace(self._config, show_start_index=int(start_index), show_end_index=int(end_index))
        self._clamp_show_range()
        self._prepare_panels()

    def _clamp_show_range(self) -> None:
        count = len(self._entities)
        if count <= 0:
            return
        start = min(self._config.show_start_index, count - 1)
        end = min(self._config.show_end_index, count - 1)
        if (start, end) != (self._config.show_start_index, self._config.show_end_index):
            LOGGER.debug("show range clamped to [%d, %d] for %d entities", start, end, count)
            self._config = replace(self._config, show_start_index=start, show_end_index=end)

    # data

    def set_entities(self, entities: Any) -> None:
        """Replace the series; accepts anything ``normalize_candles`` understands."""
        self._entities = normalize_candles(entities)
        if not self._entities:
            self.clear_highlight()
        self._clamp_show_range()
        self._notify_entities_changed()

    def append_entities(self, entities: Any) -> None:
        self._entities.extend(normalize_candles(entities))
        self._clamp_show_range()
        self._notify_entities_changed()

    def add_entities_listener(self, listener: EntitiesListener) -> None:
        self._listeners.append(listener)

    def remove_entities_listener(self, listener: EntitiesListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify_entities_changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def find_last_not_empty_index_in_display_area(self) -> int | None:
        start, end = self.visible_window()
        for idx in range(min(end, len(self._entities) - 1), max(start, 0) - 1, -1):
            if not self._entities[idx].is_empty:
                return idx
        return None

    # panels

    @property
    def panels(self) -> tuple[BasePanel, ...]:
        return tuple(self._panels)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return sum(panel.config.outer_height for panel in self._panels)

    def add_panel(self, panel: BasePanel) -> BasePanel:
        panel.attach(self)
        self._panels.append(panel)
        self.add_entities_listener(panel.on_entities_changed)
        panel.on_size_changed(self._width, panel.config.height)
        return panel

    def remove_panel(self, panel: BasePanel) -> None:
        if panel not in self._panels:
            return
        self._panels.remove(panel)
        self.remove_entities_listener(panel.on_entities_changed)
        panel.detach()
        if self._highlight_panel is panel:
            self.clear_highlight()

    def panel_offset(self, panel: BasePanel) -> int:
        """Chart-space y of the panel's top edge."""
        y = 0
        for item in self._panels:
            if item is panel:
                return y + item.config.margin_top
            y += item.config.outer_height
        raise ValueError("panel is not part of this chart")

    def resize(self, width: int) -> None:
        if width <= 0:
            raise ValueError("width must be > 0")
        self._width = int(width)
        for panel in self._panels:
            panel.on_size_changed(self._width, panel.config.height)

    def _prepare_panels(self) -> None:
        for panel in self._panels:
            panel.prepare()

    # shared x-axis transforms

    def set_external_transforms(
        self,
        *,
        x_scale: Matrix | None = None,
        fix_x_scale: Matrix | None = None,
        scroll: Matrix | None = None,
    ) -> None:
        self._external = ExternalTransforms(
            x_scale=self._external.x_scale if x_scale is None else x_scale,
            fix_x_scale=self._external.fix_x_scale if fix_x_scale is None else fix_x_scale,
            scroll=self._external.scroll if scroll is None else scroll,
        )

    def scroll_by(self, dx: float) -> None:
        self.set_external_transforms(scroll=self._external.scroll.translate(dx, 0.0))

    def zoom_x(self, factor: float, focus_x: float | None = None) -> None:
        if factor <= 0:
            raise ValueError("zoom factor must be > 0")
        focus = self._width / 2.0 if focus_x is None else float(focus_x)
        self.set_external_transforms(x_scale=self._external.x_scale.scale(factor, 1.0, focus, 0.0))

    def reset_transforms(self) -> None:
        self._external = ExternalTransforms()

    # highlight

    def set_highlight(self, panel: BasePanel, x: float, y: float) -> Highlight | None:
        """Hit-test ``(x, y)`` in the panel's local pixels and keep the result."""
        highlight = panel.hit_test(x, y)
        if highlight is None:
            self.clear_highlight()
            return None
        self._highlight = highlight
        self._highlight_panel = panel
        return highlight

    def clear_highlight(self) -> None:
        self._highlight = None
        self._highlight_panel = None

    def get_highlight(self, panel: BasePanel) -> Highlight | None:
        """The highlight as seen by ``panel``: shared x, panel-local y."""
        if self._highlight is None or self._highlight_panel is None:
            return None
        if panel is self._highlight_panel:
            return self._highlight
        origin = self.panel_offset(self._highlight_panel)
        local_y = self._highlight.y + origin - self.panel_offset(panel)
        value = panel.map_point_real_to_value(self._highlight.x, local_y)
        if value is None:
            return None
        return Highlight(x=self._highlight.x, y=local_y, value_x=value[0], value_y=value[1])

    # rendering

    def render(self) -> np.ndarray:
        height = max(1, self.height)
        frame = new_canvas(self._width, height, color=self._config.background)
        if not self._entities:
            return frame
        y = 0
        for panel in self._panels:
            canvas = new_canvas(self._width, panel.config.height, color=(0, 0, 0, 0))
            panel.draw(canvas)
            blit(frame, canvas, 0, y + panel.config.margin_top)
            y += panel.config.outer_height
        return frame
