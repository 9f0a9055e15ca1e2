from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Callable, Protocol

import numpy as np

from stockchart.areas import PanelAreas
from stockchart.errors import SingularMatrixError
from stockchart.geometry import Path, Rect
from stockchart.matrix import Matrix


LOGGER = logging.getLogger(__name__)

RangeFn = Callable[[int, int], tuple[float, float]]


@dataclass(frozen=True)
class ExternalTransforms:
    """Chart-level x-axis matrices shared by every panel.

    Gesture handling mutates these between frames by swapping in a new
    instance; the pipeline only ever reads them.
    """

    x_scale: Matrix = field(default_factory=Matrix.identity)
    fix_x_scale: Matrix = field(default_factory=Matrix.identity)
    scroll: Matrix = field(default_factory=Matrix.identity)

    def chain(self, coordinate: Matrix) -> Matrix:
        return coordinate.then(self.x_scale, self.fix_x_scale, self.scroll)


@dataclass(frozen=True)
class FrameMatrices:
    coordinate: Matrix
    fix_x: Matrix
    fix_y: Matrix
    concat: Matrix


def build_coordinate_matrix(
    start_index: int,
    end_index: int,
    areas: PanelAreas,
    x_range: RangeFn,
    y_range: RangeFn,
) -> Matrix:
    """Map the logical window ``[start_index, end_index]`` onto the main area, y flipped."""
    main = areas.main
    x_from, x_end = x_range(start_index, end_index)
    x_len = x_end - x_from
    if x_len <= 0:
        raise ValueError(f"x logical range must be > 0, got ({x_from}, {x_end})")
    y_from, y_end = y_range(start_index, end_index)
    y_len = y_end - y_from

    if y_len == 0:
        # All values equal: no vertical scaling, park the value on the full area's centre line.
        LOGGER.debug("degenerate y range %r for window [%d, %d]", y_from, start_index, end_index)
        dy = main.top + main.bottom - areas.full.center_y - y_from
        sy = 1.0
    else:
        dy = main.top - y_from
        sy = main.height / y_len
    sx = main.width / x_len

    return (
        Matrix.translation(main.left - x_from, dy)
        .scale(sx, -sy, main.left, main.top)
        .translate(0.0, main.height)
    )


def snap_offset(distance: float, unit: float) -> float:
    """Horizontal move that brings ``distance`` onto the nearest multiple of ``unit``.

    The result never exceeds half a unit in magnitude.
    """
    unit = abs(unit)
    if unit == 0:
        return 0.0
    unaligned = math.fmod(distance, unit)
    if abs(unaligned) < unit / 2:
        return -unaligned
    if unaligned > 0:
        return unit - unaligned
    return -(unit + unaligned)


def _recover_index(value: float, count: int, fallback: int) -> int:
    index = int(round(value))
    if 0 <= index < count:
        return index
    return fallback


def compute_fix_x(
    coordinate: Matrix,
    external: ExternalTransforms,
    main: Rect,
    data_count: int,
    snap_enabled: bool,
) -> Matrix:
    """Translation that makes discrete scrolling stop on whole data points."""
    if not snap_enabled or data_count <= 0:
        return Matrix.identity()

    chain = external.chain(coordinate)
    try:
        inverse = chain.inverted()
    except SingularMatrixError:
        LOGGER.debug("x chain is singular; snap skipped")
        return Matrix.identity()

    left_value, _ = inverse.map_point(main.left, 0.0)
    index_from = _recover_index(left_value, data_count, fallback=0)

    first, _ = chain.map_point(float(index_from), 0.0)
    second, _ = chain.map_point(float(index_from + 1), 0.0)
    unit = second - first
    if unit == 0:
        LOGGER.debug("zero unit length at index %d; snap skipped", index_from)
        return Matrix.identity()

    return Matrix.translation(snap_offset(first - main.left, unit), 0.0)


def compute_fix_y(
    coordinate: Matrix,
    external: ExternalTransforms,
    fix_x: Matrix,
    main: Rect,
    data_count: int,
    y_range: RangeFn,
) -> Matrix:
    """Vertical translate+scale fitting the actually visible data into the main area."""
    if data_count <= 0:
        return Matrix.identity()

    chain = external.chain(coordinate).then(fix_x)
    try:
        inverse = chain.inverted()
    except SingularMatrixError:
        LOGGER.debug("x chain is singular; auto-fit skipped")
        return Matrix.identity()

    edges = inverse.map_points([[main.left, 0.0], [main.right, 0.0]])
    index_from = _recover_index(float(edges[0, 0]), data_count, fallback=0)
    index_end = _recover_index(float(edges[1, 0]), data_count, fallback=data_count - 1)

    y_from, y_end = y_range(index_from, index_end)
    mapped = chain.map_points([[0.0, y_from], [0.0, y_end]])
    y_min = float(min(mapped[0, 1], mapped[1, 1]))
    y_max = float(max(mapped[0, 1], mapped[1, 1]))

    if y_min == y_max:
        LOGGER.debug("visible window [%d, %d] collapses to a line", index_from, index_end)
        return Matrix.identity()

    return Matrix.translation(0.0, main.top - y_min).scale(1.0, main.height / (y_max - y_min), 0.0, main.top)


def compose(coordinate: Matrix, external: ExternalTransforms, fix_x: Matrix, fix_y: Matrix) -> Matrix:
    return external.chain(coordinate).then(fix_x, fix_y)


def rebuild_frame(
    coordinate: Matrix,
    external: ExternalTransforms,
    main: Rect,
    data_count: int,
    snap_enabled: bool,
    y_range: RangeFn,
) -> FrameMatrices:
    """Run the per-frame stages in order: fix-x, then fix-y, then the concatenation."""
    fix_x = compute_fix_x(coordinate, external, main, data_count, snap_enabled)
    fix_y = compute_fix_y(coordinate, external, fix_x, main, data_count, y_range)
    return FrameMatrices(
        coordinate=coordinate,
        fix_x=fix_x,
        fix_y=fix_y,
        concat=compose(coordinate, external, fix_x, fix_y),
    )


class ChartContext(Protocol):
    def visible_window(self) -> tuple[int, int]:
        ...

    def entity_count(self) -> int:
        ...

    def snap_enabled(self) -> bool:
        ...

    def external_transforms(self) -> ExternalTransforms:
        ...


class RangeSource(Protocol):
    @property
    def areas(self) -> PanelAreas | None:
        ...

    def get_x_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        ...

    def get_y_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        ...


class TransformPipeline:
    """Per-panel owner of the coordinate matrix and the per-frame corrections.

    ``prepare`` runs on resize or data change; ``on_draw`` runs before each
    frame. Mapping calls recompose against the chart's current external
    matrices every time, since gestures may have moved them mid-frame.
    """

    def __init__(self, chart: ChartContext, source: RangeSource) -> None:
        self._chart = chart
        self._source = source
        self._coordinate: Matrix | None = None
        self._fix_x = Matrix.identity()
        self._fix_y = Matrix.identity()

    @property
    def coordinate_matrix(self) -> Matrix | None:
        return self._coordinate

    @property
    def is_prepared(self) -> bool:
        return self._coordinate is not None

    def prepare(self) -> None:
        areas = self._source.areas
        if self._chart.entity_count() <= 0 or areas is None:
            self._coordinate = None
            return
        start, end = self._chart.visible_window()
        self._coordinate = build_coordinate_matrix(
            start,
            end,
            areas,
            self._source.get_x_value_range,
            self._source.get_y_value_range,
        )
        self._fix_x = Matrix.identity()
        self._fix_y = Matrix.identity()

    def on_draw(self) -> FrameMatrices | None:
        areas = self._source.areas
        if self._coordinate is None or areas is None:
            return None
        frame = rebuild_frame(
            self._coordinate,
            self._chart.external_transforms(),
            areas.main,
            self._chart.entity_count(),
            self._chart.snap_enabled(),
            self._source.get_y_value_range,
        )
        self._fix_x = frame.fix_x
        self._fix_y = frame.fix_y
        return frame

    def concat_matrix(self) -> Matrix | None:
        if self._coordinate is None:
            return None
        return compose(self._coordinate, self._chart.external_transforms(), self._fix_x, self._fix_y)

    def _inverse(self) -> Matrix | None:
        concat = self.concat_matrix()
        if concat is None:
            return None
        try:
            return concat.inverted()
        except SingularMatrixError:
            LOGGER.debug("composed matrix is singular; inverse mapping unavailable")
            return None

    def forward_points(self, points) -> np.ndarray | None:
        concat = self.concat_matrix()
        return None if concat is None else concat.map_points(points)

    def forward_point(self, x: float, y: float) -> tuple[float, float] | None:
        concat = self.concat_matrix()
        return None if concat is None else concat.map_point(x, y)

    def forward_rect(self, rect: Rect) -> Rect | None:
        concat = self.concat_matrix()
        return None if concat is None else concat.map_rect(rect)

    def forward_path(self, path: Path) -> Path | None:
        concat = self.concat_matrix()
        return None if concat is None else concat.map_path(path)

    def inverse_points(self, points) -> np.ndarray | None:
        inverse = self._inverse()
        return None if inverse is None else inverse.map_points(points)

    def inverse_point(self, x: float, y: float) -> tuple[float, float] | None:
        inverse = self._inverse()
        return None if inverse is None else inverse.map_point(x, y)

    def inverse_rect(self, rect: Rect) -> Rect | None:
        inverse = self._inverse()
        return None if inverse is None else inverse.map_rect(rect)

    def inverse_path(self, path: Path) -> Path | None:
        inverse = self._inverse()
        return None if inverse is None else inverse.map_path(path)
