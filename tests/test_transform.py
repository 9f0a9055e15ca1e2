from __future__ import annotations

from dataclasses import dataclass, field
import unittest

import numpy as np

from stockchart.areas import PanelAreas, resolve_display_areas
from stockchart.geometry import Path, Rect
from stockchart.matrix import Matrix
from stockchart.transform import (
    ExternalTransforms,
    TransformPipeline,
    build_coordinate_matrix,
    compute_fix_x,
    compute_fix_y,
    rebuild_frame,
    snap_offset,
)


def _x_range(start: int, end: int) -> tuple[float, float]:
    return (float(start), float(end) + 1.0)


def _series_range(values: list[float]):
    def y_range(start: int, end: int) -> tuple[float, float]:
        window = values[max(0, start) : end + 1]
        return (min(window), max(window))

    return y_range


@dataclass
class _Chart:
    window: tuple[int, int] = (0, 9)
    count: int = 10
    snap: bool = False
    external: ExternalTransforms = field(default_factory=ExternalTransforms)

    def visible_window(self) -> tuple[int, int]:
        return self.window

    def entity_count(self) -> int:
        return self.count

    def snap_enabled(self) -> bool:
        return self.snap

    def external_transforms(self) -> ExternalTransforms:
        return self.external


class _Source:
    def __init__(self, areas: PanelAreas | None, y_range) -> None:
        self.areas = areas
        self._y_range = y_range

    def get_x_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        return _x_range(start_index, end_index)

    def get_y_value_range(self, start_index: int, end_index: int) -> tuple[float, float]:
        return self._y_range(start_index, end_index)


def _areas(padding_top: float = 20.0, padding_bottom: float = 20.0) -> PanelAreas:
    return resolve_display_areas(400, top=0, bottom=300, padding_top=padding_top, padding_bottom=padding_bottom)


class CoordinateMatrixTests(unittest.TestCase):
    def test_window_corners_land_on_main_area_corners(self) -> None:
        m = build_coordinate_matrix(0, 9, _areas(), _x_range, lambda s, e: (10.0, 20.0))
        x0, y0 = m.map_point(0.0, 10.0)
        x1, y1 = m.map_point(10.0, 20.0)
        self.assertAlmostEqual(x0, 0.0)
        self.assertAlmostEqual(y0, 280.0)
        self.assertAlmostEqual(x1, 400.0)
        self.assertAlmostEqual(y1, 20.0)

    def test_x_range_offset_by_window_start(self) -> None:
        m = build_coordinate_matrix(30, 39, _areas(), _x_range, lambda s, e: (0.0, 1.0))
        self.assertAlmostEqual(m.map_point(30.0, 0.0)[0], 0.0)
        self.assertAlmostEqual(m.map_point(35.5, 0.0)[0], 220.0)

    def test_degenerate_y_range_sits_on_full_area_centre(self) -> None:
        areas = _areas(padding_top=30.0, padding_bottom=50.0)
        m = build_coordinate_matrix(0, 4, areas, _x_range, lambda s, e: (100.0, 100.0))
        self.assertAlmostEqual(m.map_point(2.5, 100.0)[1], 150.0)
        self.assertTrue(np.isfinite(m.values).all())

    def test_degenerate_y_range_is_logged(self) -> None:
        with self.assertLogs("stockchart.transform", level="DEBUG") as logs:
            build_coordinate_matrix(0, 4, _areas(), _x_range, lambda s, e: (5.0, 5.0))
        self.assertIn("degenerate y range", logs.output[0])

    def test_empty_x_range_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_coordinate_matrix(0, 9, _areas(), lambda s, e: (3.0, 3.0), lambda s, e: (0.0, 1.0))


class SnapTests(unittest.TestCase):
    def test_snap_offset_picks_nearest_boundary(self) -> None:
        self.assertAlmostEqual(snap_offset(7.3, 20.0), -7.3)
        self.assertAlmostEqual(snap_offset(13.0, 20.0), 7.0)
        self.assertAlmostEqual(snap_offset(-13.0, 20.0), -7.0)
        self.assertAlmostEqual(snap_offset(-7.0, 20.0), 7.0)
        self.assertEqual(snap_offset(40.0, 20.0), 0.0)
        self.assertEqual(snap_offset(5.0, 0.0), 0.0)

    def test_fix_x_aligns_points_and_stays_within_half_unit(self) -> None:
        areas = _areas()
        coordinate = build_coordinate_matrix(0, 19, areas, _x_range, lambda s, e: (0.0, 1.0))
        for scroll in np.linspace(-95.0, 95.0, 77):
            external = ExternalTransforms(scroll=Matrix.translation(float(scroll), 0.0))
            fix_x = compute_fix_x(coordinate, external, areas.main, 100, snap_enabled=True)
            self.assertLessEqual(abs(fix_x.translate_x), 10.0 + 1e-9)
            self.assertEqual(fix_x.translate_y, 0.0)
            left_value, _ = external.chain(coordinate).then(fix_x).inverted().map_point(areas.main.left, 0.0)
            self.assertAlmostEqual(left_value, round(left_value), places=9)

    def test_fix_x_identity_when_scrolling_smoothly(self) -> None:
        areas = _areas()
        coordinate = build_coordinate_matrix(0, 19, areas, _x_range, lambda s, e: (0.0, 1.0))
        external = ExternalTransforms(scroll=Matrix.translation(7.3, 0.0))
        self.assertTrue(compute_fix_x(coordinate, external, areas.main, 100, snap_enabled=False).is_identity())

    def test_fix_x_identity_when_chain_collapses(self) -> None:
        areas = _areas()
        coordinate = build_coordinate_matrix(0, 9, areas, _x_range, lambda s, e: (0.0, 1.0))
        external = ExternalTransforms(x_scale=Matrix.scaling(0.0, 1.0))
        self.assertTrue(compute_fix_x(coordinate, external, areas.main, 10, snap_enabled=True).is_identity())


class AutoFitTests(unittest.TestCase):
    def test_window_already_fitted_gives_identity(self) -> None:
        areas = _areas()
        coordinate = build_coordinate_matrix(0, 9, areas, _x_range, lambda s, e: (10.0, 20.0))
        frame = rebuild_frame(coordinate, ExternalTransforms(), areas.main, 10, False, lambda s, e: (10.0, 20.0))
        self.assertTrue(frame.fix_x.is_identity())
        self.assertTrue(frame.fix_y.is_identity())
        self.assertEqual(frame.concat, coordinate)

    def test_scrolled_window_fills_main_area(self) -> None:
        areas = _areas()
        values = [float(i) for i in range(100)]
        y_range = _series_range(values)
        coordinate = build_coordinate_matrix(0, 9, areas, _x_range, y_range)
        external = ExternalTransforms(scroll=Matrix.translation(-400.0, 0.0))
        frame = rebuild_frame(coordinate, external, areas.main, 100, False, y_range)
        _, low = frame.concat.map_point(15.0, 10.0)
        _, high = frame.concat.map_point(15.0, 20.0)
        self.assertAlmostEqual(low, areas.main.bottom, places=6)
        self.assertAlmostEqual(high, areas.main.top, places=6)
        visible = frame.concat.map_points([[i + 0.5, values[i]] for i in range(10, 20)])
        self.assertTrue((visible[:, 1] >= areas.main.top - 1e-6).all())
        self.assertTrue((visible[:, 1] <= areas.main.bottom + 1e-6).all())

    def test_fix_y_is_deterministic(self) -> None:
        areas = _areas()
        y_range = _series_range([float(i % 7) for i in range(50)])
        coordinate = build_coordinate_matrix(0, 9, areas, _x_range, y_range)
        external = ExternalTransforms(scroll=Matrix.translation(-130.0, 0.0))
        first = compute_fix_y(coordinate, external, Matrix.identity(), areas.main, 50, y_range)
        second = compute_fix_y(coordinate, external, Matrix.identity(), areas.main, 50, y_range)
        self.assertEqual(first, second)

    def test_edge_indices_fall_back_inside_data(self) -> None:
        areas = _areas()
        coordinate = build_coordinate_matrix(0, 9, areas, _x_range, lambda s, e: (0.0, 10.0))
        calls: list[tuple[int, int]] = []

        def recorder(start: int, end: int) -> tuple[float, float]:
            calls.append((start, end))
            return (0.0, 10.0)

        right_shift = ExternalTransforms(scroll=Matrix.translation(120.0, 0.0))
        compute_fix_y(coordinate, right_shift, Matrix.identity(), areas.main, 10, recorder)
        left_shift = ExternalTransforms(scroll=Matrix.translation(-120.0, 0.0))
        compute_fix_y(coordinate, left_shift, Matrix.identity(), areas.main, 10, recorder)
        self.assertEqual(calls, [(0, 7), (3, 9)])

    def test_collapsed_visible_range_gives_identity(self) -> None:
        areas = _areas()
        coordinate = build_coordinate_matrix(0, 9, areas, _x_range, lambda s, e: (1.0, 1.0))
        fix_y = compute_fix_y(coordinate, ExternalTransforms(), Matrix.identity(), areas.main, 10, lambda s, e: (1.0, 1.0))
        self.assertTrue(fix_y.is_identity())

    def test_no_data_gives_identity(self) -> None:
        areas = _areas()
        coordinate = build_coordinate_matrix(0, 9, areas, _x_range, lambda s, e: (0.0, 1.0))
        fix_y = compute_fix_y(coordinate, ExternalTransforms(), Matrix.identity(), areas.main, 0, lambda s, e: (0.0, 1.0))
        self.assertTrue(fix_y.is_identity())


class TransformPipelineTests(unittest.TestCase):
    def _pipeline(self, chart: _Chart | None = None, y_range=None) -> tuple[TransformPipeline, _Chart]:
        chart = chart or _Chart()
        source = _Source(_areas(), y_range or (lambda s, e: (10.0, 20.0)))
        pipeline = TransformPipeline(chart, source)
        pipeline.prepare()
        return pipeline, chart

    def test_mapping_unavailable_without_data(self) -> None:
        pipeline, _ = self._pipeline(_Chart(count=0))
        self.assertFalse(pipeline.is_prepared)
        self.assertIsNone(pipeline.on_draw())
        self.assertIsNone(pipeline.forward_point(1.0, 1.0))
        self.assertIsNone(pipeline.inverse_point(1.0, 1.0))
        self.assertIsNone(pipeline.forward_rect(Rect(0.0, 0.0, 1.0, 1.0)))

    def test_mapping_unavailable_without_areas(self) -> None:
        pipeline = TransformPipeline(_Chart(), _Source(None, lambda s, e: (0.0, 1.0)))
        pipeline.prepare()
        self.assertIsNone(pipeline.coordinate_matrix)
        self.assertIsNone(pipeline.forward_points([[0.0, 0.0]]))

    def test_forward_and_inverse_round_trip(self) -> None:
        chart = _Chart(external=ExternalTransforms(scroll=Matrix.translation(-55.0, 0.0)))
        pipeline, _ = self._pipeline(chart)
        self.assertIsNotNone(pipeline.on_draw())

        point = pipeline.inverse_point(*pipeline.forward_point(3.7, 12.5))
        self.assertAlmostEqual(point[0], 3.7)
        self.assertAlmostEqual(point[1], 12.5)

        logical = np.asarray([[0.5, 10.0], [4.5, 15.0], [9.5, 20.0]])
        np.testing.assert_allclose(pipeline.inverse_points(pipeline.forward_points(logical)), logical)

        rect = Rect(left=2.0, top=11.0, right=3.0, bottom=18.0)
        back = pipeline.inverse_rect(pipeline.forward_rect(rect))
        self.assertAlmostEqual(back.left, 2.0)
        self.assertAlmostEqual(back.top, 11.0)
        self.assertAlmostEqual(back.right, 3.0)
        self.assertAlmostEqual(back.bottom, 18.0)

        path = Path().move_to(0.5, 10.0).line_to(1.5, 12.0).move_to(5.5, 19.0)
        returned = pipeline.inverse_path(pipeline.forward_path(path))
        np.testing.assert_allclose(returned.vertices, path.vertices)

    def test_forward_rect_is_sorted_after_y_flip(self) -> None:
        pipeline, _ = self._pipeline()
        pipeline.on_draw()
        rect = pipeline.forward_rect(Rect(left=0.0, top=20.0, right=1.0, bottom=10.0))
        self.assertLessEqual(rect.top, rect.bottom)
        self.assertAlmostEqual(rect.top, 20.0)
        self.assertAlmostEqual(rect.bottom, 280.0)

    def test_concat_follows_external_transforms_between_frames(self) -> None:
        pipeline, chart = self._pipeline()
        pipeline.on_draw()
        before = pipeline.forward_point(1.0, 10.0)
        chart.external = ExternalTransforms(scroll=Matrix.translation(15.0, 0.0))
        after = pipeline.forward_point(1.0, 10.0)
        self.assertAlmostEqual(after[0] - before[0], 15.0)

    def test_singular_chain_disables_inverse_only(self) -> None:
        chart = _Chart(snap=True, external=ExternalTransforms(x_scale=Matrix.scaling(0.0, 1.0)))
        pipeline, _ = self._pipeline(chart)
        frame = pipeline.on_draw()
        self.assertTrue(frame.fix_x.is_identity())
        self.assertTrue(frame.fix_y.is_identity())
        self.assertIsNotNone(pipeline.forward_point(2.0, 15.0))
        self.assertIsNone(pipeline.inverse_point(10.0, 10.0))
        self.assertIsNone(pipeline.inverse_rect(Rect(0.0, 0.0, 1.0, 1.0)))

    def test_prepare_resets_corrections(self) -> None:
        values = [float(i) for i in range(100)]
        chart = _Chart(count=100, snap=True, external=ExternalTransforms(scroll=Matrix.translation(-407.0, 0.0)))
        pipeline, _ = self._pipeline(chart, _series_range(values))
        frame = pipeline.on_draw()
        self.assertFalse(frame.fix_x.is_identity())
        self.assertFalse(frame.fix_y.is_identity())
        pipeline.prepare()
        self.assertEqual(pipeline.concat_matrix(), chart.external.chain(pipeline.coordinate_matrix))


if __name__ == "__main__":
    unittest.main()
