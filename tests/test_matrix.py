from __future__ import annotations

import unittest

import numpy as np

from stockchart.errors import SingularMatrixError
from stockchart.geometry import Path, Rect
from stockchart.matrix import Matrix


class MatrixTests(unittest.TestCase):
    def test_builders_apply_in_call_order(self) -> None:
        m = Matrix.identity().translate(1.0, 2.0).scale(10.0, 10.0)
        self.assertEqual(m.map_point(0.0, 0.0), (10.0, 20.0))
        other = Matrix.identity().scale(10.0, 10.0).translate(1.0, 2.0)
        self.assertEqual(other.map_point(0.0, 0.0), (1.0, 2.0))

    def test_scale_about_pivot_keeps_pivot_fixed(self) -> None:
        m = Matrix.scaling(3.0, -2.0, 5.0, 7.0)
        self.assertEqual(m.map_point(5.0, 7.0), (5.0, 7.0))
        self.assertEqual(m.map_point(6.0, 8.0), (8.0, 5.0))

    def test_then_matches_explicit_product(self) -> None:
        a = Matrix.translation(4.0, -1.0)
        b = Matrix.scaling(2.0, 0.5)
        expected = b.values @ a.values
        np.testing.assert_array_equal(a.then(b).values, expected)

    def test_inverse_round_trip(self) -> None:
        m = Matrix.translation(12.5, -3.0).scale(4.0, -26.0, 0.0, 20.0).translate(0.0, 260.0)
        inv = m.inverted()
        x, y = inv.map_point(*m.map_point(3.25, 17.0))
        self.assertAlmostEqual(x, 3.25)
        self.assertAlmostEqual(y, 17.0)
        np.testing.assert_allclose(m.then(inv).values, np.identity(3), atol=1e-9)

    def test_singular_matrix_rejected(self) -> None:
        with self.assertRaises(SingularMatrixError):
            Matrix.scaling(0.0, 1.0).inverted()
        with self.assertRaises(SingularMatrixError):
            Matrix.scaling(float("nan"), 1.0).inverted()

    def test_rejects_non_affine_values(self) -> None:
        with self.assertRaises(ValueError):
            Matrix([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 1.0]])
        with self.assertRaises(ValueError):
            Matrix([[1.0, 0.0], [0.0, 1.0]])

    def test_two_by_three_input_is_promoted(self) -> None:
        m = Matrix([[2.0, 0.0, 1.0], [0.0, 3.0, -1.0]])
        self.assertEqual(m, Matrix.scaling(2.0, 3.0).translate(1.0, -1.0))
        self.assertEqual(m.translate_x, 1.0)
        self.assertEqual(m.scale_y, 3.0)

    def test_map_points_accepts_flat_pairs(self) -> None:
        m = Matrix.translation(1.0, 1.0)
        out = m.map_points([0.0, 0.0, 2.0, 3.0])
        np.testing.assert_array_equal(out, [1.0, 1.0, 3.0, 4.0])
        with self.assertRaises(ValueError):
            m.map_points([1.0, 2.0, 3.0])
        self.assertEqual(m.map_points([]).shape, (0, 2))

    def test_map_rect_returns_sorted_bounds_under_flip(self) -> None:
        flip = Matrix.scaling(1.0, -1.0).translate(0.0, 100.0)
        rect = flip.map_rect(Rect(left=10.0, top=20.0, right=30.0, bottom=60.0))
        self.assertEqual(rect, Rect(left=10.0, top=40.0, right=30.0, bottom=80.0))

    def test_map_path_keeps_subpath_breaks(self) -> None:
        path = Path().move_to(0.0, 0.0).line_to(1.0, 1.0).move_to(2.0, 0.0).line_to(3.0, 1.0)
        mapped = Matrix.scaling(10.0, 10.0).map_path(path)
        self.assertEqual(len(mapped), 5)
        self.assertTrue(np.isnan(mapped.vertices[2]).all())
        np.testing.assert_array_equal(mapped.vertices[4], [30.0, 10.0])
        self.assertEqual(Matrix.identity().map_path(Path(closed=True)), Path(closed=True))

    def test_identity_and_equality(self) -> None:
        self.assertTrue(Matrix.identity().is_identity())
        self.assertFalse(Matrix.translation(0.0, 1e-9).is_identity())
        self.assertEqual(hash(Matrix.translation(1.0, 2.0)), hash(Matrix.translation(1.0, 2.0)))
        self.assertEqual(Matrix.identity().to_list()[2], [0.0, 0.0, 1.0])

    def test_values_are_read_only(self) -> None:
        with self.assertRaises(ValueError):
            Matrix.identity().values[0, 0] = 5.0


if __name__ == "__main__":
    unittest.main()
