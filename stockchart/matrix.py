from __future__ import annotations

from typing import Iterable

import numpy as np

from stockchart.errors import SingularMatrixError
from stockchart.geometry import Path, Rect


SINGULAR_EPSILON = 1e-12


class Matrix:
    """Immutable 2D affine transform acting on column vectors ``(x, y, 1)``.

    Every builder method returns a new matrix that applies ``self`` first and
    the new operation afterwards, so ``m.translate(...).scale(...)`` reads in
    the order the operations happen to a point.
    """

    __slots__ = ("_m",)

    def __init__(self, values: Iterable[Iterable[float]] | np.ndarray | None = None) -> None:
        if values is None:
            arr = np.identity(3, dtype=np.float64)
        else:
            arr = np.array(values, dtype=np.float64)
            if arr.shape == (2, 3):
                arr = np.vstack([arr, [0.0, 0.0, 1.0]])
            if arr.shape != (3, 3):
                raise ValueError(f"matrix must have shape (3, 3) or (2, 3), got {arr.shape}")
            if not np.array_equal(arr[2], [0.0, 0.0, 1.0]):
                raise ValueError("matrix is not affine: last row must be (0, 0, 1)")
        arr.setflags(write=False)
        self._m = arr

    @classmethod
    def identity(cls) -> "Matrix":
        return cls()

    @classmethod
    def translation(cls, dx: float, dy: float) -> "Matrix":
        return cls([[1.0, 0.0, dx], [0.0, 1.0, dy], [0.0, 0.0, 1.0]])

    @classmethod
    def scaling(cls, sx: float, sy: float, px: float = 0.0, py: float = 0.0) -> "Matrix":
        # Scale about the pivot (px, py): the pivot itself stays fixed.
        return cls([[sx, 0.0, px - sx * px], [0.0, sy, py - sy * py], [0.0, 0.0, 1.0]])

    @property
    def values(self) -> np.ndarray:
        return self._m

    @property
    def scale_x(self) -> float:
        return float(self._m[0, 0])

    @property
    def scale_y(self) -> float:
        return float(self._m[1, 1])

    @property
    def translate_x(self) -> float:
        return float(self._m[0, 2])

    @property
    def translate_y(self) -> float:
        return float(self._m[1, 2])

    def determinant(self) -> float:
        m = self._m
        return float(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])

    def is_identity(self) -> bool:
        return bool(np.array_equal(self._m, np.identity(3)))

    def then(self, *others: "Matrix") -> "Matrix":
        out = self._m
        for other in others:
            out = other._m @ out
        return Matrix(out)

    def translate(self, dx: float, dy: float) -> "Matrix":
        return self.then(Matrix.translation(dx, dy))

    def scale(self, sx: float, sy: float, px: float = 0.0, py: float = 0.0) -> "Matrix":
        return self.then(Matrix.scaling(sx, sy, px, py))

    def inverted(self) -> "Matrix":
        det = self.determinant()
        if not np.isfinite(det) or abs(det) < SINGULAR_EPSILON:
            raise SingularMatrixError(f"matrix is singular (det={det!r})")
        a, b, c = self._m[0]
        d, e, f = self._m[1]
        return Matrix(
            [
                [e / det, -b / det, (b * f - c * e) / det],
                [-d / det, a / det, (c * d - a * f) / det],
                [0.0, 0.0, 1.0],
            ]
        )

    def map_point(self, x: float, y: float) -> tuple[float, float]:
        m = self._m
        return (
            float(m[0, 0] * x + m[0, 1] * y + m[0, 2]),
            float(m[1, 0] * x + m[1, 1] * y + m[1, 2]),
        )

    def map_points(self, points: Iterable[Iterable[float]] | np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64)
        if pts.size == 0:
            return np.empty((0, 2), dtype=np.float64)
        flat = pts.ndim == 1
        if flat:
            if pts.size % 2 != 0:
                raise ValueError("flat point arrays must hold x/y pairs")
            pts = pts.reshape(-1, 2)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValueError(f"points must have shape (N, 2), got {pts.shape}")
        out = pts @ self._m[:2, :2].T + self._m[:2, 2]
        return out.reshape(-1) if flat else out

    def map_rect(self, rect: Rect) -> Rect:
        """Map the four corners and return their axis-aligned bounds."""
        mapped = self.map_points(rect.corners())
        xs = mapped[:, 0]
        ys = mapped[:, 1]
        return Rect(
            left=float(xs.min()),
            top=float(ys.min()),
            right=float(xs.max()),
            bottom=float(ys.max()),
        )

    def map_path(self, path: Path) -> Path:
        if len(path) == 0:
            return Path(closed=path.closed)
        return Path(self.map_points(path.vertices), closed=path.closed)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash(self._m.tobytes())

    def __repr__(self) -> str:
        rows = ", ".join(str([round(float(v), 6) for v in row]) for row in self._m[:2])
        return f"Matrix({rows})"

    def to_list(self) -> list[list[float]]:
        return [[float(v) for v in row] for row in self._m]
