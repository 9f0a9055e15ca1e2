from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2.0

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2.0

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def contains_rect(self, other: "Rect") -> bool:
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def sorted(self) -> "Rect":
        return Rect(
            left=min(self.left, self.right),
            top=min(self.top, self.bottom),
            right=max(self.left, self.right),
            bottom=max(self.top, self.bottom),
        )

    def corners(self) -> np.ndarray:
        return np.asarray(
            [
                [self.left, self.top],
                [self.right, self.top],
                [self.right, self.bottom],
                [self.left, self.bottom],
            ],
            dtype=np.float64,
        )


class Path:
    """Ordered polyline vertices, optionally closed."""

    __slots__ = ("_vertices", "closed")

    def __init__(self, vertices=None, *, closed: bool = False) -> None:
        if vertices is None:
            arr = np.empty((0, 2), dtype=np.float64)
        else:
            arr = np.asarray(vertices, dtype=np.float64)
            if arr.size == 0:
                arr = arr.reshape(0, 2)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError(f"path vertices must have shape (N, 2), got {arr.shape}")
        arr = arr.copy()
        arr.setflags(write=False)
        self._vertices = arr
        self.closed = bool(closed)

    @property
    def vertices(self) -> np.ndarray:
        return self._vertices

    def __len__(self) -> int:
        return int(self._vertices.shape[0])

    def move_to(self, x: float, y: float) -> "Path":
        # A move starts a fresh subpath; NaN rows separate subpaths.
        if len(self) == 0:
            return self.line_to(x, y)
        gap = np.asarray([[np.nan, np.nan], [x, y]], dtype=np.float64)
        return Path(np.vstack([self._vertices, gap]), closed=self.closed)

    def line_to(self, x: float, y: float) -> "Path":
        point = np.asarray([[x, y]], dtype=np.float64)
        return Path(np.vstack([self._vertices, point]), closed=self.closed)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self.closed == other.closed and np.array_equal(self._vertices, other._vertices, equal_nan=True)

    def __repr__(self) -> str:
        return f"Path(vertices={self._vertices.tolist()!r}, closed={self.closed})"
