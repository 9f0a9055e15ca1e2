from __future__ import annotations

import numpy as np

from stockchart.raster.canvas import RGBA, draw_pixel, to_pixel


def draw_polyline(dst: np.ndarray, points: np.ndarray, color: RGBA, width: int = 1) -> None:
    """Stroke consecutive vertices; a NaN vertex breaks the line into separate runs."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    for i in range(pts.shape[0] - 1):
        draw_segment(dst, pts[i, 0], pts[i, 1], pts[i + 1, 0], pts[i + 1, 1], color, width=width)


def draw_segment(dst: np.ndarray, x0: float, y0: float, x1: float, y1: float, color: RGBA, width: int = 1) -> None:
    ax, ay, bx, by = to_pixel(x0), to_pixel(y0), to_pixel(x1), to_pixel(y1)
    if ax is None or ay is None or bx is None or by is None:
        return
    if _outside(dst, ax, ay, bx, by):
        return
    dx = abs(bx - ax)
    sx = 1 if ax < bx else -1
    dy = -abs(by - ay)
    sy = 1 if ay < by else -1
    err = dx + dy
    radius = max(0, width // 2)
    while True:
        for yy in range(ay - radius, ay + radius + 1):
            for xx in range(ax - radius, ax + radius + 1):
                draw_pixel(dst, xx, yy, color)
        if ax == bx and ay == by:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            ax += sx
        if e2 <= dx:
            err += dx
            ay += sy


def _outside(dst: np.ndarray, ax: int, ay: int, bx: int, by: int) -> bool:
    h, w = dst.shape[0], dst.shape[1]
    return max(ax, bx) < 0 or min(ax, bx) >= w or max(ay, by) < 0 or min(ay, by) >= h
