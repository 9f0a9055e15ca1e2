from __future__ import annotations

import math

import numpy as np

from stockchart.geometry import Rect


RGBA = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 255)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def to_pixel(value: float) -> int | None:
    if not math.isfinite(value):
        return None
    return int(math.floor(value + 0.5))


def blit(dst: np.ndarray, src: np.ndarray, x0: int = 0, y0: int = 0) -> None:
    """Alpha-composite ``src`` onto ``dst`` with its top-left corner at ``(x0, y0)``."""
    h, w, _ = src.shape
    dx0 = max(0, x0)
    dy0 = max(0, y0)
    dx1 = min(dst.shape[1], x0 + w)
    dy1 = min(dst.shape[0], y0 + h)
    if dx0 >= dx1 or dy0 >= dy1:
        return
    patch = src[dy0 - y0 : dy1 - y0, dx0 - x0 : dx1 - x0]
    view = dst[dy0:dy1, dx0:dx1]
    alpha = patch[:, :, 3:4].astype(np.float32) / 255.0
    view[:, :, :3] = (patch[:, :, :3] * alpha + view[:, :, :3] * (1.0 - alpha)).astype(np.uint8)
    view[:, :, 3] = 255


def _blend(segment: np.ndarray, color: RGBA) -> None:
    a = color[3] / 255.0
    rgb = np.asarray(color[:3], dtype=np.float32) * a
    segment[..., :3] = (rgb + segment[..., :3].astype(np.float32) * (1.0 - a)).astype(np.uint8)
    segment[..., 3] = 255


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if 0 <= y < dst.shape[0] and 0 <= x < dst.shape[1]:
        _blend(dst[y, x], color)


def fill_rect(dst: np.ndarray, rect: Rect, color: RGBA) -> None:
    """Fill the pixel span covered by ``rect``; at least one pixel wide and tall."""
    r = rect.sorted()
    left, right = to_pixel(r.left), to_pixel(r.right)
    top, bottom = to_pixel(r.top), to_pixel(r.bottom)
    if left is None or right is None or top is None or bottom is None:
        return
    right = max(right, left + 1)
    bottom = max(bottom, top + 1)
    left, top = max(0, left), max(0, top)
    right, bottom = min(dst.shape[1], right), min(dst.shape[0], bottom)
    if left >= right or top >= bottom:
        return
    _blend(dst[top:bottom, left:right], color)


def draw_hline(dst: np.ndarray, x0: float, x1: float, y: float, color: RGBA, width: int = 1) -> None:
    row, a, b = to_pixel(y), to_pixel(min(x0, x1)), to_pixel(max(x0, x1))
    if row is None or a is None or b is None:
        return
    top = row - (width - 1) // 2
    top, bottom = max(0, top), min(dst.shape[0], top + max(1, width))
    a, b = max(0, a), min(dst.shape[1], b + 1)
    if top < bottom and a < b:
        _blend(dst[top:bottom, a:b], color)


def draw_vline(dst: np.ndarray, x: float, y0: float, y1: float, color: RGBA, width: int = 1) -> None:
    col, a, b = to_pixel(x), to_pixel(min(y0, y1)), to_pixel(max(y0, y1))
    if col is None or a is None or b is None:
        return
    left = col - (width - 1) // 2
    left, right = max(0, left), min(dst.shape[1], left + max(1, width))
    a, b = max(0, a), min(dst.shape[0], b + 1)
    if left < right and a < b:
        _blend(dst[a:b, left:right], color)
