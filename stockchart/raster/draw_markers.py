from __future__ import annotations

import numpy as np

from stockchart.raster.canvas import RGBA, draw_pixel, to_pixel


def draw_markers(dst: np.ndarray, points: np.ndarray, color: RGBA, size: int = 1) -> None:
    """Filled discs of diameter ``size`` centred on each point."""
    radius = max(0, size // 2)
    for x, y in np.asarray(points, dtype=np.float64).reshape(-1, 2).tolist():
        cx, cy = to_pixel(x), to_pixel(y)
        if cx is None or cy is None:
            continue
        for yy in range(cy - radius, cy + radius + 1):
            for xx in range(cx - radius, cx + radius + 1):
                if (xx - cx) ** 2 + (yy - cy) ** 2 <= radius * radius:
                    draw_pixel(dst, xx, yy, color)
