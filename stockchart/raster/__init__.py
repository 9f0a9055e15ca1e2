from .canvas import RGBA, blit, draw_hline, draw_pixel, draw_vline, fill_rect, new_canvas
from .draw_lines import draw_polyline, draw_segment
from .draw_markers import draw_markers

__all__ = [
    "RGBA",
    "blit",
    "draw_hline",
    "draw_markers",
    "draw_pixel",
    "draw_polyline",
    "draw_segment",
    "draw_vline",
    "fill_rect",
    "new_canvas",
]
