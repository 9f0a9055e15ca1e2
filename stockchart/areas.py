from __future__ import annotations

from dataclasses import dataclass

from stockchart.geometry import Rect


@dataclass(frozen=True)
class PanelAreas:
    """Pixel rectangles a panel draws into.

    ``full`` spans the whole panel width; ``main`` is ``full`` shrunk by the
    panel's top/bottom padding and is where data content lands.
    """

    full: Rect
    main: Rect

    def __post_init__(self) -> None:
        if self.full.left != 0.0 or self.main.left != 0.0:
            raise ValueError("display areas must start at x=0")
        if self.full.right != self.main.right:
            raise ValueError("main area must span the full panel width")
        if not self.full.contains_rect(self.main):
            raise ValueError("main display area must lie inside the full display area")


def resolve_display_areas(
    width: float,
    *,
    top: float,
    bottom: float,
    padding_top: float = 0.0,
    padding_bottom: float = 0.0,
) -> PanelAreas:
    if width <= 0:
        raise ValueError("width must be > 0")
    if bottom < top:
        raise ValueError("display area bottom must be >= top")
    if padding_top < 0 or padding_bottom < 0:
        raise ValueError("paddings must be >= 0")
    if padding_top + padding_bottom > bottom - top:
        raise ValueError("paddings exceed the display area height")
    full = Rect(left=0.0, top=float(top), right=float(width), bottom=float(bottom))
    main = Rect(
        left=full.left,
        top=full.top + float(padding_top),
        right=full.right,
        bottom=full.bottom - float(padding_bottom),
    )
    return PanelAreas(full=full, main=main)
