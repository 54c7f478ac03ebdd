"""Software rendering of the slope into numpy frame buffers."""

from skiracer.graphics.renderer import SlopeRenderer, make_background_tile, format_race_time, format_score
from skiracer.graphics.primitives import (
    draw_rect,
    draw_circle,
    draw_ellipse,
    draw_line,
    draw_text,
    draw_image,
    fill,
    fill_polygon,
    shade_rect,
)

__all__ = [
    "SlopeRenderer",
    "make_background_tile",
    "format_race_time",
    "format_score",
    "draw_rect",
    "draw_circle",
    "draw_ellipse",
    "draw_line",
    "draw_text",
    "draw_image",
    "fill",
    "fill_polygon",
    "shade_rect",
]
