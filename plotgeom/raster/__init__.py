from .canvas import blend_coverage, draw_pixel, fill_rect, new_canvas
from .draw_lines import draw_line, draw_polyline
from .draw_shapes import draw_ellipse_outline, draw_polygon_outline, draw_rect_outline
from .draw_text import PillowTextMeasurer, draw_text, text_size
from .render import draw_instruction, render_instructions, save_png

__all__ = [
    "PillowTextMeasurer",
    "blend_coverage",
    "draw_ellipse_outline",
    "draw_instruction",
    "draw_line",
    "draw_pixel",
    "draw_polygon_outline",
    "draw_polyline",
    "draw_rect_outline",
    "draw_text",
    "fill_rect",
    "new_canvas",
    "render_instructions",
    "save_png",
    "text_size",
]
