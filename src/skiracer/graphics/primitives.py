"""Drawing primitives for the slope canvas.

Everything draws into an (height, width, 3) uint8 numpy buffer and
clips against its edges, so callers can pass coordinates that are
partly or fully off screen.
"""

from typing import Optional, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

Color = Tuple[int, int, int]
Point = Tuple[float, float]
Buffer = NDArray[np.uint8]

GLYPH_WIDTH = 3
GLYPH_HEIGHT = 5


def new_buffer(width: int, height: int, color: Color = (0, 0, 0)) -> Buffer:
    buffer = np.empty((height, width, 3), dtype=np.uint8)
    buffer[:, :] = color
    return buffer


def fill(buffer: Buffer, color: Color) -> None:
    """Fill entire buffer with color."""
    buffer[:, :] = color


def _clip_box(buffer: Buffer, x1: float, y1: float, x2: float, y2: float) -> Tuple[int, int, int, int]:
    h, w = buffer.shape[:2]
    return (
        max(0, min(int(x1), w)),
        max(0, min(int(y1), h)),
        max(0, min(int(np.ceil(x2)), w)),
        max(0, min(int(np.ceil(y2)), h)),
    )


def draw_rect(
    buffer: Buffer,
    x: int,
    y: int,
    width: int,
    height: int,
    color: Color,
    filled: bool = True,
    thickness: int = 1,
) -> None:
    """Draw an axis-aligned rectangle with its top-left corner at (x, y)."""
    x1, y1, x2, y2 = _clip_box(buffer, x, y, x + width, y + height)
    if x2 <= x1 or y2 <= y1:
        return

    if filled:
        buffer[y1:y2, x1:x2] = color
        return

    t = max(1, thickness)
    buffer[y1:min(y1 + t, y2), x1:x2] = color
    buffer[max(y2 - t, y1):y2, x1:x2] = color
    buffer[y1:y2, x1:min(x1 + t, x2)] = color
    buffer[y1:y2, max(x2 - t, x1):x2] = color


def shade_rect(
    buffer: Buffer,
    x: int,
    y: int,
    width: int,
    height: int,
    color: Color,
    alpha: float,
) -> None:
    """Blend a solid color over a rectangle (alpha 0 leaves it untouched)."""
    if alpha <= 0:
        return
    x1, y1, x2, y2 = _clip_box(buffer, x, y, x + width, y + height)
    if x2 <= x1 or y2 <= y1:
        return
    if alpha >= 1:
        buffer[y1:y2, x1:x2] = color
        return
    region = buffer[y1:y2, x1:x2].astype(np.float32)
    tint = np.array(color, dtype=np.float32)
    buffer[y1:y2, x1:x2] = (region * (1 - alpha) + tint * alpha).astype(np.uint8)


def draw_ellipse(
    buffer: Buffer,
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    color: Color,
    alpha: float = 1.0,
) -> None:
    """Filled ellipse, optionally blended (used for shadows and snowballs)."""
    if rx <= 0 or ry <= 0:
        return
    x1, y1, x2, y2 = _clip_box(buffer, cx - rx, cy - ry, cx + rx + 1, cy + ry + 1)
    if x2 <= x1 or y2 <= y1:
        return

    ys, xs = np.ogrid[y1:y2, x1:x2]
    mask = ((xs - cx) / rx) ** 2 + ((ys - cy) / ry) ** 2 <= 1.0
    region = buffer[y1:y2, x1:x2]
    if alpha >= 1.0:
        region[mask] = color
    else:
        tint = np.array(color, dtype=np.float32)
        region[mask] = (region[mask] * (1 - alpha) + tint * alpha).astype(np.uint8)


def draw_circle(buffer: Buffer, cx: float, cy: float, radius: float, color: Color, filled: bool = True) -> None:
    """Draw a circle; the outline variant is a one pixel ring."""
    if filled:
        draw_ellipse(buffer, cx, cy, radius, radius, color)
        return

    x1, y1, x2, y2 = _clip_box(buffer, cx - radius - 1, cy - radius - 1, cx + radius + 2, cy + radius + 2)
    if x2 <= x1 or y2 <= y1:
        return
    ys, xs = np.ogrid[y1:y2, x1:x2]
    dist = np.sqrt((xs - cx) ** 2 + (ys - cy) ** 2)
    buffer[y1:y2, x1:x2][np.abs(dist - radius) < 0.5] = color


def draw_line(
    buffer: Buffer,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    color: Color,
    thickness: int = 1,
) -> None:
    """Bresenham line; thickness stamps a square brush at every step."""
    h, w = buffer.shape[:2]
    x1, y1, x2, y2 = int(round(x1)), int(round(y1)), int(round(x2)), int(round(y2))

    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy
    lo = -(thickness // 2)
    hi = lo + max(1, thickness)

    x, y = x1, y1
    while True:
        bx1, by1 = max(0, x + lo), max(0, y + lo)
        bx2, by2 = min(w, x + hi), min(h, y + hi)
        if bx2 > bx1 and by2 > by1:
            buffer[by1:by2, bx1:bx2] = color

        if x == x2 and y == y2:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def fill_polygon(buffer: Buffer, points: Sequence[Point], color: Color) -> None:
    """Fill a convex polygon given its vertices in either winding order."""
    if len(points) < 3:
        return
    xs_ = [p[0] for p in points]
    ys_ = [p[1] for p in points]
    x1, y1, x2, y2 = _clip_box(buffer, min(xs_), min(ys_), max(xs_) + 1, max(ys_) + 1)
    if x2 <= x1 or y2 <= y1:
        return

    ys, xs = np.mgrid[y1:y2, x1:x2]
    px = xs + 0.5
    py = ys + 0.5
    inside_pos = np.ones(px.shape, dtype=bool)
    inside_neg = np.ones(px.shape, dtype=bool)
    for i, (ax, ay) in enumerate(points):
        bx, by = points[(i + 1) % len(points)]
        cross = (bx - ax) * (py - ay) - (by - ay) * (px - ax)
        inside_pos &= cross >= 0
        inside_neg &= cross <= 0
    buffer[y1:y2, x1:x2][inside_pos | inside_neg] = color


def rotated_rect(cx: float, cy: float, width: float, height: float, angle: float) -> list[Point]:
    """Corners of a width x height rectangle centred on (cx, cy), rotated by angle (radians)."""
    c, s = np.cos(angle), np.sin(angle)
    hw, hh = width / 2, height / 2
    corners = ((-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh))
    return [(cx + x * c - y * s, cy + x * s + y * c) for x, y in corners]


# 3x5 glyphs, rows top to bottom, '#' is a lit pixel
_GLYPHS = {
    "A": ".#.#.#####.##.#", "B": "##.#.###.#.###.", "C": ".###..#..#...##",
    "D": "##.#.##.##.###.", "E": "####..##.#..###", "F": "####..##.#..#..",
    "G": ".###..#.##.#.##", "H": "#.##.#####.##.#", "I": "###.#..#..#.###",
    "J": "..#..#..##.#.#.", "K": "#.##.###.#.##.#", "L": "#..#..#..#..###",
    "M": "#.#####.##.##.#", "N": "#.########.##.#", "O": ".#.#.##.##.#.#.",
    "P": "##.#.###.#..#..", "Q": ".#.#.##.####.##", "R": "##.#.###.#.##.#",
    "S": ".###...#...###.", "T": "###.#..#..#..#.", "U": "#.##.##.##.#.#.",
    "V": "#.##.##.#.#..#.", "W": "#.##.##.#####.#", "X": "#.##.#.#.#.##.#",
    "Y": "#.##.#.#..#..#.", "Z": "###..#.#.#..###",
    "0": ".#.#.##.##.#.#.", "1": ".#.##..#..#.###", "2": ".#.#.#..#.#.###",
    "3": "##...#.#...###.", "4": "#.##.####..#..#", "5": "####..##...###.",
    "6": ".###..##.#.#.#.", "7": "###..#.#..#..#.", "8": ".#.#.#.#.#.#.#.",
    "9": ".#.#.#.##..###.",
    "?": ".#.#.#..#....#.", "!": ".#..#..#.....#.", ".": ".............#.",
    ",": "..........#.#..", ":": "....#.....#....", "-": "......###......",
    "+": "....#.###.#....", "/": "..#..#.#.#..#..", "#": "#.#####.#####.#",
    "'": ".#..#..........", "_": "............###",
    "(": ".#.#..#..#...#.", ")": ".#...#..#..#.#.",
}

_MASKS = {
    char: np.array([c == "#" for c in pattern], dtype=bool).reshape(GLYPH_HEIGHT, GLYPH_WIDTH)
    for char, pattern in _GLYPHS.items()
}


def _glyph(char: str) -> Optional[NDArray[np.bool_]]:
    return _MASKS.get(char.upper())


def text_width(text: str, scale: int = 1) -> int:
    """Width in pixels of text drawn with draw_text at the given scale."""
    if not text:
        return 0
    return len(text) * (GLYPH_WIDTH + 1) * scale - scale


def draw_text(
    buffer: Buffer,
    text: str,
    x: int,
    y: int,
    color: Color,
    scale: int = 1,
) -> Tuple[int, int]:
    """Draw text with the built-in pixel font.

    Unknown characters render as blanks. Returns the (width, height) of
    the drawn text in pixels.
    """
    h, w = buffer.shape[:2]
    scale = max(1, int(scale))
    cursor = int(x)
    y = int(y)
    block = np.ones((scale, scale), dtype=bool)

    for char in text:
        glyph = _glyph(char) if char != " " else None
        if glyph is not None:
            mask = np.kron(glyph, block).astype(bool)
            gx1, gy1 = max(0, cursor), max(0, y)
            gx2 = min(w, cursor + mask.shape[1])
            gy2 = min(h, y + mask.shape[0])
            if gx2 > gx1 and gy2 > gy1:
                sub = mask[gy1 - y:gy2 - y, gx1 - cursor:gx2 - cursor]
                buffer[gy1:gy2, gx1:gx2][sub] = color
        cursor += (GLYPH_WIDTH + 1) * scale

    return text_width(text, scale), GLYPH_HEIGHT * scale


def draw_text_centered(buffer: Buffer, text: str, cx: int, y: int, color: Color, scale: int = 1) -> None:
    draw_text(buffer, text, cx - text_width(text, scale) // 2, y, color, scale)


def draw_image(
    buffer: Buffer,
    image: Buffer,
    x: int,
    y: int,
    alpha: float = 1.0,
) -> None:
    """Blit an RGB or RGBA image with its top-left corner at (x, y)."""
    buf_h, buf_w = buffer.shape[:2]
    img_h, img_w = image.shape[:2]
    x, y = int(x), int(y)

    src_x1 = max(0, -x)
    src_y1 = max(0, -y)
    src_x2 = min(img_w, buf_w - x)
    src_y2 = min(img_h, buf_h - y)
    if src_x2 <= src_x1 or src_y2 <= src_y1:
        return

    dst = buffer[y + src_y1:y + src_y2, x + src_x1:x + src_x2]
    src = image[src_y1:src_y2, src_x1:src_x2]

    if image.shape[2] == 3 and alpha >= 1.0:
        dst[:] = src
        return

    if image.shape[2] == 4:
        weight = (src[:, :, 3:4] / 255.0) * alpha
        rgb = src[:, :, :3]
    else:
        weight = alpha
        rgb = src
    dst[:] = (rgb * weight + dst * (1 - weight)).astype(np.uint8)
