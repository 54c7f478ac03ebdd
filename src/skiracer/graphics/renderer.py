"""Slope renderer: turns a RaceSnapshot into an RGB frame."""

import math
import random
from typing import Callable, Dict, Optional

import numpy as np
from numpy.typing import NDArray

from skiracer.core.state import RacePhase
from skiracer.graphics.primitives import (
    Buffer, new_buffer, fill, draw_rect, shade_rect, draw_ellipse, draw_circle,
    draw_line, fill_polygon, rotated_rect, draw_text, draw_text_centered, draw_image, text_width,
)
from skiracer.leaderboard.models import LeaderboardEntry, ScoreKind
from skiracer.simulation.constants import (
    CANVAS_WIDTH, CANVAS_HEIGHT, BODY_WIDTH, BODY_HEIGHT, SKI_WIDTH, SKI_HEIGHT, SKI_SPACING,
    FINISH_GAP_X, SKIER_HIT_OFFSET_Y, SKIER_HIT_RADIUS, NAME_MAX_LENGTH,
)
from skiracer.simulation.obstacles import OBSTACLE_SPECS, ObstacleType
from skiracer.simulation.snapshot import ObstacleView, RaceSnapshot

SNOW = (240, 240, 240)
SNOW_DOT = (200, 200, 200)
TRAIL = (208, 219, 229)
INK = (51, 51, 51)
MUTED = (102, 102, 102)
WHITE = (255, 255, 255)
ACCENT = (231, 76, 60)
SKI = (44, 62, 80)
JACKET = (231, 76, 60)
PINE = (34, 139, 34)
BARK = (110, 72, 40)
STONE = (128, 128, 136)
GOLD = (241, 196, 15)

BACKGROUND_DOTS = 75
AIR_LIFT = 14           # peak height of a jump in pixels
BODY_TILT = 0.1         # fraction of the ski angle the body leans
FINISH_HALF_GAP = 90
LEADERBOARD_ROWS = 10


def format_race_time(ms: float) -> str:
    seconds = max(0.0, ms) / 1000.0
    minutes, seconds = divmod(seconds, 60)
    return f"{int(minutes)}:{seconds:05.2f}"


def format_score(kind: Optional[ScoreKind], value: Optional[float]) -> str:
    if kind is None or value is None:
        return "-"
    if kind == ScoreKind.TIME:
        return f"{value:.2f} S"
    return f"{value:.1f} M"


def make_background_tile(
    width: int = CANVAS_WIDTH,
    height: int = CANVAS_HEIGHT,
    dots: int = BACKGROUND_DOTS,
    seed: Optional[int] = None,
) -> Buffer:
    """One snow tile with scattered darker specks; seeded so both tiles match."""
    rng = random.Random(seed)
    tile = new_buffer(width, height, SNOW)
    for _ in range(dots):
        x = rng.random() * width
        y = rng.random() * height
        radius = 1.5 + rng.random() * 1.5
        draw_circle(tile, x, y, radius, SNOW_DOT)
    return tile


class SlopeRenderer:
    """Draws the world, the skier and the per-phase overlays."""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT, seed: Optional[int] = None) -> None:
        self.width = width
        self.height = height
        self.buffer = new_buffer(width, height, SNOW)
        self.tile = make_background_tile(width, height, seed=seed)
        self.show_hitboxes = False

        self._obstacle_painters: Dict[ObstacleType, Callable[[Buffer, ObstacleView], None]] = {
            ObstacleType.TREE: self._draw_tree,
            ObstacleType.SNOWMAN: self._draw_snowman,
            ObstacleType.ROCK: self._draw_rock,
            ObstacleType.ARROW_LEFT: self._draw_arrow,
            ObstacleType.ARROW_RIGHT: self._draw_arrow,
            ObstacleType.HEAP: self._draw_heap,
            ObstacleType.WINE_BARREL: self._draw_barrel,
        }

        self._overlays: Dict[RacePhase, Callable[[Buffer, RaceSnapshot], None]] = {
            RacePhase.LOADING: self._draw_loading,
            RacePhase.MENU: self._draw_menu,
            RacePhase.START_ANIMATION: self._draw_countdown,
            RacePhase.RACING: self._draw_hud,
            RacePhase.FINISHED: self._draw_finished,
            RacePhase.CRASHED: self._draw_crashed,
            RacePhase.SCOREBOARD: self._draw_scoreboard,
        }

    def render(self, snap: RaceSnapshot) -> NDArray[np.uint8]:
        """Draw one frame and return the (height, width, 3) buffer."""
        buf = self.buffer
        self._draw_background(buf, snap)

        if snap.phase != RacePhase.SCOREBOARD:
            self._draw_trails(buf, snap)
            for obstacle in snap.obstacles:
                self._obstacle_painters[obstacle.type](buf, obstacle)
            if snap.finish_y is not None:
                self._draw_finish_line(buf, snap.finish_y)
            if snap.phase != RacePhase.LOADING:
                self._draw_skier(buf, snap)
            if self.show_hitboxes or snap.debug_enabled:
                self._draw_hitboxes(buf, snap)

        self._overlays[snap.phase](buf, snap)

        if snap.transition_alpha > 0:
            shade_rect(buf, 0, 0, self.width, self.height, WHITE, snap.transition_alpha)
        return buf

    # World

    def _draw_background(self, buf: Buffer, snap: RaceSnapshot) -> None:
        fill(buf, SNOW)
        draw_image(buf, self.tile, 0, int(snap.tile1_y))
        draw_image(buf, self.tile, 0, int(snap.tile2_y))

    def _draw_trails(self, buf: Buffer, snap: RaceSnapshot) -> None:
        trail = snap.trail
        for prev, point in zip(trail, trail[1:]):
            draw_line(buf, prev[0], prev[1], point[0], point[1], TRAIL, thickness=3)
            draw_line(buf, prev[2], prev[3], point[2], point[3], TRAIL, thickness=3)

    def _draw_finish_line(self, buf: Buffer, y: float) -> None:
        left = FINISH_GAP_X - FINISH_HALF_GAP
        right = FINISH_GAP_X + FINISH_HALF_GAP
        # Checkered strip across the gap
        square = 10
        for i, x in enumerate(range(int(left), int(right), square)):
            top = ACCENT if i % 2 == 0 else WHITE
            bottom = WHITE if i % 2 == 0 else ACCENT
            draw_rect(buf, x, int(y) - square, square, square, top)
            draw_rect(buf, x, int(y), square, square, bottom)
        for pole_x in (left, right):
            draw_rect(buf, int(pole_x) - 3, int(y) - 60, 6, 70, INK)
            fill_polygon(buf, [(pole_x, y - 60), (pole_x + (18 if pole_x == left else -18), y - 52), (pole_x, y - 44)], ACCENT)

    def _draw_skier(self, buf: Buffer, snap: RaceSnapshot) -> None:
        s = snap.skier
        lift = math.sin(math.pi * s.jump_progress) * AIR_LIFT if s.airborne else 0.0
        ski_y = s.y + BODY_HEIGHT / 2

        if s.airborne:
            draw_ellipse(buf, s.x, ski_y + SKI_HEIGHT / 2, BODY_WIDTH * 0.8, 6, (180, 186, 196), alpha=0.6)

        rotation = -s.angle
        for offset in (-SKI_SPACING / 2, SKI_SPACING / 2):
            ski = rotated_rect(s.x + offset, ski_y - lift, SKI_WIDTH, SKI_HEIGHT, rotation)
            fill_polygon(buf, ski, SKI)

        tilt = -s.angle * BODY_TILT
        body = rotated_rect(s.x, s.y - lift, BODY_WIDTH, BODY_HEIGHT, tilt)
        fill_polygon(buf, body, JACKET if snap.phase != RacePhase.CRASHED else (190, 60, 50))
        draw_circle(buf, s.x, s.y - lift - BODY_HEIGHT / 2 - 7, 8, (245, 205, 170))

    # Obstacles

    def _draw_tree(self, buf: Buffer, o: ObstacleView) -> None:
        spec = OBSTACLE_SPECS[o.type]
        half_w, half_h = spec.width / 2, spec.height / 2
        draw_rect(buf, int(o.x - 5), int(o.y + half_h - 22), 10, 22, BARK)
        fill_polygon(buf, [(o.x, o.y - half_h), (o.x - half_w, o.y + half_h - 16), (o.x + half_w, o.y + half_h - 16)], PINE)

    def _draw_snowman(self, buf: Buffer, o: ObstacleView) -> None:
        spec = OBSTACLE_SPECS[o.type]
        base_y = o.y + spec.height / 2
        for radius, cy in ((16, base_y - 16), (11, base_y - 40), (8, base_y - 55)):
            draw_circle(buf, o.x, cy, radius + 1, (170, 180, 190))
            draw_circle(buf, o.x, cy, radius, WHITE)
        fill_polygon(buf, [(o.x, base_y - 56), (o.x + 9, base_y - 54), (o.x, base_y - 52)], (230, 126, 34))

    def _draw_rock(self, buf: Buffer, o: ObstacleView) -> None:
        spec = OBSTACLE_SPECS[o.type]
        draw_ellipse(buf, o.x, o.y + 2, spec.width / 2, spec.height / 2 - 2, STONE)
        draw_ellipse(buf, o.x - 6, o.y - 4, spec.width / 5, spec.height / 6, (160, 160, 168))

    def _draw_arrow(self, buf: Buffer, o: ObstacleView) -> None:
        spec = OBSTACLE_SPECS[o.type]
        top = o.y - spec.height / 2
        draw_rect(buf, int(o.x - 2), int(top + 20), 4, spec.height - 20, BARK)
        draw_rect(buf, int(o.x - 18), int(top), 36, 22, GOLD)
        direction = -1 if o.type == ObstacleType.ARROW_LEFT else 1
        tip = o.x + 14 * direction
        back = o.x - 10 * direction
        fill_polygon(buf, [(tip, top + 11), (o.x, top + 3), (o.x, top + 19)], INK)
        draw_rect(buf, int(min(back, o.x)), int(top + 9), 10, 4, INK)

    def _draw_heap(self, buf: Buffer, o: ObstacleView) -> None:
        spec = OBSTACLE_SPECS[o.type]
        draw_ellipse(buf, o.x, o.y + 4, spec.width / 2, spec.height / 2 - 4, (214, 222, 232))
        draw_ellipse(buf, o.x - 8, o.y - 2, spec.width / 3, spec.height / 4, WHITE)

    def _draw_barrel(self, buf: Buffer, o: ObstacleView) -> None:
        spec = OBSTACLE_SPECS[o.type]
        x, y = int(o.x - spec.width / 2), int(o.y - spec.height / 2)
        draw_rect(buf, x, y, spec.width, spec.height, (128, 0, 32))
        for band in (8, spec.height - 12):
            draw_rect(buf, x, y + band, spec.width, 4, INK)

    def _draw_hitboxes(self, buf: Buffer, snap: RaceSnapshot) -> None:
        for o in snap.obstacles:
            spec = OBSTACLE_SPECS[o.type]
            color = (52, 152, 219) if spec.jumpable else ACCENT
            draw_circle(buf, o.x, o.y + spec.hit_offset_y, spec.hit_radius, color, filled=False)
        s = snap.skier
        draw_circle(buf, s.x, s.y + SKIER_HIT_OFFSET_Y, SKIER_HIT_RADIUS, (46, 204, 113), filled=False)

    # Overlays

    def _draw_panel(self, buf: Buffer, x: int, y: int, w: int, h: int) -> None:
        shade_rect(buf, x, y, w, h, (20, 30, 45), 0.75)
        draw_rect(buf, x, y, w, h, WHITE, filled=False, thickness=2)

    def _draw_hud(self, buf: Buffer, snap: RaceSnapshot) -> None:
        draw_text(buf, f"SPEED {snap.skier.speed:.1f}", 20, 20, INK, scale=3)
        draw_text(buf, f"TIME {format_race_time(snap.race_time_ms)}", 20, 46, INK, scale=3)
        draw_text(buf, f"DIST {snap.distance_m:.0f} M", 20, 72, INK, scale=3)
        remaining = f"{snap.remaining_m:.0f} M TO GO"
        draw_text(buf, remaining, self.width - 20 - text_width(remaining, 3), 20, INK, scale=3)
        angle = f"ANGLE {math.degrees(snap.skier.angle):+.0f}"
        draw_text(buf, angle, self.width - 20 - text_width(angle, 3), 46, INK, scale=3)
        draw_text(buf, "ARROWS TURN/SPEED  SPACE JUMP", 20, self.height - 28, MUTED, scale=2)
        if snap.debug_enabled:
            self._draw_debug(buf, snap)

    def _draw_debug(self, buf: Buffer, snap: RaceSnapshot) -> None:
        d = snap.debug
        lines = [
            f"OBJ {d.obstacles} SPAWNED {d.spawned}",
            f"TRAIL {d.trail_points}",
            "COLLISION ON" if d.collision_enabled else "COLLISION OFF",
        ]
        for i, line in enumerate(lines):
            draw_text(buf, line, 20, 110 + i * 14, MUTED, scale=2)

    def _draw_loading(self, buf: Buffer, snap: RaceSnapshot) -> None:
        cx = self.width // 2
        draw_text_centered(buf, "LOADING", cx, self.height // 2 - 40, INK, scale=4)
        bar_w = 300
        x = cx - bar_w // 2
        y = self.height // 2
        draw_rect(buf, x, y, bar_w, 16, INK, filled=False, thickness=2)
        draw_rect(buf, x + 3, y + 3, int((bar_w - 6) * snap.loading_progress), 10, ACCENT)

    def _draw_menu(self, buf: Buffer, snap: RaceSnapshot) -> None:
        cx = self.width // 2
        draw_text_centered(buf, "SKI RACER", cx, 120, ACCENT, scale=8)
        draw_text_centered(buf, "PRESS SPACE TO START", cx, 200, INK, scale=3)
        draw_text_centered(buf, f"{snap.remaining_m:.0f} M TO THE FINISH", cx, 236, MUTED, scale=2)
        self._draw_board(buf, snap.leaderboard[:5], 300, highlight=None)
        if snap.leaderboard_loading:
            draw_text_centered(buf, "LOADING SCORES...", cx, self.height - 60, MUTED, scale=2)

    def _draw_countdown(self, buf: Buffer, snap: RaceSnapshot) -> None:
        if snap.countdown is None:
            return
        scale = max(1, int(round(16 * snap.countdown_scale)))
        color = PINE if snap.countdown == "GO" else ACCENT
        draw_text_centered(buf, snap.countdown, self.width // 2, self.height // 2 - scale * 5 // 2, color, scale=scale)

    def _draw_finished(self, buf: Buffer, snap: RaceSnapshot) -> None:
        cx = self.width // 2
        draw_text_centered(buf, "FINISH!", cx, self.height // 2 - 60, PINE, scale=8)
        draw_text_centered(buf, format_race_time(snap.race_time_ms), cx, self.height // 2 + 10, INK, scale=4)

    def _draw_crashed(self, buf: Buffer, snap: RaceSnapshot) -> None:
        cx = self.width // 2
        draw_text_centered(buf, "WIPEOUT!", cx, self.height // 2 - 60, ACCENT, scale=8)
        draw_text_centered(buf, f"{snap.distance_m:.1f} M", cx, self.height // 2 + 10, INK, scale=4)

    def _draw_scoreboard(self, buf: Buffer, snap: RaceSnapshot) -> None:
        cx = self.width // 2
        self._draw_panel(buf, 40, 40, self.width - 80, self.height - 80)
        title = "YOUR TIME" if snap.score_kind == ScoreKind.TIME else "YOUR DISTANCE"
        draw_text_centered(buf, title, cx, 70, WHITE, scale=3)
        draw_text_centered(buf, format_score(snap.score_kind, snap.score_value), cx, 100, GOLD, scale=5)

        if not snap.name_submitted:
            name = snap.player_name + ("_" if len(snap.player_name) < NAME_MAX_LENGTH else "")
            draw_text_centered(buf, "ENTER YOUR NAME", cx, 160, WHITE, scale=2)
            draw_text_centered(buf, name, cx, 184, WHITE, scale=4)
            draw_text_centered(buf, "ENTER TO SUBMIT", cx, 216, MUTED, scale=2)
        elif snap.rank is not None:
            draw_text_centered(buf, f"RANK #{snap.rank}", cx, 170, GOLD, scale=4)
            draw_text_centered(buf, "SPACE TO CONTINUE", cx, 210, MUTED, scale=2)
        else:
            draw_text_centered(buf, "SPACE TO CONTINUE", cx, 190, MUTED, scale=2)

        self._draw_board(buf, snap.leaderboard[:LEADERBOARD_ROWS], 260, highlight=snap.rank)
        if snap.leaderboard_loading:
            draw_text_centered(buf, "LOADING...", cx, self.height - 80, MUTED, scale=2)

    def _draw_board(self, buf: Buffer, entries: tuple[LeaderboardEntry, ...], top: int, highlight: Optional[int]) -> None:
        if not entries:
            draw_text_centered(buf, "NO SCORES YET", self.width // 2, top + 10, MUTED, scale=2)
            return
        for index, entry in enumerate(entries):
            rank = index + 1
            y = top + index * 26
            color = GOLD if rank == highlight else (WHITE if self._dark_backdrop(buf, y) else INK)
            draw_text(buf, f"{rank:>2}. {entry.name}", 80, y, color, scale=3)
            score = format_score(entry.kind, entry.value)
            draw_text(buf, score, self.width - 80 - text_width(score, 3), y, color, scale=3)

    @staticmethod
    def _dark_backdrop(buf: Buffer, y: int) -> bool:
        row = buf[max(0, min(y, buf.shape[0] - 1)), 60]
        return int(row.sum()) < 384
