from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


DrawKind = Literal["rect", "circle", "line", "text", "cell"]


class DrawOp(BaseModel):
    """One primitive in a frame, in canvas pixels.

    `cell` is a rect that also carries a glyph (board squares, pieces, digits).
    """

    kind: DrawKind
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    r: float = 0.0
    x2: float = 0.0
    y2: float = 0.0
    color: str = "#ffffff"
    text: str | None = None
    filled: bool = True


class Hud(BaseModel):
    score: int = 0
    lives: int | None = None
    line: str | None = None


class Banner(BaseModel):
    title: str
    subtitle: str | None = None
    hint: str | None = None


class Frame(BaseModel):
    game_type: str
    width: int
    height: int
    background: str = "#000000"
    ops: list[DrawOp] = Field(default_factory=list)
    hud: Hud = Field(default_factory=Hud)
    status: str | None = None
    banner: Banner | None = None


class FrameBuilder:
    """Accumulates draw ops for a single full redraw."""

    def __init__(self, *, game_type: str, width: int, height: int, background: str = "#000000") -> None:
        self._frame = Frame(game_type=game_type, width=width, height=height, background=background)

    def rect(self, x: float, y: float, w: float, h: float, color: str, *, filled: bool = True) -> FrameBuilder:
        self._frame.ops.append(DrawOp(kind="rect", x=x, y=y, w=w, h=h, color=color, filled=filled))
        return self

    def circle(self, x: float, y: float, r: float, color: str) -> FrameBuilder:
        self._frame.ops.append(DrawOp(kind="circle", x=x, y=y, r=r, color=color))
        return self

    def line(self, x: float, y: float, x2: float, y2: float, color: str) -> FrameBuilder:
        self._frame.ops.append(DrawOp(kind="line", x=x, y=y, x2=x2, y2=y2, color=color))
        return self

    def text(self, x: float, y: float, text: str, color: str = "#ffffff") -> FrameBuilder:
        self._frame.ops.append(DrawOp(kind="text", x=x, y=y, text=text, color=color))
        return self

    def cell(self, x: float, y: float, size: float, color: str, glyph: str | None = None) -> FrameBuilder:
        self._frame.ops.append(DrawOp(kind="cell", x=x, y=y, w=size, h=size, color=color, text=glyph))
        return self

    def build(self, *, score: int, lives: int | None = None, line: str | None = None) -> Frame:
        self._frame.hud = Hud(score=score, lives=lives, line=line)
        return self._frame


def apply_status_overlay(frame: Frame, *, status: str, score: int) -> Frame:
    """Attach the status and, for paused/terminal sessions, the overlay banner."""

    frame.status = status
    if status == "won":
        frame.banner = Banner(title="You Win!", subtitle=f"Final Score: {score}", hint="Restart to play again")
    elif status == "over":
        frame.banner = Banner(title="Game Over!", subtitle=f"Final Score: {score}", hint="Restart to play again")
    elif status == "paused":
        frame.banner = Banner(title="Paused", hint="Resume to continue")
    elif status == "idle":
        frame.banner = Banner(title="Ready", hint="Start to play")
    else:
        frame.banner = None
    return frame


def _put(grid: list[list[str]], col: int, row: int, ch: str) -> None:
    if 0 <= row < len(grid) and 0 <= col < len(grid[0]):
        grid[row][col] = ch


def frame_to_ascii(frame: Frame, *, cols: int = 60, rows: int = 24) -> str:
    """Rasterize a frame onto a character grid.

    Filled rects use `#`, outlined rects `+`, circles `@`, lines `.`; cells and
    text ops write their glyphs. Later ops paint over earlier ones.
    """

    sx = cols / frame.width
    sy = rows / frame.height
    grid = [[" " for _ in range(cols)] for _ in range(rows)]

    for op in frame.ops:
        if op.kind in ("rect", "cell"):
            c0, r0 = int(op.x * sx), int(op.y * sy)
            c1 = max(c0, int((op.x + op.w) * sx) - 1)
            r1 = max(r0, int((op.y + op.h) * sy) - 1)
            fill = "#" if op.filled else "+"
            if op.kind == "cell":
                fill = " " if not op.text else fill
            for rr in range(r0, r1 + 1):
                for cc in range(c0, c1 + 1):
                    if op.kind == "rect" and not op.filled and r0 < rr < r1 and c0 < cc < c1:
                        continue
                    _put(grid, cc, rr, fill if op.kind == "rect" else " ")
            if op.kind == "cell" and op.text:
                _put(grid, (c0 + c1) // 2, (r0 + r1) // 2, op.text[0])
        elif op.kind == "circle":
            _put(grid, int(op.x * sx), int(op.y * sy), "@")
        elif op.kind == "line":
            steps = max(abs(int(op.x2 * sx) - int(op.x * sx)), abs(int(op.y2 * sy) - int(op.y * sy)), 1)
            for i in range(steps + 1):
                t = i / steps
                _put(grid, int((op.x + (op.x2 - op.x) * t) * sx), int((op.y + (op.y2 - op.y) * t) * sy), ".")
        elif op.kind == "text" and op.text:
            c0, r0 = int(op.x * sx), int(op.y * sy)
            for i, ch in enumerate(op.text):
                _put(grid, c0 + i, r0, ch)

    lines = ["".join(row).rstrip() for row in grid]
    hud = f"score={frame.hud.score}"
    if frame.hud.lives is not None:
        hud += f" lives={frame.hud.lives}"
    if frame.hud.line:
        hud += f" | {frame.hud.line}"
    lines.append(hud)
    if frame.banner is not None:
        lines.append(f"*** {frame.banner.title} ***" + (f" {frame.banner.subtitle}" if frame.banner.subtitle else ""))
    return "\n".join(lines)
