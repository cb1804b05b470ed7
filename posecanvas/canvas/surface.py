from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np
from PIL import Image, ImageChops, ImageDraw

from posecanvas.canvas.aspect import ensure_positive
from posecanvas.canvas.history import HistoryStack
from posecanvas.canvas.image_file import ImageFile, decode_image, encode_png, parse_color
from posecanvas.canvas.types import Brush, SurfaceState
from posecanvas.config import settings

_LOG = logging.getLogger(__name__)

ChangeListener = Callable[[ImageFile], None]
Point = tuple[float, float]
Box = tuple[int, int, int, int]


class CanvasControls(Protocol):
    def undo(self) -> None:
        ...

    def clear(self) -> None:
        ...


class _SurfaceControls:
    """Toolbar-facing handle: undo and clear, nothing else."""

    __slots__ = ("_undo", "_clear")

    def __init__(self, surface: DrawingSurface) -> None:
        self._undo = surface.undo
        self._clear = surface.clear

    def undo(self) -> None:
        self._undo()

    def clear(self) -> None:
        self._clear()


@dataclass(slots=True)
class Placement:
    x: int
    y: int
    width: int
    height: int


def contain_placement(image_w: int, image_h: int, target_w: int, target_h: int) -> Placement:
    """Uniform scale so the image fits entirely inside the target, centered."""
    s = min(target_w / image_w, target_h / image_h)
    w1 = max(1, int(round(image_w * s)))
    h1 = max(1, int(round(image_h * s)))
    return Placement(x=(target_w - w1) // 2, y=(target_h - h1) // 2, width=w1, height=h1)


def render_base(
    width: int,
    height: int,
    background: Image.Image | None,
    fill: str | tuple[int, ...],
) -> Image.Image:
    base = Image.new("RGBA", (width, height), parse_color(fill))
    if background is None:
        return base
    placement = contain_placement(background.width, background.height, width, height)
    resized = background.resize((placement.width, placement.height), Image.Resampling.LANCZOS)
    base.alpha_composite(resized, dest=(placement.x, placement.y))
    return base


def segment_box(start: Point, end: Point, radius: float, width: int, height: int) -> Box | None:
    pad = int(math.ceil(radius)) + 1
    x1 = max(0, int(math.floor(min(start[0], end[0]))) - pad)
    y1 = max(0, int(math.floor(min(start[1], end[1]))) - pad)
    x2 = min(width, int(math.ceil(max(start[0], end[0]))) + pad + 1)
    y2 = min(height, int(math.ceil(max(start[1], end[1]))) + pad + 1)
    if x2 <= x1 or y2 <= y1:
        return None
    return x1, y1, x2, y2


def stroke_mask(start: Point, end: Point, size: int, box: Box) -> Image.Image:
    """Coverage of one round-capped segment, in the coordinates of `box`."""
    x0, y0 = box[0], box[1]
    mask = Image.new("L", (box[2] - box[0], box[3] - box[1]), 0)
    draw = ImageDraw.Draw(mask)
    a = (start[0] - x0, start[1] - y0)
    b = (end[0] - x0, end[1] - y0)
    r = size / 2
    if a != b:
        draw.line([a, b], fill=255, width=max(1, int(size)))
    for cx, cy in (a, b):
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=255)
    return mask


class DrawingSurface:
    """Freehand drawing over an optional background image.

    The surface keeps two layers: a base layer (fill color plus the
    background image, "contain" scaled) and an ink layer holding the user's
    strokes. The pen composites source-over onto the ink layer; the eraser
    removes ink alpha (destination-out), which reveals the base beneath.

    History snapshots the ink layer. Mounting, resizing, changing the
    background and `clear()` all repaint the base and reseed history with a
    stroke-free snapshot, so undo never goes past the last reset. A reset
    arriving mid-stroke discards that stroke.
    """

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        *,
        brush: Brush | None = None,
        background_color: str | None = None,
        on_change: ChangeListener | None = None,
    ) -> None:
        self.brush = brush or Brush(color=settings.default_pen_color, size=settings.default_pen_size)
        self._background_color = background_color or settings.canvas_background_color
        self._on_change = on_change

        self._lock = threading.Lock()
        self._state = SurfaceState.UNINITIALIZED
        self._size: tuple[int, int] | None = None
        self._background: Image.Image | None = None
        self._base: Image.Image | None = None
        self._ink: Image.Image | None = None
        self._history = HistoryStack()
        self._last_point: Point | None = None

        if width is not None and height is not None:
            self.resize(width, height)

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def size(self) -> tuple[int, int] | None:
        return self._size

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    def controls(self) -> CanvasControls:
        return _SurfaceControls(self)

    # -- reset path -------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        ensure_positive(width, height)
        size = (int(width), int(height))
        if self._state is not SurfaceState.UNINITIALIZED and size == self._size:
            return
        self._reset(size, self._background)

    def set_background(self, image: ImageFile | None) -> None:
        """Swap the background image; decode errors leave the surface as it was."""
        background = decode_image(image) if image is not None else None
        if self._size is None:
            self._background = background
            return
        self._reset(self._size, background)

    def clear(self) -> None:
        if self._size is None:
            return
        self._reset(self._size, self._background)

    def _reset(self, size: tuple[int, int], background: Image.Image | None) -> None:
        width, height = size
        base = render_base(width, height, background, self._background_color)
        ink = Image.new("RGBA", size, (0, 0, 0, 0))

        with self._lock:
            if self._state is SurfaceState.DRAWING:
                _LOG.debug("reset during stroke; discarding in-flight stroke")
            self._state = SurfaceState.RESET
            self._size = size
            self._background = background
            self._base = base
            self._ink = ink
            self._history.seed(ink)
            self._last_point = None
            self._state = SurfaceState.READY

        _LOG.debug("surface reset to %dx%d background=%s", width, height, background is not None)
        self._emit()

    # -- strokes ----------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        if self._state is SurfaceState.UNINITIALIZED:
            return
        if self._state is SurfaceState.DRAWING:
            self.pointer_up()
        self._state = SurfaceState.DRAWING
        self._last_point = (x, y)

    def pointer_move(self, x: float, y: float) -> None:
        start = self._last_point
        if self._state is not SurfaceState.DRAWING or start is None:
            return
        self._draw_segment(start, (x, y))
        self._last_point = (x, y)

    def pointer_up(self) -> None:
        if self._state is not SurfaceState.DRAWING:
            return
        with self._lock:
            self._history.push(self._ink)
            self._last_point = None
            self._state = SurfaceState.READY
        self._emit()

    def pointer_leave(self) -> None:
        self.pointer_up()

    def stroke(self, points: list[Point]) -> None:
        """Draw one complete stroke through `points`."""
        if not points:
            return
        self.pointer_down(*points[0])
        for point in points[1:]:
            self.pointer_move(*point)
        self.pointer_up()

    def _draw_segment(self, start: Point, end: Point) -> None:
        ink = self._ink
        if ink is None:
            return
        brush = self.brush
        box = segment_box(start, end, brush.size / 2, ink.width, ink.height)
        if box is None:
            return
        coverage = stroke_mask(start, end, brush.size, box)
        region = ink.crop(box)

        if brush.tool == "eraser":
            alpha = ImageChops.subtract(region.getchannel("A"), coverage)
            region.putalpha(alpha)
        else:
            color = parse_color(brush.color)
            paint = Image.new("RGBA", region.size, color)
            if color[3] < 255:
                coverage = coverage.point(lambda v: v * color[3] // 255)
            paint.putalpha(coverage)
            region.alpha_composite(paint)

        with self._lock:
            # A reset or undo swapped the layer while this segment rendered.
            if self._ink is not ink:
                return
            ink.paste(region, box[:2])

    # -- history ----------------------------------------------------------

    def undo(self) -> None:
        with self._lock:
            restored = self._history.undo()
            if restored is None:
                return
            self._ink = restored
            self._last_point = None
            self._state = SurfaceState.READY
        _LOG.debug("undo; history depth now %d", len(self._history))
        self._emit()

    # -- output -----------------------------------------------------------

    def composite(self) -> Image.Image:
        if self._base is None or self._ink is None:
            raise RuntimeError("surface has not been sized yet")
        with self._lock:
            return Image.alpha_composite(self._base, self._ink)

    def to_array(self) -> np.ndarray:
        return np.array(self.composite(), dtype=np.uint8)

    def snapshot(self) -> ImageFile:
        return encode_png(self.composite())

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot())
