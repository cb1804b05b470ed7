from __future__ import annotations

import logging
import threading

import numpy as np
from PIL import Image, ImageDraw

from posecanvas.canvas.aspect import ensure_positive
from posecanvas.canvas.history import HistoryStack
from posecanvas.canvas.image_file import ImageFile, encode_png, parse_color
from posecanvas.canvas.mask import extract_mask, painted_pixels
from posecanvas.canvas.surface import segment_box
from posecanvas.config import settings

_LOG = logging.getLogger(__name__)


def to_canvas_coordinates(
    x: float,
    y: float,
    canvas_size: tuple[int, int],
    display_size: tuple[float, float],
) -> tuple[float, float]:
    """Map a point on the displayed (CSS-scaled) overlay to overlay pixels."""
    dw, dh = display_size
    ensure_positive(dw, dh)
    return x * canvas_size[0] / dw, y * canvas_size[1] / dh


class MaskOverlay:
    """Translucent brush layer painted over a generated image.

    The overlay is sized to the image's natural pixel size and starts fully
    transparent. Each pointer position stamps a filled circle in the paint
    color; overlapping dabs blend source-over. `to_mask()` keys the result
    into a binary inpainting mask.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        brush_size: int | None = None,
        paint_color: tuple[int, int, int, int] | str | None = None,
    ) -> None:
        self.brush_size = brush_size or settings.mask_brush_size
        self.paint_color = parse_color(paint_color or settings.mask_paint_color)
        self._lock = threading.Lock()
        self._history = HistoryStack()
        self._drawing = False
        self._layer: Image.Image
        self.reset(width, height)

    @property
    def size(self) -> tuple[int, int]:
        return self._layer.size

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def is_empty(self) -> bool:
        return not bool(self._layer.getchannel("A").getbbox())

    def reset(self, width: int, height: int) -> None:
        ensure_positive(width, height)
        layer = Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))
        with self._lock:
            self._layer = layer
            self._history.seed(layer)
            self._drawing = False
        _LOG.debug("mask overlay reset to %dx%d", width, height)

    def pointer_down(self, x: float, y: float) -> None:
        self._drawing = True
        self._dab(x, y)

    def pointer_move(self, x: float, y: float) -> None:
        if self._drawing:
            self._dab(x, y)

    def pointer_up(self) -> None:
        if not self._drawing:
            return
        with self._lock:
            self._drawing = False
            self._history.push(self._layer)

    def pointer_leave(self) -> None:
        self.pointer_up()

    def undo(self) -> None:
        with self._lock:
            restored = self._history.undo()
            if restored is not None:
                self._layer = restored

    def _dab(self, x: float, y: float) -> None:
        r = self.brush_size / 2
        layer = self._layer
        box = segment_box((x, y), (x, y), r, layer.width, layer.height)
        if box is None:
            return
        x0, y0 = box[0], box[1]
        dab = Image.new("RGBA", (box[2] - x0, box[3] - y0), (0, 0, 0, 0))
        ImageDraw.Draw(dab).ellipse((x - x0 - r, y - y0 - r, x - x0 + r, y - y0 + r), fill=self.paint_color)
        region = layer.crop(box)
        region.alpha_composite(dab)
        with self._lock:
            if self._layer is not layer:
                return
            layer.paste(region, box[:2])

    def to_array(self) -> np.ndarray:
        with self._lock:
            return np.array(self._layer, dtype=np.uint8)

    def to_image_file(self) -> ImageFile:
        return encode_png(self.to_array())

    def painted_count(self, *, red_threshold: int | None = None) -> int:
        threshold = settings.mask_red_threshold if red_threshold is None else red_threshold
        return int(painted_pixels(self.to_array(), red_threshold=threshold).sum())

    def to_mask(self, *, red_threshold: int | None = None) -> ImageFile:
        threshold = settings.mask_red_threshold if red_threshold is None else red_threshold
        return encode_png(extract_mask(self.to_array(), red_threshold=threshold))
