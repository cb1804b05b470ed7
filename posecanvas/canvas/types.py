from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Literal

from posecanvas.canvas.aspect import SupportedRatio
from posecanvas.canvas.image_file import ImageFile

CanvasTool = Literal["pen", "eraser"]


@dataclass(frozen=True, slots=True)
class PenColor:
    name: str
    hex: str


PEN_COLORS: tuple[PenColor, ...] = (
    PenColor(name="Vivid Green", hex="#00FF00"),
    PenColor(name="Magenta", hex="#FF00FF"),
    PenColor(name="Cyan", hex="#00FFFF"),
    PenColor(name="Yellow", hex="#FFFF00"),
)


@dataclass(frozen=True, slots=True)
class Brush:
    tool: CanvasTool = "pen"
    color: str = PEN_COLORS[0].hex
    size: int = 5


class SurfaceState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DRAWING = "drawing"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class PaddedCanvasGeometry:
    width: int
    height: int
    target_width: int
    target_height: int
    offset_x: int
    offset_y: int
    inset: int


@dataclass(frozen=True, slots=True)
class OutpaintResult:
    padded: ImageFile
    mask: ImageFile
    resolved_ratio: SupportedRatio
    geometry: PaddedCanvasGeometry
