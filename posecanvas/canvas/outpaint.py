from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from posecanvas.canvas.aspect import (
    MATCH_SOURCE,
    SupportedRatio,
    ensure_positive,
    parse_ratio,
    resolve_aspect_ratio,
    round_half_up,
)
from posecanvas.canvas.errors import InvalidRatio
from posecanvas.canvas.image_file import ImageFile, decode_image, encode_png, parse_color
from posecanvas.canvas.mask import MASK_BLACK, MASK_WHITE
from posecanvas.canvas.types import OutpaintResult, PaddedCanvasGeometry
from posecanvas.config import settings

_LOG = logging.getLogger(__name__)

DEFAULT_SEAM_INSET = 4


def clamp_seam_inset(width: int, height: int, seam_inset: int = DEFAULT_SEAM_INSET) -> int:
    """Seam overlap, never more than a quarter of either original side."""
    return max(0, min(int(seam_inset), width // 4, height // 4))


def compute_padded_geometry(
    width: int,
    height: int,
    ratio_value: float,
    *,
    seam_inset: int = DEFAULT_SEAM_INSET,
) -> PaddedCanvasGeometry:
    """Letterbox `width x height` into the smallest canvas with `ratio_value`.

    Only the shorter side (relative to the target ratio) is padded, so the
    original always fits without cropping.
    """
    ensure_positive(width, height)
    if not ratio_value > 0:
        raise InvalidRatio(f"ratio value must be positive: {ratio_value}")

    current = width / height
    if current > ratio_value:
        target_w = width
        target_h = round_half_up(width / ratio_value)
    else:
        target_h = height
        target_w = round_half_up(height * ratio_value)

    if target_w < width or target_h < height:
        raise ValueError(
            "padded canvas does not contain the original: "
            f"original={width}x{height}, padded={target_w}x{target_h}"
        )

    return PaddedCanvasGeometry(
        width=width,
        height=height,
        target_width=target_w,
        target_height=target_h,
        offset_x=round_half_up((target_w - width) / 2),
        offset_y=round_half_up((target_h - height) / 2),
        inset=clamp_seam_inset(width, height, seam_inset),
    )


def make_seam_mask(geometry: PaddedCanvasGeometry) -> np.ndarray:
    # White: padding plus seam overlap to generate. Black: original to keep.
    g = geometry
    mask = np.empty((g.target_height, g.target_width, 4), dtype=np.uint8)
    mask[:] = MASK_WHITE
    x1 = g.offset_x + g.inset
    y1 = g.offset_y + g.inset
    x2 = g.offset_x + g.width - g.inset
    y2 = g.offset_y + g.height - g.inset
    if x2 > x1 and y2 > y1:
        mask[y1:y2, x1:x2] = MASK_BLACK
    return mask


def compose_padded(
    source: Image.Image,
    geometry: PaddedCanvasGeometry,
    pad_color: str | tuple[int, ...] = "#000000",
) -> Image.Image:
    canvas = Image.new("RGBA", (geometry.target_width, geometry.target_height), parse_color(pad_color))
    canvas.alpha_composite(source.convert("RGBA"), dest=(geometry.offset_x, geometry.offset_y))
    return canvas


def compose_outpaint(
    original: ImageFile,
    target_ratio: SupportedRatio | str = MATCH_SOURCE,
    *,
    seam_inset: int | None = None,
    pad_color: str | tuple[int, ...] | None = None,
) -> OutpaintResult:
    """Pad `original` to `target_ratio` and build the matching border mask.

    `match-source` picks the supported ratio nearest to the original's own
    proportions. Decode errors propagate as `DecodeFailure`; nothing partial
    is returned.
    """
    selected = parse_ratio(target_ratio)
    source = decode_image(original)
    width, height = source.size

    resolved = resolve_aspect_ratio(width, height) if selected == MATCH_SOURCE else selected
    geometry = compute_padded_geometry(
        width,
        height,
        resolved.quotient,
        seam_inset=settings.outpaint_seam_inset_px if seam_inset is None else seam_inset,
    )
    padded = compose_padded(
        source,
        geometry,
        settings.outpaint_pad_color if pad_color is None else pad_color,
    )
    mask = make_seam_mask(geometry)

    _LOG.info(
        "outpaint %dx%d -> %dx%d ratio=%s offset=(%d,%d) inset=%d",
        width,
        height,
        geometry.target_width,
        geometry.target_height,
        resolved.value,
        geometry.offset_x,
        geometry.offset_y,
        geometry.inset,
    )
    return OutpaintResult(
        padded=encode_png(padded),
        mask=encode_png(mask),
        resolved_ratio=resolved,
        geometry=geometry,
    )
