from __future__ import annotations

import numpy as np

from posecanvas.canvas.image_file import ImageFile, decode_rgba, encode_png

# Tuned for the translucent pink mask brush: any stroke of it keeps red well
# above this even at 0.7 alpha.
RED_THRESHOLD = 100
MIN_ALPHA = 1

MASK_WHITE = (255, 255, 255, 255)
MASK_BLACK = (0, 0, 0, 255)


def _check_rgba(overlay: np.ndarray) -> None:
    if overlay.ndim != 3 or overlay.shape[2] != 4:
        raise ValueError(f"overlay must be HxWx4 RGBA, got shape={overlay.shape}")
    if overlay.dtype != np.uint8:
        raise ValueError(f"overlay must be uint8, got dtype={overlay.dtype}")


def painted_pixels(
    overlay: np.ndarray,
    *,
    red_threshold: int = RED_THRESHOLD,
    min_alpha: int = MIN_ALPHA,
    key_color: tuple[int, int, int] | None = None,
    tolerance: int = 0,
) -> np.ndarray:
    """Boolean HxW array marking pixels that carry the paint signature.

    By default a pixel is painted when its red channel exceeds
    `red_threshold` and its alpha is at least `min_alpha`. Red is read
    straight (unpremultiplied), so a faint anti-aliased edge of the pink
    brush, e.g. (255, 143, 171, 10), counts as painted. Flattening the
    overlay onto black first would drop such edges (10/255 of 255 red is
    under the threshold); raise `min_alpha` to get a similar cut-off.
    Passing `key_color` switches to keying on that RGB color instead:
    every channel must be within `tolerance` of it.
    """
    _check_rgba(overlay)
    alpha_ok = overlay[:, :, 3] >= min_alpha
    if key_color is None:
        return (overlay[:, :, 0] > red_threshold) & alpha_ok

    key = np.asarray(key_color, dtype=np.int16).reshape(1, 1, 3)
    diff = np.abs(overlay[:, :, :3].astype(np.int16) - key).max(axis=2)
    return (diff <= tolerance) & alpha_ok


def extract_mask(
    overlay: np.ndarray,
    *,
    red_threshold: int = RED_THRESHOLD,
    min_alpha: int = MIN_ALPHA,
    key_color: tuple[int, int, int] | None = None,
    tolerance: int = 0,
) -> np.ndarray:
    """Turn a painted overlay into a strict black/white RGBA mask.

    Painted pixels become white (regenerate), everything else black
    (preserve). Alpha is forced to 255. A blank overlay gives an all-black
    mask, which is a valid result.
    """
    painted = painted_pixels(
        overlay,
        red_threshold=red_threshold,
        min_alpha=min_alpha,
        key_color=key_color,
        tolerance=tolerance,
    )
    h, w = painted.shape
    mask = np.empty((h, w, 4), dtype=np.uint8)
    mask[:] = MASK_BLACK
    mask[painted] = MASK_WHITE
    return mask


def extract_mask_image(
    overlay: ImageFile,
    *,
    red_threshold: int = RED_THRESHOLD,
    min_alpha: int = MIN_ALPHA,
    key_color: tuple[int, int, int] | None = None,
    tolerance: int = 0,
) -> ImageFile:
    mask = extract_mask(
        decode_rgba(overlay),
        red_threshold=red_threshold,
        min_alpha=min_alpha,
        key_color=key_color,
        tolerance=tolerance,
    )
    return encode_png(mask)


def is_binary_mask(mask: np.ndarray) -> bool:
    _check_rgba(mask)
    flat = mask.reshape(-1, 4)
    white = (flat == MASK_WHITE).all(axis=1)
    black = (flat == MASK_BLACK).all(axis=1)
    return bool((white | black).all())
