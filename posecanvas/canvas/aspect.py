from __future__ import annotations

import enum
import math

from posecanvas.canvas.errors import InvalidDimensions, InvalidRatio

MATCH_SOURCE = "match-source"


class SupportedRatio(str, enum.Enum):
    """Ratios accepted by the generation service, in tie-break order."""

    SQUARE = "1:1"
    LANDSCAPE = "4:3"
    PORTRAIT = "3:4"
    WIDESCREEN = "16:9"
    VERTICAL = "9:16"

    @property
    def quotient(self) -> float:
        w, h = self.value.split(":")
        return int(w) / int(h)


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; pixel math expects .5 to go up.
    return int(math.floor(value + 0.5))


def ensure_positive(width: float, height: float) -> None:
    if not (width > 0 and height > 0 and math.isfinite(width) and math.isfinite(height)):
        raise InvalidDimensions(f"dimensions must be positive and finite: width={width}, height={height}")


def resolve_aspect_ratio(width: float, height: float) -> SupportedRatio:
    """Return the supported ratio closest to `width / height`.

    Ties keep the earliest entry in `SupportedRatio` order.
    """
    ensure_positive(width, height)
    ratio = width / height
    best = SupportedRatio.SQUARE
    best_diff = math.inf
    for candidate in SupportedRatio:
        diff = abs(candidate.quotient - ratio)
        if diff < best_diff:
            best = candidate
            best_diff = diff
    return best


def parse_ratio(value: SupportedRatio | str) -> SupportedRatio | str:
    """Normalize a ratio selection to a `SupportedRatio` or `MATCH_SOURCE`."""
    if isinstance(value, SupportedRatio):
        return value
    text = str(value).strip()
    if text.lower() == MATCH_SOURCE:
        return MATCH_SOURCE
    try:
        return SupportedRatio(text)
    except ValueError as exc:
        names = ", ".join(r.value for r in SupportedRatio)
        raise InvalidRatio(f"unsupported aspect ratio {value!r}; expected one of {names} or {MATCH_SOURCE}") from exc


def surface_size(
    width: int,
    ratio: SupportedRatio | str,
    reference: tuple[int, int] | None = None,
) -> tuple[int, int]:
    """Size of a drawing surface `width` pixels wide for the selected ratio.

    `match-source` follows the reference image's exact proportions and falls
    back to a square surface when no reference is loaded.
    """
    if not (width > 0 and math.isfinite(width)):
        raise InvalidDimensions(f"surface width must be positive and finite: {width}")
    selected = parse_ratio(ratio)
    if selected == MATCH_SOURCE:
        if reference is None:
            quotient = SupportedRatio.SQUARE.quotient
        else:
            ensure_positive(*reference)
            quotient = reference[0] / reference[1]
    else:
        quotient = selected.quotient
    return width, max(1, round_half_up(width / quotient))
