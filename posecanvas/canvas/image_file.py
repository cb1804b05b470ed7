from __future__ import annotations

import base64
import binascii
import io
import re
from dataclasses import dataclass

import numpy as np
from PIL import Image, ImageColor, ImageOps, UnidentifiedImageError

from posecanvas.canvas.errors import DecodeFailure

PNG_MIME_TYPE = "image/png"
ACCEPTED_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/webp"})

_DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[\w.+-]+=[\w.+-]+)*);base64,(?P<payload>.*)$",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class ImageFile:
    """Encoded bitmap plus its mime type.

    `data` always holds the raw encoded bytes; data URIs and bare base64 are
    converted on the way in via `from_data_uri`.
    """

    data: bytes
    mime_type: str = PNG_MIME_TYPE

    @classmethod
    def from_data_uri(cls, value: str, mime_type: str | None = None) -> ImageFile:
        """Parse `data:<mime>;base64,<payload>` or a bare base64 payload.

        A bare payload needs `mime_type`; for a data URI an explicit
        `mime_type` overrides the one embedded in the URI.
        """
        text = value.strip()
        if text.startswith("data:"):
            match = _DATA_URI_PATTERN.match(text)
            if match is None:
                raise DecodeFailure("malformed data URI")
            payload = match.group("payload")
            mime_type = mime_type or match.group("mime")
        else:
            payload = text
        if not mime_type:
            raise DecodeFailure("mime type is required for a bare base64 payload")
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeFailure(f"invalid base64 payload: {exc}") from exc
        return cls(data=data, mime_type=mime_type.lower())

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


def decode_image(image: ImageFile) -> Image.Image:
    """Decode to an RGBA Pillow image, honouring EXIF orientation."""
    if image.mime_type not in ACCEPTED_MIME_TYPES:
        raise DecodeFailure(f"unsupported mime type: {image.mime_type}")
    if not image.data:
        raise DecodeFailure("image data is empty")
    try:
        with Image.open(io.BytesIO(image.data)) as pil:
            pil.load()
            oriented = ImageOps.exif_transpose(pil)
            return oriented.convert("RGBA")
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise DecodeFailure(f"cannot decode {image.mime_type} image: {exc}") from exc


def decode_rgba(image: ImageFile) -> np.ndarray:
    return np.array(decode_image(image), dtype=np.uint8)


def encode_png(image: Image.Image | np.ndarray) -> ImageFile:
    if isinstance(image, np.ndarray):
        image = Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return ImageFile(data=buffer.getvalue(), mime_type=PNG_MIME_TYPE)


def parse_color(color: str | tuple[int, ...]) -> tuple[int, int, int, int]:
    """CSS-style color string or RGB(A) tuple to an RGBA tuple."""
    if isinstance(color, str):
        try:
            rgb = ImageColor.getrgb(color)
        except ValueError as exc:
            raise ValueError(f"unknown color: {color!r}") from exc
    else:
        rgb = tuple(int(c) for c in color)
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    if len(rgb) == 4:
        return (rgb[0], rgb[1], rgb[2], rgb[3])
    raise ValueError(f"color must have 3 or 4 channels: {color!r}")
