"""Image builders shared by the test modules."""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from posecanvas.canvas.image_file import ImageFile


def make_image_file(
    width: int,
    height: int,
    color: tuple[int, ...] = (200, 30, 30, 255),
    fmt: str = "PNG",
) -> ImageFile:
    mode = "RGBA" if fmt == "PNG" else "RGB"
    image = Image.new(mode, (width, height), color if mode == "RGBA" else color[:3])
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    mime = {"PNG": "image/png", "JPEG": "image/jpeg", "WEBP": "image/webp"}[fmt]
    return ImageFile(data=buffer.getvalue(), mime_type=mime)


def read_pixels(image: ImageFile) -> np.ndarray:
    with Image.open(io.BytesIO(image.data)) as pil:
        return np.array(pil.convert("RGBA"), dtype=np.uint8)
