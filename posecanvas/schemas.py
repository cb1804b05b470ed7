from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from posecanvas.canvas.image_file import ImageFile

MimeType = Literal["image/png", "image/jpeg", "image/webp"]
RatioName = Literal["1:1", "4:3", "3:4", "16:9", "9:16", "match-source"]


class ImageFilePayload(BaseModel):
    data: str = Field(min_length=1, description="data URI or bare base64")
    mime_type: MimeType = "image/png"

    def to_image_file(self) -> ImageFile:
        # An embedded data URI mime type wins over the field default.
        mime_type = None if self.data.startswith("data:") else self.mime_type
        return ImageFile.from_data_uri(self.data, mime_type)

    @classmethod
    def from_image_file(cls, image: ImageFile) -> ImageFilePayload:
        return cls(data=image.to_data_uri(), mime_type=image.mime_type)


class AspectRatioResponse(BaseModel):
    width: int
    height: int
    ratio: str


class OutpaintRequest(BaseModel):
    image: ImageFilePayload
    target_ratio: RatioName = "match-source"
    seam_inset: int | None = Field(default=None, ge=0, le=64)


class GeometryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    width: int
    height: int
    target_width: int
    target_height: int
    offset_x: int
    offset_y: int
    inset: int


class OutpaintResponse(BaseModel):
    padded: ImageFilePayload
    mask: ImageFilePayload
    resolved_ratio: str
    geometry: GeometryResponse


class MaskRequest(BaseModel):
    overlay: ImageFilePayload
    red_threshold: int | None = Field(default=None, ge=0, le=254)


class MaskResponse(BaseModel):
    mask: ImageFilePayload
    painted_pixels: int
