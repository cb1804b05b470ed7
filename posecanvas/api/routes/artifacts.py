from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from posecanvas.canvas.aspect import resolve_aspect_ratio
from posecanvas.canvas.errors import CanvasError
from posecanvas.canvas.image_file import decode_rgba, encode_png
from posecanvas.canvas.mask import extract_mask, painted_pixels
from posecanvas.canvas.outpaint import compose_outpaint
from posecanvas.config import settings
from posecanvas.schemas import (
    AspectRatioResponse,
    GeometryResponse,
    ImageFilePayload,
    MaskRequest,
    MaskResponse,
    OutpaintRequest,
    OutpaintResponse,
)

_LOG = logging.getLogger(__name__)

router = APIRouter(tags=["artifacts"])


@router.get("/aspect-ratio", response_model=AspectRatioResponse)
def get_aspect_ratio(
    width: int = Query(gt=0),
    height: int = Query(gt=0),
) -> AspectRatioResponse:
    ratio = resolve_aspect_ratio(width, height)
    return AspectRatioResponse(width=width, height=height, ratio=ratio.value)


@router.post("/outpaint", response_model=OutpaintResponse)
def create_outpaint(payload: OutpaintRequest) -> OutpaintResponse:
    try:
        result = compose_outpaint(
            payload.image.to_image_file(),
            payload.target_ratio,
            seam_inset=payload.seam_inset,
        )
    except CanvasError as exc:
        _LOG.warning("outpaint rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return OutpaintResponse(
        padded=ImageFilePayload.from_image_file(result.padded),
        mask=ImageFilePayload.from_image_file(result.mask),
        resolved_ratio=result.resolved_ratio.value,
        geometry=GeometryResponse.model_validate(result.geometry),
    )


@router.post("/mask", response_model=MaskResponse)
def create_mask(payload: MaskRequest) -> MaskResponse:
    threshold = settings.mask_red_threshold if payload.red_threshold is None else payload.red_threshold
    try:
        overlay = decode_rgba(payload.overlay.to_image_file())
    except CanvasError as exc:
        _LOG.warning("mask rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    painted = int(painted_pixels(overlay, red_threshold=threshold).sum())
    mask = encode_png(extract_mask(overlay, red_threshold=threshold))
    return MaskResponse(
        mask=ImageFilePayload.from_image_file(mask),
        painted_pixels=painted,
    )
