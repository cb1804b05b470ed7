from __future__ import annotations


class CanvasError(Exception):
    pass


class DecodeFailure(CanvasError, ValueError):
    """Image bytes could not be decoded, or the mime type is not accepted."""


class InvalidDimensions(CanvasError, ValueError):
    """A width or height was zero or negative."""


class InvalidRatio(CanvasError, ValueError):
    pass
