"""Tests for the HTTP artifact endpoints."""

from __future__ import annotations

import numpy as np
import pytest
from fastapi.testclient import TestClient

from posecanvas.canvas.image_file import ImageFile, encode_png
from posecanvas.main import create_app
from tests.helpers import read_pixels


@pytest.fixture
def client():
    """Test client for a fresh app instance."""
    return TestClient(create_app())


def _payload(image: ImageFile) -> dict[str, str]:
    return {"data": image.to_data_uri(), "mime_type": image.mime_type}


class TestAspectRatioEndpoint:
    """Tests for GET /aspect-ratio."""

    def test_resolves(self, client):
        """Test that dimensions resolve to the nearest ratio."""
        response = client.get("/api/v1/aspect-ratio", params={"width": 1920, "height": 1080})
        assert response.status_code == 200
        assert response.json()["ratio"] == "16:9"

    def test_rejects_zero(self, client):
        """Test that zero dimensions fail validation."""
        response = client.get("/api/v1/aspect-ratio", params={"width": 0, "height": 10})
        assert response.status_code == 422


class TestOutpaintEndpoint:
    """Tests for POST /outpaint."""

    def test_outpaint(self, client, square_png):
        """Test that the endpoint returns padded image, mask and geometry."""
        response = client.post(
            "/api/v1/outpaint",
            json={"image": _payload(square_png), "target_ratio": "16:9"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["resolved_ratio"] == "16:9"
        assert body["geometry"] == {
            "width": 100,
            "height": 100,
            "target_width": 178,
            "target_height": 100,
            "offset_x": 39,
            "offset_y": 0,
            "inset": 4,
        }

        mask = read_pixels(ImageFile.from_data_uri(body["mask"]["data"]))
        assert mask.shape == (100, 178, 4)

    def test_bare_base64(self, client, square_png):
        """Test that bare base64 with a mime type is accepted."""
        response = client.post(
            "/api/v1/outpaint",
            json={"image": {"data": square_png.base64, "mime_type": "image/png"}},
        )
        assert response.status_code == 200
        assert response.json()["resolved_ratio"] == "1:1"

    def test_corrupt_image(self, client):
        """Test that undecodable input maps to 422."""
        response = client.post(
            "/api/v1/outpaint",
            json={"image": {"data": "aGVsbG8=", "mime_type": "image/png"}, "target_ratio": "1:1"},
        )
        assert response.status_code == 422

    def test_unknown_ratio(self, client, square_png):
        """Test that an unsupported ratio fails validation."""
        response = client.post(
            "/api/v1/outpaint",
            json={"image": _payload(square_png), "target_ratio": "2:3"},
        )
        assert response.status_code == 422


class TestMaskEndpoint:
    """Tests for POST /mask."""

    def test_mask(self, client):
        """Test that a painted overlay becomes a binary mask."""
        overlay = np.zeros((10, 10, 4), dtype=np.uint8)
        overlay[2:4, 2:4] = (255, 143, 171, 178)
        response = client.post("/api/v1/mask", json={"overlay": _payload(encode_png(overlay))})
        assert response.status_code == 200
        body = response.json()
        assert body["painted_pixels"] == 4
        mask = read_pixels(ImageFile.from_data_uri(body["mask"]["data"]))
        assert tuple(mask[3, 3]) == (255, 255, 255, 255)
        assert tuple(mask[8, 8]) == (0, 0, 0, 255)

    def test_empty_overlay_is_valid(self, client):
        """Test that an unpainted overlay yields an all-black mask, not an error."""
        overlay = np.zeros((6, 6, 4), dtype=np.uint8)
        response = client.post("/api/v1/mask", json={"overlay": _payload(encode_png(overlay))})
        assert response.status_code == 200
        assert response.json()["painted_pixels"] == 0


def test_health(client):
    """Test the health endpoint."""
    assert client.get("/api/v1/health").json() == {"status": "ok"}
