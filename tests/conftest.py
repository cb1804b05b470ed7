"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from tests.helpers import make_image_file


@pytest.fixture
def square_png():
    """A 100x100 opaque red PNG."""
    return make_image_file(100, 100)


@pytest.fixture
def emitted():
    """Collects ImageFiles passed to an on_change listener."""
    return []
