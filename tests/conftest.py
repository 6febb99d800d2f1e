"""Shared fixtures for qr_svg_overlay tests."""

import pytest
from PIL import Image

LOGO_SVG_SIZED = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="32" height="32">'
    '<circle cx="16" cy="16" r="14" fill="#61dafb"/></svg>'
)
LOGO_SVG_UNSIZED = (
    '<svg xmlns="http://www.w3.org/2000/svg">'
    '<rect width="40" height="30" fill="#646cff"/></svg>'
)


@pytest.fixture
def diagonal_grid():
    """3x3 grid with dark modules on the main diagonal."""
    return (
        (True, False, False),
        (False, True, False),
        (False, False, True),
    )


@pytest.fixture
def full_grid():
    """21x21 grid with every module dark."""
    return tuple(tuple(True for _ in range(21)) for _ in range(21))


@pytest.fixture
def logo_image():
    return Image.new("RGBA", (40, 30), (255, 0, 0, 255))


@pytest.fixture
def logo_path(tmp_path, logo_image):
    path = tmp_path / "logo.png"
    logo_image.save(path, "PNG")
    return str(path)
