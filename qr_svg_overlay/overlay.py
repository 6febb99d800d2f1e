"""Overlay (logo) content and footprint sizing.

An overlay reports its footprint in pixels in one of two ways:
    - statically, from declared width/height or a viewBox
    - dynamically, by measuring it after it has been laid out once

Declared sizes are always preferred. Measured sizes are cached by the
OverlaySizer until the overlay content or the cell size changes.
"""

import base64
import io
import logging
import math
import os
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from PIL import Image

from qr_svg_overlay.svg_renderer import format_number

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_PROLOG_RE = re.compile(r"^\s*(?:<\?xml[^>]*\?>\s*)?(?:<!DOCTYPE[^>]*>\s*)?", re.IGNORECASE)


@dataclass(frozen=True)
class Footprint:
    """Overlay size in pixels."""

    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        """True when the footprint covers no area (treated as no overlay)."""
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            return True
        return self.width <= 0 or self.height <= 0


def parse_number(value) -> float | None:
    """Parse a numeric attribute such as ``32``, ``"32"`` or ``"32px"``.

    Strings are read up to the first non-numeric character. Returns None
    for anything that does not start with a finite number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value)
        if match:
            number = float(match.group(0))
            return number if math.isfinite(number) else None
    return None


def parse_view_box(value) -> Footprint | None:
    """Return the width/height part of a four-number viewBox string."""
    if not isinstance(value, str):
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return None
    numbers = [parse_number(part) for part in parts]
    if any(n is None for n in numbers):
        return None
    return Footprint(numbers[2], numbers[3])


class OverlayContent(ABC):
    """Capability interface for anything drawn on top of the QR code."""

    @abstractmethod
    def declared_size(self) -> Footprint | None:
        """Size known without layout, or None."""

    def measure(self) -> Footprint | None:
        """Size measured after layout. None when no layout surface exists."""
        return None

    @abstractmethod
    def to_svg(self) -> str:
        """Markup placed inside the overlay viewport."""


class SvgOverlay(OverlayContent):
    """SVG markup used as a logo.

    Args:
        markup: SVG element markup (usually an ``<svg>`` root).
        bbox: Optional ``(x, y, width, height)`` bounding box measured by the
            host after layout, used when the markup declares no size.
    """

    def __init__(self, markup: str, bbox: tuple[float, float, float, float] | None = None):
        self._markup = _PROLOG_RE.sub("", markup, count=1).strip()
        try:
            self._root = ET.fromstring(self._markup)
        except ET.ParseError as e:
            raise ValueError(f"Overlay is not well-formed SVG: {e}")
        self.bbox = bbox

    def declared_size(self) -> Footprint | None:
        width = parse_number(self._root.get("width"))
        height = parse_number(self._root.get("height"))
        # Zero widths fall through to the viewBox like missing ones
        if width and height:
            return Footprint(width, height)
        return parse_view_box(self._root.get("viewBox"))

    def measure(self) -> Footprint | None:
        if self.bbox is None:
            return None
        _, _, width, height = self.bbox
        return Footprint(width, height)

    def to_svg(self) -> str:
        return self._markup


class ImageOverlay(OverlayContent):
    """Raster logo embedded as a PNG data URI.

    Declared size comes from explicit ``width``/``height``. Without both,
    the overlay must be measured, which yields the decoded pixel size.
    """

    def __init__(
        self,
        image: "str | Image.Image",
        width: float | None = None,
        height: float | None = None,
    ):
        if isinstance(image, Image.Image):
            self._image = image
        else:
            self._image = load_overlay_image(image)
        self.width = parse_number(width)
        self.height = parse_number(height)

    @property
    def image(self) -> Image.Image:
        return self._image

    def declared_size(self) -> Footprint | None:
        if self.width and self.height:
            return Footprint(self.width, self.height)
        return None

    def measure(self) -> Footprint | None:
        width, height = self._image.size
        return Footprint(self.width or width, self.height or height)

    def to_svg(self) -> str:
        buffer = io.BytesIO()
        self._image.save(buffer, "PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        width = self.width or self._image.width
        height = self.height or self._image.height
        return (
            f'<image href="data:image/png;base64,{encoded}" '
            f'width="{format_number(width)}" height="{format_number(height)}"/>'
        )


def load_overlay_image(path: str, square: bool = False) -> Image.Image:
    """Load a logo image from disk.

    Args:
        path: Path to the image file.
        square: If True, center-crop to the largest centered square.

    Returns:
        PIL Image in RGBA mode (transparency preserved).

    Raises:
        FileNotFoundError: If the image file doesn't exist.
        ValueError: If the file is not a valid image.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    try:
        img = Image.open(path)
        img.load()
        img = img.convert("RGBA")
    except (OSError, SyntaxError) as e:
        raise ValueError(f"Could not open image '{path}': {e}")

    if square:
        img = _center_crop_square(img)
    return img


def _center_crop_square(img: Image.Image) -> Image.Image:
    """Center-crop an image to a square, preserving aspect ratio."""
    width, height = img.size
    if width == height:
        return img

    side = min(width, height)
    left = (width - side) // 2
    top = (height - side) // 2
    return img.crop((left, top, left + side, top + side))


Measurer = Callable[[OverlayContent], "Footprint | None"]


def measure_overlay(
    content: OverlayContent,
    measurer: Measurer | None = None,
) -> Footprint | None:
    """Measure an already laid-out overlay.

    Uses the host-supplied ``measurer`` when given, else the content's own
    ``measure()``. Empty results come back as None.
    """
    footprint = measurer(content) if measurer else content.measure()
    if footprint is None or footprint.is_empty:
        return None
    return footprint


class OverlaySizer:
    """Resolves overlay footprints, caching the latest measurement.

    The cache holds a single entry keyed by (content identity, cell size),
    so a new overlay or a new cell size always misses it.
    """

    def __init__(self):
        self._content: OverlayContent | None = None
        self._cell_size: float | None = None
        self._measured: Footprint | None = None

    def _cached(self, content: OverlayContent, cell_size: float) -> Footprint | None:
        if self._content is content and self._cell_size == cell_size:
            return self._measured
        return None

    def resolve(self, content: OverlayContent | None, cell_size: float) -> Footprint | None:
        """Footprint to use for this render, or None for no exclusion zone."""
        if content is None:
            return None

        declared = content.declared_size()
        if declared is not None:
            return None if declared.is_empty else declared

        return self._cached(content, cell_size)

    def needs_measurement(self, content: OverlayContent | None, cell_size: float) -> bool:
        """True when only a post-layout measurement can size the content."""
        if content is None or content.declared_size() is not None:
            return False
        return not (self._content is content and self._cell_size == cell_size)

    def record(
        self,
        content: OverlayContent,
        cell_size: float,
        footprint: Footprint | None,
    ) -> None:
        """Store a measurement, replacing any previous one."""
        if footprint is not None and footprint.is_empty:
            footprint = None
        self._content = content
        self._cell_size = cell_size
        self._measured = footprint
        logger.debug("Recorded overlay measurement %s at cell size %s", footprint, cell_size)

    def invalidate(self) -> None:
        self._content = None
        self._cell_size = None
        self._measured = None
