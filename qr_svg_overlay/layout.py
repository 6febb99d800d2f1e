"""Render parameters and the overlay exclusion-zone (mask) calculation."""

import logging
import math
from dataclasses import dataclass

from qr_svg_overlay import (
    DEFAULT_BACKGROUND,
    DEFAULT_ERROR_CORRECTION,
    DEFAULT_FOREGROUND,
    DEFAULT_MARGIN,
    DEFAULT_SIZE,
)
from qr_svg_overlay.overlay import Footprint
from qr_svg_overlay.qr_generator import ErrorCorrectionLevel, Grid
from qr_svg_overlay.svg_renderer import module_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderParams:
    """Caller-supplied parameters for one render."""

    size: float = DEFAULT_SIZE
    margin: float = DEFAULT_MARGIN
    foreground_color: str = DEFAULT_FOREGROUND
    background_color: str = DEFAULT_BACKGROUND
    error_correction: ErrorCorrectionLevel = ErrorCorrectionLevel.parse(DEFAULT_ERROR_CORRECTION)

    def __post_init__(self):
        object.__setattr__(
            self, "error_correction", ErrorCorrectionLevel.parse(self.error_correction)
        )
        if not math.isfinite(self.size) or self.size <= 0:
            raise ValueError(f"size must be a positive number, got {self.size!r}")
        if not math.isfinite(self.margin) or self.margin < 0:
            raise ValueError(f"margin must be zero or positive, got {self.margin!r}")
        if self.size <= 2 * self.margin:
            raise ValueError(
                f"size ({self.size}) must be larger than twice the margin ({self.margin})"
            )

    def cell_size(self, grid_size: int) -> float:
        """Pixel side of one module; 0 when there is no symbol yet."""
        if not grid_size:
            return 0.0
        return (self.size - 2 * self.margin) / grid_size


@dataclass(frozen=True)
class ExclusionZone:
    """Half-open rectangle of grid cells left undrawn under the overlay."""

    start_x: int
    start_y: int
    end_x: int
    end_y: int

    @classmethod
    def empty(cls) -> "ExclusionZone":
        return cls(-1, -1, -1, -1)

    @property
    def is_empty(self) -> bool:
        return self.end_x <= self.start_x or self.end_y <= self.start_y

    def contains(self, x: int, y: int) -> bool:
        return self.start_x <= x < self.end_x and self.start_y <= y < self.end_y


@dataclass(frozen=True)
class Mask:
    """Exclusion zone plus the overlay's pixel origin."""

    zone: ExclusionZone
    origin: tuple[float, float]


def compute_mask(
    grid_size: int,
    cell_size: float,
    margin: float,
    footprint: Footprint | None,
) -> Mask:
    """Center the overlay footprint on the grid.

    The zone is snapped outward to whole cells (floor on the start edge,
    ceil on the end edge) so no partly covered module is drawn. The origin
    uses the unsnapped start so the overlay itself stays exactly centered.
    Overlays larger than the grid are not clamped.

    Args:
        grid_size: Side N of the module grid.
        cell_size: Pixel side of one module.
        margin: Pixel margin around the grid.
        footprint: Overlay size in pixels, or None.

    Returns:
        Mask with the zone in cell coordinates and the origin in pixels.
    """
    if footprint is None or footprint.is_empty or not cell_size:
        return Mask(ExclusionZone.empty(), (margin, margin))

    cells_w = footprint.width / cell_size
    cells_h = footprint.height / cell_size
    start_xf = (grid_size - cells_w) / 2
    start_yf = (grid_size - cells_h) / 2

    zone = ExclusionZone(
        start_x=math.floor(start_xf),
        start_y=math.floor(start_yf),
        end_x=math.ceil(start_xf + cells_w),
        end_y=math.ceil(start_yf + cells_h),
    )
    origin = (margin + start_xf * cell_size, margin + start_yf * cell_size)
    return Mask(zone, origin)


@dataclass(frozen=True)
class RenderResult:
    """Everything needed to draw one QR code."""

    size: float
    grid_size: int
    cell_size: float
    margin: float
    footprint: Footprint | None
    mask: Mask
    path: str
    dark_count: int


def compute_layout(
    grid: Grid,
    params: RenderParams,
    footprint: Footprint | None = None,
) -> RenderResult:
    """Pure layout of one render: cell size, mask and module path."""
    grid_size = len(grid)
    cell_size = params.cell_size(grid_size)
    if footprint is not None and footprint.is_empty:
        footprint = None
    mask = compute_mask(grid_size, cell_size, params.margin, footprint)
    path, drawn = module_path(grid, cell_size, params.margin, mask.zone)

    logger.debug(
        "Layout: %dx%d modules, cell %.4gpx, zone %s, %d dark modules drawn",
        grid_size, grid_size, cell_size, mask.zone, drawn,
    )
    return RenderResult(
        size=params.size,
        grid_size=grid_size,
        cell_size=cell_size,
        margin=params.margin,
        footprint=footprint,
        mask=mask,
        path=path,
        dark_count=drawn,
    )
