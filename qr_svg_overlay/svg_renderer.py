"""SVG path rendering for QR module grids."""

from typing import TYPE_CHECKING
from xml.sax.saxutils import quoteattr

from qr_svg_overlay.qr_generator import Grid

if TYPE_CHECKING:
    from qr_svg_overlay.layout import ExclusionZone, RenderParams, RenderResult
    from qr_svg_overlay.overlay import OverlayContent

SVG_NS = "http://www.w3.org/2000/svg"


def format_number(value: float) -> str:
    """Shortest text form of a coordinate (``4.0`` -> ``"4"``)."""
    if isinstance(value, int):
        return str(value)
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def square_subpath(px: float, py: float, side: float) -> str:
    """Closed square: move, horizontal, vertical, horizontal, close."""
    s = format_number(side)
    return f"M{format_number(px)},{format_number(py)}h{s}v{s}h-{s}z"


def module_path(
    grid: Grid,
    cell_size: float,
    margin: float,
    zone: "ExclusionZone",
) -> tuple[str, int]:
    """Build one path drawing every dark module outside the exclusion zone.

    Cells are scanned row by row; each drawn module is an independent
    closed unit square, so subpaths are joined without separators.

    Args:
        grid: Square module grid, ``grid[y][x]`` True for dark.
        cell_size: Pixel side of one module.
        margin: Pixel offset of the grid from the canvas edge.
        zone: Cells to leave undrawn.

    Returns:
        Tuple of (path string, number of modules drawn).
    """
    parts = []
    for y, row in enumerate(grid):
        for x, dark in enumerate(row):
            if not dark or zone.contains(x, y):
                continue
            parts.append(
                square_subpath(margin + x * cell_size, margin + y * cell_size, cell_size)
            )
    return "".join(parts), len(parts)


def render_svg(
    result: "RenderResult",
    params: "RenderParams",
    overlay: "OverlayContent | None" = None,
) -> str:
    """Compose the SVG document for a computed layout.

    Z-order: background, dark modules, then the overlay (if any) in a
    nested viewport at the mask origin that ignores pointer events.
    """
    size = format_number(result.size)
    parts = [
        f'<svg xmlns="{SVG_NS}" width="{size}" height="{size}" '
        f'viewBox="0 0 {size} {size}" preserveAspectRatio="xMidYMid meet">',
        f'<path d="M0,0h{size}v{size}h-{size}z" '
        f"fill={quoteattr(params.background_color)}/>",
        f'<path d="{result.path}" fill={quoteattr(params.foreground_color)} '
        f'shape-rendering="crispEdges"/>',
    ]

    if overlay is not None:
        footprint = result.footprint
        width = format_number(footprint.width) if footprint else "1"
        height = format_number(footprint.height) if footprint else "1"
        fx, fy = result.mask.origin
        view_box = (
            f"0 0 {format_number(footprint.width)} {format_number(footprint.height)}"
            if footprint
            else "0 0 0 0"
        )
        parts.append(
            f'<svg x="{format_number(fx)}" y="{format_number(fy)}" '
            f'width="{width}" height="{height}" viewBox="{view_box}" '
            f'pointer-events="none">'
        )
        parts.append(overlay.to_svg())
        parts.append("</svg>")

    parts.append("</svg>")
    return "".join(parts)
