"""Host-facing QR code component with a two-pass overlay measurement.

Typical host flow for an overlay with no declared size::

    qr = QRCodeSvg("https://example.com", overlay=logo)
    svg = qr.to_svg()                  # pass 1: provisional, overlay at 1x1
    if qr.pending_measurement:
        qr.apply_measurement(bbox, revision=qr.revision)
        svg = qr.to_svg()              # pass 2: corrected exclusion zone

Measurements tagged with an older revision are discarded, so only the
latest inputs' measurement is ever applied.
"""

import logging

from qr_svg_overlay import (
    DEFAULT_BACKGROUND,
    DEFAULT_ERROR_CORRECTION,
    DEFAULT_FOREGROUND,
    DEFAULT_MARGIN,
    DEFAULT_SIZE,
)
from qr_svg_overlay.layout import RenderParams, RenderResult, compute_layout
from qr_svg_overlay.overlay import (
    Footprint,
    Measurer,
    OverlayContent,
    OverlaySizer,
    measure_overlay,
)
from qr_svg_overlay.qr_generator import EncodingFailure, Grid, encode_grid
from qr_svg_overlay.svg_renderer import render_svg

logger = logging.getLogger(__name__)

_PARAM_FIELDS = ("size", "margin", "foreground_color", "background_color", "error_correction")


class QRCodeSvg:
    """A QR code rendered to SVG, with an optional centered overlay."""

    def __init__(
        self,
        value: str,
        size: float = DEFAULT_SIZE,
        error_correction: str = DEFAULT_ERROR_CORRECTION,
        margin: float = DEFAULT_MARGIN,
        foreground_color: str = DEFAULT_FOREGROUND,
        background_color: str = DEFAULT_BACKGROUND,
        overlay: OverlayContent | None = None,
        measurer: Measurer | None = None,
        backend: str = "qrcode",
    ):
        self.value = value
        self.params = RenderParams(
            size=size,
            margin=margin,
            foreground_color=foreground_color,
            background_color=background_color,
            error_correction=error_correction,
        )
        self.overlay = overlay
        self.measurer = measurer
        self.backend = backend
        self.revision = 0
        self.pending_measurement = False

        self._sizer = OverlaySizer()
        self._grid: Grid | None = None
        self._grid_key: tuple | None = None

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def update(self, **props) -> int:
        """Change one or more inputs. Returns the new revision."""
        params = {}
        for name, value in props.items():
            if name in _PARAM_FIELDS:
                params[name] = value
            elif name in ("value", "overlay", "measurer", "backend"):
                setattr(self, name, value)
            else:
                raise TypeError(f"Unknown QR code property '{name}'")

        if params:
            current = {name: getattr(self.params, name) for name in _PARAM_FIELDS}
            current.update(params)
            self.params = RenderParams(**current)

        self.revision += 1
        return self.revision

    def _encode(self) -> Grid | None:
        """Encode once per (value, level, backend); failures are logged once."""
        key = (self.value, self.params.error_correction, self.backend)
        if self._grid_key != key:
            self._grid_key = key
            try:
                self._grid = encode_grid(self.value, self.params.error_correction, self.backend)
            except EncodingFailure as e:
                self._grid = None
                logger.error("QR generation failed: %s", e)
            else:
                side = len(self._grid)
                logger.debug("Encoded %d chars into a %dx%d symbol", len(self.value), side, side)
        return self._grid

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> RenderResult | None:
        """Compute the layout for the current inputs.

        Returns None, after logging the failure, when the value cannot be
        encoded. Never returns a partial symbol.
        """
        grid = self._encode()
        if grid is None:
            self.pending_measurement = False
            return None

        cell_size = self.params.cell_size(len(grid))
        footprint = self._sizer.resolve(self.overlay, cell_size)
        self.pending_measurement = self._sizer.needs_measurement(self.overlay, cell_size)
        return compute_layout(grid, self.params, footprint)

    def to_svg(self) -> str | None:
        """Render the SVG document, or None when encoding fails."""
        result = self.render()
        if result is None:
            return None
        return render_svg(result, self.params, self.overlay)

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def apply_measurement(self, footprint: Footprint | None, revision: int | None = None) -> bool:
        """Record the host's post-layout measurement of the overlay.

        Args:
            footprint: Measured overlay size, or None if nothing could be
                measured (resolves to no exclusion zone).
            revision: Revision the measurement was taken at. Defaults to
                the current one.

        Returns:
            True if applied. False if it was stale, there is no overlay, or
            the value cannot be encoded.
        """
        if revision is not None and revision != self.revision:
            logger.debug(
                "Discarding stale overlay measurement (revision %d, current %d)",
                revision, self.revision,
            )
            return False
        if self.overlay is None:
            return False
        grid = self._encode()
        if grid is None:
            return False

        cell_size = self.params.cell_size(len(grid))
        self._sizer.record(self.overlay, cell_size, footprint)
        self.pending_measurement = False
        return True

    def measure(self) -> bool:
        """Measure the overlay with the configured measurer and apply it."""
        if self.overlay is None:
            return False
        return self.apply_measurement(
            measure_overlay(self.overlay, self.measurer), revision=self.revision
        )


def render_qr_svg(
    value: str,
    overlay: OverlayContent | None = None,
    measurer: Measurer | None = None,
    **params,
) -> str | None:
    """Render a QR code to SVG in one call, measuring the overlay if needed.

    Args:
        value: Text or URL to encode.
        overlay: Optional logo content.
        measurer: Optional host measurement callback for the overlay.
        **params: size, margin, error_correction, foreground_color,
            background_color, backend.

    Returns:
        SVG markup, or None if the value cannot be encoded.
    """
    qr = QRCodeSvg(value, overlay=overlay, measurer=measurer, **params)
    if qr.render() is None:
        return None
    if qr.pending_measurement:
        qr.measure()
    return qr.to_svg()
