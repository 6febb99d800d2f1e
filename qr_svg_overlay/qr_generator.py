"""Generate QR module grids for vector rendering."""

from enum import Enum

import qrcode
from qrcode.exceptions import DataOverflowError

Grid = tuple[tuple[bool, ...], ...]


class EncodingFailure(ValueError):
    """The text cannot be encoded at the requested error correction level."""


class ErrorCorrectionLevel(Enum):
    """The four standard QR error correction levels, weakest to strongest."""

    L = "L"  # ~7% recovery
    M = "M"  # ~15% recovery
    Q = "Q"  # ~25% recovery
    H = "H"  # ~30% recovery

    @classmethod
    def parse(cls, value: "str | ErrorCorrectionLevel") -> "ErrorCorrectionLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown error correction level {value!r}. Choose from: L, M, Q, H"
            ) from None


_QRCODE_LEVELS = {
    ErrorCorrectionLevel.L: qrcode.constants.ERROR_CORRECT_L,
    ErrorCorrectionLevel.M: qrcode.constants.ERROR_CORRECT_M,
    ErrorCorrectionLevel.Q: qrcode.constants.ERROR_CORRECT_Q,
    ErrorCorrectionLevel.H: qrcode.constants.ERROR_CORRECT_H,
}

BACKENDS = ("qrcode", "segno")


def encode_grid(
    text: str,
    level: "str | ErrorCorrectionLevel" = ErrorCorrectionLevel.L,
    backend: str = "qrcode",
) -> Grid:
    """Encode text into a square grid of dark/light modules.

    The grid carries no quiet zone: margins are applied in pixel space by
    the renderer. ``grid[y][x]`` is True for a dark module.

    Args:
        text: The text or URL to encode.
        level: Error correction level, as a letter or enum member.
        backend: ``"qrcode"`` (default) or ``"segno"``.

    Returns:
        Immutable square grid of booleans.

    Raises:
        EncodingFailure: If the text is empty, exceeds the capacity of the
            largest symbol at this level, or the backend is unavailable.
    """
    level = ErrorCorrectionLevel.parse(level)

    if not text:
        raise EncodingFailure("QR data cannot be empty.")

    if backend == "qrcode":
        return _encode_qrcode(text, level)
    if backend == "segno":
        return _encode_segno(text, level)
    raise EncodingFailure(
        f"Unknown QR backend '{backend}'. Choose from: {', '.join(BACKENDS)}"
    )


def _encode_qrcode(text: str, level: ErrorCorrectionLevel) -> Grid:
    """Encode using python-qrcode, picking the smallest fitting version."""
    qr = qrcode.QRCode(
        error_correction=_QRCODE_LEVELS[level],
        border=0,
    )
    qr.add_data(text)
    try:
        qr.make(fit=True)
    except DataOverflowError as e:
        raise EncodingFailure(
            f"QR data too long ({len(text)} chars) for error correction level "
            f"{level.value}: {e}"
        ) from e

    return tuple(tuple(bool(cell) for cell in row) for row in qr.get_matrix())


def _encode_segno(text: str, level: ErrorCorrectionLevel) -> Grid:
    """Encode using segno, keeping the requested level (no error boosting)."""
    try:
        import segno
    except ImportError as e:
        raise EncodingFailure(
            "segno package not installed. Run: pip install segno"
        ) from e

    try:
        qr = segno.make(
            text,
            error=level.value.lower(),
            micro=False,
            boost_error=False,
        )
    except segno.DataOverflowError as e:
        raise EncodingFailure(
            f"QR data too long ({len(text)} chars) for error correction level "
            f"{level.value}: {e}"
        ) from e

    return tuple(tuple(bool(cell) for cell in row) for row in qr.matrix)


def count_dark(grid: Grid) -> int:
    """Number of dark modules in a grid."""
    return sum(sum(row) for row in grid)
