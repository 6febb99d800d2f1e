"""Tests for the QR symbol provider.

Validates grid shape, determinism, error correction levels and the
EncodingFailure cases (empty text, capacity overflow, bad backend).
"""

import pytest

from qr_svg_overlay.qr_generator import (
    EncodingFailure,
    ErrorCorrectionLevel,
    count_dark,
    encode_grid,
)


def _is_valid_symbol_side(n: int) -> bool:
    return 21 <= n <= 177 and (n - 17) % 4 == 0


# ---------------------------------------------------------------------------
# Error correction levels
# ---------------------------------------------------------------------------


class TestErrorCorrectionLevel:
    def test_parse_letter(self) -> None:
        assert ErrorCorrectionLevel.parse("M") is ErrorCorrectionLevel.M

    def test_parse_lowercase(self) -> None:
        assert ErrorCorrectionLevel.parse("q") is ErrorCorrectionLevel.Q

    def test_parse_member_passthrough(self) -> None:
        assert ErrorCorrectionLevel.parse(ErrorCorrectionLevel.H) is ErrorCorrectionLevel.H

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown error correction level"):
            ErrorCorrectionLevel.parse("X")

    def test_order_weakest_to_strongest(self) -> None:
        assert [level.value for level in ErrorCorrectionLevel] == ["L", "M", "Q", "H"]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class TestEncodeGrid:
    def test_grid_is_square(self) -> None:
        grid = encode_grid("https://react.dev", "M")
        n = len(grid)
        assert _is_valid_symbol_side(n)
        assert all(len(row) == n for row in grid)

    def test_grid_cells_are_bool(self) -> None:
        grid = encode_grid("hello")
        assert all(isinstance(cell, bool) for row in grid for cell in row)

    def test_grid_is_immutable(self) -> None:
        grid = encode_grid("hello")
        assert isinstance(grid, tuple)
        assert isinstance(grid[0], tuple)

    def test_deterministic(self) -> None:
        assert encode_grid("https://react.dev", "M") == encode_grid("https://react.dev", "M")

    def test_no_quiet_zone(self) -> None:
        # Finder pattern corner starts at (0, 0) when there is no border
        grid = encode_grid("hello")
        assert grid[0][0] is True
        assert grid[0][6] is True
        assert grid[6][0] is True

    def test_stronger_level_never_smaller(self) -> None:
        text = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        sides = [len(encode_grid(text, level)) for level in ErrorCorrectionLevel]
        assert sides == sorted(sides)

    def test_has_dark_modules(self) -> None:
        grid = encode_grid("hello")
        assert 0 < count_dark(grid) < len(grid) ** 2


class TestEncodingFailure:
    def test_is_value_error(self) -> None:
        assert issubclass(EncodingFailure, ValueError)

    def test_empty_text(self) -> None:
        with pytest.raises(EncodingFailure, match="empty"):
            encode_grid("")

    def test_whitespace_text_is_encoded(self) -> None:
        grid = encode_grid("   ")
        assert _is_valid_symbol_side(len(grid))
        assert count_dark(grid) > 0

    def test_text_too_long(self) -> None:
        with pytest.raises(EncodingFailure, match="too long"):
            encode_grid("x" * 4000, "L")

    def test_fits_low_but_not_high(self) -> None:
        text = "x" * 2000
        assert len(encode_grid(text, "L")) > 0
        with pytest.raises(EncodingFailure):
            encode_grid(text, "H")

    def test_unknown_backend(self) -> None:
        with pytest.raises(EncodingFailure, match="Unknown QR backend"):
            encode_grid("hello", backend="zxing")


# ---------------------------------------------------------------------------
# segno backend
# ---------------------------------------------------------------------------


class TestSegnoBackend:
    def test_square_grid(self) -> None:
        pytest.importorskip("segno")
        grid = encode_grid("https://react.dev", "M", backend="segno")
        n = len(grid)
        assert _is_valid_symbol_side(n)
        assert all(len(row) == n for row in grid)

    def test_too_long(self) -> None:
        pytest.importorskip("segno")
        with pytest.raises(EncodingFailure, match="too long"):
            encode_grid("x" * 4000, "L", backend="segno")
