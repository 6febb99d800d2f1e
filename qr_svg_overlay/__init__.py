"""QR SVG Overlay: vector QR codes with a centered logo cut-out."""

__version__ = "1.0.0"

# Shared defaults
DEFAULT_SIZE = 128  # Canvas side in pixels
DEFAULT_MARGIN = 4  # Pixels, applied on all four sides
DEFAULT_FOREGROUND = "#000"
DEFAULT_BACKGROUND = "#fff"
DEFAULT_ERROR_CORRECTION = "L"
