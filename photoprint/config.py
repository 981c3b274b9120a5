"""Centralized configuration constants for photoprint."""

from pathlib import Path

# DPI settings
PRINT_DPI = 300  # Default raster density for print output
PREVIEW_DPI = 72  # Default density for PNG page previews
MM_PER_INCH = 25.4
POINTS_PER_INCH = 72

# Page geometry (millimeters)
OUTER_MARGIN_MM = 10.0  # Paper edge to nearest slot
GUTTER_MM = 10.0  # Between adjacent slots
THREE_UP_TOP_SHARE = 0.5  # Share of available height for the top slot
THREE_UP_BOTTOM_SHARE = 0.45  # Share of available height for each bottom slot

# Coordinate system
COORDINATE_SYSTEM = "top_left_mm"  # Origin: top-left corner, units: millimeters
SCHEMA_VERSION = "1.0.0"  # Layout JSON schema version

# Rendering
FRAME_FILL_RGB = (1.0, 1.0, 1.0)  # Margin frame colour (ReportLab 0-1 floats)
CUT_GUIDE_RGB = (0.8, 0.8, 0.8)
CUT_GUIDE_WIDTH_PT = 0.25
JPEG_QUALITY = 92

# Photo source
SUPPORTED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff", ".gif")

# Preferences
DEFAULT_SETTINGS_PATH = Path.home() / ".photoprint" / "settings.json"

# Paper types (fixed set, millimeters, portrait orientation)
PAPER_TYPES = {
    "A4": {"width_mm": 210.0, "height_mm": 297.0, "display_name": "A4"},
    "A5": {"width_mm": 148.0, "height_mm": 210.0, "display_name": "A5"},
    "LETTER": {"width_mm": 215.9, "height_mm": 279.4, "display_name": "Letter"},
    "PHOTO_4X6": {"width_mm": 101.6, "height_mm": 152.4, "display_name": '4x6"'},
    "PHOTO_5X7": {"width_mm": 127.0, "height_mm": 177.8, "display_name": '5x7"'},
}

# Margin presets (millimeters): top, bottom, left, right
MARGIN_PRESETS = {
    "none": (0.0, 0.0, 0.0, 0.0),
    "minimal": (4.0, 4.0, 4.0, 4.0),
    "instant_camera": (8.0, 25.0, 8.0, 8.0),
}
DEFAULT_MARGIN_PRESET = "instant_camera"
