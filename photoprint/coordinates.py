"""Coordinate transformation and DPI conversion utilities.

This module handles:
- DPI conversions (device units ↔ millimeters)
- Coordinate system transforms (top-left mm → ReportLab bottom-left points)
- PDF rasterization using PyMuPDF for page previews
"""

from pathlib import Path
from typing import TypedDict

import fitz  # type: ignore[import-untyped]  # PyMuPDF lacks type stubs

from photoprint.config import MM_PER_INCH, POINTS_PER_INCH


class PageMetadata(TypedDict):
    """Metadata for a rasterized PDF page."""

    page_num: int
    image_path: str
    width_px: int
    height_px: int
    dpi: int


def _check_density(dpi: float) -> None:
    if dpi <= 0:
        raise ValueError(f"Density must be positive, got {dpi}")


def mm_to_px(mm: float, dpi: float) -> float:
    """Convert millimeters to device units (pixels) at a given density.

    Args:
        mm: Length in millimeters
        dpi: Device units per inch

    Returns:
        Length in device units, unrounded
    """
    _check_density(dpi)
    return mm * (dpi / MM_PER_INCH)


def px_to_mm(px: float, dpi: float) -> float:
    """Convert device units (pixels) to millimeters.

    Args:
        px: Length in device units
        dpi: Device units per inch

    Returns:
        Length in millimeters

    Note:
        1 inch = 25.4 mm
    """
    _check_density(dpi)
    return px * (MM_PER_INCH / dpi)


def mm_to_pt(mm: float) -> float:
    """Convert millimeters to PDF points (1pt = 1/72 inch)."""
    return mm_to_px(mm, POINTS_PER_INCH)


def mm_to_pdf_coords(x_mm: float, y_mm: float, page_height_mm: float) -> tuple[float, float]:
    """Convert top-left mm coordinates to ReportLab bottom-left points.

    Args:
        x_mm: X coordinate in millimeters from top-left
        y_mm: Y coordinate in millimeters from top-left
        page_height_mm: Total page height in millimeters

    Returns:
        Tuple of (x_pt, y_pt) in ReportLab points

    Note:
        ReportLab uses bottom-left origin, so Y axis is flipped.
    """
    return mm_to_pt(x_mm), mm_to_pt(page_height_mm - y_mm)


def rasterize_pdf(
    pdf_path: str, output_dir: str, dpi: int, prefix: str = "page"
) -> list[PageMetadata]:
    """Rasterize PDF pages to PNG images.

    Args:
        pdf_path: Path to input PDF file
        output_dir: Directory to save rasterized images
        dpi: Resolution for rasterization
        prefix: Filename prefix for the page images

    Returns:
        List of PageMetadata dicts with metadata for each rasterized page

    Raises:
        FileNotFoundError: If PDF file doesn't exist
        RuntimeError: If PDF cannot be opened or rasterization fails
    """
    pdf_path_obj = Path(pdf_path)
    if not pdf_path_obj.exists():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")
    _check_density(dpi)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    try:
        doc = fitz.open(pdf_path)
    except Exception as e:
        raise RuntimeError(f"Failed to open PDF: {e}") from e

    results: list[PageMetadata] = []

    try:
        # PyMuPDF renders at 72 DPI by default, so zoom = target_dpi / 72
        zoom = dpi / POINTS_PER_INCH
        mat = fitz.Matrix(zoom, zoom)

        for page_num in range(len(doc)):
            try:
                pix = doc[page_num].get_pixmap(matrix=mat, alpha=False)
            except Exception as e:
                raise RuntimeError(f"Failed to rasterize page {page_num + 1}: {e}") from e

            image_path = output_path / f"{prefix}_{page_num + 1:04d}.png"
            pix.save(str(image_path))

            results.append(
                PageMetadata(
                    page_num=page_num + 1,  # 1-indexed for user-facing
                    image_path=str(image_path),
                    width_px=pix.width,
                    height_px=pix.height,
                    dpi=dpi,
                )
            )
    finally:
        doc.close()

    return results
