"""PDF rendering from page placements.

This module handles:
- Computing placements for every page of a print job
- Drawing margin frames and contain-fit photos with ReportLab
- Skipping photos that fail to decode without aborting the job
- Writing the document atomically, with cancellation support
"""

import io
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TypedDict

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from photoprint.config import (
    CUT_GUIDE_RGB,
    CUT_GUIDE_WIDTH_PT,
    FRAME_FILL_RGB,
    JPEG_QUALITY,
    PRINT_DPI,
)
from photoprint.coordinates import mm_to_pdf_coords, mm_to_pt, mm_to_px
from photoprint.errors import DocumentWriteFailure, RenderCancelled, SourceUnavailable
from photoprint.layout import calculate_transform, place_pages
from photoprint.loading import load_image
from photoprint.validation import BBoxMM, PhotoPlacement, PrintJob

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class SkippedPhoto(TypedDict):
    """A photo left blank because it could not be decoded."""

    photo_id: str
    name: str
    source: str
    page_number: int
    reason: str


class RenderResult(TypedDict):
    """Summary of a completed render."""

    output_path: str
    page_count: int
    photo_count: int
    skipped_photos: list[SkippedPhoto]


def _pdf_rect(bbox: BBoxMM, page_height_mm: float) -> tuple[float, float, float, float]:
    """Top-left mm bbox -> ReportLab (x, y_bottom, width, height) in points."""
    x_pt, y_top_pt = mm_to_pdf_coords(bbox.x, bbox.y, page_height_mm)
    height_pt = mm_to_pt(bbox.height)
    return x_pt, y_top_pt - height_pt, mm_to_pt(bbox.width), height_pt


def _draw_frame(
    c: canvas.Canvas, placement: PhotoPlacement, page_height_mm: float, cut_guides: bool
) -> None:
    x, y, w, h = _pdf_rect(placement.slot, page_height_mm)
    c.setFillColorRGB(*FRAME_FILL_RGB)
    c.setStrokeColorRGB(*CUT_GUIDE_RGB)
    c.setLineWidth(CUT_GUIDE_WIDTH_PT)
    c.rect(x, y, w, h, stroke=1 if cut_guides else 0, fill=1)


def _draw_photo(
    c: canvas.Canvas, placement: PhotoPlacement, page_height_mm: float, dpi: int
) -> None:
    rect = placement.photo_rect
    target_px = (round(mm_to_px(rect.width, dpi)), round(mm_to_px(rect.height, dpi)))
    img = load_image(placement.photo, target_px)

    transform = calculate_transform(img.width, img.height, rect.width, rect.height)
    fitted = BBoxMM(
        x=rect.x + transform["offset_x"],
        y=rect.y + transform["offset_y"],
        width=transform["width"],
        height=transform["height"],
    )

    # ReportLab embeds JPEG streams as-is, which keeps the document small
    buffer = io.BytesIO()
    img.save(buffer, "JPEG", quality=JPEG_QUALITY)
    buffer.seek(0)

    x, y, w, h = _pdf_rect(fitted, page_height_mm)
    c.drawImage(ImageReader(buffer), x, y, width=w, height=h, preserveAspectRatio=False)
    logger.debug(
        f"Drew {placement.photo.name} at x={fitted.x:.2f}mm, y={fitted.y:.2f}mm "
        f"({fitted.width:.2f}x{fitted.height:.2f}mm, {img.width}x{img.height}px)"
    )


def _check_cancelled(cancel_check: Callable[[], bool] | None) -> None:
    if cancel_check and cancel_check():
        raise RenderCancelled("Rendering cancelled")


def render_pdf(
    job: PrintJob,
    output_path: str,
    dpi: int = PRINT_DPI,
    progress_callback: ProgressCallback | None = None,
    cancel_check: Callable[[], bool] | None = None,
    cut_guides: bool = True,
) -> RenderResult:
    """Generate a print-ready PDF for a print job.

    Args:
        job: Pages, paper, margins and copy count
        output_path: Where to save the generated PDF
        dpi: Raster density photos are decoded at (default 300)
        progress_callback: Called with (pages_written, total_pages) after each page
        cancel_check: Polled between photos; returning True cancels the job
        cut_guides: Outline each slot with a hairline

    Returns:
        RenderResult with page count and the photos that were skipped

    Raises:
        ValueError: If the job has no pages
        ConfigurationError: If the pages cannot be placed on the paper
        RenderCancelled: If cancel_check requested cancellation
        DocumentWriteFailure: If the document could not be written

    Note:
        - Pages are written in ascending page order, all pages once per copy
        - The document is written to a temporary file and moved into place
          only when complete; failures and cancellation leave nothing behind
    """
    if not job.pages:
        raise ValueError("No pages to render")

    paper = job.paper_size
    placements_by_page = place_pages(job.pages, paper, job.margins)

    output_path_obj = Path(output_path)
    try:
        output_path_obj.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            suffix=".pdf", prefix=".partial_", dir=output_path_obj.parent, delete=False
        ) as f:
            temp_path = Path(f.name)
    except OSError as e:
        logger.error(f"Cannot create {output_path}: {e}")
        raise DocumentWriteFailure(f"Failed to write {output_path}: {e}") from e

    total_pages = len(job.pages) * job.copies
    skipped: list[SkippedPhoto] = []
    pages_written = 0

    logger.info(
        f"Rendering {len(job.pages)} pages x {job.copies} copies on "
        f"{paper.display_name} at {dpi} DPI -> {output_path}"
    )

    try:
        c = canvas.Canvas(
            str(temp_path),
            pagesize=(mm_to_pt(paper.width_mm), mm_to_pt(paper.height_mm)),
        )
        c.setTitle(output_path_obj.stem)
        c.setCreator("photoprint")

        for copy_index in range(job.copies):
            for page, placements in zip(job.pages, placements_by_page):
                for placement in placements:
                    _check_cancelled(cancel_check)
                    _draw_frame(c, placement, paper.height_mm, cut_guides)
                    try:
                        _draw_photo(c, placement, paper.height_mm, dpi)
                    except SourceUnavailable as e:
                        if copy_index == 0:
                            logger.warning(
                                f"Skipping {placement.photo.name} on page {page.page_number}: "
                                f"{e.reason}"
                            )
                            skipped.append(
                                SkippedPhoto(
                                    photo_id=placement.photo.id,
                                    name=placement.photo.name,
                                    source=placement.photo.source,
                                    page_number=page.page_number,
                                    reason=e.reason,
                                )
                            )

                c.showPage()
                pages_written += 1
                if progress_callback:
                    progress_callback(pages_written, total_pages)

        _check_cancelled(cancel_check)
        c.save()
        temp_path.replace(output_path_obj)

    except RenderCancelled:
        temp_path.unlink(missing_ok=True)
        logger.info(f"Rendering cancelled after {pages_written} of {total_pages} pages")
        raise
    except Exception as e:
        temp_path.unlink(missing_ok=True)
        logger.error(f"Failed to write {output_path}: {e}")
        raise DocumentWriteFailure(f"Failed to write {output_path}: {e}") from e

    photo_count = sum(len(page.photos) for page in job.pages)
    logger.info(
        f"Wrote {pages_written} pages to {output_path} "
        f"({photo_count - len(skipped)}/{photo_count} photos drawn)"
    )

    return RenderResult(
        output_path=str(output_path_obj),
        page_count=pages_written,
        photo_count=photo_count,
        skipped_photos=skipped,
    )
