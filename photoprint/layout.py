"""Slot geometry and photo placement.

This module handles:
- Slot rectangles for each fixed page arrangement
- Placing photos into slots with orientation-aware margin frames
- Contain-fit transforms for drawing decoded images into placements
- Generating layout JSON for inspection or rendering
"""

import logging
from collections.abc import Sequence
from typing import TypedDict

from photoprint.config import (
    COORDINATE_SYSTEM,
    GUTTER_MM,
    OUTER_MARGIN_MM,
    SCHEMA_VERSION,
    THREE_UP_BOTTOM_SHARE,
    THREE_UP_TOP_SHARE,
)
from photoprint.errors import ConfigurationError
from photoprint.margins import resolve_margins
from photoprint.pagination import paginate
from photoprint.validation import (
    BBoxMM,
    IncompletePageMode,
    LayoutType,
    MarginConfig,
    OrientedMargins,
    Page,
    PaperSize,
    Photo,
    PhotoPlacement,
    check_bbox_within_page,
    check_bboxes_disjoint,
)

logger = logging.getLogger(__name__)


class Transform(TypedDict):
    """Contain-fit of a source image into a target rectangle."""

    scale_factor: float
    width: float
    height: float
    offset_x: float
    offset_y: float


class PositionedPhoto(TypedDict):
    """Photo positioned in a slot."""

    photo_id: str
    source: str
    name: str
    rotation: int
    status: str
    orientation: str  # slot orientation: "landscape" or "portrait"
    slot_mm: dict[str, float]  # {x, y, width, height}
    photo_mm: dict[str, float]  # {x, y, width, height}
    margins_mm: dict[str, float]  # {top, bottom, left, right}


class PageLayout(TypedDict):
    """Placements for one page."""

    page_number: int
    layout: str
    positioned_photos: list[PositionedPhoto]


class LayoutOutput(TypedDict):
    """Complete layout output for a print job."""

    schema_version: str
    coordinate_system: str
    paper: dict[str, object]
    margins_mm: dict[str, float]
    layout: str
    incomplete_page_mode: str
    pages: list[PageLayout]


def _two_up(width_mm: float, height_mm: float) -> list[tuple[float, float, float, float]]:
    slot_w = width_mm - 2 * OUTER_MARGIN_MM
    slot_h = (height_mm - 2 * OUTER_MARGIN_MM - GUTTER_MM) / 2
    return [
        (OUTER_MARGIN_MM, OUTER_MARGIN_MM + i * (slot_h + GUTTER_MM), slot_w, slot_h)
        for i in range(2)
    ]


def _three_up(width_mm: float, height_mm: float) -> list[tuple[float, float, float, float]]:
    available_h = height_mm - 2 * OUTER_MARGIN_MM - GUTTER_MM
    top_w = width_mm - 2 * OUTER_MARGIN_MM
    top_h = available_h * THREE_UP_TOP_SHARE
    bottom_w = (width_mm - 2 * OUTER_MARGIN_MM - GUTTER_MM) / 2
    bottom_h = available_h * THREE_UP_BOTTOM_SHARE
    bottom_y = top_h + OUTER_MARGIN_MM + GUTTER_MM

    slots = [(OUTER_MARGIN_MM, OUTER_MARGIN_MM, top_w, top_h)]
    for j in range(2):
        slots.append((OUTER_MARGIN_MM + j * (bottom_w + GUTTER_MM), bottom_y, bottom_w, bottom_h))
    return slots


def _four_up(width_mm: float, height_mm: float) -> list[tuple[float, float, float, float]]:
    slot_w = (width_mm - 2 * OUTER_MARGIN_MM - GUTTER_MM) / 2
    slot_h = (height_mm - 2 * OUTER_MARGIN_MM - GUTTER_MM) / 2
    slots = []
    for index in range(4):
        col, row = index % 2, index // 2
        slots.append(
            (
                OUTER_MARGIN_MM + col * (slot_w + GUTTER_MM),
                OUTER_MARGIN_MM + row * (slot_h + GUTTER_MM),
                slot_w,
                slot_h,
            )
        )
    return slots


_ARRANGEMENTS = {
    LayoutType.TWO_PER_PAGE: _two_up,
    LayoutType.THREE_PER_PAGE: _three_up,
    LayoutType.FOUR_PER_PAGE: _four_up,
}


def compute_slots(layout: LayoutType, width_mm: float, height_mm: float) -> list[BBoxMM]:
    """Compute every slot of a page arrangement, in fill order.

    Args:
        layout: Page arrangement
        width_mm: Paper width
        height_mm: Paper height

    Returns:
        One BBoxMM per slot (layout.capacity of them), including margin frames

    Raises:
        ConfigurationError: If the paper is non-positive or too small to leave
            room for the outer margins and gutters, or a slot would fall
            outside the paper or overlap another slot
    """
    if width_mm <= 0 or height_mm <= 0:
        raise ConfigurationError(
            f"Paper dimensions must be positive, got {width_mm}x{height_mm}mm"
        )

    raw_slots = _ARRANGEMENTS[layout](width_mm, height_mm)
    slots: list[BBoxMM] = []
    for index, (x, y, w, h) in enumerate(raw_slots):
        if w <= 0 or h <= 0:
            raise ConfigurationError(
                f"Paper {width_mm}x{height_mm}mm is too small for {layout.value}: "
                f"slot {index + 1} would be {w:.2f}x{h:.2f}mm"
            )
        slot = BBoxMM(x=x, y=y, width=w, height=h)
        if not check_bbox_within_page(slot, width_mm, height_mm):
            raise ConfigurationError(
                f"Slot {index + 1} of {layout.value} exceeds paper {width_mm}x{height_mm}mm"
            )
        slots.append(slot)

    if not check_bboxes_disjoint(slots):
        raise ConfigurationError(
            f"Slots of {layout.value} overlap on {width_mm}x{height_mm}mm paper"
        )
    return slots


def _inset(slot: BBoxMM, margins: MarginConfig, label: str) -> tuple[BBoxMM, OrientedMargins]:
    oriented = resolve_margins(margins, slot.width, slot.height)
    photo_w = slot.width - oriented.left_mm - oriented.right_mm
    photo_h = slot.height - oriented.top_mm - oriented.bottom_mm
    if photo_w <= 0 or photo_h <= 0:
        raise ConfigurationError(
            f"Margins leave no room for the photo in {label}: slot is "
            f"{slot.width:.2f}x{slot.height:.2f}mm, photo area would be "
            f"{photo_w:.2f}x{photo_h:.2f}mm"
        )
    photo_rect = BBoxMM(
        x=slot.x + oriented.left_mm,
        y=slot.y + oriented.top_mm,
        width=photo_w,
        height=photo_h,
    )
    return photo_rect, oriented


def place(page: Page, paper_size: PaperSize, margins: MarginConfig) -> list[PhotoPlacement]:
    """Compute where each photo of a page is drawn.

    Photos fill slots in order; a short page leaves its trailing slots empty.

    Args:
        page: Page to lay out
        paper_size: Sheet the page is printed on
        margins: Base margin configuration, oriented per slot

    Returns:
        One PhotoPlacement per photo, in page order

    Raises:
        ConfigurationError: If margins exceed a slot or the paper is too small
    """
    slots = compute_slots(page.layout, paper_size.width_mm, paper_size.height_mm)

    placements: list[PhotoPlacement] = []
    for index, photo in enumerate(page.photos):
        slot = slots[index]
        photo_rect, oriented = _inset(slot, margins, f"page {page.page_number}, slot {index + 1}")
        placements.append(
            PhotoPlacement(photo=photo, slot=slot, photo_rect=photo_rect, margins=oriented)
        )
    return placements


def place_pages(
    pages: Sequence[Page], paper_size: PaperSize, margins: MarginConfig
) -> list[list[PhotoPlacement]]:
    """Place every page. Pages are independent of each other."""
    return [place(page, paper_size, margins) for page in pages]


def validate_configuration(
    layout: LayoutType, paper_size: PaperSize, margins: MarginConfig
) -> None:
    """Check that a full page of `layout` can be placed.

    Raises:
        ConfigurationError: If any slot of the arrangement is unusable
    """
    for index, slot in enumerate(compute_slots(layout, paper_size.width_mm, paper_size.height_mm)):
        _inset(slot, margins, f"{layout.value} slot {index + 1} on {paper_size.display_name}")


def calculate_transform(
    source_width: float,
    source_height: float,
    target_width: float,
    target_height: float,
) -> Transform:
    """Calculate the contain-fit of a source image into a target rectangle.

    Args:
        source_width: Source image width (any unit)
        source_height: Source image height
        target_width: Target rectangle width
        target_height: Target rectangle height

    Returns:
        Transform with the uniform scale, scaled size and the offsets that
        center the scaled image inside the target

    Note:
        The image is never cropped or stretched; differing aspect ratios leave
        symmetric gaps on one axis.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Source size must be positive, got {source_width}x{source_height}")

    scale_factor = min(target_width / source_width, target_height / source_height)
    width = source_width * scale_factor
    height = source_height * scale_factor

    return Transform(
        scale_factor=scale_factor,
        width=width,
        height=height,
        offset_x=(target_width - width) / 2,
        offset_y=(target_height - height) / 2,
    )


def _bbox_dict(bbox: BBoxMM) -> dict[str, float]:
    return {"x": bbox.x, "y": bbox.y, "width": bbox.width, "height": bbox.height}


def create_layout(
    photos: Sequence[Photo],
    paper_size: PaperSize,
    margins: MarginConfig,
    layout: LayoutType,
    mode: IncompletePageMode = IncompletePageMode.LEAVE_BLANK,
) -> LayoutOutput:
    """Generate the layout document for a photo selection.

    Args:
        photos: Photos in print order
        paper_size: Sheet to print on
        margins: Base margin configuration
        layout: Requested layout
        mode: Incomplete page handling

    Returns:
        LayoutOutput dict with every page and placement

    Raises:
        ConfigurationError: If the configuration cannot be placed
    """
    pages = paginate(photos, layout, mode)

    page_layouts: list[PageLayout] = []
    for page, placements in zip(pages, place_pages(pages, paper_size, margins)):
        page_layouts.append(
            PageLayout(
                page_number=page.page_number,
                layout=page.layout.value,
                positioned_photos=[
                    PositionedPhoto(
                        photo_id=p.photo.id,
                        source=p.photo.source,
                        name=p.photo.name,
                        rotation=p.photo.rotation,
                        status=p.photo.status.value,
                        orientation="landscape" if p.slot.is_landscape else "portrait",
                        slot_mm=_bbox_dict(p.slot),
                        photo_mm=_bbox_dict(p.photo_rect),
                        margins_mm={
                            "top": p.margins.top_mm,
                            "bottom": p.margins.bottom_mm,
                            "left": p.margins.left_mm,
                            "right": p.margins.right_mm,
                        },
                    )
                    for p in placements
                ],
            )
        )

    logger.info(
        f"Laid out {len(photos)} photos on {len(page_layouts)} pages "
        f"({layout.value}, {paper_size.display_name})"
    )

    return LayoutOutput(
        schema_version=SCHEMA_VERSION,
        coordinate_system=COORDINATE_SYSTEM,
        paper={
            "name": paper_size.value,
            "width_mm": paper_size.width_mm,
            "height_mm": paper_size.height_mm,
        },
        margins_mm={
            "top": margins.top_mm,
            "bottom": margins.bottom_mm,
            "left": margins.left_mm,
            "right": margins.right_mm,
        },
        layout=layout.value,
        incomplete_page_mode=mode.value,
        pages=page_layouts,
    )
