"""Schema validation using Pydantic models.

This module defines:
- Enums for layout arity, paper sizes and incomplete-page handling
- Pydantic value models for photos, margins, pages and placements
- Bounding box checks (page containment, overlap)
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from photoprint.config import MARGIN_PRESETS, PAPER_TYPES

VALID_ROTATIONS = (0, 90, 180, 270)


class LayoutType(str, Enum):
    """Photos per page. Each member fixes both capacity and arrangement."""

    TWO_PER_PAGE = "TWO_PER_PAGE"
    THREE_PER_PAGE = "THREE_PER_PAGE"
    FOUR_PER_PAGE = "FOUR_PER_PAGE"

    @property
    def capacity(self) -> int:
        return _LAYOUT_CAPACITY[self]

    @property
    def display_name(self) -> str:
        return f"{self.capacity} per page"

    @classmethod
    def for_count(cls, count: int) -> "LayoutType":
        """Layout that best matches a page holding `count` photos."""
        if count <= 2:
            return cls.TWO_PER_PAGE
        if count == 3:
            return cls.THREE_PER_PAGE
        return cls.FOUR_PER_PAGE

    @classmethod
    def from_capacity(cls, capacity: int) -> "LayoutType":
        for member in cls:
            if member.capacity == capacity:
                return member
        raise KeyError(f"No layout holds {capacity} photos per page")


_LAYOUT_CAPACITY = {
    LayoutType.TWO_PER_PAGE: 2,
    LayoutType.THREE_PER_PAGE: 3,
    LayoutType.FOUR_PER_PAGE: 4,
}


class IncompletePageMode(str, Enum):
    """How to lay out a final page holding fewer photos than the layout allows."""

    LEAVE_BLANK = "LEAVE_BLANK"
    FILL_LAYOUT = "FILL_LAYOUT"

    @property
    def display_name(self) -> str:
        return "Leave blank" if self is IncompletePageMode.LEAVE_BLANK else "Adjust layout"

    @property
    def description(self) -> str:
        if self is IncompletePageMode.LEAVE_BLANK:
            return "Empty spaces remain where photos would be"
        return "Change layout to fit the number of photos"


class PaperSize(str, Enum):
    """Supported paper sheets. Dimensions come from config.PAPER_TYPES."""

    A4 = "A4"
    A5 = "A5"
    LETTER = "LETTER"
    PHOTO_4X6 = "PHOTO_4X6"
    PHOTO_5X7 = "PHOTO_5X7"

    @property
    def width_mm(self) -> float:
        return PAPER_TYPES[self.value]["width_mm"]  # type: ignore[return-value]

    @property
    def height_mm(self) -> float:
        return PAPER_TYPES[self.value]["height_mm"]  # type: ignore[return-value]

    @property
    def display_name(self) -> str:
        return PAPER_TYPES[self.value]["display_name"]  # type: ignore[return-value]

    @classmethod
    def from_name(cls, name: str) -> "PaperSize":
        """Case-insensitive lookup by member name ("a4", "Letter", "photo_4x6")."""
        key = name.strip().upper()
        if key not in cls.__members__:
            raise KeyError(f"Unknown paper size: {name}")
        return cls[key]


class PhotoStatus(str, Enum):
    """Lifecycle of a photo in the selection layer."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class Photo(BaseModel):
    """One image selected for printing."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable identifier")
    source: str = Field(description="Path used by the image loader")
    name: str = Field(description="Display name")
    rotation: int = Field(default=0, description="Clockwise user rotation in degrees")
    status: PhotoStatus = Field(default=PhotoStatus.PENDING)

    @field_validator("rotation")
    @classmethod
    def check_rotation(cls, v: int) -> int:
        """Validate rotation is a quarter turn."""
        if v not in VALID_ROTATIONS:
            raise ValueError(f"Rotation must be one of {VALID_ROTATIONS}, got {v}")
        return v

    def rotated(self, degrees: int) -> "Photo":
        """Return a copy rotated clockwise by a multiple of 90 degrees."""
        if degrees % 90 != 0:
            raise ValueError(f"Rotation step must be a multiple of 90, got {degrees}")
        return self.model_copy(update={"rotation": (self.rotation + degrees) % 360})

    def with_status(self, status: PhotoStatus) -> "Photo":
        return self.model_copy(update={"status": status})


class MarginConfig(BaseModel):
    """Instant-camera margin frame around each photo (millimeters).

    Top and bottom encode the small and large borders; left is the side border.
    Which edge receives which value is decided per slot by the margin resolver.
    """

    model_config = ConfigDict(frozen=True)

    top_mm: float = Field(default=8.0, ge=0, description="Top margin (mm)")
    bottom_mm: float = Field(default=25.0, ge=0, description="Bottom margin (mm)")
    left_mm: float = Field(default=8.0, ge=0, description="Left margin (mm)")
    right_mm: float = Field(default=8.0, ge=0, description="Right margin (mm)")

    @classmethod
    def preset(cls, name: str) -> "MarginConfig":
        """Build a named preset: none | minimal | instant_camera."""
        key = name.strip().lower().replace("-", "_")
        if key not in MARGIN_PRESETS:
            raise KeyError(f"Unknown margin preset: {name}")
        top, bottom, left, right = MARGIN_PRESETS[key]
        return cls(top_mm=top, bottom_mm=bottom, left_mm=left, right_mm=right)


class OrientedMargins(BaseModel):
    """Margins after orientation resolution."""

    model_config = ConfigDict(frozen=True)

    top_mm: float
    bottom_mm: float
    left_mm: float
    right_mm: float


class BBoxMM(BaseModel):
    """Bounding box in millimeters (top-left origin)."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0, description="X coordinate from top-left (mm)")
    y: float = Field(ge=0, description="Y coordinate from top-left (mm)")
    width: float = Field(gt=0, description="Width in millimeters")
    height: float = Field(gt=0, description="Height in millimeters")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height


class Page(BaseModel):
    """Photos that share one printed sheet, with the layout arranging them."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(ge=1, description="Page number (1-indexed)")
    photos: tuple[Photo, ...] = Field(min_length=1)
    layout: LayoutType

    @model_validator(mode="after")
    def check_capacity(self) -> "Page":
        """Validate the page does not hold more photos than its layout."""
        if len(self.photos) > self.layout.capacity:
            raise ValueError(
                f"{self.layout.value} holds at most {self.layout.capacity} photos, "
                f"got {len(self.photos)}"
            )
        return self


class PhotoPlacement(BaseModel):
    """Where one photo and its margin frame are drawn on a page."""

    model_config = ConfigDict(frozen=True)

    photo: Photo
    slot: BBoxMM = Field(description="Total region including the margin frame")
    photo_rect: BBoxMM = Field(description="Drawable region inside the frame")
    margins: OrientedMargins

    @property
    def x(self) -> float:
        return self.photo_rect.x

    @property
    def y(self) -> float:
        return self.photo_rect.y

    @property
    def width(self) -> float:
        return self.photo_rect.width

    @property
    def height(self) -> float:
        return self.photo_rect.height


class PrintJob(BaseModel):
    """Everything the renderer needs to produce a document."""

    model_config = ConfigDict(frozen=True)

    pages: tuple[Page, ...]
    paper_size: PaperSize
    margins: MarginConfig = Field(default_factory=MarginConfig)
    copies: int = Field(default=1, ge=1)


def calculate_iou(bbox1: BBoxMM, bbox2: BBoxMM) -> float:
    """Calculate Intersection over Union (IoU) between two bounding boxes.

    Args:
        bbox1: First bounding box
        bbox2: Second bounding box

    Returns:
        IoU score between 0 and 1, where:
        - 0 = no overlap
        - 1 = perfect overlap
    """
    x1_inter = max(bbox1.x, bbox2.x)
    y1_inter = max(bbox1.y, bbox2.y)
    x2_inter = min(bbox1.right, bbox2.right)
    y2_inter = min(bbox1.bottom, bbox2.bottom)

    if x2_inter < x1_inter or y2_inter < y1_inter:
        return 0.0

    intersection_area = (x2_inter - x1_inter) * (y2_inter - y1_inter)
    area1 = bbox1.width * bbox1.height
    area2 = bbox2.width * bbox2.height
    union_area = area1 + area2 - intersection_area

    return intersection_area / union_area if union_area > 0 else 0.0


def check_bbox_within_page(
    bbox: BBoxMM, page_width_mm: float, page_height_mm: float, tolerance_mm: float = 1e-6
) -> bool:
    """Check if bounding box is fully within page boundaries.

    Args:
        bbox: Bounding box to check
        page_width_mm: Page width in millimeters
        page_height_mm: Page height in millimeters
        tolerance_mm: Allowance for floating-point error on the far edges

    Returns:
        True if bbox is fully within page, False otherwise
    """
    return (
        bbox.x >= 0
        and bbox.y >= 0
        and bbox.right <= page_width_mm + tolerance_mm
        and bbox.bottom <= page_height_mm + tolerance_mm
    )


def check_bboxes_disjoint(bboxes: list[BBoxMM], iou_threshold: float = 0.0) -> bool:
    """Check that no two boxes overlap by more than `iou_threshold`.

    Returns:
        True if no significant overlaps found, False otherwise
    """
    for i, b1 in enumerate(bboxes):
        for b2 in bboxes[i + 1 :]:
            if calculate_iou(b1, b2) > iou_threshold:
                return False
    return True
