"""Unit tests for photoprint/validation.py."""

import pytest
from pydantic import ValidationError

from photoprint.validation import (
    BBoxMM,
    IncompletePageMode,
    LayoutType,
    MarginConfig,
    Page,
    PaperSize,
    Photo,
    PhotoStatus,
    PrintJob,
    calculate_iou,
    check_bbox_within_page,
    check_bboxes_disjoint,
)


class TestLayoutType:
    """Tests for LayoutType."""

    def test_capacities(self) -> None:
        """Test each layout's capacity and display name."""
        assert LayoutType.TWO_PER_PAGE.capacity == 2
        assert LayoutType.THREE_PER_PAGE.capacity == 3
        assert LayoutType.FOUR_PER_PAGE.capacity == 4
        assert LayoutType.THREE_PER_PAGE.display_name == "3 per page"

    @pytest.mark.parametrize(
        "count,expected",
        [
            (1, LayoutType.TWO_PER_PAGE),
            (2, LayoutType.TWO_PER_PAGE),
            (3, LayoutType.THREE_PER_PAGE),
            (4, LayoutType.FOUR_PER_PAGE),
        ],
    )
    def test_for_count(self, count: int, expected: LayoutType) -> None:
        """Test the best-matching layout for a photo count."""
        assert LayoutType.for_count(count) is expected

    def test_from_capacity(self) -> None:
        """Test lookup by capacity."""
        assert LayoutType.from_capacity(3) is LayoutType.THREE_PER_PAGE
        with pytest.raises(KeyError):
            LayoutType.from_capacity(6)


class TestPaperSize:
    """Tests for PaperSize."""

    def test_dimensions(self) -> None:
        """Test paper dimensions in millimeters."""
        assert (PaperSize.A4.width_mm, PaperSize.A4.height_mm) == (210, 297)
        assert (PaperSize.LETTER.width_mm, PaperSize.LETTER.height_mm) == (215.9, 279.4)
        assert (PaperSize.PHOTO_4X6.width_mm, PaperSize.PHOTO_4X6.height_mm) == (101.6, 152.4)

    def test_from_name_is_case_insensitive(self) -> None:
        """Test lookup by name ignoring case."""
        assert PaperSize.from_name("letter") is PaperSize.LETTER
        assert PaperSize.from_name(" photo_5x7 ") is PaperSize.PHOTO_5X7

    def test_unknown_name_raises(self) -> None:
        """Test that an unknown paper name raises KeyError."""
        with pytest.raises(KeyError, match="Unknown paper size"):
            PaperSize.from_name("B5")


class TestIncompletePageMode:
    """Tests for IncompletePageMode."""

    def test_display_text(self) -> None:
        """Test display names and descriptions."""
        assert IncompletePageMode.LEAVE_BLANK.display_name == "Leave blank"
        assert "fit" in IncompletePageMode.FILL_LAYOUT.description


class TestPhoto:
    """Tests for Photo model."""

    def test_defaults(self) -> None:
        """Test default rotation and status."""
        photo = Photo(id="p1", source="/x/a.jpg", name="a.jpg")
        assert photo.rotation == 0
        assert photo.status is PhotoStatus.PENDING

    def test_invalid_rotation_raises(self) -> None:
        """Test that a rotation other than a quarter turn raises ValidationError."""
        with pytest.raises(ValidationError, match="Rotation must be one of"):
            Photo(id="p1", source="/x/a.jpg", name="a.jpg", rotation=45)

    def test_rotated_wraps_around(self) -> None:
        """Test that rotating returns a new photo and wraps at 360."""
        photo = Photo(id="p1", source="/x/a.jpg", name="a.jpg", rotation=270)
        turned = photo.rotated(180)
        assert turned.rotation == 90
        assert photo.rotation == 270
        assert photo.rotated(-90).rotation == 180

    def test_rotated_rejects_partial_turn(self) -> None:
        """Test that rotation steps must be multiples of 90."""
        with pytest.raises(ValueError, match="multiple of 90"):
            Photo(id="p1", source="/x/a.jpg", name="a.jpg").rotated(30)

    def test_photo_is_immutable(self) -> None:
        """Test that fields cannot be assigned."""
        photo = Photo(id="p1", source="/x/a.jpg", name="a.jpg")
        with pytest.raises(ValidationError):
            photo.rotation = 90  # type: ignore[misc]


class TestMarginConfig:
    """Tests for MarginConfig model."""

    def test_defaults_are_instant_camera(self) -> None:
        """Test default margins match the instant-camera preset."""
        assert MarginConfig() == MarginConfig.preset("instant_camera")
        assert MarginConfig().bottom_mm == 25

    def test_negative_margin_raises(self) -> None:
        """Test that a negative margin raises ValidationError."""
        with pytest.raises(ValidationError, match="greater than or equal to 0"):
            MarginConfig(top_mm=-1)

    def test_presets(self) -> None:
        """Test named presets."""
        assert MarginConfig.preset("none") == MarginConfig(
            top_mm=0, bottom_mm=0, left_mm=0, right_mm=0
        )
        assert MarginConfig.preset("Minimal").left_mm == 4

    def test_unknown_preset_raises(self) -> None:
        """Test that an unknown preset raises KeyError."""
        with pytest.raises(KeyError, match="Unknown margin preset"):
            MarginConfig.preset("polaroid-xl")


class TestPage:
    """Tests for Page model."""

    def test_over_capacity_raises(self, make_photos) -> None:
        """Test that more photos than the layout holds raises ValidationError."""
        with pytest.raises(ValidationError, match="holds at most 2 photos"):
            Page(page_number=1, photos=tuple(make_photos(3)), layout=LayoutType.TWO_PER_PAGE)

    def test_empty_page_raises(self) -> None:
        """Test that a page needs at least one photo."""
        with pytest.raises(ValidationError):
            Page(page_number=1, photos=(), layout=LayoutType.TWO_PER_PAGE)

    def test_page_number_starts_at_one(self, make_photos) -> None:
        """Test that page 0 is rejected."""
        with pytest.raises(ValidationError, match="greater than or equal to 1"):
            Page(page_number=0, photos=tuple(make_photos(1)), layout=LayoutType.TWO_PER_PAGE)


class TestPrintJob:
    """Tests for PrintJob model."""

    def test_copies_must_be_positive(self, make_photos) -> None:
        """Test that zero copies raises ValidationError."""
        page = Page(page_number=1, photos=tuple(make_photos(1)), layout=LayoutType.TWO_PER_PAGE)
        with pytest.raises(ValidationError):
            PrintJob(pages=(page,), paper_size=PaperSize.A4, copies=0)


class TestBBoxMM:
    """Tests for BBoxMM model."""

    def test_valid_bbox(self) -> None:
        """Test creating a valid bounding box and its edges."""
        bbox = BBoxMM(x=10, y=20, width=80, height=60)
        assert (bbox.right, bbox.bottom) == (90, 80)
        assert bbox.is_landscape

    def test_zero_width_raises(self) -> None:
        """Test that zero width raises ValidationError."""
        with pytest.raises(ValidationError, match="greater than 0"):
            BBoxMM(x=0, y=0, width=0, height=10)

    def test_negative_x_raises(self) -> None:
        """Test that negative X coordinate raises ValidationError."""
        with pytest.raises(ValidationError, match="greater than or equal to 0"):
            BBoxMM(x=-1, y=0, width=10, height=10)


class TestBBoxChecks:
    """Tests for IoU, page containment and overlap checks."""

    def test_iou_no_overlap(self) -> None:
        """Test IoU for non-overlapping boxes."""
        assert calculate_iou(BBoxMM(x=0, y=0, width=10, height=10), BBoxMM(x=20, y=20, width=10, height=10)) == 0.0

    def test_iou_partial_overlap(self) -> None:
        """Test IoU for partially overlapping boxes."""
        # Intersection 25, union 175
        iou = calculate_iou(BBoxMM(x=0, y=0, width=10, height=10), BBoxMM(x=5, y=5, width=10, height=10))
        assert iou == pytest.approx(25 / 175)

    def test_touching_edges_are_disjoint(self) -> None:
        """Test boxes sharing an edge do not count as overlapping."""
        boxes = [BBoxMM(x=0, y=0, width=10, height=10), BBoxMM(x=10, y=0, width=10, height=10)]
        assert check_bboxes_disjoint(boxes) is True

    def test_overlap_detected(self) -> None:
        """Test overlapping boxes are reported."""
        boxes = [BBoxMM(x=0, y=0, width=10, height=10), BBoxMM(x=5, y=5, width=10, height=10)]
        assert check_bboxes_disjoint(boxes) is False

    def test_bbox_at_page_corner(self) -> None:
        """Test bbox that exactly fills the page."""
        assert check_bbox_within_page(BBoxMM(x=0, y=0, width=210, height=297), 210, 297) is True

    def test_bbox_exceeds_bottom_edge(self) -> None:
        """Test bbox that exceeds bottom page edge."""
        assert check_bbox_within_page(BBoxMM(x=10, y=250, width=80, height=60), 210, 297) is False
