"""Shared fixtures: sample photo files and in-memory Photo records."""

from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from photoprint.validation import Photo

PALETTE = [
    (100, 150, 200),
    (200, 120, 80),
    (90, 180, 110),
    (170, 90, 170),
    (220, 200, 90),
    (60, 60, 140),
]


def write_test_image(
    path: Path,
    size: tuple[int, int] = (800, 600),
    color: tuple[int, int, int] = (100, 150, 200),
    exif_orientation: int | None = None,
) -> Path:
    """Write a test image with a border and a label, like a real photo would have."""
    img = Image.new("RGB", size, color=color)
    draw = ImageDraw.Draw(img)
    draw.rectangle([(10, 10), (size[0] - 10, size[1] - 10)], outline=(255, 255, 255), width=3)
    draw.text((size[0] // 3, size[1] // 2), f"{size[0]}x{size[1]}", fill=(255, 255, 255))

    save_kwargs: dict[str, object] = {}
    if exif_orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = exif_orientation
        save_kwargs["exif"] = exif

    img.save(path, **save_kwargs)
    return path


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    """Directory with five distinct images plus a file that is not an image."""
    image_dir = tmp_path / "photos"
    image_dir.mkdir()
    write_test_image(image_dir / "a_landscape.jpg", (800, 600), PALETTE[0])
    write_test_image(image_dir / "b_portrait.jpg", (600, 800), PALETTE[1])
    write_test_image(image_dir / "c_square.png", (500, 500), PALETTE[2])
    write_test_image(image_dir / "d_wide.jpg", (1200, 400), PALETTE[3])
    write_test_image(image_dir / "e_tall.jpg", (400, 900), PALETTE[4])
    (image_dir / "notes.txt").write_text("not an image")
    return image_dir


@pytest.fixture
def make_photos() -> Callable[[int], list[Photo]]:
    """Factory for Photo records that do not need files on disk."""

    def _make(count: int) -> list[Photo]:
        return [
            Photo(id=f"photo_{i:03d}", source=f"/photos/img_{i:03d}.jpg", name=f"img_{i:03d}.jpg")
            for i in range(count)
        ]

    return _make
