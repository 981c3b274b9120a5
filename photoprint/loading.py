"""Photo discovery and image decoding.

This module provides:
- A directory-backed photo source producing Photo records
- Rotation updates by photo name
- Pillow decoding with EXIF orientation and user rotation applied
"""

import hashlib
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from photoprint.config import SUPPORTED_IMAGE_EXTENSIONS
from photoprint.errors import SourceUnavailable
from photoprint.validation import Photo, PhotoStatus

logger = logging.getLogger(__name__)

# EXIF orientations that swap width and height
_EXIF_ORIENTATION_TAG = 0x0112
_TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}

# Clockwise user rotation -> Pillow transpose (Pillow rotates counter-clockwise)
_ROTATION_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def photo_id_for(path: Path) -> str:
    """Stable identifier derived from the resolved file path."""
    return hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]


def discover_photos(image_dir: str, recursive: bool = False) -> list[Photo]:
    """Find printable images in a directory.

    Args:
        image_dir: Directory containing user images
        recursive: Also search subdirectories

    Returns:
        Photos sorted by file name; empty if the directory holds no images

    Raises:
        SourceUnavailable: If the directory is missing or unreadable
    """
    image_path_obj = Path(image_dir)
    if not image_path_obj.is_dir():
        raise SourceUnavailable(image_dir, "directory not found")

    pattern = "**/*" if recursive else "*"
    try:
        image_files = sorted(
            (
                p
                for p in image_path_obj.glob(pattern)
                if p.is_file() and p.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS
            ),
            key=lambda p: (p.name.lower(), str(p)),
        )
    except PermissionError as e:
        raise SourceUnavailable(image_dir, "permission denied") from e

    photos = [Photo(id=photo_id_for(p), source=str(p), name=p.name) for p in image_files]
    logger.info(f"Found {len(photos)} images in {image_dir}")
    return photos


def apply_rotations(photos: Sequence[Photo], rotations: Mapping[str, int]) -> list[Photo]:
    """Return photos with clockwise rotations applied by display name.

    Raises:
        KeyError: If a rotation names a photo that is not in the selection
    """
    by_name = {photo.name for photo in photos}
    unknown = sorted(set(rotations) - by_name)
    if unknown:
        raise KeyError(f"No selected photo named: {', '.join(unknown)}")
    return [
        photo.rotated(rotations[photo.name]) if photo.name in rotations else photo
        for photo in photos
    ]


def load_image(photo: Photo, max_size_px: tuple[int, int] | None = None) -> Image.Image:
    """Decode a photo ready for drawing.

    Args:
        photo: Photo to decode
        max_size_px: Optional (width, height) bound; larger images are
            downsampled preserving aspect ratio, smaller ones are left as is

    Returns:
        RGB image with EXIF orientation and the user rotation applied

    Raises:
        SourceUnavailable: If the file is missing, corrupt, unsupported or
            larger than Pillow's decompression limit
    """
    try:
        with Image.open(photo.source) as img:
            oriented = ImageOps.exif_transpose(img)
            if photo.rotation:
                oriented = oriented.transpose(_ROTATION_TRANSPOSE[photo.rotation])
            result = oriented.convert("RGB")
    except FileNotFoundError as e:
        raise SourceUnavailable(photo.source, "file not found") from e
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise SourceUnavailable(photo.source, str(e)) from e

    if max_size_px:
        width, height = max(1, max_size_px[0]), max(1, max_size_px[1])
        result.thumbnail((width, height), Image.Resampling.LANCZOS)
    return result


def image_size(photo: Photo) -> tuple[int, int]:
    """Pixel size of a photo as it will be drawn, without decoding pixels.

    Raises:
        SourceUnavailable: If the file cannot be identified
    """
    try:
        with Image.open(photo.source) as img:
            width, height = img.size
            orientation = img.getexif().get(_EXIF_ORIENTATION_TAG, 1)
    except FileNotFoundError as e:
        raise SourceUnavailable(photo.source, "file not found") from e
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise SourceUnavailable(photo.source, str(e)) from e

    if orientation in _TRANSPOSED_ORIENTATIONS:
        width, height = height, width
    if photo.rotation in (90, 270):
        width, height = height, width
    return width, height


def probe_photos(photos: Sequence[Photo]) -> list[Photo]:
    """Mark each photo READY or FAILED depending on whether it can be opened."""
    probed: list[Photo] = []
    for photo in photos:
        try:
            image_size(photo)
        except SourceUnavailable as e:
            logger.warning(f"Unreadable photo {photo.name}: {e.reason}")
            probed.append(photo.with_status(PhotoStatus.FAILED))
        else:
            probed.append(photo.with_status(PhotoStatus.READY))
    return probed
