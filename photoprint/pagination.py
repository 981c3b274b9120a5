"""Grouping of an ordered photo selection into printable pages."""

import logging
import math
from collections.abc import Sequence

from photoprint.validation import IncompletePageMode, LayoutType, Page, Photo

logger = logging.getLogger(__name__)


def page_count(photo_count: int, layout: LayoutType) -> int:
    """Number of pages needed for `photo_count` photos."""
    if photo_count < 0:
        raise ValueError(f"Photo count must be non-negative, got {photo_count}")
    return math.ceil(photo_count / layout.capacity)


def paginate(
    photos: Sequence[Photo],
    layout: LayoutType,
    mode: IncompletePageMode = IncompletePageMode.LEAVE_BLANK,
) -> list[Page]:
    """Split photos into consecutive pages of `layout.capacity` photos.

    Args:
        photos: Photos in print order
        layout: Requested layout for every page
        mode: What to do with a short final page. LEAVE_BLANK keeps the
            requested layout and leaves trailing slots empty; FILL_LAYOUT
            switches the final page to the layout matching its photo count.

    Returns:
        Pages numbered from 1 in input order. Empty input gives no pages.
    """
    if not photos:
        return []

    capacity = layout.capacity
    chunks = [
        tuple(photos[i * capacity : (i + 1) * capacity])
        for i in range(page_count(len(photos), layout))
    ]

    pages: list[Page] = []
    for index, chunk in enumerate(chunks):
        page_layout = layout
        is_last = index == len(chunks) - 1
        if is_last and mode is IncompletePageMode.FILL_LAYOUT and len(chunk) < capacity:
            page_layout = LayoutType.for_count(len(chunk))
            logger.debug(
                f"Final page {index + 1} holds {len(chunk)} photos, "
                f"using {page_layout.value} instead of {layout.value}"
            )
        pages.append(Page(page_number=index + 1, photos=chunk, layout=page_layout))

    logger.debug(f"Paginated {len(photos)} photos into {len(pages)} pages ({layout.value})")
    return pages
