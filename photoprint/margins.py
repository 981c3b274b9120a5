"""Orientation-aware margin resolution.

An instant-camera print carries one wide border. It sits at the bottom of a
portrait print and on the left of a landscape print, where the print is held
or captioned. The base MarginConfig stores the wide and narrow borders in
top/bottom and the side border in left; this module decides which physical
edge each of them lands on for a given slot.
"""

from photoprint.validation import MarginConfig, OrientedMargins


def resolve_margins(base: MarginConfig, width_mm: float, height_mm: float) -> OrientedMargins:
    """Place the wide border according to the orientation of a slot.

    Args:
        base: Margin configuration; only top, bottom and left are read
        width_mm: Total slot width
        height_mm: Total slot height

    Returns:
        OrientedMargins. Landscape slots get the wide border on the left and
        the narrow one on the right; portrait and square slots get it at the
        bottom with the narrow one on top. The remaining pair uses the side
        border.
    """
    large = max(base.top_mm, base.bottom_mm)
    small = min(base.top_mm, base.bottom_mm)
    side = base.left_mm

    if width_mm > height_mm:
        return OrientedMargins(top_mm=side, bottom_mm=side, left_mm=large, right_mm=small)
    return OrientedMargins(top_mm=small, bottom_mm=large, left_mm=side, right_mm=side)
